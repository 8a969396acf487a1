from __future__ import annotations

import json

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from agenttrain.apps.accounts import models as account_models
from agenttrain.database import get_read_db
from agenttrain.security import get_current_profile

from . import schemas, service
from .errors import ReportError
from .repository import SqlReportDataSource

router = APIRouter(prefix="/reports", tags=["reports"])


async def read_report_request(request: Request) -> schemas.ReportRequest:
    """
    Lenient body parsing for the chat endpoint.

    A malformed body, a non-object body or a non-string prompt becomes an
    empty prompt, which the report service answers with 400.
    """
    raw_body = await request.body()
    try:
        body = json.loads(raw_body) if raw_body else {}
    except ValueError:
        body = {}
    prompt = body.get("prompt") if isinstance(body, dict) else None
    return schemas.ReportRequest(prompt=prompt if isinstance(prompt, str) else "")


@router.post(
    "/chat",
    response_model=schemas.ReportResponse,
    summary="Answer a free-text training report prompt for the current caller",
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {
                "application/json": {
                    "schema": schemas.ReportRequest.model_json_schema(),
                }
            },
        }
    },
)
def report_chat(
    payload: schemas.ReportRequest = Depends(read_report_request),
    db: Session = Depends(get_read_db),
    current_user: account_models.Profile = Depends(get_current_profile),
):
    """
    Examples:
    - "Show overdue trainings"
    - "Show completion rate by job title"
    - "What is due soon in the next 14 days for netid jdoe?"
    - "Find trainings about biosafety"
    """
    try:
        return service.build_report(
            SqlReportDataSource(db),
            caller_id=current_user.user_id,
            prompt=payload.prompt,
        )
    except ReportError as exc:
        raise exc.to_http()
