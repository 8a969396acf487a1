# backend/agenttrain/apps/reports/errors.py
"""
Error taxonomy for report requests.

Each error carries the HTTP status the router should answer with. None of
them is retried by the engine.
"""

from __future__ import annotations

from fastapi import HTTPException, status


class ReportError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail

    def to_http(self) -> HTTPException:
        return HTTPException(status_code=self.status_code, detail=self.detail)


class Unauthenticated(ReportError):
    status_code = status.HTTP_401_UNAUTHORIZED

    def to_http(self) -> HTTPException:
        return HTTPException(
            status_code=self.status_code,
            detail=self.detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class Forbidden(ReportError):
    status_code = status.HTTP_403_FORBIDDEN


class InvalidRequest(ReportError):
    status_code = status.HTTP_400_BAD_REQUEST


class UpstreamFailure(ReportError):
    """A read against the data store failed; the driver message is kept."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
