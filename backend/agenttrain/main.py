# backend/agenttrain/main.py
import logging
import os
from typing import List, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .apps.reports.router import router as reports_router

API_TITLE = "Training Report Agent API"
API_VERSION = "1.0.0"

DEV_ORIGINS = [
    "http://127.0.0.1:5173",
    "http://localhost:5173",
    "http://localhost:8080",
]

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "info").upper(),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)


def parse_origins(raw: Optional[str]) -> List[str]:
    """Comma-separated CORS_ALLOWED_ORIGINS; dev ports when empty."""
    origins = [o.strip() for o in (raw or "").split(",") if o.strip()]
    return origins or list(DEV_ORIGINS)


def create_app() -> FastAPI:
    application = FastAPI(title=API_TITLE, version=API_VERSION)

    origins = parse_origins(os.getenv("CORS_ALLOWED_ORIGINS"))
    application.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        # Browsers reject credentials with a wildcard origin.
        allow_credentials="*" not in origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type"],
    )

    application.add_api_route("/", read_root, methods=["GET"], tags=["health"])
    application.add_api_route("/health", health, methods=["GET"], tags=["health"])
    application.include_router(reports_router)
    return application


def read_root():
    return {"status": "ok", "service": API_TITLE, "version": API_VERSION}


def health():
    return {"status": "ok"}


app = create_app()
