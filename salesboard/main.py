from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from salesboard.api.router import api_router
from salesboard.core.config import get_cors_origins, get_settings
from salesboard.core.errors import AppError, app_error_handler, validation_error_handler
from salesboard.core.logging import configure_logging

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title=settings.app_name)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_cors_origins(),
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    app.include_router(api_router, prefix=settings.api_prefix)

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    logger.info(
        "Sales dashboard API ready (sheet=%s, timezone=%s)",
        settings.google_sheets_id or "<unset>",
        settings.reporting_timezone,
    )
    return app


app = create_app()
