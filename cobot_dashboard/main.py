"""Cobot Dashboard API — FastAPI application entry point.

Run locally:
    uvicorn cobot_dashboard.main:app --reload --port 3003
or:
    python -m cobot_dashboard
"""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from cobot_dashboard.cobot.field_writer import NO_VALID_FIELDS
from cobot_dashboard.config import get_settings
from cobot_dashboard.exceptions import DashboardError, ProviderError, ValidationError
from cobot_dashboard.middleware.cors import (
    WIDGET_ALLOWED_HEADERS,
    WIDGET_CORS_HEADERS,
    WidgetCORSHeadersMiddleware,
)
from cobot_dashboard.models.base import ErrorResponse
from cobot_dashboard.routers import health, members

# ---------- Logging ----------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    stream=sys.stdout,
)
logger = logging.getLogger("cobot_dashboard")


# ---------- Lifespan ----------

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Open one shared httpx client for all Cobot calls."""
    settings = get_settings()
    logger.info("Starting %s v%s against %s", settings.app_name, settings.app_version, settings.cobot_base_url)
    async with httpx.AsyncClient() as client:
        app.state.http_client = client
        yield
    app.state.http_client = None
    logger.info("%s shut down", settings.app_name)


# ---------- Error handlers ----------

def _error_response(
    status_code: int, message: str, headers: dict[str, str] | None = None
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(),
        headers=headers,
    )


async def _validation_error(request: Request, exc: ValidationError) -> JSONResponse:
    logger.warning("Rejected %s %s: %s", request.method, request.url.path, exc)
    return _error_response(400, str(exc))


async def _malformed_body(request: Request, exc: RequestValidationError) -> JSONResponse:
    # The only request body is the custom-field object; anything else carries no fields.
    logger.warning("Rejected %s %s: %s", request.method, request.url.path, exc.errors())
    return _error_response(400, NO_VALID_FIELDS)


async def _dashboard_error(request: Request, exc: DashboardError) -> JSONResponse:
    if isinstance(exc, ProviderError):
        logger.error(
            "Cobot request failed for %s %s (status=%s): %s",
            request.method, request.url.path, exc.status_code, exc,
        )
    else:
        logger.error("Request failed for %s %s: %s", request.method, request.url.path, exc)
    return _error_response(500, str(exc))


async def _unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    # Rendered outside the middleware stack, so the CORS headers are set here.
    logger.exception("Unhandled error for %s %s", request.method, request.url.path)
    return _error_response(500, "Interner Serverfehler", headers=WIDGET_CORS_HEADERS)


# ---------- App factory ----------

def create_app() -> FastAPI:
    settings = get_settings()
    logging.getLogger().setLevel(settings.log_level.upper())

    app = FastAPI(
        title="Cobot Dashboard API",
        description="Live Cobot member data for the Chatwoot dashboard widget.",
        version=settings.app_version,
        lifespan=lifespan,
    )

    # ---------- Middleware (order matters — last added runs outermost) ----------

    # Cross-origin headers on every response, with or without Origin
    app.add_middleware(WidgetCORSHeadersMiddleware)

    # CORS preflight for the widget's PUT requests
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "PUT", "OPTIONS"],
        allow_headers=WIDGET_ALLOWED_HEADERS,
    )

    app.add_exception_handler(ValidationError, _validation_error)
    app.add_exception_handler(RequestValidationError, _malformed_body)
    app.add_exception_handler(DashboardError, _dashboard_error)
    app.add_exception_handler(Exception, _unexpected_error)

    app.include_router(health.router)
    app.include_router(members.router)

    # Widget html/js, mounted last so the API routes win
    if settings.static_dir:
        app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="static")

    return app


app = create_app()
