"""FastAPI application entrypoint."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from sims.api import api_router
from sims.core.config import get_settings
from sims.core.errors import AuthenticationError, SIMSError
from sims.core.security import clear_session_cookie
from sims.db.base import Base
from sims.db.session import async_session_factory, engine, get_session
from sims.services.repair_status import RepairStatusBridge
from sims.services.scheduler import create_scheduler, schedule_session_sweep, start_scheduler, stop_scheduler
from sims.services.sessions import DatabaseSessionStore, SessionManager
from sims.services.users import ensure_system_administrator

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    async with get_session() as session:
        await ensure_system_administrator(session, settings.bootstrap_admin_password)

    manager = SessionManager(
        DatabaseSessionStore(async_session_factory),
        ttl=timedelta(seconds=settings.session_ttl_seconds),
    )
    app.state.session_manager = manager
    app.state.repair_bridge = RepairStatusBridge(
        settings.repairs_system_url,
        timeout=settings.repairs_timeout_seconds,
        failure_threshold=settings.repairs_failure_threshold,
        cooldown_seconds=settings.repairs_cooldown_seconds,
    )

    scheduler = None
    if settings.scheduler_enabled:
        scheduler = create_scheduler()
        schedule_session_sweep(scheduler, manager, settings.session_sweep_interval_seconds)
        start_scheduler(scheduler)
    logger.info("%s started (%s)", settings.app_name, settings.environment)
    try:
        yield
    finally:
        if scheduler is not None:
            stop_scheduler(scheduler)


app = FastAPI(title=settings.app_name, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "x-api-key"],
)


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


@app.exception_handler(SIMSError)
async def handle_sims_error(_: Request, exc: SIMSError) -> JSONResponse:
    if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error("%s: %s", exc.__class__.__name__, exc.message)
    response = _error_response(exc.status_code, exc.message)
    if isinstance(exc, AuthenticationError):
        clear_session_cookie(response)
    return response


@app.exception_handler(RequestValidationError)
async def handle_validation_error(_: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path"))
        message = first.get("msg", "Invalid request").removeprefix("Value error, ")
        if field:
            message = f"{field}: {message}"
    else:
        message = "Invalid request"
    return _error_response(status.HTTP_400_BAD_REQUEST, message)


@app.exception_handler(SQLAlchemyError)
async def handle_database_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Database error on %s %s", request.method, request.url.path, exc_info=exc)
    message = "Internal server error" if settings.is_production else str(exc)
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, message)


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    message = "Internal server error" if settings.is_production else str(exc)
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, message)


app.include_router(api_router)
