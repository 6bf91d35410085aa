"""Stage Gate Engine: FastAPI application entry point."""

import signal
import uuid
from contextlib import asynccontextmanager

# CRITICAL ORDER: configure_structlog MUST be called before all other stagegate imports
# to avoid the structlog cache pitfall (structlog caches the processor chain on first use).
from stagegate.core.logging import configure_structlog
from stagegate.core.config import get_settings as _get_settings_early

_early_settings = _get_settings_early()
configure_structlog(
    log_level="DEBUG" if _early_settings.debug else _early_settings.log_level,
    json_logs=not _early_settings.debug,
)

import structlog

from fastapi import FastAPI, Request, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from stagegate.api.routes import api_router
from stagegate.core.config import get_settings
from stagegate.core.exceptions import StageGateError
from stagegate.db import init_db, close_db, get_session_factory
from stagegate.db.seed import seed_workflow_stages
from stagegate.domain.stage_rules import validate_stage_rules
from stagegate.middleware.correlation import (
    setup_correlation_middleware,
    get_correlation_id,
)
from stagegate.services.stage_registry import StageRegistry

logger = structlog.get_logger(__name__)


async def validate_stage_rule_coverage() -> None:
    """Fail fast if a registered stage has no stage rule entry."""
    registry = StageRegistry(get_session_factory())
    stages = await registry.get_workflow_stages(include_inactive=True)
    validate_stage_rules(s.slug for s in stages)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    # SIGTERM flips this so the health check returns 503 while draining
    app.state.shutting_down = False

    def handle_sigterm(signum, frame):
        app.state.shutting_down = True
        logger.info("sigterm_received", action="health_check_503_draining_connections")

    signal.signal(signal.SIGTERM, handle_sigterm)

    # Startup
    settings = get_settings()
    logger.info("startup_begin", app_name=settings.app_name, debug=settings.debug)

    await init_db(create_tables=settings.create_tables_on_startup)
    logger.info("db_initialized")

    if settings.seed_workflow_stages:
        await seed_workflow_stages()
        logger.info("workflow_stages_seeded")

    await validate_stage_rule_coverage()
    logger.info("stage_rules_validated")

    yield

    # Shutdown
    logger.info("shutdown_begin")
    await close_db()
    logger.info("shutdown_complete")


def _error_response(request: Request, status_code: int, detail, event: str, **fields) -> JSONResponse:
    """Log the error under a fresh debug_id and return the sanitized body."""
    debug_id = str(uuid.uuid4())
    logger.error(
        event,
        status_code=status_code,
        debug_id=debug_id,
        correlation_id=get_correlation_id(),
        path=request.url.path,
        method=request.method,
        user_id=getattr(request.state, "user_id", None),
        detail=detail,
        **fields,
    )
    return JSONResponse(status_code=status_code, content={"detail": detail, "debug_id": debug_id})


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return _error_response(request, exc.status_code, exc.detail, "http_exception")


async def stage_gate_exception_handler(request: Request, exc: StageGateError) -> JSONResponse:
    """Map StageGateError subclasses to their status code.

    Client errors carry the exception text; server errors get a generic message.
    """
    detail = str(exc) if exc.status_code < 500 else "Internal server error"
    return _error_response(
        request,
        exc.status_code,
        detail,
        "stage_gate_exception",
        error=str(exc),
        error_type=type(exc).__name__,
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort: full traceback in the log, generic 500 to the client."""
    return _error_response(
        request,
        500,
        "Internal server error",
        "unhandled_exception",
        error=str(exc),
        error_type=type(exc).__name__,
        exc_info=True,
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Stage-transition prerequisite validation for project workflows",
        version="0.1.0",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=sorted({settings.frontend_url, *settings.cors_origins}),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Correlation ID middleware (runs first on incoming requests)
    setup_correlation_middleware(app)

    # Exception handlers
    app.exception_handler(HTTPException)(http_exception_handler)
    app.exception_handler(StageGateError)(stage_gate_exception_handler)
    app.exception_handler(Exception)(generic_exception_handler)

    app.include_router(api_router, prefix="/api")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "stagegate.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
