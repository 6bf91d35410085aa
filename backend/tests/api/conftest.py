"""API-specific test fixtures."""

from contextlib import asynccontextmanager

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient


@pytest.fixture
def api_client(engine, db_url):
    """FastAPI test client with test database.

    Initializes the global database via init_db inside the TestClient's
    own event loop so route handlers can use get_session_factory().
    The engine fixture ensures tables exist before this runs.
    """
    from fastapi import HTTPException

    from stagegate.api.routes import api_router
    from stagegate.core.config import get_settings
    from stagegate.core.exceptions import StageGateError
    from stagegate.db import close_db, init_db
    from stagegate.db.seed import seed_workflow_stages
    from stagegate.main import generic_exception_handler, http_exception_handler, stage_gate_exception_handler
    from stagegate.middleware.correlation import setup_correlation_middleware

    @asynccontextmanager
    async def test_lifespan(app: FastAPI):
        """Test lifespan - initialize DB in TestClient's event loop."""
        # Reset global so init_db creates a fresh engine in THIS loop
        import stagegate.db.base as db_mod

        db_mod._engine = None
        db_mod._session_factory = None
        app.state.shutting_down = False
        await init_db(db_url)
        await seed_workflow_stages()
        yield
        await close_db()

    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Stage Gate Engine - Test Client",
        version="0.1.0",
        lifespan=test_lifespan,
    )

    setup_correlation_middleware(app)

    # Exception handlers (needed for debug_id testing)
    app.exception_handler(HTTPException)(http_exception_handler)
    app.exception_handler(StageGateError)(stage_gate_exception_handler)
    app.exception_handler(Exception)(generic_exception_handler)

    app.include_router(api_router, prefix="/api")

    with TestClient(app) as client:
        yield client


def auth_headers(user_id: str = "user-sales", roles: str = "sales") -> dict[str, str]:
    return {"X-User-Id": user_id, "X-User-Roles": roles}


@pytest.fixture
def sales_headers() -> dict[str, str]:
    return auth_headers()


@pytest.fixture
def manager_headers() -> dict[str, str]:
    return auth_headers("user-manager", "manager")
