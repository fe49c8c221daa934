"""FastAPI main application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from kpi_backend.core.config import Settings, settings
from kpi_backend.core.middleware import setup_middleware
from kpi_backend.core.exceptions import KPIError
from kpi_backend.db.session import build_engine, build_session_factory
from kpi_backend.services.query_gateway import QueryGateway

from kpi_backend.api.system import router as system_router
from kpi_backend.api.auth import router as auth_router
from kpi_backend.api.users import router as users_router
from kpi_backend.api.rounds import router as rounds_router

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger("kpi_backend")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the connection pool once per process; dispose it on shutdown."""
    app_settings: Settings = app.state.settings
    logger.info("🚀 Starting %s", app_settings.APP_NAME)
    engine = None
    if app.state.gateway is None:
        engine = build_engine(app_settings)
        app.state.gateway = QueryGateway(
            build_session_factory(engine),
            users_limit=app_settings.USERS_LIST_LIMIT,
        )
        logger.info("Connection pool ready (size=%s)", app_settings.DB_POOL_SIZE)

    yield

    if engine is not None:
        await engine.dispose()
    logger.info("🔻 Shutting down %s", app_settings.APP_NAME)


def _describe(errors) -> str:
    """First validation error as ``field: message``."""
    if not errors:
        return "Invalid request"
    first = errors[0]
    loc = [str(p) for p in first.get("loc", ()) if p not in ("body", "query")]
    field = ".".join(loc) or "body"
    return f"{field}: {first.get('msg', 'invalid')}"


def create_app(gateway: Optional[QueryGateway] = None, app_settings: Optional[Settings] = None) -> FastAPI:
    """Build the API. A supplied gateway replaces the pooled one (used by tests)."""
    app_settings = app_settings or settings
    app = FastAPI(
        title=app_settings.APP_NAME,
        description="Employee identity, PIN authentication and duty-round lookups",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = app_settings
    app.state.gateway = gateway

    setup_middleware(app, app_settings)

    @app.exception_handler(KPIError)
    async def kpi_exception_handler(request: Request, exc: KPIError):
        return JSONResponse(status_code=exc.status_code, content=exc.payload())

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"ok": False, "error": _describe(exc.errors())})

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"ok": False, "error": "Internal server error"})

    # Register routers
    app.include_router(system_router)
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(rounds_router)

    return app


app = create_app()
