"""Async PostgreSQL engine, session factory, and gateway dependency."""

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine

from kpi_backend.core.config import Settings


def build_engine(app_settings: Settings) -> AsyncEngine:
    """Bounded pool; excess demand waits up to DB_POOL_TIMEOUT instead of failing fast."""
    return create_async_engine(
        app_settings.database_url,
        pool_size=app_settings.DB_POOL_SIZE,
        max_overflow=0,
        pool_timeout=app_settings.DB_POOL_TIMEOUT,
        pool_recycle=app_settings.DB_POOL_RECYCLE,
        pool_pre_ping=True,
        connect_args={"timeout": app_settings.DB_CONNECT_TIMEOUT},
        echo=app_settings.DEBUG,
    )


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)


def get_gateway(request: Request):
    """FastAPI dependency returning the process-wide query gateway."""
    return request.app.state.gateway
