"""Application configuration from environment variables."""

from pydantic_settings import BaseSettings
from sqlalchemy.engine import URL
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App
    APP_NAME: str = "KPI API"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    HOST: str = "0.0.0.0"
    PORT: int = 8080

    # Transport
    API_KEY: Optional[str] = None
    ALLOW_ORIGIN: str = "https://kpi.bvx.com.vn"

    # PostgreSQL
    PGHOST: str = "127.0.0.1"
    PGPORT: int = 5432
    PGUSER: str = "postgres"
    PGPASSWORD: str = ""
    PGDATABASE: str = "kpi_db"
    INSTANCE_CONNECTION_NAME: str = ""  # project:region:instance

    # Pool
    DB_POOL_SIZE: int = 10
    DB_POOL_TIMEOUT: int = 30
    DB_CONNECT_TIMEOUT: int = 10
    DB_POOL_RECYCLE: int = 1800

    # Features
    USERS_LIST_LIMIT: int = 500
    INIT_USER_ROLE: str = "viewer"
    FEATURE_FLAGS: list[str] = ["kpi-v1"]
    INIT_VERSION: int = 1

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"

    @property
    def uses_cloud_sql_socket(self) -> bool:
        return self.ENVIRONMENT == "production" and bool(self.INSTANCE_CONNECTION_NAME)

    @property
    def database_url(self) -> URL:
        """asyncpg URL; in production with a Cloud SQL instance, connect over its unix socket."""
        if self.uses_cloud_sql_socket:
            return URL.create(
                "postgresql+asyncpg",
                username=self.PGUSER,
                password=self.PGPASSWORD,
                database=self.PGDATABASE,
                query={"host": f"/cloudsql/{self.INSTANCE_CONNECTION_NAME}"},
            )
        return URL.create(
            "postgresql+asyncpg",
            username=self.PGUSER,
            password=self.PGPASSWORD,
            host=self.PGHOST,
            port=self.PGPORT,
            database=self.PGDATABASE,
        )


settings = Settings()
