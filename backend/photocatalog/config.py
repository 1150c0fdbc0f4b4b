"""
PhotoCatalog Configuration Module
Loads settings from environment variables with sensible defaults.
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL


class ConfigurationError(RuntimeError):
    """Raised when a required setting is missing or unusable."""


INSECURE_SECRETS = {
    "change-me-in-production",
    "changeme",
    "secret",
    "password",
    "default",
}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "PhotoCatalog"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 3000
    api_prefix: str = ""
    cors_origins: str = "*"

    # Database
    database_url: Optional[str] = None
    db_host: str = "localhost"
    db_port: int = 5432
    db_database: str = "photocatalog"
    db_user: Optional[str] = None
    db_password: Optional[str] = None
    db_pool_size: int = 10
    db_max_overflow: int = 20
    db_connect_timeout: float = 5.0  # seconds to acquire a connection
    db_statement_timeout: float = 10.0  # seconds per statement

    # Authentication
    jwt_secret: Optional[str] = None  # required by the API, not by the indexer
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24
    bcrypt_rounds: int = 10
    revoke_tokens_on_password_change: bool = False

    # Administration
    admin_api_key: Optional[str] = None
    admin_key_header: str = "X-Admin-Key"

    # Indexer
    nas_root_path: Optional[str] = None
    indexer_concurrency: int = 8
    indexer_fail_on_errors: bool = False

    # Logging
    log_level: str = "INFO"
    log_dir: Optional[str] = None

    @field_validator("jwt_secret")
    @classmethod
    def validate_jwt_secret(cls, v: Optional[str]) -> Optional[str]:
        """Reject short or well-known signing secrets."""
        if v is None:
            return v
        if len(v) < 32:
            raise ValueError("JWT_SECRET must be at least 32 characters long")
        if v.lower() in INSECURE_SECRETS:
            raise ValueError(
                "JWT_SECRET appears to be insecure. Generate a secure key with: "
                "python -c 'import secrets; print(secrets.token_hex(32))'"
            )
        return v

    @field_validator("api_prefix")
    @classmethod
    def normalize_api_prefix(cls, v: str) -> str:
        v = v.strip().rstrip("/")
        if v and not v.startswith("/"):
            v = "/" + v
        return v

    @field_validator("indexer_concurrency")
    @classmethod
    def validate_concurrency(cls, v: int) -> int:
        if v < 1:
            raise ValueError("INDEXER_CONCURRENCY must be at least 1")
        return v

    @property
    def sqlalchemy_url(self) -> str:
        """Full async database URL, built from the DB_* parts unless DATABASE_URL is set."""
        if self.database_url:
            return self.database_url
        return URL.create(
            "postgresql+asyncpg",
            username=self.db_user,
            password=self.db_password,
            host=self.db_host,
            port=self.db_port,
            database=self.db_database,
        ).render_as_string(hide_password=False)

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse comma-separated origins into a list."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    def require_jwt_secret(self) -> str:
        if not self.jwt_secret:
            raise ConfigurationError("JWT_SECRET is not set; the API cannot sign tokens.")
        return self.jwt_secret

    def require_nas_root(self) -> str:
        if not self.nas_root_path:
            raise ConfigurationError("NAS_ROOT_PATH is not set; nothing to index.")
        return self.nas_root_path


def mask_secret(value: Optional[str]) -> str:
    """Render a secret for logs: first 4 characters only."""
    if not value:
        return "NOT SET"
    return value[:4] + "..."


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance. Entry points only; handlers use the app context."""
    return Settings()
