"""Application settings and configuration.

This module defines all configuration options for the Coffee application.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Coffee", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    # Accounts signing up with this address are created approved and admin.
    admin_email: str | None = Field(default=None, alias="ADMIN_EMAIL")

    # Security and authentication
    secret_key: str = Field(alias="SECRET_KEY")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Database configuration
    database_url: str = Field(default="sqlite:///./coffee.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")
    create_tables_on_startup: bool = Field(default=False, alias="CREATE_TABLES_ON_STARTUP")

    # JWT session settings
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=60 * 24 * 7,
        alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )
    session_cookie_name: str = Field(default="coffee_session", alias="SESSION_COOKIE_NAME")
    session_cookie_secure: bool = Field(default=True, alias="SESSION_COOKIE_SECURE")
    min_password_length: int = Field(default=8, alias="MIN_PASSWORD_LENGTH")

    # Listing limits
    feed_page_size: int = Field(default=12, alias="FEED_PAGE_SIZE")
    search_result_limit: int = Field(default=50, alias="SEARCH_RESULT_LIMIT")

    # Retry policy for rate-limited store reads (linear backoff: backoff * attempt)
    rate_limit_max_attempts: int = Field(default=3, alias="RATE_LIMIT_MAX_ATTEMPTS")
    rate_limit_backoff_seconds: float = Field(default=1.0, alias="RATE_LIMIT_BACKOFF_SECONDS")

    # Placeholder values written when repairing an approved admin's profile
    admin_placeholder_name: str = Field(default="Admin User", alias="ADMIN_PLACEHOLDER_NAME")
    admin_placeholder_photo_url: str = Field(
        default="/admin-interface.png",
        alias="ADMIN_PLACEHOLDER_PHOTO_URL",
    )

    # S3-compatible object storage
    storage_endpoint_url: str | None = Field(default=None, alias="STORAGE_ENDPOINT_URL")
    storage_access_key: str | None = Field(default=None, alias="STORAGE_ACCESS_KEY")
    storage_secret_key: str | None = Field(default=None, alias="STORAGE_SECRET_KEY")
    storage_region: str = Field(default="us-east-1", alias="STORAGE_REGION")
    storage_public_url: str | None = Field(default=None, alias="STORAGE_PUBLIC_URL")
    storage_signed_upload_ttl_seconds: int = Field(
        default=600,
        alias="STORAGE_SIGNED_UPLOAD_TTL_SECONDS",
    )

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(
        default=["*"],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PATCH", "PUT", "DELETE", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(
        default=["*"],
        alias="CORS_ALLOW_HEADERS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def database_url_sync(self) -> str:
        """Return a sync-compatible database URL for tooling.

        Converts asyncpg URLs to psycopg for synchronous database operations
        like Alembic migrations.
        """
        url = self.effective_database_url
        if url.startswith("postgresql+asyncpg"):
            return url.replace("postgresql+asyncpg", "postgresql+psycopg", 1)
        return url

    @property
    def effective_database_url(self) -> str:
        """Return the database URL respecting testing overrides."""
        if self.use_testing_database and self.test_database_url:
            return self.test_database_url
        return self.database_url

    @property
    def storage_configured(self) -> bool:
        """True when credentials for the object store are present."""
        return bool(self.storage_access_key and self.storage_secret_key)

    def is_admin_email(self, email: str | None) -> bool:
        """Return True if ``email`` is the configured auto-approved admin address."""
        if not email or not self.admin_email:
            return False
        return email.strip().lower() == self.admin_email.strip().lower()


settings = Settings()  # type: ignore[call-arg]
