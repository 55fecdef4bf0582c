import json
from typing import Annotated, Any, Optional
from urllib.parse import quote_plus

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class DatabaseConfig(BaseSettings):
    """Database configuration"""

    host: str = "localhost"
    port: int = 5432
    username: str = "postgres"
    password: SecretStr = Field(default=SecretStr("postgres"))
    database: str = "feednet"
    schema_name: Optional[str] = Field(default=None, validation_alias="DB_SCHEMA")
    url_override: Optional[str] = Field(
        default=None,
        validation_alias="DB_URL",
        description="Full SQLAlchemy URL; takes precedence over the discrete fields.",
    )
    serverless: bool = Field(
        default=True,
        description="If true, disable connection pooling so serverless DBs can pause.",
    )

    @property
    def url(self) -> str:
        """Get database URL"""
        if self.url_override:
            return self.url_override
        username = quote_plus(self.username)
        password = quote_plus(self.password.get_secret_value())
        return (
            "postgresql+asyncpg://"
            f"{username}:{password}"
            f"@{self.host}:{self.port}/{self.database}"
        )

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        env_file=".env",
        secrets_dir=".secrets",
        case_sensitive=False,
        extra="ignore",
    )


class SecurityConfig(BaseSettings):
    """JWT and application security configuration."""

    jwt_secret_key: SecretStr = Field(
        default=SecretStr("change-me"),
        validation_alias="JWT_SECRET",
    )
    jwt_algorithm: str = Field(default="HS256", validation_alias="JWT_ALGORITHM")
    access_token_expires_minutes: int = Field(
        default=60,
        validation_alias="JWT_EXPIRATION_MINUTES",
        ge=1,
    )
    super_admin_emails: Annotated[list[str], NoDecode] = Field(
        default_factory=list,
        validation_alias="SUPER_ADMIN_EMAILS",
    )

    @field_validator("super_admin_emails", mode="before")
    @classmethod
    def split_emails(cls, value: Any) -> Any:
        """Accept a comma-separated list or a JSON array."""

        if not isinstance(value, str):
            return value
        value = value.strip()
        if value.startswith("["):
            return json.loads(value)
        return [part.strip() for part in value.split(",") if part.strip()]

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class MailConfig(BaseSettings):
    """SMTP settings used for password recovery emails."""

    host: Optional[str] = None
    port: int = 587
    username: Optional[str] = None
    password: Optional[SecretStr] = None
    sender: str = "FeedNet <no-reply@feednet.local>"
    use_tls: bool = True
    use_ssl: bool = False

    def is_configured(self) -> bool:
        return bool(self.host and self.sender)

    model_config = SettingsConfigDict(
        env_prefix="MAIL_",
        env_file=".env",
        secrets_dir=".secrets",
        case_sensitive=False,
        extra="ignore",
    )


class IdentityConfig(BaseSettings):
    """Identity provider settings.

    When ``revoke_url`` is empty, sign-in accounts are revoked directly in the
    local identity store; otherwise the privileged remote endpoint is called.
    """

    revoke_url: Optional[str] = None
    timeout_seconds: float = Field(default=10.0, gt=0)

    model_config = SettingsConfigDict(
        env_prefix="IDENTITY_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class NeedTrackerConfig(BaseSettings):
    """Food-need counter maintenance and the daily reset job."""

    decrement_attempts: int = Field(default=3, ge=1, le=20)
    retry_backoff_seconds: float = Field(default=0.2, ge=0)
    reset_enabled: bool = True
    reset_check_interval_seconds: float = Field(default=60.0, gt=0)
    timezone: str = "UTC"

    model_config = SettingsConfigDict(
        env_prefix="NEED_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class Settings(BaseSettings):
    """Application settings"""

    app_name: str = "FeedNet Backend"
    app_version: str = "1.0.0"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000
    log_file: str = "logs/app.log"
    donation_log_file: str = "logs/donations.log"
    persist_request_logs: bool = False

    # Database
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)

    # Security
    security: SecurityConfig = Field(default_factory=SecurityConfig)

    # Mail
    mail: MailConfig = Field(default_factory=MailConfig)

    # Identity provider
    identity: IdentityConfig = Field(default_factory=IdentityConfig)

    # Need tracker
    need_tracker: NeedTrackerConfig = Field(default_factory=NeedTrackerConfig)

    # CORS
    cors_origins: list[str] = ["*"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


# Global settings instance
settings = Settings()
