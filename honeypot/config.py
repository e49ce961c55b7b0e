"""Application configuration via pydantic-settings.

All secrets are loaded from environment variables (.env file).
Settings are organized into logical groups and composed into a single Settings object.
"""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Relational store for users, products, carts and orders."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    database_url: str = Field(
        default="sqlite+aiosqlite:///./database/ecommerce_honeypot.sqlite",
        description="Async SQLAlchemy connection string",
    )

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


class ActivityLogSettings(BaseSettings):
    """Where the honeypot activity trail is written."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    logs_dir: str = Field(default="logs", description="Directory holding both activity sinks")
    activity_log_file: str = Field(
        default="honeypot_activity.log",
        description="Human-readable line log",
    )
    structured_log_file: str = Field(
        default="splunk_input.log",
        description="JSON-lines feed for the log-analysis platform",
    )
    console_echo: bool = Field(default=True, description="Echo every record to the console logger")


class SecuritySettings(BaseSettings):
    """Token signing and password hashing settings."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    jwt_secret: str = Field(default="", description="HMAC secret for bearer tokens")
    jwt_algorithm: str = Field(default="HS256")
    jwt_expire_days: int = Field(default=30, description="Bearer token lifetime in days")
    password_min_length: int = Field(default=6)
    password_iterations: int = Field(default=260_000, description="pbkdf2_sha256 rounds for new hashes")


class ServerSettings(BaseSettings):
    """Uvicorn bind address."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000)


class Settings(BaseSettings):
    """Root settings composing all sub-settings.

    Usage:
        settings = Settings()
        settings.db.database_url
        settings.activity.logs_dir
        settings.security.jwt_expire_days
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Environment
    environment: str = Field(default="development")
    log_level: str = Field(default="INFO")

    # Composed settings (loaded from same .env)
    db: DatabaseSettings = Field(default_factory=DatabaseSettings)
    activity: ActivityLogSettings = Field(default_factory=ActivityLogSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)
    server: ServerSettings = Field(default_factory=ServerSettings)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid:
            msg = f"Invalid log level: {v}. Must be one of {valid}"
            raise ValueError(msg)
        return upper

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"


# Module-level singleton, import this wherever settings are needed.
settings = Settings()
