"""
Application settings.

Loads configuration from environment variables using pydantic-settings.
"""

from decimal import Decimal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str = "sqlite+aiosqlite:///./mlm.db"
    database_echo: bool = False
    sqlite_busy_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Seconds a SQLite connection waits for the write lock",
    )

    # Application
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"
    log_file: str | None = "logs/mlm_core.log"

    # Security
    password_salt_rounds: int = Field(
        default=10,
        ge=4,
        le=31,
        description="bcrypt cost factor for member passwords",
    )

    # Wallets
    min_withdrawal_amount: Decimal | None = Field(
        default=None,
        description="Minimum commission-wallet withdrawal (unset = no minimum)",
    )

    # Concurrency
    optimistic_lock_max_retries: int = Field(
        default=5,
        ge=1,
        le=20,
        description="Attempts for a unit of work that hits a version conflict",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator('database_url')
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Validate database URL uses an async driver."""
        if not v.startswith(('postgresql+asyncpg://', 'sqlite+aiosqlite://')):
            raise ValueError(
                'DATABASE_URL must start with postgresql+asyncpg:// '
                'or sqlite+aiosqlite://'
            )
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize log level name."""
        level = v.upper()
        if level not in {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f'Unknown log level: {v}')
        return level

    @model_validator(mode='after')
    def validate_production(self) -> 'Settings':
        """Reject development-only settings in production."""
        if self.environment == "production":
            if self.debug:
                raise ValueError('DEBUG must be disabled in production')
            if self.database_url.startswith('sqlite'):
                raise ValueError('SQLite is not supported in production')
        return self

    @property
    def is_sqlite(self) -> bool:
        """Whether the configured database is SQLite."""
        return self.database_url.startswith('sqlite')


# Global settings instance
settings = Settings()
