from decimal import Decimal
from urllib.parse import quote_plus

from pydantic import Field, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables (and ``.env``).
    """

    # Application
    PROJECT_NAME: str = "Retail POS"
    VERSION: str = "0.1.0"
    ENVIRONMENT: str = Field("development", description="development, test or production")
    DEBUG: bool = Field(False, description="Debug mode")

    # Sales rules
    TAX_RATE: Decimal = Field(Decimal("0.08"), description="Sales tax rate applied to order subtotals")
    RETURN_WINDOW_DAYS: int = Field(30, description="Days after purchase during which a return is accepted")
    DEFAULT_REORDER_LEVEL: int = Field(10, description="Reorder level for products that do not set one")
    DEFAULT_MAX_STOCK_LEVEL: int = Field(100, description="Maximum stock level for products that do not set one")

    # Logging
    LOG_LEVEL: str = Field("INFO", description="DEBUG, INFO, WARNING, ERROR or CRITICAL")
    LOG_FORMAT: str = Field("colored", description="colored, json or plain")
    LOG_FILE: str | None = Field(None, description="Optional path for JSON file logging")

    # PostgreSQL Database Settings
    DB_HOST: str = Field("localhost", description="PostgreSQL host")
    DB_PORT: int = Field(5432, description="PostgreSQL port")
    DB_NAME: str = Field("retail_pos", description="Database name")
    DB_USER: str = Field("postgres", description="Database user")
    DB_PASSWORD: str | None = Field(None, description="Database password")
    DB_ECHO: bool = Field(False, description="Log SQL queries (debug only)")

    # Database connection pool settings
    DB_POOL_SIZE: int = Field(10, description="Connection pool size")
    DB_MAX_OVERFLOW: int = Field(20, description="Maximum pool overflow")
    DB_POOL_RECYCLE: int = Field(3600, description="Recycle connections after N seconds")
    DB_POOL_TIMEOUT: int = Field(30, description="Seconds to wait for a pooled connection")

    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("TAX_RATE")
    @classmethod
    def validate_tax_rate(cls, v: Decimal) -> Decimal:
        if v < 0 or v >= 1:
            raise ValueError("TAX_RATE must be a fraction in [0, 1)")
        return v

    @field_validator("RETURN_WINDOW_DAYS")
    @classmethod
    def validate_return_window(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("RETURN_WINDOW_DAYS must be positive")
        return v

    @field_validator("LOG_FORMAT")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        v = v.lower()
        if v not in ("colored", "json", "plain"):
            raise ValueError("LOG_FORMAT must be one of: colored, json, plain")
        return v

    @computed_field
    @property
    def database_url(self) -> str:
        """Async SQLAlchemy URL built from the DB_* settings."""
        user = quote_plus(self.DB_USER)
        if self.DB_PASSWORD:
            credentials = f"{user}:{quote_plus(self.DB_PASSWORD)}"
        else:
            credentials = user
        return f"postgresql+asyncpg://{credentials}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    @property
    def is_testing(self) -> bool:
        return self.ENVIRONMENT == "test"


# Settings singleton
_settings_instance = None


def get_settings() -> Settings:
    """
    Return the cached settings instance.
    Avoids reading the environment more than once.
    """
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance


def reset_settings() -> None:
    """Drop the cached instance so the next call re-reads the environment."""
    global _settings_instance
    _settings_instance = None
