from typing import Optional
from urllib.parse import quote_plus

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseConfig(BaseSettings):
    """Database configuration"""

    host: str = "localhost"
    port: int = 5432
    username: str = "postgres"
    password: SecretStr = Field(default=SecretStr("postgres"))
    database: str = "log_relay"
    schema_name: Optional[str] = None
    serverless: bool = Field(
        default=True,
        description="If true, disable connection pooling so serverless DBs can pause.",
    )

    @property
    def url(self) -> str:
        """Get database URL"""
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


class TelegramConfig(BaseSettings):
    """Telegram Bot API configuration."""

    bot_token: SecretStr | None = Field(default=None)
    api_base: str = "https://api.telegram.org"
    timeout_seconds: float = Field(default=10.0, gt=0)

    model_config = SettingsConfigDict(
        env_prefix="TELEGRAM_",
        env_file=".env",
        secrets_dir=".secrets",
        case_sensitive=False,
        extra="ignore",
    )


class GeolocationConfig(BaseSettings):
    """IP geolocation lookup configuration."""

    base_url: str = "http://ip-api.com/json"
    timeout_seconds: float = Field(default=5.0, gt=0)
    cache_ttl_seconds: int = Field(default=86_400, ge=0)
    cache_max_entries: int = Field(default=10_000, ge=1)

    model_config = SettingsConfigDict(
        env_prefix="GEO_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class RateLimitConfig(BaseSettings):
    """Fixed-window rate limiting for the upload endpoint."""

    window_seconds: float = Field(default=60.0, gt=0)
    max_requests: int = Field(default=10, ge=1)
    sweep_interval_seconds: float = Field(default=60.0, gt=0)

    model_config = SettingsConfigDict(
        env_prefix="RATE_LIMIT_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class Settings(BaseSettings):
    """Application settings"""

    app_name: str = "Log Relay Backend"
    app_version: str = "1.0.0"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000
    log_file: str = "logs/app.log"
    upload_log_file: str = "logs/uploads.log"

    # Database
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)

    # Telegram
    telegram: TelegramConfig = Field(default_factory=TelegramConfig)

    # Geolocation
    geolocation: GeolocationConfig = Field(default_factory=GeolocationConfig)

    # Rate limiting
    rate_limit: RateLimitConfig = Field(default_factory=RateLimitConfig)

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
