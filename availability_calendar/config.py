from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
import os


def _get_secret_key() -> str:
    key = os.getenv("SECRET_KEY")
    if not key:
        raise ValueError("SECRET_KEY environment variable is required")
    return key


def _get_database_url() -> str:
    url = os.getenv("DATABASE_URL")
    if not url:
        raise ValueError("DATABASE_URL environment variable is required")
    return url


class Settings(BaseSettings):
    APP_NAME: str = "Availability Calendar API"
    VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    SECRET_KEY: str = Field(
        default_factory=_get_secret_key, description="Secret key for JWT tokens"
    )
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30
    REFRESH_TOKEN_EXPIRE_DAYS: int = 30
    DATABASE_URL: str = Field(
        default_factory=_get_database_url, description="Database connection URL"
    )

    CORS_ORIGINS: str = Field(
        default="http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000",
        description="Comma-separated list of allowed origins",
    )
    TRUSTED_HOSTS: str = "localhost,127.0.0.1,test"

    COOKIE_SECURE: bool = True

    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_PER_MINUTE: int = 60
    TOGGLE_RATE_LIMIT: str = "30/minute"
    LOGIN_MAX_ATTEMPTS: int = 5
    LOGIN_LOCKOUT_SECONDS: int = 1800

    LOG_LEVEL: str = "INFO"
    SENTRY_DSN: str | None = None

    UNKNOWN_DISPLAY_NAME: str = "Unknown"

    DB_ECHO: bool = False
    DOCS_ENABLED: bool = True

    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=True, env_file_encoding="utf-8", extra="ignore"
    )

    @field_validator("CORS_ORIGINS")
    @classmethod
    def validate_cors_origins(cls, v: str) -> str:
        if not v:
            raise ValueError("CORS_ORIGINS cannot be empty")

        origins = [origin.strip() for origin in v.split(",")]
        for origin in origins:
            if not origin.startswith(("http://", "https://")):
                raise ValueError(
                    f"Invalid CORS origin format: {origin}. Must start with http:// or https://"
                )

        return v

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT.lower() == "development"

    @property
    def cors_origins_list(self) -> list[str]:
        return [
            origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()
        ]

    @property
    def trusted_hosts_list(self) -> list[str]:
        return [host.strip() for host in self.TRUSTED_HOSTS.split(",") if host.strip()]


settings = Settings()  # type: ignore[call-arg]


def _validate_settings() -> None:
    if not os.getenv("SKIP_CONFIG_VALIDATION"):
        from .core.config_validator import EnvironmentValidator

        EnvironmentValidator.validate_or_exit()


_validate_settings()
