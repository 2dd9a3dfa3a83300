from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="", case_sensitive=True, extra="ignore"
    )

    # Application
    APP_NAME: str = "Devon Farm"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    APP_URL: str | None = Field(
        default=None, description="Public base URL, used to build the magic-link redirect"
    )

    # Magic-link provider (Stytch)
    STYTCH_PROJECT_ID: str = Field(..., min_length=1)
    STYTCH_SECRET: str = Field(..., min_length=1)
    STYTCH_API_URL: str | None = None
    PROVIDER_TIMEOUT_SECONDS: float = 5.0

    # Database
    POSTGRES_URL: str = Field(..., description="PostgreSQL connection URL")
    POSTGRES_POOL_SIZE: int = 20
    POSTGRES_MAX_OVERFLOW: int = 10
    DB_COMMAND_TIMEOUT_SECONDS: float = 5.0

    # Session cookie
    SESSION_COOKIE_NAME: str = "stytch_session"
    SESSION_CREDENTIAL_TYPE: Literal["session_token", "session_jwt"] = "session_jwt"
    SESSION_COOKIE_TTL_HOURS: int = 24
    SESSION_DURATION_MINUTES: int = 24 * 60
    SESSION_JWT_MAX_AGE_SECONDS: int = Field(default=300, ge=0, le=300)
    TRUST_FORWARDED_PROTO: bool = True

    @field_validator("STYTCH_API_URL", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v: str | None) -> str | None:
        if isinstance(v, str):
            return v.rstrip("/") or None
        return v

    @property
    def stytch_base_url(self) -> str:
        if self.STYTCH_API_URL:
            return self.STYTCH_API_URL
        if self.STYTCH_PROJECT_ID.startswith("project-test-"):
            return "https://test.stytch.com"
        return "https://api.stytch.com"

    @property
    def callback_url(self) -> str | None:
        if not self.APP_URL:
            return None
        return f"{self.APP_URL.rstrip('/')}/auth/callback"


# Global settings instance; a missing secret or connection string aborts startup
try:
    settings = Settings()
except Exception as e:
    print(f"Error loading settings: {e}")
    raise e
