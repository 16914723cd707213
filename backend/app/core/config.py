from functools import lru_cache
from typing import List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

EMAIL_PROVIDERS = ("log", "sendgrid", "resend")


class Settings(BaseSettings):
    """Application configuration loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    PROJECT_NAME: str = "Helpdesk API"
    API_PREFIX: str = "/api"
    ENVIRONMENT: str = "local"
    LOG_LEVEL: str = "INFO"
    # Hosted Postgres in production, a local SQLite file otherwise
    DATABASE_URL: str = "sqlite:///../helpdesk.db"
    BACKEND_CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
    ]

    # Identity provider (JWTs signed with the project secret)
    AUTH_JWT_SECRET: str = "changeme"
    AUTH_JWT_ALGORITHM: str = "HS256"
    AUTH_JWT_AUDIENCE: str = "authenticated"

    # Email delivery: "log", "sendgrid" or "resend"
    EMAIL_PROVIDER: str = "log"
    EMAIL_API_KEY: Optional[str] = None
    EMAIL_FROM: str = "helpdesk@example.com"
    EMAIL_FROM_NAME: str = "Helpdesk Support"
    EMAIL_TIMEOUT_SECONDS: float = 10.0

    # S3-compatible object storage for attachments
    STORAGE_BUCKET: str = "helpdesk-attachments"
    STORAGE_ENDPOINT_URL: Optional[str] = None
    STORAGE_REGION: str = "us-east-1"
    STORAGE_ACCESS_KEY_ID: Optional[str] = None
    STORAGE_SECRET_ACCESS_KEY: Optional[str] = None
    STORAGE_PUBLIC_URL: Optional[str] = None

    MAX_UPLOAD_SIZE: int = 5 * 1024 * 1024
    MAX_UPLOAD_FILES: int = 5

    ENFORCE_STATUS_TRANSITIONS: bool = False

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, value: List[str] | str) -> List[str]:
        """Allow both comma-separated strings and list inputs."""
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @field_validator("EMAIL_PROVIDER")
    @classmethod
    def normalize_email_provider(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in EMAIL_PROVIDERS:
            raise ValueError(f"EMAIL_PROVIDER must be one of: {', '.join(EMAIL_PROVIDERS)}")
        return value


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
