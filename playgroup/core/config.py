from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str = Field("sqlite+aiosqlite:///./playgroup.db", alias="DATABASE_URL")

    jwt_secret_key: str = Field(..., alias="JWT_SECRET_KEY")
    jwt_algorithm: str = Field("HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(60, alias="ACCESS_TOKEN_EXPIRE_MINUTES")

    log_level: str = Field("INFO", alias="LOG_LEVEL")
    cors_origins: List[str] = Field(default_factory=lambda: ["*"], alias="CORS_ORIGINS")

    # Prefix for generated fee receipt numbers, e.g. RC-001
    receipt_prefix: str = Field("RC-", alias="RECEIPT_PREFIX")

    superadmin_username: Optional[str] = Field(None, alias="SUPERADMIN_USERNAME")
    superadmin_email: Optional[str] = Field(None, alias="SUPERADMIN_EMAIL")
    superadmin_password: Optional[str] = Field(None, alias="SUPERADMIN_PASSWORD")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()
