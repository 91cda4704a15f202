"""
Application settings.

Settings are read once at process start (environment variables or a local
.env file) and handed to `create_app()`. Components receive the settings
object through `app.state` instead of looking up globals.
"""

from functools import lru_cache
from typing import List

from fastapi import Request
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Strongly-typed settings model loaded from env / .env."""

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    DATABASE_URL: str = Field(
        default="sqlite:///./edutest.db",
        description="SQLAlchemy database URL (PostgreSQL in production, SQLite locally)",
    )
    LOG_LEVEL: str = Field(default="INFO", description="Root log level")

    JWT_SECRET: str = Field(default="change-me", description="HMAC secret used to verify bearer tokens")
    JWT_ALGORITHM: str = Field(default="HS256", description="JWT signing algorithm")

    STUDENT_ROLE: str = Field(default="student", description="Role that is subject to time/attempt policy")
    PRIVILEGED_ROLES: List[str] = Field(
        default_factory=lambda: ["admin", "teacher"],
        description="Roles that may read other users' attempts",
    )

    SUBMIT_RETRIES: int = Field(default=3, ge=1, description="Retries when two submissions race")
    DEFAULT_SECTION: str = Field(default="general", description="Bucket for SAT questions without a section")


@lru_cache()
def get_settings() -> Settings:
    """Return the process-level settings, read once."""
    return Settings()


def get_app_settings(request: Request) -> Settings:
    """FastAPI dependency: the settings the running app was built with."""
    return request.app.state.settings
