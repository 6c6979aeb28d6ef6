"""
Runtime configuration helpers for the social client.

Loads DATABASE_URL, the hosted backend endpoint and other variables from the
.env file located in the project root.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[1]

ENV_PATH = BASE_DIR / ".env"

# Values already exported in the environment win over the .env file.
load_dotenv(dotenv_path=ENV_PATH, override=False)


class Settings(BaseSettings):
    # Local key/value store for persisted client settings
    database_url: str = Field(default="sqlite+pysqlite:///./social_client.db", alias="DATABASE_URL")

    app_name: str = Field(default="SocialSphere Client", alias="APP_NAME")
    api_version: str = Field(default="0.1.0", alias="API_VERSION")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Hosted backend (PostgREST-style query API)
    backend_url: str = Field(default="http://localhost:54321", alias="BACKEND_URL")
    backend_api_key: str | None = Field(default=None, alias="BACKEND_API_KEY")
    backend_timeout: float = Field(default=15.0, alias="BACKEND_TIMEOUT")
    backend_user_id: str | None = Field(default=None, alias="BACKEND_USER_ID")
    default_conversation_id: str | None = Field(default=None, alias="DEFAULT_CONVERSATION_ID")

    mount_views_on_startup: bool = Field(default=True, alias="MOUNT_VIEWS_ON_STARTUP")

    model_config = SettingsConfigDict(
        env_file=str(ENV_PATH),
        env_file_encoding="utf-8",
        extra="ignore"
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()


__all__ = ["Settings", "get_settings"]
