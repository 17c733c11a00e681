"""
Application settings loaded from the environment (and `.env`).
"""

from __future__ import annotations

import json
from functools import lru_cache
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # LLM / ADK
    llm_model: str = Field(default="gemini-2.5-flash")
    adk_app_name: str = Field(default="hitl_backend")
    adk_user_id: str = Field(default="default_user")
    streaming_enabled: bool = Field(
        default=True,
        description="Use ADK SSE streaming so text arrives as partial events",
    )
    google_application_credentials: str | None = Field(
        default=None,
        description="Service account file path or inline JSON for Vertex AI",
    )

    # HTTP
    cors_origins: Annotated[list[str], NoDecode] = Field(
        default=["http://localhost:3000"]
    )

    # Support desk
    conversation_store_backend: str = Field(default="memory")
    history_context_limit: int = Field(default=10, ge=1)
    triage_history_limit: int = Field(default=5, ge=1)

    # Logging
    log_level: str = Field(default="INFO")
    log_dir: str | None = Field(
        default=None,
        description="Directory for app.log; console-only when unset",
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: str | list[str]) -> list[str]:
        """Accept a JSON array or a comma separated list."""
        if isinstance(v, str):
            try:
                parsed = json.loads(v)
            except json.JSONDecodeError:
                return [origin.strip() for origin in v.split(",") if origin.strip()]
            if isinstance(parsed, list):
                return [str(origin) for origin in parsed]
            return [str(parsed)]
        return v


@lru_cache
def get_settings() -> Settings:
    return Settings()
