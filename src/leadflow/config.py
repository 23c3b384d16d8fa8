"""Application configuration and settings management."""

from typing import Any, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="LEADFLOW_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Leadflow Distribution API"
    api_prefix: str = "/api"
    log_level: str = Field(default="INFO", description="Root log level for the service.")
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:3000",
            "http://127.0.0.1:3000",
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    # Upload handling
    max_upload_bytes: int = Field(default=10 * 1024 * 1024, ge=1, description="Hard ceiling for uploaded files.")
    allowed_extensions: tuple[str, ...] = Field(default=(".csv", ".xls", ".xlsx"))

    # Roster rules
    max_agents: int = Field(default=5, ge=1, description="Maximum number of agents on the roster.")

    # Distribution fan-out
    assignment_max_parallel_writes: int = Field(default=5, ge=1)
    assignment_join_timeout_seconds: float = Field(default=30.0, gt=0.0)

    # History listing
    default_page_size: int = Field(default=20, ge=1)
    max_page_size: int = Field(default=100, ge=1)

    # Supabase configuration
    supabase_url: Optional[str] = Field(
        default=None,
        description="Supabase project URL (e.g., https://xxx.supabase.co).",
    )
    supabase_key: Optional[str] = Field(
        default=None,
        description="Supabase service role key for backend operations.",
    )
    storage_timeout_seconds: float = Field(
        default=10.0,
        gt=0.0,
        description="Timeout applied to every backing-store request.",
    )

    @field_validator("frontend_allowed_origins", "allowed_extensions", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            # Try JSON first
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()

    @field_validator("allowed_extensions", mode="after")
    @classmethod
    def _normalize_extensions(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in value)


settings = Settings()
