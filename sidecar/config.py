"""Runtime settings, read from the environment (and a .env beside the package)."""

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field


class Settings(BaseModel):
    completion_tool: str = "attempt_completion"
    completion_field: str = "result"
    compact_approved_permissions: bool = True
    cors_origins: list[str] = Field(default_factory=lambda: ["http://localhost:5173"])
    log_level: str = "INFO"


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def load_settings() -> Settings:
    """Build Settings from SIDECAR_* environment variables."""
    load_dotenv(Path(__file__).resolve().parent.parent / ".env")

    defaults = Settings()
    origins = os.environ.get("SIDECAR_CORS_ORIGINS")
    return Settings(
        completion_tool=os.environ.get("SIDECAR_COMPLETION_TOOL", defaults.completion_tool),
        completion_field=os.environ.get("SIDECAR_COMPLETION_FIELD", defaults.completion_field),
        compact_approved_permissions=_env_flag(
            "SIDECAR_COMPACT_APPROVED_PERMISSIONS", defaults.compact_approved_permissions,
        ),
        cors_origins=(
            [o.strip() for o in origins.split(",") if o.strip()]
            if origins
            else defaults.cors_origins
        ),
        log_level=os.environ.get("SIDECAR_LOG_LEVEL", defaults.log_level).upper(),
    )
