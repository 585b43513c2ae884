"""Application settings loaded from environment variables via .env file."""

from pathlib import Path
import json
import re

from pydantic import ConfigDict, field_validator
from pydantic_settings import BaseSettings

REPO_ROOT = Path(__file__).resolve().parents[2]
BACKEND_DIR = Path(__file__).resolve().parents[1]

DEFAULT_CORS_ORIGIN_REGEX = r"^https?://(localhost(:\d+)?|[\w-]+(\.[\w-]+)*\.vercel\.app)$"


def _parse_origin_list(raw: str) -> list[str]:
    """Parse a JSON list or a comma/space separated string of origins."""
    value = raw.strip()
    if not value:
        return []

    if value.startswith("["):
        try:
            parsed = json.loads(value)
            if isinstance(parsed, list):
                candidates = [str(item) for item in parsed]
            else:
                candidates = [value]
        except json.JSONDecodeError:
            candidates = re.split(r"[,\s;]+", value)
    else:
        candidates = re.split(r"[,\s;]+", value)

    origins: list[str] = []
    for candidate in candidates:
        origin = candidate.strip().strip("'\"").rstrip("/")
        if origin and origin not in origins:
            origins.append(origin)
    return origins


class Settings(BaseSettings):
    # CORS
    cors_origins: str = ""
    # Origins matching this pattern are allowed in addition to `cors_origins`.
    cors_origin_regex: str | None = DEFAULT_CORS_ORIGIN_REGEX

    # Presence
    # Inactivity window after which a typing indicator retracts itself.
    typing_timeout_ms: int = 3000

    # Logging
    log_level: str = "INFO"

    # Backend
    backend_host: str = "0.0.0.0"
    backend_port: int = 5000
    backend_reload: bool = False

    @property
    def cors_origin_list(self) -> list[str]:
        return _parse_origin_list(self.cors_origins)

    @property
    def typing_timeout_seconds(self) -> float:
        return max(0, self.typing_timeout_ms) / 1000.0

    @field_validator("cors_origin_regex", mode="before")
    @classmethod
    def _blank_regex_disables(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalise_log_level(cls, value: str) -> str:
        return str(value).strip().upper()

    model_config = ConfigDict(
        env_file=(str(REPO_ROOT / ".env"), str(BACKEND_DIR / ".env")),
        extra="ignore",
    )


settings = Settings()
