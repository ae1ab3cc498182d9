"""Application configuration."""

import os
import re
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

DEFAULT_ALLOWED_ORIGINS = ("http://localhost:5175", "http://localhost:5173")

_DURATION_UNITS = {
    "s": 1,
    "m": 60,
    "h": 60 * 60,
    "d": 24 * 60 * 60,
    "w": 7 * 24 * 60 * 60,
    "y": 365 * 24 * 60 * 60,
}
_DURATION_PATTERN = re.compile(r"^(\d+)\s*([smhdwy]?)$")


class Settings(BaseSettings):
    """Server settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    storage_bucket: str = "images"
    storage_folder: str = "user-images"
    jwt_secret: str
    jwt_algorithm: str = "HS256"
    jwt_expires_in: str = "7d"
    frontend_url: str | None = None
    auth_rate_limit: str = "5/15minutes"
    rate_limit_enabled: bool = True

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @property
    def token_ttl_seconds(self) -> int:
        return parse_duration(self.jwt_expires_in)


class ClientSettings(BaseSettings):
    """Settings for the command-line client."""

    api_base_url: str = "http://localhost:3005"
    token_path: Path = Path.home() / ".image_vault" / "token.json"

    model_config = SettingsConfigDict(env_prefix="IMAGE_VAULT_", extra="ignore")


def parse_duration(raw: str) -> int:
    """Parse a duration like ``7d`` or ``3600`` into seconds."""
    match = _DURATION_PATTERN.match(raw.strip().lower())
    if not match:
        raise ValueError(
            f'Invalid duration format: "{raw}". '
            'Expected formats: "7d", "24h", "30m", "3600", "1y".'
        )
    amount, unit = match.groups()
    seconds = int(amount) * _DURATION_UNITS[unit or "s"]
    if seconds <= 0:
        raise ValueError(f'Duration must be positive: "{raw}"')
    return seconds


def parse_allowed_origins(raw: str | None) -> list[str]:
    """Parse comma separated CORS origins, falling back to local dev origins."""
    if raw is None:
        return list(DEFAULT_ALLOWED_ORIGINS)
    origins = [chunk.strip() for chunk in raw.split(",") if chunk.strip()]
    return origins or list(DEFAULT_ALLOWED_ORIGINS)
