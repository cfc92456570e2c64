"""Load .env and settings.yaml, expose all configuration."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from uuid import UUID

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

from globaltags.api.models import AuthProvider

log = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent.parent

THIRTY_MINUTES_MS = 30 * 60 * 1000
FIVE_MINUTES_MS = 5 * 60 * 1000


def _load_env() -> None:
    env_path = PROJECT_ROOT / ".env"
    load_dotenv(env_path)


def _load_yaml() -> dict:
    settings_path = PROJECT_ROOT / "settings.yaml"
    if settings_path.exists():
        try:
            with open(settings_path) as f:
                return yaml.safe_load(f) or {}
        except yaml.YAMLError:
            log.warning("Failed to parse settings.yaml, using defaults")
            return {}
    return {}


class Settings(BaseModel):
    api_base: str = "https://api.globaltags.xyz"
    auth_type: AuthProvider = AuthProvider.BEARER
    authorization: str = ""
    client_uuid: UUID | None = None
    language: str = "en_us"
    agent_name: str = "globaltags-python"
    agent_version: str = "1.0.0"
    minecraft_version: str | None = None
    # Milliseconds, -1 disables the cycle.
    cache_clear_interval: int = THIRTY_MINUTES_MS
    cache_renew_interval: int = FIVE_MINUTES_MS

    @field_validator("authorization")
    @classmethod
    def strip_authorization(cls, v: str) -> str:
        return v.strip()

    @field_validator("api_base")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("cache_clear_interval", "cache_renew_interval")
    @classmethod
    def check_interval(cls, v: int) -> int:
        if v < -1 or v == 0:
            raise ValueError("interval must be -1 (disabled) or a positive number of milliseconds")
        return v

    @property
    def authorization_header(self) -> str:
        """Value for the Authorization header, empty when unauthenticated."""
        if not self.authorization:
            return ""
        return f"{self.auth_type.id} {self.authorization}"


def load_settings() -> Settings:
    _load_env()
    raw = _load_yaml()
    raw["authorization"] = os.getenv("GLOBALTAGS_AUTHORIZATION", "")
    client_uuid = os.getenv("GLOBALTAGS_CLIENT_UUID")
    if client_uuid:
        raw["client_uuid"] = client_uuid
    return Settings(**raw)
