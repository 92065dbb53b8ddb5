"""User-editable application settings.

Settings are a flat JSON object stored in :data:`paths.SETTINGS_FILE`.
Missing keys fall back to :data:`DEFAULT_SETTINGS`, and an unreadable
file behaves as if it were empty.
"""

from __future__ import annotations

import json
from typing import Any

from loguru import logger

from .paths import SETTINGS_FILE, atomic_write

DEFAULT_API_BASE_URL = "https://reel-wheel-api-x92jj.ondigitalocean.app"

DEFAULT_SETTINGS: dict[str, Any] = {
    "api_base_url": DEFAULT_API_BASE_URL,
    "debug": False,
    "cache_enabled": True,
    "cache_ttl_seconds": 120,
    "stale_while_revalidate": True,
    # How long past its TTL a stale entry is kept before purge_expired drops it.
    "cache_stale_grace_seconds": 600,
    "request_timeout": 30.0,
}


class AppSettings:
    """Read/write access to the persisted settings file."""

    @staticmethod
    def load() -> dict[str, Any]:
        """Return the stored settings merged over the defaults."""
        settings = dict(DEFAULT_SETTINGS)
        if not SETTINGS_FILE.exists():
            return settings
        try:
            stored = json.loads(SETTINGS_FILE.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError, ValueError) as exc:
            logger.warning(f"Ignoring unreadable settings file {SETTINGS_FILE}: {exc}")
            return settings
        if isinstance(stored, dict):
            settings.update(stored)
        return settings

    @staticmethod
    def save(settings: dict[str, Any]) -> None:
        atomic_write(SETTINGS_FILE, json.dumps(settings, indent=2))

    @staticmethod
    def get(key: str, default: Any = None) -> Any:
        return AppSettings.load().get(key, default)

    @staticmethod
    def set(key: str, value: Any) -> None:
        settings = AppSettings.load()
        settings[key] = value
        AppSettings.save(settings)
