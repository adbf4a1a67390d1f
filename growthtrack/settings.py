"""Application settings with JSON persistence.

Settings are stored at:
    ~/.growthtrack/settings.json

Usage::

    settings = load_settings()
    settings.default_rest_seconds = 60
    save_settings(settings)

``GROWTHTRACK_API_URL`` in the environment overrides ``api_url``.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, asdict, field, fields
from pathlib import Path

from .services.notifications import NotificationPreferences

logger = logging.getLogger(__name__)

APP_DIR = Path.home() / ".growthtrack"
SETTINGS_PATH = APP_DIR / "settings.json"

DEFAULT_API_URL = "https://node-post-connect.replit.app"
API_URL_ENV = "GROWTHTRACK_API_URL"


@dataclass
class Settings:
    """All user-configurable preferences."""

    # ── backend ───────────────────────────────────────────────────────
    api_url: str = DEFAULT_API_URL
    request_timeout: float = 10.0          # seconds
    offline_mode: bool = False             # log sessions locally only

    # ── timers ────────────────────────────────────────────────────────
    tick_interval_ms: int = 1000
    default_rest_seconds: int = 90
    default_pt_seconds: int = 30

    # ── logging ───────────────────────────────────────────────────────
    log_level: str = "INFO"

    # ── notifications ─────────────────────────────────────────────────
    notifications: NotificationPreferences = field(default_factory=NotificationPreferences)


def load_settings(path: Path | None = None) -> Settings:
    """Load settings from disk, falling back to defaults."""
    path = path or SETTINGS_PATH
    settings = Settings()
    try:
        if path.exists():
            data = json.loads(path.read_text(encoding="utf-8"))
            # Only use keys that exist in the dataclass
            valid_keys = {f.name for f in fields(Settings)}
            filtered = {k: v for k, v in data.items() if k in valid_keys}
            prefs = filtered.pop("notifications", None)
            settings = Settings(**filtered)
            if isinstance(prefs, dict):
                settings.notifications = NotificationPreferences.from_dict(prefs)
    except (OSError, ValueError, TypeError) as exc:
        logger.warning("Could not read %s, using defaults: %s", path, exc)
        settings = Settings()

    env_url = os.environ.get(API_URL_ENV)
    if env_url:
        settings.api_url = env_url
    return settings


def save_settings(settings: Settings, path: Path | None = None) -> None:
    """Write settings to disk as JSON."""
    path = path or SETTINGS_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(asdict(settings), indent=2) + "\n",
        encoding="utf-8",
    )
