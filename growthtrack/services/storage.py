"""Auth token and cached-user storage.

A small JSON key-value file next to the settings.  The API client reads
the bearer token from here and clears it when the server answers 401.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

TOKEN_KEY = "auth_token"
USER_KEY = "user_data"

DEFAULT_STORE_PATH = Path.home() / ".growthtrack" / "credentials.json"


class TokenStore:
    """File-backed key-value store for credentials."""

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or DEFAULT_STORE_PATH

    @property
    def path(self) -> Path:
        return self._path

    # ── generic ───────────────────────────────────────────────────────

    def _read(self) -> dict:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Discarding unreadable credential store at %s: %s", self._path, exc)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        # owner-only before the token lands on disk
        self._path.touch(mode=0o600, exist_ok=True)
        self._path.chmod(0o600)
        self._path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")

    def get_item(self, key: str):
        return self._read().get(key)

    def set_item(self, key: str, value) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove_item(self, key: str) -> None:
        data = self._read()
        if data.pop(key, None) is not None:
            self._write(data)

    def clear(self) -> None:
        if self._path.exists():
            self._path.unlink()

    # ── token / user ──────────────────────────────────────────────────

    def get_token(self) -> str | None:
        return self.get_item(TOKEN_KEY)

    def set_token(self, token: str) -> None:
        self.set_item(TOKEN_KEY, token)

    def remove_token(self) -> None:
        self.remove_item(TOKEN_KEY)

    def get_user(self) -> dict | None:
        return self.get_item(USER_KEY)

    def set_user(self, user: dict) -> None:
        self.set_item(USER_KEY, user)
