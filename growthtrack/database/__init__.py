"""Database package."""

from .db import get_session, init_db
from .models import SessionLog

__all__ = ["get_session", "init_db", "SessionLog"]
