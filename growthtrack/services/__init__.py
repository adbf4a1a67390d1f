"""Collaborators the timer core talks to: REST API, local log, reminders."""

from .api import ApiClient, ApiError, SessionExpired
from .notifications import DailyTrigger, NotificationPreferences, NotificationService
from .storage import TokenStore

__all__ = [
    "ApiClient",
    "ApiError",
    "SessionExpired",
    "DailyTrigger",
    "NotificationPreferences",
    "NotificationService",
    "TokenStore",
]
