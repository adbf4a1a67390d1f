"""Daily reminder scheduling.

``daily_triggers`` turns the user's preferences into a fixed list of
once-a-day reminders.  ``NotificationService`` arms one single-shot
``QTimer`` per trigger and emits ``reminder_due`` when it fires; the
host decides how to present it (tray message, toast, log line).

The service is created and torn down by the application root: call
``init()`` before scheduling and ``teardown()`` on shutdown.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from datetime import datetime, timedelta

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

logger = logging.getLogger(__name__)


@dataclass
class NotificationPreferences:
    morning_brief_enabled: bool = True
    morning_brief_time: str = "07:00"  # HH:MM, 24h
    checkin_reminder: bool = True
    workout_reminder: bool = True
    meal_reminder: bool = False
    sleep_reminder: bool = True

    @classmethod
    def from_dict(cls, data: dict) -> "NotificationPreferences":
        valid_keys = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in valid_keys})


@dataclass(frozen=True)
class DailyTrigger:
    kind: str
    title: str
    body: str
    hour: int
    minute: int = 0


def parse_time_of_day(value: str) -> tuple[int, int]:
    """``"07:30"`` → ``(7, 30)``."""
    try:
        hour_text, minute_text = value.split(":")
        hour, minute = int(hour_text), int(minute_text)
    except ValueError:
        raise ValueError(f"expected HH:MM, got {value!r}") from None
    if not (0 <= hour < 24 and 0 <= minute < 60):
        raise ValueError(f"time of day out of range: {value!r}")
    return hour, minute


def daily_triggers(prefs: NotificationPreferences) -> list[DailyTrigger]:
    """Reminders implied by *prefs*, in time-of-day order."""
    triggers: list[DailyTrigger] = []

    if prefs.morning_brief_enabled:
        hour, minute = parse_time_of_day(prefs.morning_brief_time)
        triggers.append(DailyTrigger(
            "morning_brief", "Good Morning!",
            "Check your morning brief and start the day strong.",
            hour, minute,
        ))
    if prefs.checkin_reminder:
        triggers.append(DailyTrigger(
            "checkin", "Daily Check-in",
            "How are you feeling today? Take a moment to log your mood and energy.",
            9,
        ))
    if prefs.meal_reminder:
        triggers.append(DailyTrigger(
            "meal", "Log Your Meal",
            "Track your nutrition to fuel your performance.",
            12, 30,
        ))
    if prefs.workout_reminder:
        triggers.append(DailyTrigger(
            "workout", "Time to Train",
            "Don't forget your workout today. Stay consistent!",
            16,
        ))
    if prefs.sleep_reminder:
        triggers.append(DailyTrigger(
            "sleep", "Wind Down",
            "It's getting late. Start your bedtime routine for better recovery.",
            21, 30,
        ))

    triggers.sort(key=lambda t: (t.hour, t.minute))
    return triggers


def next_fire_time(trigger: DailyTrigger, now: datetime) -> datetime:
    """Next wall-clock time strictly after *now* at the trigger's hour:minute."""
    candidate = now.replace(hour=trigger.hour, minute=trigger.minute, second=0, microsecond=0)
    if candidate <= now:
        candidate += timedelta(days=1)
    return candidate


class NotificationService(QObject):
    """Owns the reminder timers for the lifetime of the application.

    Signals
    -------
    reminder_due(trigger: DailyTrigger)
        A daily reminder fired.  It has already been re-armed for tomorrow.
    """

    reminder_due = pyqtSignal(object)

    def __init__(self, parent: QObject | None = None, *, clock=datetime.now) -> None:
        super().__init__(parent)
        self._clock = clock
        self._active = False
        self._timers: dict[str, tuple[DailyTrigger, QTimer]] = {}

    @property
    def is_active(self) -> bool:
        return self._active

    def init(self) -> None:
        self._active = True
        logger.debug("Notification service initialised")

    def teardown(self) -> None:
        if not self._active:
            return
        self.cancel_all()
        self._active = False
        logger.debug("Notification service torn down")

    def schedule_all(self, prefs: NotificationPreferences) -> list[DailyTrigger]:
        """Replace every scheduled reminder with those implied by *prefs*."""
        self._require_active()
        self.cancel_all()
        triggers = daily_triggers(prefs)
        for trigger in triggers:
            timer = QTimer(self)
            timer.setSingleShot(True)
            timer.timeout.connect(lambda t=trigger: self._on_fire(t))
            self._timers[trigger.kind] = (trigger, timer)
            self._arm(trigger, timer)
        logger.info("Scheduled %d daily reminders", len(triggers))
        return triggers

    def cancel_all(self) -> None:
        for _, timer in self._timers.values():
            timer.stop()
            timer.deleteLater()
        self._timers.clear()

    def scheduled(self) -> list[DailyTrigger]:
        return [trigger for trigger, _ in self._timers.values()]

    def pending_ms(self, kind: str) -> int | None:
        """Milliseconds until *kind* fires, or ``None`` if not scheduled."""
        entry = self._timers.get(kind)
        if entry is None:
            return None
        return entry[1].remainingTime()

    # ── internal ──────────────────────────────────────────────────────

    def _require_active(self) -> None:
        if not self._active:
            raise RuntimeError("NotificationService used outside init()/teardown()")

    def _arm(self, trigger: DailyTrigger, timer: QTimer) -> None:
        now = self._clock()
        delay = next_fire_time(trigger, now) - now
        timer.start(max(0, int(delay.total_seconds() * 1000)))

    def _on_fire(self, trigger: DailyTrigger) -> None:
        entry = self._timers.get(trigger.kind)
        if entry is None or not self._active:
            return
        self._arm(trigger, entry[1])
        self.reminder_due.emit(trigger)
