"""Countdown state machine shared by every timed screen in GrowthTrack.

States
------
IDLE        Loaded with a duration, waiting for the user to press play.
RUNNING     Counting down, one ``tick()`` per interval.
PAUSED      Frozen; ticks are ignored until ``resume()``.
COMPLETED   Reached 0.  Only ``reset()``/``start()`` arm a new countdown.

Transitions
-----------
IDLE → RUNNING          (resume)
RUNNING → PAUSED        (pause)
PAUSED → RUNNING        (resume)
RUNNING → COMPLETED     (tick reaches 0)
Any → IDLE              (start / reset with a fresh duration)

The engine owns exactly one ``QTimer``.  ``resume()`` never arms a second
one while the first is live, and ``dispose()`` stops it for good, so a
screen that goes away cannot leave an interval firing behind it.
"""

from __future__ import annotations

import logging
import threading
from enum import Enum

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from .errors import DuplicateCompletion, InvalidDuration, InvalidTransition

logger = logging.getLogger(__name__)


# ── enums ─────────────────────────────────────────────────────────────────


class TimerStatus(Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"


# ── constants ─────────────────────────────────────────────────────────────

TICK_INTERVAL_MS = 1000


def validate_duration(duration_seconds) -> int:
    """Return *duration_seconds* if it is a whole number ≥ 1, else raise."""
    if isinstance(duration_seconds, bool) or not isinstance(duration_seconds, int):
        raise InvalidDuration(duration_seconds)
    if duration_seconds < 1:
        raise InvalidDuration(duration_seconds)
    return duration_seconds


# ── engine ────────────────────────────────────────────────────────────────


class CountdownEngine(QObject):
    """Single countdown driven by a 1-second ``QTimer``.

    Signals
    -------
    remaining_changed(remaining_seconds: int)
        Emitted after every decrement.
    state_changed(new_status: TimerStatus)
        Emitted on every status change.
    completed()
        Emitted once when ``remaining`` reaches 0.
    """

    remaining_changed = pyqtSignal(int)
    state_changed = pyqtSignal(object)
    completed = pyqtSignal()

    def __init__(
        self,
        duration_seconds: int,
        parent: QObject | None = None,
        *,
        interval_ms: int = TICK_INTERVAL_MS,
    ) -> None:
        super().__init__(parent)
        duration = validate_duration(duration_seconds)

        self._lock = threading.RLock()
        self._total: int = duration
        self._remaining: int = duration
        self._status: TimerStatus = TimerStatus.IDLE
        self._completion_emitted: bool = False
        self._disposed: bool = False

        # ── Qt timer ──────────────────────────────────────────────────
        self._qt_timer = QTimer(self)
        self._qt_timer.setInterval(interval_ms)
        self._qt_timer.timeout.connect(self._on_timeout)

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC PROPERTIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def status(self) -> TimerStatus:
        return self._status

    @property
    def remaining(self) -> int:
        """Seconds left on the clock."""
        return self._remaining

    @property
    def total_duration(self) -> int:
        return self._total

    @property
    def elapsed(self) -> int:
        return self._total - self._remaining

    @property
    def elapsed_ratio(self) -> float:
        """0.0 → 1.0 progress through the current countdown."""
        return max(0.0, min(1.0, self.elapsed / self._total))

    @property
    def is_running(self) -> bool:
        return self._status == TimerStatus.RUNNING and not self._disposed

    @property
    def is_completed(self) -> bool:
        return self._status == TimerStatus.COMPLETED

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    @property
    def tick_source_active(self) -> bool:
        """True while the underlying ``QTimer`` is armed."""
        return self._qt_timer.isActive()

    # ══════════════════════════════════════════════════════════════════
    #  CONTROLS
    # ══════════════════════════════════════════════════════════════════

    def start(self, duration_seconds: int) -> None:
        """Load a new countdown of *duration_seconds* and wait in IDLE."""
        self.reset(duration_seconds)

    def resume(self) -> None:
        """IDLE/PAUSED → RUNNING.  A no-op when already running."""
        with self._lock:
            if self._disposed:
                raise InvalidTransition("cannot resume a disposed countdown")
            if self._status == TimerStatus.RUNNING:
                return
            if self._status == TimerStatus.COMPLETED:
                logger.warning(
                    "Ignored resume(): %s",
                    InvalidTransition("countdown already completed"),
                )
                return
            self._status = TimerStatus.RUNNING
            if not self._qt_timer.isActive():
                self._qt_timer.start()
        self.state_changed.emit(TimerStatus.RUNNING)

    def pause(self) -> None:
        """RUNNING → PAUSED.  Stops the tick source."""
        with self._lock:
            if self._disposed:
                return
            if self._status == TimerStatus.COMPLETED:
                logger.warning(
                    "Ignored pause(): %s",
                    InvalidTransition("countdown already completed"),
                )
                return
            if self._status != TimerStatus.RUNNING:
                return
            self._qt_timer.stop()
            self._status = TimerStatus.PAUSED
        self.state_changed.emit(TimerStatus.PAUSED)

    def toggle(self) -> None:
        """Play/pause button."""
        if self.is_running:
            self.pause()
        else:
            self.resume()

    def reset(self, duration_seconds: int | None = None) -> None:
        """Re-arm the countdown with a fresh duration and return to IDLE.

        Passing ``None`` reuses the current total.  The completion latch
        is cleared so the new countdown can complete once.
        """
        duration = self._total if duration_seconds is None else validate_duration(duration_seconds)
        with self._lock:
            if self._disposed:
                raise InvalidTransition("cannot reset a disposed countdown")
            self._qt_timer.stop()
            self._total = duration
            self._remaining = duration
            self._completion_emitted = False
            self._status = TimerStatus.IDLE
        self.state_changed.emit(TimerStatus.IDLE)
        self.remaining_changed.emit(self._remaining)

    def tick(self) -> None:
        """Apply one interval's worth of countdown.

        Ignored unless RUNNING, so a pause between two ticks always
        wins.  Never decrements below 0.
        """
        with self._lock:
            if self._disposed or self._status != TimerStatus.RUNNING:
                return
            self._remaining = max(0, self._remaining - 1)
            remaining = self._remaining
            finished = remaining == 0
            if finished:
                self._qt_timer.stop()
                self._status = TimerStatus.COMPLETED

        self.remaining_changed.emit(remaining)
        if finished:
            self.state_changed.emit(TimerStatus.COMPLETED)
            self._signal_completion()

    def dispose(self) -> None:
        """Stop the tick source permanently.  Safe to call repeatedly."""
        with self._lock:
            if self._disposed:
                return
            self._disposed = True
            self._qt_timer.stop()
        logger.debug("Countdown disposed with %ss remaining", self._remaining)

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL
    # ══════════════════════════════════════════════════════════════════

    def _on_timeout(self) -> None:
        self.tick()

    def _signal_completion(self) -> None:
        with self._lock:
            if self._completion_emitted:
                duplicate = True
            else:
                duplicate = False
                self._completion_emitted = True
        if duplicate:
            logger.error(
                "Suppressed %s",
                DuplicateCompletion("countdown already signalled completion"),
            )
            return
        self.completed.emit()
