"""Session runner: sets, guidance steps and result hand-off.

One ``SessionRunner`` backs one timed screen visit (rest timer,
meditation timer or PT exercise timer).  It owns a ``CountdownEngine``
exclusively, repeats it for multi-set sessions, keys an instruction
step to the elapsed ratio, and passes a ``SessionResult`` to a sink
when the session is finalised.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Sequence

from PyQt6.QtCore import QObject, pyqtSignal

from .engine import TICK_INTERVAL_MS, CountdownEngine, TimerStatus, validate_duration
from .errors import InvalidTransition

logger = logging.getLogger(__name__)


# ── types ─────────────────────────────────────────────────────────────────


class SessionKind(Enum):
    REST = "rest"
    MEDITATION = "meditation"
    PT_EXERCISE = "pt_exercise"


PAIN_LEVELS = ("none", "mild", "significant")


@dataclass(frozen=True)
class ExerciseFeedback:
    """Post-exercise self-report for PT sessions."""

    difficulty: int = 3  # 1 (easy) .. 5 (hard)
    pain_level: str = "none"

    def __post_init__(self) -> None:
        if not 1 <= self.difficulty <= 5:
            raise ValueError(f"difficulty must be 1-5, got {self.difficulty}")
        if self.pain_level not in PAIN_LEVELS:
            raise ValueError(f"unknown pain level {self.pain_level!r}")


@dataclass(frozen=True)
class SessionResult:
    kind: SessionKind
    sets_completed: int
    total_sets: int
    total_elapsed_seconds: int
    skipped_early: bool
    started_at: datetime | None = None
    ended_at: datetime | None = None
    feedback: ExerciseFeedback | None = None

    @property
    def elapsed_minutes(self) -> int:
        return round(self.total_elapsed_seconds / 60)


def guidance_index_for(elapsed_ratio: float, step_count: int) -> int:
    """Index of the instruction step to highlight for *elapsed_ratio*.

    ``floor(ratio * step_count)`` clamped to ``[0, step_count - 1]``.
    """
    if step_count < 1:
        raise ValueError(f"step_count must be at least 1, got {step_count}")
    if math.isnan(elapsed_ratio):
        return 0
    index = math.floor(elapsed_ratio * step_count)
    return max(0, min(step_count - 1, index))


# ── runner ────────────────────────────────────────────────────────────────


class SessionRunner(QObject):
    """Multi-set countdown session with guidance steps.

    Signals
    -------
    remaining_changed(remaining_seconds: int)
        Relayed from the engine.
    state_changed(status: TimerStatus)
        Session-level status (see ``status``).
    step_changed(index: int)
        The highlighted guidance step moved.
    set_finished(set_index: int)
        A set's countdown reached 0.
    session_completed(result: SessionResult)
        Emitted once when the session is finalised.
    """

    remaining_changed = pyqtSignal(int)
    state_changed = pyqtSignal(object)
    step_changed = pyqtSignal(int)
    set_finished = pyqtSignal(int)
    session_completed = pyqtSignal(object)

    def __init__(
        self,
        kind: SessionKind,
        set_duration_seconds: int,
        parent: QObject | None = None,
        *,
        total_sets: int = 1,
        steps: Sequence[str] = (),
        sink=None,
        interval_ms: int = TICK_INTERVAL_MS,
    ) -> None:
        super().__init__(parent)
        if isinstance(total_sets, bool) or not isinstance(total_sets, int) or total_sets < 1:
            raise ValueError(f"total_sets must be at least 1, got {total_sets!r}")

        self._kind = kind
        self._set_duration = validate_duration(set_duration_seconds)
        self._total_sets = total_sets
        self._steps: tuple[str, ...] = tuple(steps)
        self._sink = sink

        self._current_set: int = 1
        self._sets_completed: int = 0
        self._banked_elapsed: int = 0  # elapsed seconds from finished sets
        self._step_index: int = 0
        self._started_at: datetime | None = None
        self._result: SessionResult | None = None
        self._torn_down: bool = False
        self.feedback: ExerciseFeedback | None = None  # attached to the result

        self._engine = CountdownEngine(self._set_duration, self, interval_ms=interval_ms)
        self._engine.remaining_changed.connect(self._on_remaining_changed)
        self._engine.state_changed.connect(self._on_engine_state)
        self._engine.completed.connect(self._on_set_completed)

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC PROPERTIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def kind(self) -> SessionKind:
        return self._kind

    @property
    def engine(self) -> CountdownEngine:
        return self._engine

    @property
    def status(self) -> TimerStatus:
        """Session status.

        ``COMPLETED`` only once the session is finalised.  A non-final
        set sitting at 0 reports ``IDLE`` until ``advance_set()``.
        """
        if self._result is not None:
            return TimerStatus.COMPLETED
        engine_status = self._engine.status
        if engine_status == TimerStatus.COMPLETED:
            return TimerStatus.IDLE
        return engine_status

    @property
    def remaining(self) -> int:
        return self._engine.remaining

    @property
    def set_duration(self) -> int:
        return self._set_duration

    @property
    def current_set(self) -> int:
        return self._current_set

    @property
    def total_sets(self) -> int:
        return self._total_sets

    @property
    def sets_completed(self) -> int:
        return self._sets_completed

    @property
    def elapsed_ratio(self) -> float:
        """Progress through the current set."""
        return self._engine.elapsed_ratio

    @property
    def total_elapsed_seconds(self) -> int:
        current = 0 if self._engine.is_completed else self._engine.elapsed
        return self._banked_elapsed + current

    @property
    def steps(self) -> tuple[str, ...]:
        return self._steps

    @property
    def guidance_index(self) -> int | None:
        if not self._steps:
            return None
        return guidance_index_for(self.elapsed_ratio, len(self._steps))

    @property
    def current_step(self) -> str | None:
        index = self.guidance_index
        return None if index is None else self._steps[index]

    @property
    def all_sets_done(self) -> bool:
        return self._current_set >= self._total_sets and self._engine.is_completed

    @property
    def result(self) -> SessionResult | None:
        return self._result

    @property
    def is_finished(self) -> bool:
        return self._result is not None

    @property
    def is_torn_down(self) -> bool:
        return self._torn_down

    # ══════════════════════════════════════════════════════════════════
    #  CONTROLS
    # ══════════════════════════════════════════════════════════════════

    def start(self) -> None:
        """Begin (or continue) counting down the current set."""
        self.resume()

    def resume(self) -> None:
        if not self._accepting("resume"):
            return
        if self._started_at is None:
            self._started_at = datetime.now()
        self._engine.resume()

    def pause(self) -> None:
        if not self._accepting("pause"):
            return
        self._engine.pause()

    def toggle(self) -> None:
        if self._engine.is_running:
            self.pause()
        else:
            self.resume()

    def tick(self) -> None:
        """Forward one tick to the engine (normally the ``QTimer`` does this)."""
        if self._torn_down or self._result is not None:
            return
        self._engine.tick()

    def select_preset(self, seconds: int) -> None:
        """Restart the current set at *seconds* and keep running.

        Elapsed time already spent on this set is discarded.
        """
        if not self._accepting("select_preset"):
            return
        self._set_duration = validate_duration(seconds)
        if self._engine.is_completed:
            # restarting a set that already reached 0 un-counts it
            self._sets_completed -= 1
            self._banked_elapsed -= self._engine.total_duration
        self._engine.reset(self._set_duration)
        self.resume()

    def advance_set(self) -> None:
        """Move to the next set once the current one has reached 0."""
        if self._torn_down or self._result is not None:
            raise InvalidTransition("session is already finished")
        if not self._engine.is_completed:
            raise InvalidTransition(
                f"set {self._current_set} still has {self._engine.remaining}s remaining"
            )
        if self._current_set >= self._total_sets:
            raise InvalidTransition(f"all {self._total_sets} sets are done")
        self._current_set += 1
        self._engine.reset(self._set_duration)

    def complete_session(
        self,
        skipped_early: bool = False,
        feedback: ExerciseFeedback | None = None,
    ) -> SessionResult | None:
        """Finalise the session and submit its result.

        Ending before the final set reaches 0 always counts as skipped.
        Returns ``None`` (and does nothing else) if the session was
        already finalised or torn down.
        """
        if self._torn_down or self._result is not None:
            logger.warning(
                "Ignored complete_session(): %s",
                InvalidTransition(f"{self._kind.value} session already finished"),
            )
            return None

        natural = self.all_sets_done
        result = SessionResult(
            kind=self._kind,
            sets_completed=self._sets_completed,
            total_sets=self._total_sets,
            total_elapsed_seconds=self.total_elapsed_seconds,
            skipped_early=bool(skipped_early) or not natural,
            started_at=self._started_at,
            ended_at=datetime.now(),
            feedback=feedback if feedback is not None else self.feedback,
        )
        self._result = result
        self._engine.dispose()
        logger.info(
            "%s session finished: %d/%d sets, %ds elapsed%s",
            self._kind.value,
            result.sets_completed,
            result.total_sets,
            result.total_elapsed_seconds,
            " (ended early)" if result.skipped_early else "",
        )

        self.state_changed.emit(TimerStatus.COMPLETED)
        self.session_completed.emit(result)
        self._submit(result)
        return result

    def teardown(self) -> None:
        """Stop the tick source for good.  Nothing is persisted."""
        if self._torn_down:
            return
        self._torn_down = True
        self._engine.dispose()

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL
    # ══════════════════════════════════════════════════════════════════

    def _accepting(self, operation: str) -> bool:
        if self._torn_down or self._result is not None:
            logger.warning(
                "Ignored %s(): %s",
                operation,
                InvalidTransition(f"{self._kind.value} session already finished"),
            )
            return False
        return True

    def _on_remaining_changed(self, remaining: int) -> None:
        self.remaining_changed.emit(remaining)
        index = self.guidance_index
        if index is not None and index != self._step_index:
            self._step_index = index
            self.step_changed.emit(index)

    def _on_engine_state(self, engine_status: TimerStatus) -> None:
        if engine_status == TimerStatus.COMPLETED:
            # the session-level change is emitted from _on_set_completed
            return
        self.state_changed.emit(engine_status)

    def _on_set_completed(self) -> None:
        self._sets_completed += 1
        self._banked_elapsed += self._engine.total_duration
        finished_set = self._current_set
        if finished_set >= self._total_sets:
            self.set_finished.emit(finished_set)
            self.complete_session(skipped_early=False)
        else:
            self.state_changed.emit(TimerStatus.IDLE)
            self.set_finished.emit(finished_set)

    def _submit(self, result: SessionResult) -> None:
        if self._sink is None:
            return
        from ..services.results import submit_session_result

        submit_session_result(self._sink, self._kind, result)
