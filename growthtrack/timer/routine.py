"""Scoliosis PT routine: progress across one visit to the exercise list.

Each exercise runs in its own ``SessionRunner`` whose sink is the
routine, so a finished (or ended) exercise is ticked off here together
with its feedback.  The routine reports one adherence record for the
whole visit; see ``services.results.submit_routine``.

Usage::

    routine = PtRoutine(routine_id="r1")
    runner = routine.start_exercise("3")
    ...                                   # runner finishes, or user ends it
    routine.mark_complete("5")            # done without the timer
    routine.adherence_payload()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Sequence

from PyQt6.QtCore import QObject

from .engine import TICK_INTERVAL_MS
from .presets import DEFAULT_PT_EXERCISES, DEFAULT_PT_SECONDS, PtExercise, pt_exercise_session
from .runner import ExerciseFeedback, SessionKind, SessionResult, SessionRunner

logger = logging.getLogger(__name__)


@dataclass
class ExerciseProgress:
    exercise: PtExercise
    completed: bool = False
    feedback: ExerciseFeedback | None = None
    result: SessionResult | None = None


class PtRoutine:
    """Completion state for one pass through a PT exercise list."""

    def __init__(
        self,
        exercises: Sequence[PtExercise] = DEFAULT_PT_EXERCISES,
        *,
        routine_id: str | None = None,
        store=None,
        default_seconds: int = DEFAULT_PT_SECONDS,
        clock=datetime.now,
    ) -> None:
        if not exercises:
            raise ValueError("a PT routine needs at least one exercise")
        self.routine_id = routine_id
        self._store = store  # optional local copy of each exercise result
        self._default_seconds = default_seconds
        self._clock = clock
        self._entries: dict[str, ExerciseProgress] = {
            exercise.id: ExerciseProgress(exercise) for exercise in exercises
        }
        self._active: str | None = None
        self._started_at: datetime | None = None

    # ── progress ──────────────────────────────────────────────────────

    @property
    def started_at(self) -> datetime | None:
        """When the first exercise was opened."""
        return self._started_at

    @property
    def entries(self) -> list[ExerciseProgress]:
        return list(self._entries.values())

    @property
    def active_exercise(self) -> str | None:
        return self._active

    @property
    def completed_ids(self) -> list[str]:
        return [e.exercise.id for e in self._entries.values() if e.completed]

    @property
    def completed_count(self) -> int:
        return len(self.completed_ids)

    @property
    def progress_percent(self) -> int:
        return round(self.completed_count / len(self._entries) * 100)

    @property
    def all_completed(self) -> bool:
        return self.completed_count == len(self._entries)

    def entry(self, exercise_id: str) -> ExerciseProgress:
        try:
            return self._entries[exercise_id]
        except KeyError:
            raise KeyError(f"Exercise {exercise_id!r} is not in this routine") from None

    # ── exercises ─────────────────────────────────────────────────────

    def start_exercise(
        self,
        exercise_id: str,
        *,
        parent: QObject | None = None,
        interval_ms: int = TICK_INTERVAL_MS,
    ) -> SessionRunner:
        """Open *exercise_id* and return its runner, reporting back here."""
        entry = self.entry(exercise_id)
        if self._started_at is None:
            self._started_at = self._clock()
        self._active = exercise_id
        return pt_exercise_session(
            entry.exercise,
            sink=self,
            parent=parent,
            interval_ms=interval_ms,
            default_seconds=self._default_seconds,
        )

    def mark_complete(self, exercise_id: str, feedback: ExerciseFeedback | None = None) -> None:
        """Tick off *exercise_id* without running (or finishing) its timer."""
        entry = self.entry(exercise_id)
        entry.completed = True
        if feedback is not None:
            entry.feedback = feedback
        if self._active == exercise_id:
            self._active = None

    def submit(self, kind: SessionKind, result: SessionResult) -> bool:
        """Result sink for the runner returned by ``start_exercise``."""
        if kind != SessionKind.PT_EXERCISE or self._active is None:
            logger.warning("PT routine got a %s result with no exercise open", kind.value)
            return False
        entry = self._entries[self._active]
        entry.result = result
        self.mark_complete(entry.exercise.id, result.feedback or ExerciseFeedback())
        logger.info(
            "PT exercise %s done (%d/%d exercises)",
            entry.exercise.name, self.completed_count, len(self._entries),
        )
        if self._store is None:
            return True
        return bool(self._store.submit(kind, result))

    # ── reporting ─────────────────────────────────────────────────────

    def duration_minutes(self, now: datetime | None = None) -> int:
        if self._started_at is None:
            return 0
        now = now or self._clock()
        return round((now - self._started_at).total_seconds() / 60)

    def adherence_payload(self, now: datetime | None = None) -> dict:
        body = {
            "completed": self.all_completed,
            "durationMinutes": self.duration_minutes(now),
            "exercisesCompleted": self.completed_ids,
        }
        if self.routine_id is not None:
            body["routineId"] = self.routine_id
        return body
