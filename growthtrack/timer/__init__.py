"""Timer package."""

from .engine import CountdownEngine, TimerStatus, TICK_INTERVAL_MS
from .errors import DuplicateCompletion, InvalidDuration, InvalidTransition, TimerError
from .runner import (
    ExerciseFeedback,
    SessionKind,
    SessionResult,
    SessionRunner,
    guidance_index_for,
)
from .routine import ExerciseProgress, PtRoutine

__all__ = [
    "CountdownEngine",
    "TimerStatus",
    "TICK_INTERVAL_MS",
    "TimerError",
    "InvalidDuration",
    "InvalidTransition",
    "DuplicateCompletion",
    "ExerciseFeedback",
    "SessionKind",
    "SessionResult",
    "SessionRunner",
    "guidance_index_for",
    "ExerciseProgress",
    "PtRoutine",
]
