"""Exceptions raised by the countdown engine and session runner.

All of these are caller-contract violations.  ``InvalidDuration`` and
``InvalidTransition`` are raised to the caller; ``DuplicateCompletion``
is only ever logged, since it points at a tick-source cleanup bug rather
than anything the user did.
"""


class TimerError(Exception):
    """Base class for timer-core errors."""


class InvalidDuration(TimerError, ValueError):
    """A countdown was configured with a non-positive duration."""

    def __init__(self, duration) -> None:
        super().__init__(f"duration must be a positive whole number of seconds, got {duration!r}")
        self.duration = duration


class InvalidTransition(TimerError, RuntimeError):
    """An operation was invoked in a state that does not permit it."""


class DuplicateCompletion(TimerError):
    """A second completion was attempted for the same countdown."""
