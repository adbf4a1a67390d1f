"""Where finished timer sessions go.

A sink is anything with ``submit(kind, result) -> bool``.  The session
runner calls ``submit_session_result``, which turns any sink failure
into ``False`` plus a log record so a broken network never takes the
timer screen down with it.
"""

from __future__ import annotations

import logging
from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError

from ..database.db import get_session
from ..database.models import SessionLog
from ..timer.routine import PtRoutine
from ..timer.runner import ExerciseFeedback, SessionKind, SessionResult
from .api import ApiClient, ApiError

logger = logging.getLogger(__name__)


class ResultSink(Protocol):
    def submit(self, kind: SessionKind, result: SessionResult) -> bool: ...


def submit_session_result(sink: ResultSink, kind: SessionKind, result: SessionResult) -> bool:
    """Hand *result* to *sink*; never raises."""
    try:
        ok = bool(sink.submit(kind, result))
    except Exception:
        logger.exception("Result sink %r raised while saving a %s session", sink, kind.value)
        return False
    if not ok:
        logger.warning("Result sink %r did not save the %s session", sink, kind.value)
    return ok


# ══════════════════════════════════════════════════════════════════════════
#  REST API
# ══════════════════════════════════════════════════════════════════════════

# PT exercises are reported once per routine (``submit_routine``), not per
# exercise, so only these kinds are posted one session at a time.
POSTED_KINDS = (SessionKind.REST, SessionKind.MEDITATION)


def build_payload(kind: SessionKind, result: SessionResult) -> dict:
    """JSON body for posting *result* on its own."""
    date = result.ended_at.isoformat() if result.ended_at else None

    if kind == SessionKind.REST:
        return {
            "workoutType": "rest",
            "duration": result.elapsed_minutes,
            "durationSeconds": result.total_elapsed_seconds,
            "sets": result.sets_completed,
            "completed": not result.skipped_early,
            "date": date,
        }

    if kind == SessionKind.MEDITATION:
        return {
            "type": "meditation",
            "duration": result.elapsed_minutes,
            "completed": not result.skipped_early,
            "date": date,
        }

    raise ValueError(f"{kind.value} sessions are not posted individually")


class ApiResultSink:
    """Posts rest and meditation results to the backend log endpoints."""

    def __init__(self, client: ApiClient) -> None:
        self.client = client

    def _poster(self, kind: SessionKind):
        if kind == SessionKind.REST:
            return self.client.log_workout
        if kind == SessionKind.MEDITATION:
            return self.client.log_mental_health
        raise ValueError(f"{kind.value} sessions are not posted individually")

    def submit(self, kind: SessionKind, result: SessionResult) -> bool:
        post = self._poster(kind)
        try:
            post(build_payload(kind, result))
        except ApiError as exc:
            logger.warning("Could not post %s session: %s", kind.value, exc)
            return False
        return True

    def __repr__(self) -> str:
        return f"<ApiResultSink {self.client.base_url}>"


def submit_routine(client: ApiClient, routine: PtRoutine) -> bool:
    """Post one ``/api/pt-adherence`` record for *routine*; never raises.

    Nothing is sent for a routine that was never started or has no
    backend routine id to log against.
    """
    if routine.started_at is None:
        logger.info("PT routine never started; no adherence logged")
        return False
    if routine.routine_id is None:
        logger.info("PT routine has no id; no adherence logged")
        return False
    try:
        client.log_pt_adherence(routine.adherence_payload())
    except ApiError as exc:
        logger.warning("Could not log PT adherence for routine %s: %s", routine.routine_id, exc)
        return False
    logger.info(
        "Logged PT adherence for routine %s: %d%% complete",
        routine.routine_id, routine.progress_percent,
    )
    return True


# ══════════════════════════════════════════════════════════════════════════
#  LOCAL DATABASE
# ══════════════════════════════════════════════════════════════════════════


class DatabaseResultSink:
    """Writes a ``SessionLog`` row per finished session."""

    def __init__(self, *, synced: bool = False) -> None:
        self.synced = synced
        self.last_id: int | None = None

    def submit(self, kind: SessionKind, result: SessionResult) -> bool:
        try:
            with get_session() as db:
                record = SessionLog(
                    kind=kind.value,
                    started_at=result.started_at,
                    ended_at=result.ended_at,
                    sets_completed=result.sets_completed,
                    total_sets=result.total_sets,
                    elapsed_seconds=result.total_elapsed_seconds,
                    skipped_early=result.skipped_early,
                    difficulty=result.feedback.difficulty if result.feedback else None,
                    pain_level=result.feedback.pain_level if result.feedback else None,
                    synced=self.synced,
                )
                db.add(record)
                db.flush()
                self.last_id = record.id
        except SQLAlchemyError as exc:
            logger.error("Could not store %s session locally: %s", kind.value, exc)
            return False
        return True

    def __repr__(self) -> str:
        return "<DatabaseResultSink>"


class OfflineFirstSink:
    """Try the API; keep a local copy either way, flagged with whether it synced."""

    def __init__(self, api: ApiResultSink) -> None:
        self.api = api

    def submit(self, kind: SessionKind, result: SessionResult) -> bool:
        synced = submit_session_result(self.api, kind, result)
        stored = DatabaseResultSink(synced=synced).submit(kind, result)
        return synced or stored

    def __repr__(self) -> str:
        return f"<OfflineFirstSink via {self.api!r}>"


def log_to_result(record: SessionLog) -> SessionResult:
    feedback = None
    if record.difficulty is not None:
        feedback = ExerciseFeedback(record.difficulty, record.pain_level or "none")
    return SessionResult(
        kind=SessionKind(record.kind),
        sets_completed=record.sets_completed,
        total_sets=record.total_sets,
        total_elapsed_seconds=record.elapsed_seconds,
        skipped_early=record.skipped_early,
        started_at=record.started_at,
        ended_at=record.ended_at,
        feedback=feedback,
    )


def sync_pending(api: ApiResultSink) -> int:
    """Re-post every unsynced local log.  Returns how many went through."""
    sent = 0
    with get_session() as db:
        pending = (
            db.query(SessionLog)
            .filter(SessionLog.synced.is_(False))
            .filter(SessionLog.kind.in_([k.value for k in POSTED_KINDS]))
            .order_by(SessionLog.id)
            .all()
        )
        for record in pending:
            result = log_to_result(record)
            if submit_session_result(api, result.kind, result):
                record.synced = True
                sent += 1
    if sent:
        logger.info("Synced %d pending session logs", sent)
    return sent
