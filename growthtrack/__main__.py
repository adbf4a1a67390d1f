"""Run one timer session headless: python -m growthtrack."""

from __future__ import annotations

import argparse
import logging
import signal
import sys

from PyQt6.QtCore import QCoreApplication, QObject, QTimer

from .database.db import init_db
from .logging_setup import configure_logging
from .settings import load_settings
from .services.api import ApiClient
from .services.notifications import NotificationService
from .services.results import (
    ApiResultSink,
    DatabaseResultSink,
    OfflineFirstSink,
    submit_routine,
    sync_pending,
)
from .timer import ExerciseFeedback, PtRoutine, SessionRunner, TimerError
from .timer.presets import (
    MEDITATION_TEMPLATES,
    meditation_session,
    meditation_template,
    rest_session,
)

logger = logging.getLogger(__name__)


def format_time(seconds: int) -> str:
    return f"{seconds // 60}:{seconds % 60:02d}"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="growthtrack", description=__doc__)
    parser.add_argument("--offline", action="store_true", help="log to the local database only")
    parser.add_argument("--log-level", default=None)
    sub = parser.add_subparsers(dest="kind", required=True)

    rest = sub.add_parser("rest", help="rest timer between sets")
    rest.add_argument("seconds", type=int, nargs="?", default=None)
    rest.add_argument("--sets", type=int, default=1)

    med = sub.add_parser("meditation", help="guided meditation timer")
    med.add_argument(
        "template", choices=[t.key for t in MEDITATION_TEMPLATES], default="guided_breathing", nargs="?"
    )
    med.add_argument("--minutes", type=int, default=None)

    pt = sub.add_parser("pt", help="scoliosis PT exercise timer")
    pt.add_argument("exercise", help="exercise id from the default routine")
    pt.add_argument("--routine-id", default=None)
    pt.add_argument("--difficulty", type=int, choices=range(1, 6), default=3)
    pt.add_argument("--pain", choices=["none", "mild", "significant"], default="none")
    return parser


def make_client(settings) -> ApiClient:
    return ApiClient(settings.api_url, timeout=settings.request_timeout)


def make_sink(client: ApiClient | None):
    """Offline-first API logging, or the local database alone without a client."""
    if client is None:
        return DatabaseResultSink()
    return OfflineFirstSink(ApiResultSink(client))


def make_routine(args, settings) -> PtRoutine:
    return PtRoutine(
        routine_id=args.routine_id,
        store=DatabaseResultSink(),
        default_seconds=settings.default_pt_seconds,
    )


def make_runner(args, settings, *, client: ApiClient | None = None, routine: PtRoutine | None = None) -> SessionRunner:
    interval = settings.tick_interval_ms
    if args.kind == "rest":
        seconds = settings.default_rest_seconds if args.seconds is None else args.seconds
        return rest_session(seconds, sets=args.sets, sink=make_sink(client), interval_ms=interval)
    if args.kind == "meditation":
        template = meditation_template(args.template)
        return meditation_session(template, args.minutes, sink=make_sink(client), interval_ms=interval)
    routine = routine or make_routine(args, settings)
    runner = routine.start_exercise(args.exercise, interval_ms=interval)
    runner.feedback = ExerciseFeedback(args.difficulty, args.pain)
    return runner


def schedule_reminders(settings, parent: QObject | None = None) -> NotificationService:
    """Start the reminder service for the lifetime of the application."""
    service = NotificationService(parent)
    service.init()
    try:
        service.schedule_all(settings.notifications)
    except ValueError as exc:
        logger.warning("Reminders not scheduled: %s", exc)
    return service


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = load_settings()
    configure_logging(args.log_level or settings.log_level)

    app = QCoreApplication.instance() or QCoreApplication(sys.argv[:1])
    app.setApplicationName("GrowthTrack")

    init_db()
    offline = args.offline or settings.offline_mode
    client = None if offline else make_client(settings)
    if client is not None:
        sync_pending(ApiResultSink(client))

    routine = make_routine(args, settings) if args.kind == "pt" else None
    try:
        runner = make_runner(args, settings, client=client, routine=routine)
    except (TimerError, KeyError, ValueError) as exc:
        print(f"growthtrack: {exc}", file=sys.stderr)
        return 2

    reminders = schedule_reminders(settings, app)
    reminders.reminder_due.connect(lambda trigger: print(f"\n{trigger.title}: {trigger.body}"))

    def on_remaining(remaining: int) -> None:
        step = runner.current_step
        suffix = f"  {step}" if step else ""
        print(f"\r[set {runner.current_set}/{runner.total_sets}] {format_time(remaining)}{suffix}", end="", flush=True)

    def on_set_finished(index: int) -> None:
        print()
        if index < runner.total_sets:
            runner.advance_set()
            runner.resume()

    def on_completed(result) -> None:
        print()
        print(
            f"Done: {result.sets_completed}/{result.total_sets} sets, "
            f"{format_time(result.total_elapsed_seconds)} elapsed"
            + (" (ended early)" if result.skipped_early else "")
        )
        app.quit()

    def on_interrupt(*_) -> None:
        runner.complete_session(skipped_early=True)

    runner.remaining_changed.connect(on_remaining)
    runner.set_finished.connect(on_set_finished)
    runner.session_completed.connect(on_completed)
    signal.signal(signal.SIGINT, on_interrupt)
    # let Python's signal handlers run while Qt's loop spins
    heartbeat = QTimer()
    heartbeat.start(200)
    heartbeat.timeout.connect(lambda: None)

    print("GrowthTrack ready!")
    runner.start()
    app.exec()
    runner.teardown()
    reminders.teardown()

    if routine is not None and client is not None:
        submit_routine(client, routine)
    return 0


if __name__ == "__main__":
    sys.exit(main())
