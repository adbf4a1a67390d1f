"""Shared pytest fixtures for GrowthTrack tests."""

import sys
import pytest

from PyQt6.QtCore import QCoreApplication

from growthtrack.database.db import configure_engine, init_db
from growthtrack.timer.engine import CountdownEngine
from growthtrack.timer.runner import SessionKind, SessionRunner

from helpers import RecordingSink


@pytest.fixture(scope="session")
def qapp():
    """A single QCoreApplication instance shared across the entire test run."""
    app = QCoreApplication.instance() or QCoreApplication(sys.argv)
    yield app


@pytest.fixture(autouse=True)
def test_db():
    """Point every test at a fresh in-memory SQLite database."""
    configure_engine("sqlite:///:memory:")
    init_db()
    yield


@pytest.fixture
def engine(qapp):
    """Fresh 10-second countdown."""
    eng = CountdownEngine(10)
    yield eng
    eng.dispose()


@pytest.fixture
def recorder():
    """In-memory result sink that remembers every submission."""
    return RecordingSink()


@pytest.fixture
def pt_runner(qapp, recorder):
    """Three sets of 5 seconds with four instruction steps."""
    runner = SessionRunner(
        SessionKind.PT_EXERCISE, 5,
        total_sets=3,
        steps=("one", "two", "three", "four"),
        sink=recorder,
    )
    yield runner
    runner.teardown()
