"""Tests for the countdown engine.

Covers: construction validation, state transitions, tick semantics,
pause between ticks, completion-once, reset/start, toggle, the single
tick-source guard, and disposal.
"""

import logging

import pytest

from growthtrack.timer.engine import CountdownEngine, TimerStatus
from growthtrack.timer.errors import InvalidDuration, InvalidTransition

from helpers import SignalCollector, run_ticks


# ═══════════════════════════════════════════════════════════════════════════
#  CONSTRUCTION
# ═══════════════════════════════════════════════════════════════════════════


class TestConstruction:

    def test_initial_state_is_idle(self, engine):
        assert engine.status == TimerStatus.IDLE
        assert engine.remaining == 10
        assert engine.total_duration == 10
        assert engine.elapsed_ratio == 0.0

    @pytest.mark.parametrize("bad", [0, -1, -90])
    def test_non_positive_duration_rejected(self, qapp, bad):
        with pytest.raises(InvalidDuration):
            CountdownEngine(bad)

    @pytest.mark.parametrize("bad", [1.5, "30", None, True])
    def test_non_integer_duration_rejected(self, qapp, bad):
        with pytest.raises(InvalidDuration):
            CountdownEngine(bad)

    def test_invalid_duration_is_a_value_error(self, qapp):
        with pytest.raises(ValueError):
            CountdownEngine(0)

    def test_tick_source_idle_until_resumed(self, engine):
        assert not engine.tick_source_active


# ═══════════════════════════════════════════════════════════════════════════
#  STATE TRANSITIONS
# ═══════════════════════════════════════════════════════════════════════════


class TestStateTransitions:

    def test_resume_from_idle_runs(self, engine):
        engine.resume()
        assert engine.status == TimerStatus.RUNNING
        assert engine.tick_source_active

    def test_pause_and_resume(self, engine):
        engine.resume()
        engine.pause()
        assert engine.status == TimerStatus.PAUSED
        assert not engine.tick_source_active
        engine.resume()
        assert engine.status == TimerStatus.RUNNING

    def test_pause_is_noop_when_idle(self, engine):
        engine.pause()
        assert engine.status == TimerStatus.IDLE

    def test_toggle_flips_running_and_paused(self, engine):
        engine.toggle()
        assert engine.status == TimerStatus.RUNNING
        engine.toggle()
        assert engine.status == TimerStatus.PAUSED
        engine.toggle()
        assert engine.status == TimerStatus.RUNNING

    def test_state_changed_signal_fires_on_transitions(self, engine):
        c = SignalCollector()
        engine.state_changed.connect(c)

        engine.resume()
        assert c.last == TimerStatus.RUNNING
        engine.pause()
        assert c.last == TimerStatus.PAUSED
        engine.resume()
        assert c.last == TimerStatus.RUNNING

    def test_resume_when_running_does_not_rearm(self, engine):
        """Second play press must not start a second interval."""
        c = SignalCollector()
        engine.state_changed.connect(c)
        engine.resume()
        engine.resume()
        assert len(c) == 1
        assert engine.tick_source_active

    def test_resume_on_completed_is_ignored_and_logged(self, engine, caplog):
        engine.resume()
        run_ticks(engine, 10)
        with caplog.at_level(logging.WARNING):
            engine.resume()
        assert engine.status == TimerStatus.COMPLETED
        assert "already completed" in caplog.text

    def test_pause_on_completed_is_ignored(self, engine):
        engine.resume()
        run_ticks(engine, 10)
        engine.pause()
        assert engine.status == TimerStatus.COMPLETED


# ═══════════════════════════════════════════════════════════════════════════
#  TICK / COUNTDOWN
# ═══════════════════════════════════════════════════════════════════════════


class TestCountdown:

    def test_tick_decrements_remaining(self, engine):
        engine.resume()
        engine.tick()
        assert engine.remaining == 9
        assert engine.elapsed == 1

    def test_tick_ignored_while_idle(self, engine):
        engine.tick()
        assert engine.remaining == 10

    def test_remaining_changed_signal(self, engine):
        c = SignalCollector()
        engine.remaining_changed.connect(c)
        engine.resume()
        engine.tick()
        assert c.last == 9

    @pytest.mark.parametrize("duration", [1, 2, 7, 90])
    def test_d_ticks_complete_a_d_second_countdown(self, qapp, duration):
        eng = CountdownEngine(duration)
        eng.resume()
        run_ticks(eng, duration)
        assert eng.remaining == 0
        assert eng.status == TimerStatus.COMPLETED
        assert not eng.tick_source_active
        eng.dispose()

    def test_remaining_never_goes_negative(self, engine):
        engine.resume()
        run_ticks(engine, 25)
        assert engine.remaining == 0

    def test_percent_at_halfway(self, engine):
        engine.resume()
        run_ticks(engine, 5)
        assert engine.elapsed_ratio == pytest.approx(0.5)


class TestPause:

    def test_ticks_while_paused_change_nothing(self, engine):
        engine.resume()
        run_ticks(engine, 3)
        engine.pause()
        run_ticks(engine, 5)
        assert engine.remaining == 7

    def test_ticks_to_completion_after_resume(self, engine):
        engine.resume()
        run_ticks(engine, 4)
        engine.pause()
        run_ticks(engine, 3)
        engine.resume()

        needed = 0
        while engine.status != TimerStatus.COMPLETED:
            engine.tick()
            needed += 1
        assert needed == 10 - 4


# ═══════════════════════════════════════════════════════════════════════════
#  COMPLETION
# ═══════════════════════════════════════════════════════════════════════════


class TestCompletion:

    def test_completed_fires_exactly_once(self, engine):
        c = SignalCollector()
        engine.completed.connect(c)
        engine.resume()
        run_ticks(engine, 15)
        assert len(c) == 1

    def test_duplicate_completion_is_suppressed_and_logged(self, engine, caplog):
        c = SignalCollector()
        engine.completed.connect(c)
        engine.resume()
        run_ticks(engine, 10)

        with caplog.at_level(logging.ERROR):
            engine._signal_completion()
        assert len(c) == 1
        assert "DuplicateCompletion" in caplog.text or "already signalled" in caplog.text

    def test_completed_state_precedes_completed_signal(self, engine):
        seen = []
        engine.completed.connect(lambda: seen.append(engine.status))
        engine.resume()
        run_ticks(engine, 10)
        assert seen == [TimerStatus.COMPLETED]


# ═══════════════════════════════════════════════════════════════════════════
#  RESET / START
# ═══════════════════════════════════════════════════════════════════════════


class TestReset:

    def test_reset_restores_duration_and_idles(self, engine):
        engine.resume()
        run_ticks(engine, 4)
        engine.reset()
        assert engine.remaining == 10
        assert engine.status == TimerStatus.IDLE
        assert not engine.tick_source_active

    def test_reset_with_new_duration(self, engine):
        engine.resume()
        engine.reset(60)
        assert engine.total_duration == 60
        assert engine.remaining == 60

    def test_reset_rejects_bad_duration(self, engine):
        with pytest.raises(InvalidDuration):
            engine.reset(0)
        assert engine.remaining == 10

    def test_reset_after_completion_allows_another_completion(self, engine):
        c = SignalCollector()
        engine.completed.connect(c)
        engine.resume()
        run_ticks(engine, 10)
        engine.reset(3)
        engine.resume()
        run_ticks(engine, 3)
        assert len(c) == 2

    def test_start_loads_duration_in_idle(self, engine):
        engine.resume()
        engine.start(45)
        assert engine.status == TimerStatus.IDLE
        assert engine.remaining == 45


# ═══════════════════════════════════════════════════════════════════════════
#  DISPOSAL
# ═══════════════════════════════════════════════════════════════════════════


class TestDispose:

    def test_dispose_stops_tick_source(self, engine):
        engine.resume()
        engine.dispose()
        assert not engine.tick_source_active
        assert engine.is_disposed

    def test_ticks_after_dispose_are_ignored(self, engine):
        engine.resume()
        engine.dispose()
        run_ticks(engine, 3)
        assert engine.remaining == 10

    def test_resume_after_dispose_raises(self, engine):
        engine.dispose()
        with pytest.raises(InvalidTransition):
            engine.resume()

    def test_dispose_is_idempotent(self, engine):
        engine.dispose()
        engine.dispose()
        assert engine.is_disposed

    def test_disposed_engine_is_not_running(self, engine):
        engine.resume()
        engine.dispose()
        assert not engine.is_running

    def test_pause_after_dispose_is_ignored(self, engine):
        engine.resume()
        engine.dispose()
        states = SignalCollector()
        engine.state_changed.connect(states.slot)
        engine.pause()
        assert len(states) == 0
        assert engine.status != TimerStatus.PAUSED

    def test_qtimer_timeout_drives_tick(self, engine):
        engine.resume()
        engine._on_timeout()
        assert engine.remaining == 9
