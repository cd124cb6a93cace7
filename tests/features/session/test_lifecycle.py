"""
Tests for the session state machine, moving time and reset.
"""

import pytest

from runtrack.features.session import (
    RejectionReason,
    SessionConfig,
    SessionEngine,
    SessionState,
)


# =============================================================================
# Test State Machine
# =============================================================================

class TestStateMachine:
    """idle -> running <-> paused -> stopped"""

    def test_initial_state(self, engine):
        assert engine.state == SessionState.IDLE
        assert not engine.is_running
        assert engine.snapshot().started_at_ms is None

    def test_fixes_before_start_rejected(self, engine, make_fix):
        assert engine.add_sample(make_fix(0, 0)) is None
        assert engine.samples == ()
        assert engine.rejection_counts == {RejectionReason.NOT_RUNNING: 1}

    def test_start(self, engine, clock):
        assert engine.start()
        assert engine.state == SessionState.RUNNING
        assert engine.snapshot().started_at_ms == clock.now_ms

    def test_start_twice_is_noop(self, engine):
        engine.start()
        assert not engine.start()
        assert engine.state == SessionState.RUNNING

    def test_pause_and_resume(self, engine, recorder):
        engine.add_listener(recorder)
        engine.start()

        assert engine.pause()
        assert engine.is_paused
        assert engine.snapshot().is_paused
        assert not engine.pause()

        assert engine.resume()
        assert engine.is_running
        assert not engine.resume()

        assert [name for name, _ in recorder.events] == ["pause", "resume"]

    def test_start_resumes_paused_session(self, engine):
        engine.start()
        engine.pause()

        assert engine.start()
        assert engine.state == SessionState.RUNNING

    def test_pause_from_idle_is_noop(self, engine):
        assert not engine.pause()
        assert engine.state == SessionState.IDLE

    def test_paused_session_drops_fixes(self, engine, clock, make_fix):
        engine.start()
        engine.add_sample(make_fix(0, 0))
        engine.pause()

        assert engine.add_sample(make_fix(30, 10)) is None
        assert len(engine.samples) == 1
        assert engine.rejection_counts[RejectionReason.NOT_RUNNING] == 1

    def test_stop(self, engine, clock, make_fix, recorder):
        engine.add_listener(recorder)
        engine.start()
        engine.add_sample(make_fix(0, 0))
        clock.set(30)

        snapshot = engine.stop()

        assert snapshot.state == SessionState.STOPPED
        assert snapshot.stopped_at_ms == clock.now_ms
        assert snapshot.totals.duration_s == pytest.approx(30.0)
        assert recorder.of("stats")[-1] == snapshot.totals

    def test_stopped_session_rejects_fixes(self, engine, clock, make_fix):
        engine.start()
        engine.stop()

        assert engine.add_sample(make_fix(0, 0)) is None
        assert engine.samples == ()
        assert not engine.start()
        assert not engine.pause()
        assert engine.state == SessionState.STOPPED

    def test_stop_from_idle_returns_snapshot(self, engine):
        snapshot = engine.stop()

        assert snapshot.state == SessionState.IDLE
        assert snapshot is engine.snapshot()

    def test_stop_twice_returns_same_snapshot(self, engine, clock):
        engine.start()
        first = engine.stop()
        clock.advance(60)

        assert engine.stop() is first


# =============================================================================
# Test Moving Time
# =============================================================================

class TestDuration:
    """Duration excludes every paused interval."""

    def test_pause_excluded(self, engine, clock):
        """Pause at 60 s and resume at 90 s: the 30 s gap is not counted."""
        clock.set(0)
        engine.start()
        clock.set(60)
        engine.pause()
        clock.set(90)
        engine.start()
        clock.set(120)

        assert engine.get_stats().duration_s == pytest.approx(90.0)

    def test_open_pause_excluded(self, engine, clock):
        engine.start()
        clock.set(60)
        engine.pause()
        clock.set(75)

        assert engine.get_stats().duration_s == pytest.approx(60.0)

    def test_several_pauses(self, engine, clock):
        engine.start()
        for pause_at, resume_at in [(10, 15), (30, 50)]:
            clock.set(pause_at)
            engine.pause()
            clock.set(resume_at)
            engine.resume()
        clock.set(100)

        assert engine.get_stats().duration_s == pytest.approx(75.0)

    def test_stop_while_paused(self, engine, clock):
        engine.start()
        clock.set(40)
        engine.pause()
        clock.set(100)

        snapshot = engine.stop()

        assert snapshot.paused_at_ms is None
        assert snapshot.totals.duration_s == pytest.approx(40.0)

    def test_duration_frozen_after_stop(self, engine, clock):
        engine.start()
        clock.set(50)
        engine.stop()
        clock.set(500)

        assert engine.get_stats().duration_s == pytest.approx(50.0)

    def test_idle_duration_is_zero(self, engine, clock):
        clock.set(100)
        assert engine.get_stats().duration_s == 0.0


# =============================================================================
# Test Reset
# =============================================================================

class TestReset:
    """reset() discards data but keeps configuration and listeners."""

    def test_reset_clears_state(self, clock, make_fix, recorder):
        engine = SessionEngine(SessionConfig(unit="mi"), clock=clock, session_id="run_a")
        engine.add_listener(recorder)
        engine.start()
        engine.add_sample(make_fix(0, 0))
        engine.stop()

        engine.reset()

        assert engine.session_id != "run_a"
        assert engine.state == SessionState.IDLE
        assert engine.samples == ()
        assert engine.laps == ()
        assert engine.rejected_samples == 0
        assert engine.unit.value == "mi"

        engine.start()
        engine.add_sample(make_fix(0, 0))
        assert len(recorder.of("sample")) == 2

    def test_replay_is_deterministic(self, engine, clock, make_fix):
        """Replaying the same fixes after reset() reproduces totals and laps."""
        east = 0.0
        fixes = []
        for i, step in enumerate([0, 120, 95, 130, 0, 110, 140, 80, 125, 100, 90, 135]):
            east += step
            altitude = 100.0 + (i % 4) * 4.0
            fixes.append(make_fix(east, i * 10, altitude_m=altitude))
        fixes.insert(5, make_fix(east + 5000, 45))     # rejected jump

        def run():
            clock.set(0)
            engine.start()
            for fix in fixes:
                clock.now_ms = fix.timestamp_ms
                engine.add_sample(fix)
            return engine.stop()

        first = run()
        engine.reset()
        second = run()

        assert second.totals == first.totals
        assert second.laps == first.laps
        assert second.rejected_samples == first.rejected_samples == 1
        assert len(first.laps) == 1
