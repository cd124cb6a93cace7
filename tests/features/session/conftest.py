import pytest

from runtrack.features.session import SessionConfig, SessionEngine


@pytest.fixture
def fast_config():
    """Speed ceilings high enough for kilometre-per-ten-seconds test tracks."""
    return SessionConfig(
        max_speed_kmh=1000.0,
        medium_interval_max_speed_kmh=1000.0,
        short_interval_max_speed_kmh=1000.0,
    )


@pytest.fixture
def engine(clock):
    return SessionEngine(clock=clock, session_id="run_test")


class Recorder:
    """SessionListener stand-in that records every event."""

    def __init__(self):
        self.events = []

    def on_sample(self, sample):
        self.events.append(("sample", sample))

    def on_split(self, lap):
        self.events.append(("split", lap))

    def on_pause(self):
        self.events.append(("pause", None))

    def on_resume(self):
        self.events.append(("resume", None))

    def on_stats_update(self, totals):
        self.events.append(("stats", totals))

    def on_sample_rejected(self, reason):
        self.events.append(("rejected", reason))

    def of(self, kind):
        return [payload for name, payload in self.events if name == kind]


@pytest.fixture
def recorder():
    return Recorder()
