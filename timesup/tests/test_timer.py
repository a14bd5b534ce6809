"""
Tests for the tick-driven turn timer.
"""

from ..session.timer import ManualTurnTimer


class Counter:
    def __init__(self):
        self.calls = 0

    def __call__(self):
        self.calls += 1


class TestManualTurnTimer:
    """Tests for ManualTurnTimer."""

    def test_fires_once_when_time_runs_out(self):
        timer = ManualTurnTimer()
        fired = Counter()
        timer.start(3, fired)

        assert not timer.tick(2)
        assert timer.remaining == 1
        assert timer.tick(2)
        assert not timer.tick(2)
        assert fired.calls == 1
        assert not timer.is_running

    def test_never_fires_after_stop(self):
        timer = ManualTurnTimer()
        fired = Counter()
        timer.start(1, fired)
        timer.stop()
        assert not timer.tick(5)
        assert fired.calls == 0

    def test_pause_freezes_time(self):
        timer = ManualTurnTimer()
        fired = Counter()
        timer.start(2, fired)
        timer.pause()
        assert timer.is_paused
        timer.tick(5)
        assert timer.remaining == 2
        assert fired.calls == 0

        timer.resume()
        timer.tick(2)
        assert fired.calls == 1

    def test_restart_fires_again(self):
        timer = ManualTurnTimer()
        fired = Counter()
        timer.start(1, fired)
        timer.tick(1)
        timer.start(1, fired)
        timer.tick(1)
        assert fired.calls == 2

    def test_set_remaining(self):
        timer = ManualTurnTimer()
        timer.start(10, Counter())
        timer.set_remaining(-4)
        assert timer.remaining == 0

    def test_pause_without_start_is_noop(self):
        timer = ManualTurnTimer()
        timer.pause()
        assert not timer.is_paused
