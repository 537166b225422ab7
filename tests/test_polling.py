"""Tests for PollingHandler."""

from cs_actions.models.schemas import PollingConfig
from cs_actions.utils.polling import PollingHandler


class TestPollingHandler:
    def test_stops_when_done(self, sleeps, fake_sleep):
        values = iter(["Queued", "InProgress", "Completed", "never"])
        handler = PollingHandler(PollingConfig(interval=2, max_attempts=5), sleep=fake_sleep)

        value, timed_out = handler.poll(lambda: next(values), lambda status: status == "Completed")

        assert value == "Completed"
        assert timed_out is False
        assert sleeps == [2, 2, 2]

    def test_times_out_after_max_attempts(self, sleeps, fake_sleep):
        calls = []
        handler = PollingHandler(PollingConfig(interval=1, max_attempts=3), sleep=fake_sleep)

        value, timed_out = handler.poll(lambda: calls.append(1) or "Queued", lambda status: False)

        assert value == "Queued"
        assert timed_out is True
        assert len(calls) == 3
        assert sleeps == [1, 1, 1]
