"""Tests for shared/clock.py."""

from datetime import datetime, timezone

from shared.clock import MILLIS_PER_DAY, now_millis, to_datetime, to_millis


class TestClock:
    def test_to_datetime_epoch(self):
        """Zero millis should be the Unix epoch in UTC."""
        assert to_datetime(0) == datetime(1970, 1, 1, tzinfo=timezone.utc)

    def test_to_millis_inverts_to_datetime(self):
        """to_millis(to_datetime(x)) should give x back exactly."""
        millis = 1_700_000_000_123
        assert to_millis(to_datetime(millis)) == millis

    def test_naive_datetime_treated_as_utc(self):
        """Naive datetimes should be read as UTC."""
        assert to_millis(datetime(1970, 1, 2)) == MILLIS_PER_DAY

    def test_now_millis_is_current(self):
        """now_millis should match the wall clock."""
        before = int(datetime.now(timezone.utc).timestamp() * 1000)
        value = now_millis()
        after = int(datetime.now(timezone.utc).timestamp() * 1000)
        assert before - 1 <= value <= after + 1
