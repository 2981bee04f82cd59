import pytest
from datetime import datetime, timedelta, timezone
from pydantic import ValidationError

from modules.accounts.models import (
    SubscriptionStatus,
    UserAccount,
    is_placeholder_device_id,
)


class TestSubscriptionStatus:
    def test_valid_statuses(self):
        """Only TRIAL and ACTIVE count as a valid subscription."""
        valid = {status for status in SubscriptionStatus if status.is_valid()}
        assert valid == {SubscriptionStatus.TRIAL, SubscriptionStatus.ACTIVE}

    def test_requires_payment(self):
        """PENDING, EXPIRED and CANCELLED require payment."""
        assert SubscriptionStatus.PENDING.requires_payment()
        assert SubscriptionStatus.CANCELLED.requires_payment()
        assert not SubscriptionStatus.TRIAL.requires_payment()


class TestPlaceholderDeviceIds:
    @pytest.mark.parametrize("device_id", [None, "", "  ", "deviceid", "unknown_device"])
    def test_placeholders(self, device_id):
        """Empty and sentinel device ids are placeholders."""
        assert is_placeholder_device_id(device_id)

    def test_real_id(self):
        """A real device id is not a placeholder."""
        assert not is_placeholder_device_id("device-abc-123")


class TestUserAccount:
    def test_end_requires_start(self):
        """A commitment end date without a start date is invalid."""
        with pytest.raises(ValidationError):
            UserAccount(
                id="u1",
                email="a@b.c",
                commitment_end_date=datetime(2025, 1, 1, tzinfo=timezone.utc),
            )

    def test_end_must_follow_start(self):
        """The end date must be strictly after the start date."""
        moment = datetime(2025, 1, 1, tzinfo=timezone.utc)
        with pytest.raises(ValidationError):
            UserAccount(
                id="u1",
                email="a@b.c",
                commitment_start_date=moment,
                commitment_end_date=moment,
            )

    def test_naive_datetimes_become_utc(self):
        """Naive datetimes from the store should be read as UTC."""
        account = UserAccount(
            id="u1",
            email="a@b.c",
            commitment_start_date=datetime(2025, 1, 1),
            commitment_end_date=datetime(2025, 1, 31),
        )
        assert account.commitment_end_date.tzinfo is timezone.utc

    def test_commitment_period(self, make_account, now):
        """An account with a future end date is in its commitment period."""
        account = make_account(end_offset=timedelta(days=10))
        assert account.is_in_commitment_period(now)
        assert account.remaining_commitment_days(now) == 10
        assert account.commitment_progress_percentage(now) == pytest.approx(20 / 30 * 100)

    def test_commitment_over(self, make_account, now):
        """Once the end date passes the period is over."""
        account = make_account(end_offset=timedelta(days=-1))
        assert not account.is_in_commitment_period(now)
        assert account.remaining_commitment_days(now) == 0

    def test_no_commitment(self, make_account, now):
        """Accounts without an end date are never in a commitment."""
        account = make_account(end_offset=None)
        assert not account.is_in_commitment_period(now)
        assert account.commitment_progress_percentage(now) == 0.0

    def test_is_reset(self):
        """A fresh PENDING account without device owner is in reset shape."""
        assert UserAccount(id="u1", email="a@b.c").is_reset()
        assert not UserAccount(id="u1", email="a@b.c", has_device_owner=True).is_reset()
