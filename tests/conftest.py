"""
Shared test fixtures and utilities.

Every test gets its own local state directory and fresh singletons.
"""

import pytest
from datetime import datetime, timezone, timedelta

from shared.config import get_settings
from shared.database import reset_client_cache
from modules.auth.service import reset_auth_service
from modules.accounts.models import SubscriptionStatus, UserAccount
from modules.accounts.repository import reset_account_repository
from modules.accounts.service import reset_account_service
from modules.policies.repository import reset_policy_repository
from modules.restrictions.device import reset_device_policy_manager
from modules.fortress.service import reset_fortress_service

from fakes import LOCAL_DEVICE_ID


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Point local state at a temp dir and clear cached settings."""
    monkeypatch.setenv("LOCAL_STATE_DIR", str(tmp_path / "state"))
    monkeypatch.setenv("SUPABASE_URL", "")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def reset_singletons():
    """Reset module singletons before and after each test."""
    resets = (
        reset_client_cache,
        reset_auth_service,
        reset_account_repository,
        reset_account_service,
        reset_policy_repository,
        reset_device_policy_manager,
        reset_fortress_service,
    )
    for reset in resets:
        reset()
    yield
    for reset in resets:
        reset()


@pytest.fixture
def now() -> datetime:
    """A fixed evaluation time."""
    return datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_account(now):
    """Factory for accounts in a given lifecycle shape."""

    def _make(
        status: SubscriptionStatus = SubscriptionStatus.ACTIVE,
        device_id: str = LOCAL_DEVICE_ID,
        has_device_owner: bool = True,
        end_offset: timedelta | None = timedelta(days=10),
        days: int = 30,
    ) -> UserAccount:
        start = end = None
        if end_offset is not None:
            end = now + end_offset
            start = end - timedelta(days=days)
        return UserAccount(
            id="user-123",
            email="test@example.com",
            device_id=device_id,
            subscription_status=status,
            has_device_owner=has_device_owner,
            selected_plan="MONTHLY" if end_offset is not None else "",
            commitment_days=days if end_offset is not None else 0,
            commitment_start_date=start,
            commitment_end_date=end,
            created_at=now - timedelta(days=60),
            updated_at=now - timedelta(days=1),
        )

    return _make
