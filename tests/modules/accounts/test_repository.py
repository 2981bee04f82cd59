import pytest
from unittest.mock import MagicMock

from modules.accounts.exceptions import AccountStorageError
from modules.accounts.models import SubscriptionStatus, UserAccount
from modules.accounts.repository import SupabaseAccountRepository


def _row(**overrides) -> dict:
    row = {
        "id": "user-123",
        "email": "test@example.com",
        "device_id": "device-abc-123",
        "subscription_status": "ACTIVE",
        "has_device_owner": True,
        "selected_plan": "MONTHLY",
        "commitment_days": 30,
        "commitment_start_date": "2025-02-09T12:00:00+00:00",
        "commitment_end_date": "2025-03-11T12:00:00+00:00",
        "created_at": "2025-01-01T00:00:00+00:00",
        "updated_at": "2025-02-09T12:00:00+00:00",
    }
    row.update(overrides)
    return row


class TestSupabaseAccountRepository:
    @pytest.fixture
    def mock_db(self):
        return MagicMock()

    @pytest.fixture
    def repo(self, mock_db):
        return SupabaseAccountRepository(mock_db, table="users")

    def _select_result(self, mock_db):
        return (
            mock_db.table.return_value.select.return_value
            .eq.return_value.limit.return_value.execute.return_value
        )

    @pytest.mark.asyncio
    async def test_get_maps_row(self, repo, mock_db):
        """get should map the row to a UserAccount."""
        self._select_result(mock_db).data = [_row()]

        account = await repo.get("user-123")

        assert account.id == "user-123"
        assert account.subscription_status is SubscriptionStatus.ACTIVE
        assert account.commitment_days == 30
        mock_db.table.assert_called_with("users")
        mock_db.table.return_value.select.return_value.eq.assert_called_with("id", "user-123")

    @pytest.mark.asyncio
    async def test_get_missing(self, repo, mock_db):
        """get should return None when no row matches."""
        self._select_result(mock_db).data = []
        assert await repo.get("user-123") is None

    @pytest.mark.asyncio
    async def test_null_columns_default(self, repo, mock_db):
        """Null columns should map to empty defaults."""
        self._select_result(mock_db).data = [_row(
            device_id=None,
            subscription_status=None,
            selected_plan=None,
            commitment_days=None,
            commitment_start_date=None,
            commitment_end_date=None,
        )]

        account = await repo.get("user-123")

        assert account.device_id == ""
        assert account.subscription_status is SubscriptionStatus.PENDING
        assert account.commitment_end_date is None

    @pytest.mark.asyncio
    async def test_get_by_email(self, repo, mock_db):
        """get_by_email should filter on the email column."""
        self._select_result(mock_db).data = [_row()]
        await repo.get_by_email("test@example.com")
        mock_db.table.return_value.select.return_value.eq.assert_called_with(
            "email", "test@example.com"
        )

    @pytest.mark.asyncio
    async def test_get_by_device_id(self, repo, mock_db):
        """get_by_device_id should filter on the device_id column."""
        self._select_result(mock_db).data = [_row()]
        await repo.get_by_device_id("device-abc-123")
        mock_db.table.return_value.select.return_value.eq.assert_called_with(
            "device_id", "device-abc-123"
        )

    @pytest.mark.asyncio
    async def test_set_upserts_json_row(self, repo, mock_db):
        """set should upsert the JSON form of the account."""
        account = UserAccount(id="user-123", email="test@example.com")

        await repo.set(account)

        row = mock_db.table.return_value.upsert.call_args[0][0]
        assert row["id"] == "user-123"
        assert row["subscription_status"] == "PENDING"
        assert isinstance(row["created_at"], str)

    @pytest.mark.asyncio
    async def test_client_failure_is_storage_error(self, repo, mock_db):
        """Client failures should surface as AccountStorageError."""
        mock_db.table.return_value.select.return_value.eq.return_value.limit.return_value.execute.side_effect = (
            ConnectionError("connection refused")
        )

        with pytest.raises(AccountStorageError) as exc_info:
            await repo.get("user-123")

        assert exc_info.value.store == "accounts"
