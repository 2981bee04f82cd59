"""
Account stores.

- SupabaseAccountRepository: the remote ``users`` table (production)
- InMemoryAccountStore: dictionary-backed store for tests and dry runs

Both are keyed by identity ID and last-write-wins.
"""

import logging
from typing import Any, Optional

from supabase import Client

from shared.config import get_settings
from shared.exceptions import StorageError
from shared.repository import BaseRepository

from .exceptions import AccountStorageError
from .models import SubscriptionStatus, UserAccount

logger = logging.getLogger(__name__)


class SupabaseAccountRepository(BaseRepository[UserAccount]):
    """
    Repository for account records in Supabase.

    Column names match the UserAccount field names. Every client failure
    surfaces as AccountStorageError.
    """

    store_name = "accounts"

    def __init__(self, db: Client, table: Optional[str] = None) -> None:
        super().__init__(db)
        self._table = table or get_settings().accounts_table

    async def get(self, account_id: str) -> Optional[UserAccount]:
        """Get an account by identity ID."""
        return self._select_one("id", account_id)

    async def get_by_email(self, email: str) -> Optional[UserAccount]:
        """Get the account registered with an email."""
        return self._select_one("email", email)

    async def get_by_device_id(self, device_id: str) -> Optional[UserAccount]:
        """Get the account bound to a device."""
        return self._select_one("device_id", device_id)

    async def set(self, account: UserAccount) -> None:
        """Upsert the whole record."""
        data = self._map_to_row(account)
        self._execute(lambda: self._db.table(self._table).upsert(data).execute())
        logger.debug(f"Stored account {account.id}")

    # -------------------------------------------------------------------------
    # Private helpers
    # -------------------------------------------------------------------------

    def _select_one(self, column: str, value: str) -> Optional[UserAccount]:
        result = self._execute(
            lambda: self._db.table(self._table).select("*").eq(column, value).limit(1).execute()
        )
        if not result.data:
            return None
        return self._map_to_account(result.data[0])

    def _storage_error(self, cause: Exception) -> StorageError:
        return AccountStorageError(f"Account store unavailable: {cause}")

    def _map_to_account(self, data: dict[str, Any]) -> UserAccount:
        """Map database row to UserAccount model."""
        return UserAccount(
            id=str(data["id"]),
            email=data.get("email") or "",
            device_id=data.get("device_id") or "",
            subscription_status=SubscriptionStatus(
                data.get("subscription_status") or SubscriptionStatus.PENDING.value
            ),
            has_device_owner=bool(data.get("has_device_owner", False)),
            selected_plan=data.get("selected_plan") or "",
            commitment_days=data.get("commitment_days") or 0,
            commitment_start_date=data.get("commitment_start_date"),
            commitment_end_date=data.get("commitment_end_date"),
            created_at=data["created_at"],
            updated_at=data["updated_at"],
        )

    def _map_to_row(self, account: UserAccount) -> dict[str, Any]:
        """Map UserAccount model to a database row."""
        return account.model_dump(mode="json")


class InMemoryAccountStore:
    """
    Dictionary-backed account store.

    Mirrors SupabaseAccountRepository semantics with no network access.
    """

    def __init__(self) -> None:
        self._accounts: dict[str, UserAccount] = {}
        self.write_count = 0

    async def get(self, account_id: str) -> Optional[UserAccount]:
        account = self._accounts.get(account_id)
        return account.model_copy(deep=True) if account else None

    async def get_by_email(self, email: str) -> Optional[UserAccount]:
        for account in self._accounts.values():
            if account.email == email:
                return account.model_copy(deep=True)
        return None

    async def get_by_device_id(self, device_id: str) -> Optional[UserAccount]:
        for account in self._accounts.values():
            if account.device_id == device_id:
                return account.model_copy(deep=True)
        return None

    async def set(self, account: UserAccount) -> None:
        self._accounts[account.id] = account.model_copy(deep=True)
        self.write_count += 1


# Module-level instance getter
_repository_instance: Optional[SupabaseAccountRepository] = None


def get_account_repository() -> SupabaseAccountRepository:
    """Get the account repository singleton."""
    global _repository_instance
    if _repository_instance is None:
        from shared.database import get_supabase_client
        _repository_instance = SupabaseAccountRepository(get_supabase_client())
    return _repository_instance


def reset_account_repository() -> None:
    """Reset the account repository singleton (for testing)."""
    global _repository_instance
    _repository_instance = None
