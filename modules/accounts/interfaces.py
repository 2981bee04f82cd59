"""
Accounts module interfaces.

IAccountStore is the narrow storage contract (keyed, last-write-wins).
IAccountService is what routing and the orchestrators use; it adds the
read-through cache and the account lifecycle writes.
"""

from typing import Protocol, Optional, runtime_checkable

from modules.auth.models import Identity
from modules.policies.models import CommitmentPlan

from .models import UserAccount


@runtime_checkable
class IAccountStore(Protocol):
    """Durable storage for account records."""

    async def get(self, account_id: str) -> Optional[UserAccount]:
        """
        Get an account by identity ID.

        Returns:
            The account, or None if no record exists

        Raises:
            AccountStorageError: If the store is unavailable
        """
        ...

    async def set(self, account: UserAccount) -> None:
        """
        Write an account record, replacing any previous version.

        Raises:
            AccountStorageError: If the store is unavailable
        """
        ...

    async def get_by_email(self, email: str) -> Optional[UserAccount]:
        """Get the account registered with an email, if any."""
        ...

    async def get_by_device_id(self, device_id: str) -> Optional[UserAccount]:
        """Get the account bound to a device, if any."""
        ...


@runtime_checkable
class IAccountService(Protocol):
    """
    Account operations used by routing and the orchestrators.

    Every write invalidates the read cache, so a read that follows a write
    in the same process always sees that write.
    """

    async def get_account(self, account_id: str) -> Optional[UserAccount]:
        """Get an account, served from the short-lived cache when fresh."""
        ...

    async def get_by_email(self, email: str) -> Optional[UserAccount]:
        """Get the account registered with an email, bypassing the cache."""
        ...

    async def get_by_device_id(self, device_id: str) -> Optional[UserAccount]:
        """Get the account bound to a device. Placeholder IDs match nothing."""
        ...

    async def register(self, identity: Identity, device_id: str) -> UserAccount:
        """Create a PENDING account bound to ``device_id``."""
        ...

    async def select_plan(self, account_id: str, plan: CommitmentPlan) -> UserAccount:
        """
        Schedule a commitment for ``plan`` starting now.

        Raises:
            AccountNotFoundError: If the account doesn't exist
        """
        ...

    async def mark_device_owner(self, account_id: str, held: bool = True) -> UserAccount:
        """Record whether this device holds restriction authority."""
        ...

    async def reset_after_clear(self, account_id: str) -> Optional[UserAccount]:
        """
        Reset the account to the PENDING / no-commitment shape.

        Email, device ID and creation time are preserved. Returns the
        account as stored, or None if it doesn't exist.
        """
        ...

    def invalidate_cache(self) -> None:
        """Drop any cached account reads."""
        ...
