"""
Account service implementation.

Wraps an IAccountStore with a short-lived read-through cache so routing
does not hit the remote store on every app entry. Any write made through
this service drops the cache before and after the store call, and a read
that overlapped a write is not cached, so a read that follows a write
always sees it.
"""

import logging
from typing import Optional

from shared.clock import Clock, MILLIS_PER_SECOND, now_millis, to_datetime
from shared.config import get_settings
from modules.auth.models import Identity
from modules.policies.models import CommitmentPlan

from .exceptions import AccountNotFoundError, InvalidAccountError
from .interfaces import IAccountService, IAccountStore
from .models import SubscriptionStatus, UserAccount, is_placeholder_device_id

logger = logging.getLogger(__name__)


class AccountService(IAccountService):
    """
    Account lifecycle operations over an account store.

    The cache is per process and keyed by account ID.
    """

    def __init__(
        self,
        store: IAccountStore,
        clock: Clock = now_millis,
        cache_ttl_seconds: Optional[int] = None,
    ):
        self._store = store
        self._clock = clock
        ttl = get_settings().account_cache_ttl_seconds if cache_ttl_seconds is None else cache_ttl_seconds
        self._cache_ttl_millis = ttl * MILLIS_PER_SECOND
        self._cache: dict[str, tuple[int, Optional[UserAccount]]] = {}
        self._generation = 0

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def _is_cache_valid(self, cached_at: int) -> bool:
        return self._clock() - cached_at < self._cache_ttl_millis

    async def get_account(self, account_id: str) -> Optional[UserAccount]:
        """Get an account, served from cache when fresh."""
        cached = self._cache.get(account_id)
        if cached is not None and self._is_cache_valid(cached[0]):
            account = cached[1]
            return account.model_copy(deep=True) if account else None

        generation = self._generation
        account = await self._store.get(account_id)
        if generation == self._generation:
            self._cache[account_id] = (self._clock(), account.model_copy(deep=True) if account else None)
        return account

    async def get_by_email(self, email: str) -> Optional[UserAccount]:
        return await self._store.get_by_email(email)

    async def get_by_device_id(self, device_id: str) -> Optional[UserAccount]:
        if is_placeholder_device_id(device_id):
            return None
        return await self._store.get_by_device_id(device_id)

    def invalidate_cache(self) -> None:
        self._generation += 1
        self._cache.clear()

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    async def _require(self, account_id: str) -> UserAccount:
        account = await self._store.get(account_id)
        if account is None:
            raise AccountNotFoundError(account_id)
        return account

    async def _write(self, account: UserAccount, **changes) -> UserAccount:
        """Apply ``changes``, bump updated_at and store the result."""
        self.invalidate_cache()
        data = account.model_dump()
        data.update(changes)
        data["updated_at"] = to_datetime(self._clock())
        try:
            updated = UserAccount.model_validate(data)
        except ValueError as e:
            raise InvalidAccountError(account.id, str(e)) from e
        try:
            await self._store.set(updated)
        finally:
            self.invalidate_cache()
        return updated

    async def register(self, identity: Identity, device_id: str) -> UserAccount:
        """
        Create a PENDING account bound to ``device_id``.

        An existing record for the identity is returned unchanged.
        """
        if is_placeholder_device_id(device_id):
            raise InvalidAccountError(identity.id, "a real device ID is required")

        existing = await self._store.get(identity.id)
        if existing is not None:
            logger.info(f"Account {identity.id} already registered")
            return existing

        self.invalidate_cache()
        now = to_datetime(self._clock())
        account = UserAccount(
            id=identity.id,
            email=identity.email,
            device_id=device_id,
            subscription_status=SubscriptionStatus.PENDING,
            created_at=now,
            updated_at=now,
        )
        try:
            await self._store.set(account)
        finally:
            self.invalidate_cache()
        logger.info(f"Registered account {identity.id} on device {device_id}")
        return account

    async def select_plan(self, account_id: str, plan: CommitmentPlan) -> UserAccount:
        """Start a commitment for ``plan`` now. Free plans run as TRIAL."""
        account = await self._require(account_id)
        start = self._clock()
        status = SubscriptionStatus.TRIAL if plan.is_free else SubscriptionStatus.ACTIVE

        updated = await self._write(
            account,
            subscription_status=status,
            selected_plan=plan.value,
            commitment_days=plan.days,
            commitment_start_date=to_datetime(start),
            commitment_end_date=to_datetime(start + plan.duration_millis),
        )
        logger.info(f"Account {account_id} selected {plan.value} ({status.value})")
        return updated

    async def mark_device_owner(self, account_id: str, held: bool = True) -> UserAccount:
        account = await self._require(account_id)
        updated = await self._write(account, has_device_owner=held)
        logger.info(f"Account {account_id} device owner: {held}")
        return updated

    async def reset_after_clear(self, account_id: str) -> Optional[UserAccount]:
        """Return the account to the PENDING, no-commitment shape."""
        account = await self._store.get(account_id)
        if account is None:
            logger.warning(f"No account {account_id} to reset")
            return None

        if account.is_reset():
            logger.info(f"Account {account_id} already reset")
            return account

        updated = await self._write(
            account,
            has_device_owner=False,
            subscription_status=SubscriptionStatus.PENDING,
            selected_plan="",
            commitment_days=0,
            commitment_start_date=None,
            commitment_end_date=None,
        )
        logger.info(f"Account {account_id} reset to PENDING")
        return updated


# Module-level instance getter
_service_instance: Optional[AccountService] = None


def get_account_service() -> AccountService:
    """Get the account service singleton."""
    global _service_instance
    if _service_instance is None:
        from .repository import get_account_repository
        _service_instance = AccountService(store=get_account_repository())
    return _service_instance


def reset_account_service() -> None:
    """Reset the account service singleton (for testing)."""
    global _service_instance
    _service_instance = None
