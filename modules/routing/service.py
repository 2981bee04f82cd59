"""
Route resolution.

``resolve`` is the decision table: pure, read-only, first match wins.
RouteResolver adds the account read (through the account service cache)
and treats any failure to load the account as "no account".
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from modules.auth.models import Identity
from modules.accounts.interfaces import IAccountService
from modules.accounts.models import SubscriptionStatus, UserAccount, is_placeholder_device_id

from .models import (
    CommitmentSelection,
    Dashboard,
    DeviceOwnerSetup,
    ExpiredDashboard,
    RouteVerdict,
    SubscriptionExpired,
    UnauthorizedDevice,
    Welcome,
)

logger = logging.getLogger(__name__)


def resolve(
    identity: Optional[Identity],
    account: Optional[UserAccount],
    local_device_id: str,
    now: Optional[datetime] = None,
) -> RouteVerdict:
    """
    Decide where the user goes next.

    Args:
        identity: Signed-in identity, or None
        account: The identity's account record, or None if it couldn't be loaded
        local_device_id: ID of the device running the app
        now: Evaluation time (defaults to the current UTC time)

    Returns:
        The first matching verdict of the routing table
    """
    if identity is None:
        return Welcome()

    if account is None:
        return Welcome()

    if not is_placeholder_device_id(account.device_id) and account.device_id != local_device_id:
        return UnauthorizedDevice(
            current_device_id=local_device_id,
            registered_device_id=account.device_id,
        )

    now = now or datetime.now(timezone.utc)
    status = account.subscription_status

    if account.commitment_end_date is not None and now >= account.commitment_end_date:
        # PENDING here means a previous teardown already reset the record.
        if status is SubscriptionStatus.PENDING:
            return CommitmentSelection()
        return ExpiredDashboard()

    if status is SubscriptionStatus.PENDING:
        return CommitmentSelection()

    if status in (SubscriptionStatus.EXPIRED, SubscriptionStatus.CANCELLED):
        return SubscriptionExpired()

    if status.is_valid() and not account.has_device_owner:
        return DeviceOwnerSetup()

    if account.commitment_end_date is None:
        return CommitmentSelection()

    return Dashboard()


class RouteResolver:
    """Resolves routes for the current device using the account service."""

    def __init__(self, accounts: IAccountService, local_device_id: str):
        self._accounts = accounts
        self._local_device_id = local_device_id

    async def resolve_route(
        self,
        identity: Optional[Identity],
        now: Optional[datetime] = None,
    ) -> RouteVerdict:
        """Load the identity's account and run the routing table."""
        if identity is None:
            return Welcome()

        try:
            account = await self._accounts.get_account(identity.id)
        except Exception as e:
            logger.warning(f"Could not load account {identity.id}, routing to welcome: {e}")
            return Welcome()

        verdict = resolve(identity, account, self._local_device_id, now)
        logger.info(f"Route for {identity.id}: {verdict.kind}")
        return verdict
