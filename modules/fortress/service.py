"""
Fortress service implementation.

Entry point for the commitment lifecycle: delegates locking and teardown
to the orchestrators and answers status questions from the policy store.
"""

import logging
from typing import Optional

from shared.clock import Clock, now_millis
from shared.config import get_settings
from modules.policies.interfaces import IPolicyStore
from modules.policies.models import (
    ActivationMethod,
    CommitmentPlan,
    CommitmentPolicy,
    FortressState,
    RemainingTime,
)
from modules.restrictions.catalog import RESIDUAL_BROWSERS
from modules.restrictions.interfaces import IDevicePolicyManager
from modules.restrictions.models import ContentFilterStatus

from .activation import ActivationOrchestrator
from .deactivation import DeactivationOrchestrator
from .interfaces import IFortressService
from .models import (
    ActivationResult,
    ClearResult,
    DeactivationResult,
    DeactivationSuccess,
    FortressActive,
    FortressInactive,
    FortressStatus,
    NoActivePolicy,
    PeriodNotExpired,
)

logger = logging.getLogger(__name__)


class FortressService(IFortressService):
    """Implementation of the fortress service."""

    def __init__(
        self,
        policies: IPolicyStore,
        activation: ActivationOrchestrator,
        deactivation: DeactivationOrchestrator,
        device: Optional[IDevicePolicyManager] = None,
        clock: Clock = now_millis,
    ):
        self._policies = policies
        self._activation = activation
        self._deactivation = deactivation
        self._device = device
        self._clock = clock

    async def activate(self, plan: CommitmentPlan, method: ActivationMethod) -> ActivationResult:
        return await self._activation.activate(plan, method)

    async def clear_everything(self, account_id: Optional[str] = None) -> ClearResult:
        return await self._deactivation.clear_everything(account_id)

    async def deactivate_fortress(self) -> DeactivationResult:
        active = await self._policies.get_active()
        if active is None:
            return NoActivePolicy()

        now = self._clock()
        if not active.is_unlock_eligible(now):
            remaining_days = active.remaining_days(now)
            logger.warning(f"Period not expired, {remaining_days} days remaining")
            return PeriodNotExpired(remaining_days=remaining_days)

        if active.state is not FortressState.UNLOCKABLE:
            await self._policies.update(active.model_copy(update={"state": FortressState.UNLOCKABLE}))
        logger.info(f"Policy {active.id} marked UNLOCKABLE")
        return DeactivationSuccess()

    async def can_unlock(self) -> bool:
        active = await self._policies.get_active()
        return active is not None and active.is_unlock_eligible(self._clock())

    async def get_status(self) -> FortressStatus:
        active = await self._policies.get_active()
        if active is None:
            return FortressInactive()

        now = self._clock()
        return FortressActive(
            policy=active,
            remaining_days=active.remaining_days(now),
            progress_percentage=active.progress_percentage(now),
            protection_score=active.protection_score(),
        )

    async def get_remaining_time(self) -> Optional[RemainingTime]:
        active = await self._policies.get_active()
        if active is None:
            return None
        return active.remaining_time(self._clock())

    async def get_history(self) -> list[CommitmentPolicy]:
        return await self._policies.list_historical()

    def get_content_filter_status(self) -> ContentFilterStatus:
        """Read the live content-filtering state back from the device."""
        if self._device is None:
            return ContentFilterStatus()

        settings = get_settings()
        return ContentFilterStatus(
            dns_filter_active=self._device.get_private_dns_host() == settings.dns_filter_host,
            managed_browser_active=bool(
                self._device.get_application_restrictions(settings.managed_browser_package)
            ),
            browsers_blocked=sum(
                1 for package in RESIDUAL_BROWSERS if self._device.is_application_hidden(package)
            ),
            device_owner_active=self._device.is_device_owner(),
        )


# Module-level instance getter
_service_instance: Optional[FortressService] = None


def get_fortress_service() -> FortressService:
    """Get the fortress service singleton."""
    global _service_instance
    if _service_instance is None:
        from modules.policies.repository import get_policy_repository
        from modules.restrictions.blocked_apps import (
            default_blocked_app_repository,
            default_commitment_scratch,
            default_user_block_list,
        )
        from modules.restrictions.device import DeviceOwnerAuthority, get_device_policy_manager
        from modules.restrictions.layers import build_default_layers

        settings = get_settings()
        policies = get_policy_repository()
        device = get_device_policy_manager()
        authority = DeviceOwnerAuthority(device)

        accounts = None
        if settings.supabase_url:
            from modules.accounts.service import get_account_service
            accounts = get_account_service()

        _service_instance = FortressService(
            policies=policies,
            activation=ActivationOrchestrator(
                policies=policies,
                authority=authority,
                layers=build_default_layers(device, settings),
            ),
            deactivation=DeactivationOrchestrator(
                device=device,
                authority=authority,
                policies=policies,
                blocked_apps=default_blocked_app_repository(),
                user_block_list=default_user_block_list(),
                scratch=default_commitment_scratch(),
                accounts=accounts,
                settings=settings,
            ),
            device=device,
        )
    return _service_instance


def reset_fortress_service() -> None:
    """Reset the fortress service singleton (for testing)."""
    global _service_instance
    _service_instance = None
