"""
Fortress teardown ("clear everything").

Runs a fixed list of named steps. Every step is attempted even when an
earlier one failed, and releasing device-owner authority always runs
last because every other device call needs it. Safe to run repeatedly.
"""

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from shared.config import Settings, get_settings
from modules.accounts.interfaces import IAccountService
from modules.policies.interfaces import IPolicyStore
from modules.policies.models import FortressState
from modules.restrictions.blocked_apps import CommitmentScratch
from modules.restrictions.catalog import (
    ALWAYS_HIDDEN,
    BEHAVIOURAL_RESTRICTIONS,
    BROWSERS,
    DISALLOW_CONFIG_PRIVATE_DNS,
    PRIVATE_DNS_MODE_OPPORTUNISTIC,
)
from modules.restrictions.interfaces import (
    IBlockedAppStore,
    IDeviceAuthority,
    IDevicePolicyManager,
    IUserBlockList,
)

from .models import ClearResult, ClearSuccess, PartialSuccess

logger = logging.getLogger(__name__)


class StepFailed(Exception):
    """One teardown step finished but some of its items failed."""


@dataclass
class TeardownStep:
    name: str
    action: Callable[[], Awaitable[None]]
    # Failures of unrecorded steps are logged but don't make the result partial.
    recorded: bool = True


class DeactivationOrchestrator:
    """Best-effort, idempotent teardown of everything activation set up."""

    def __init__(
        self,
        device: IDevicePolicyManager,
        authority: IDeviceAuthority,
        policies: IPolicyStore,
        blocked_apps: IBlockedAppStore,
        user_block_list: IUserBlockList,
        scratch: CommitmentScratch,
        accounts: Optional[IAccountService] = None,
        settings: Optional[Settings] = None,
    ):
        self._device = device
        self._authority = authority
        self._policies = policies
        self._blocked_apps = blocked_apps
        self._user_block_list = user_block_list
        self._scratch = scratch
        self._accounts = accounts
        self._settings = settings or get_settings()

    async def clear_everything(self, account_id: Optional[str] = None) -> ClearResult:
        """
        Tear the fortress down.

        Args:
            account_id: Account to reset remotely. None skips the remote reset.

        Returns:
            ClearSuccess, or PartialSuccess naming the failed steps
        """
        logger.info("Fortress clear started")

        if not await self._authority.is_held():
            logger.warning("Not device owner, clearing local data and account only")
            await self._run([
                TeardownStep("clear_local_state", self._clear_local_state, recorded=False),
                TeardownStep("reset_account", lambda: self._reset_account(account_id), recorded=False),
            ])
            return ClearSuccess()

        errors = await self._run(self._steps(account_id))

        logger.info(f"Fortress clear complete, errors: {len(errors)}")
        if errors:
            return PartialSuccess(errors=errors)
        return ClearSuccess()

    def _steps(self, account_id: Optional[str]) -> list[TeardownStep]:
        return [
            TeardownStep("unsuspend_browsers", self._unsuspend_browsers),
            TeardownStep("unhide_apps", self._unhide_apps),
            TeardownStep("unblock_recorded_apps", self._unblock_recorded_apps),
            TeardownStep("unblock_user_apps", self._unblock_user_apps),
            TeardownStep("clear_user_restrictions", self._clear_user_restrictions),
            TeardownStep("reset_dns", self._reset_dns),
            TeardownStep("release_auto_time", self._release_auto_time),
            TeardownStep("stop_content_filter", self._stop_content_filter),
            TeardownStep("remove_browser_policies", self._remove_browser_policies),
            TeardownStep("allow_uninstall", self._allow_uninstall),
            TeardownStep("clear_local_state", self._clear_local_state),
            # Remote reconciliation may lag; local state always wins.
            TeardownStep("reset_account", lambda: self._reset_account(account_id), recorded=False),
            TeardownStep("release_device_owner", self._authority.release),
        ]

    async def _run(self, steps: list[TeardownStep]) -> dict[str, str]:
        errors: dict[str, str] = {}
        for number, step in enumerate(steps, start=1):
            logger.info(f"Step {number}: {step.name}")
            try:
                await step.action()
            except Exception as e:
                if step.recorded:
                    errors[step.name] = str(e)
                    logger.error(f"Step {step.name} failed: {e}")
                else:
                    logger.warning(f"Step {step.name} failed: {e}")
        return errors

    # -------------------------------------------------------------------------
    # Device steps
    # -------------------------------------------------------------------------

    def _unblock_packages(self, packages: list[str]) -> list[str]:
        """Unhide and unsuspend each package. Returns the ones that failed."""
        failed = []
        for package in packages:
            try:
                unhidden = self._device.set_application_hidden(package, False)
                still_suspended = self._device.set_packages_suspended([package], False)
                if not unhidden or still_suspended:
                    failed.append(package)
                    continue
                logger.debug(f"Unblocked {package}")
            except Exception as e:
                logger.warning(f"Could not unblock {package}: {e}")
                failed.append(package)
        return failed

    async def _unsuspend_browsers(self) -> None:
        failed = self._device.set_packages_suspended(list(BROWSERS), False)
        if failed:
            raise StepFailed(f"Could not unsuspend: {', '.join(failed)}")

    async def _unhide_apps(self) -> None:
        failed = []
        for package in ALWAYS_HIDDEN:
            try:
                if not self._device.set_application_hidden(package, False):
                    failed.append(package)
            except Exception as e:
                logger.warning(f"Could not unhide {package}: {e}")
                failed.append(package)
        if failed:
            raise StepFailed(f"Could not unhide: {', '.join(failed)}")

    async def _unblock_recorded_apps(self) -> None:
        apps = await self._blocked_apps.list_all()
        logger.info(f"Found {len(apps)} recorded blocked apps")
        failed = self._unblock_packages([app.package_name for app in apps])
        if failed:
            raise StepFailed(f"Could not unblock: {', '.join(failed)}")

    async def _unblock_user_apps(self) -> None:
        packages = await self._user_block_list.get_blocked_packages()
        logger.info(f"Found {len(packages)} user-blocked apps")
        failed = self._unblock_packages(packages)
        for package in packages:
            if package not in failed:
                await self._user_block_list.remove_blocked_package(package)
        if failed:
            raise StepFailed(f"Could not unblock: {', '.join(failed)}")

    async def _clear_user_restrictions(self) -> None:
        failed = []
        for key in BEHAVIOURAL_RESTRICTIONS:
            try:
                self._device.clear_user_restriction(key)
            except Exception as e:
                logger.warning(f"Could not remove restriction {key}: {e}")
                failed.append(key)
        if failed:
            raise StepFailed(f"Could not remove: {', '.join(failed)}")

    async def _reset_dns(self) -> None:
        self._device.clear_user_restriction(DISALLOW_CONFIG_PRIVATE_DNS)
        self._device.set_private_dns_mode(PRIVATE_DNS_MODE_OPPORTUNISTIC)

    async def _release_auto_time(self) -> None:
        self._device.set_auto_time_required(False)

    async def _stop_content_filter(self) -> None:
        self._device.stop_content_filter_service()

    async def _remove_browser_policies(self) -> None:
        self._device.set_application_restrictions(self._settings.managed_browser_package, {})

    async def _allow_uninstall(self) -> None:
        self._device.set_uninstall_blocked(self._settings.app_package_name, False)

    # -------------------------------------------------------------------------
    # State steps
    # -------------------------------------------------------------------------

    async def _clear_local_state(self) -> None:
        failures = []

        try:
            removed = await self._blocked_apps.clear()
            logger.info(f"Blocked app records cleared ({removed})")
        except Exception as e:
            logger.warning(f"Clear blocked apps: {e}")
            failures.append("blocked apps")

        try:
            active = await self._policies.get_active()
            if active is not None and active.state is not FortressState.UNLOCKABLE:
                await self._policies.update(active.model_copy(update={"state": FortressState.UNLOCKABLE}))
            await self._policies.clear_active()
            logger.info("Active policy cleared")
        except Exception as e:
            logger.warning(f"Clear policy: {e}")
            failures.append("active policy")

        try:
            await self._scratch.clear()
        except Exception as e:
            logger.warning(f"Clear commitment scratch: {e}")
            failures.append("commitment scratch")

        if failures:
            raise StepFailed(f"Could not clear {', '.join(failures)}")

    async def _reset_account(self, account_id: Optional[str]) -> None:
        if self._accounts is None or account_id is None:
            logger.warning("No account to reset, skipping remote reset")
            return
        await self._accounts.reset_after_clear(account_id)
