"""
Concrete restriction layers.

Each layer owns one protection and knows how to undo it. Layers never
touch the policy store; the activation orchestrator reads ``policy_flag``
and records the flag itself once ``apply`` returns.
"""

import logging
from typing import Any, Callable, Optional

from shared.config import Settings, get_settings
from modules.policies.models import CommitmentPolicy

from .catalog import (
    DISALLOW_CONFIG_PRIVATE_DNS,
    MANAGED_BROWSER_POLICY,
    PRIVATE_DNS_MODE_OPPORTUNISTIC,
    RESIDUAL_BROWSERS,
    browser_subset,
    nuclear_subset,
)
from .exceptions import AuthorityMissingError, LayerFailureError
from .interfaces import IDevicePolicyManager, IRestrictionLayer

logger = logging.getLogger(__name__)


class DeviceRestrictionLayer(IRestrictionLayer):
    """Base for layers implemented with device policy manager calls."""

    name: str = ""
    policy_flag: Optional[str] = None

    def __init__(self, device: IDevicePolicyManager):
        self._device = device

    def _require_authority(self) -> None:
        if not self._device.is_device_owner():
            raise AuthorityMissingError(self.name)

    def _call(self, failure: str, fn: Callable[..., Any], *args: Any) -> Any:
        """Run one platform call, turning any rejection into LayerFailureError."""
        try:
            return fn(*args)
        except Exception as e:
            raise LayerFailureError(self.name, f"{failure}: {e}") from e

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"


class UninstallBlockLayer(DeviceRestrictionLayer):
    """Prevents this application from being uninstalled."""

    name = "uninstall_block"

    def __init__(self, device: IDevicePolicyManager, package_name: str):
        super().__init__(device)
        self._package_name = package_name

    async def apply(self, policy: CommitmentPolicy) -> None:
        self._require_authority()
        self._call("Failed to block uninstall", self._device.set_uninstall_blocked, self._package_name, True)
        logger.info(f"Uninstall blocked for {self._package_name}")

    async def remove(self, policy: CommitmentPolicy) -> None:
        self._call("Failed to unblock uninstall", self._device.set_uninstall_blocked, self._package_name, False)


class AppHideLayer(DeviceRestrictionLayer):
    """Hides the always-hidden apps found in the policy's blocked set."""

    name = "app_hide"

    async def _set_hidden(self, policy: CommitmentPolicy, hidden: bool) -> None:
        packages = nuclear_subset(policy.blocked_apps)
        if not packages:
            return

        failed = []
        for package in packages:
            try:
                if not self._device.set_application_hidden(package, hidden):
                    failed.append(package)
            except Exception as e:
                logger.warning(f"Could not change visibility of {package}: {e}")
                failed.append(package)

        if failed:
            verb = "hide" if hidden else "unhide"
            raise LayerFailureError(self.name, f"Failed to {verb} nuclear apps: {', '.join(failed)}")
        logger.info(f"{'Hidden' if hidden else 'Unhidden'} apps: {', '.join(packages)}")

    async def apply(self, policy: CommitmentPolicy) -> None:
        self._require_authority()
        await self._set_hidden(policy, True)

    async def remove(self, policy: CommitmentPolicy) -> None:
        await self._set_hidden(policy, False)


class AppSuspendLayer(DeviceRestrictionLayer):
    """Suspends the blocked browsers that are not already hidden."""

    name = "app_suspend"

    async def _set_suspended(self, policy: CommitmentPolicy, suspended: bool) -> None:
        packages = browser_subset(policy.blocked_apps)
        if not packages:
            return

        verb = "suspend" if suspended else "unsuspend"
        failed = self._call(f"Failed to {verb} browsers", self._device.set_packages_suspended, packages, suspended)
        if failed:
            raise LayerFailureError(self.name, f"Failed to {verb} browsers: {', '.join(failed)}")
        logger.info(f"Browsers {verb}ed: {', '.join(packages)}")

    async def apply(self, policy: CommitmentPolicy) -> None:
        self._require_authority()
        await self._set_suspended(policy, True)

    async def remove(self, policy: CommitmentPolicy) -> None:
        await self._set_suspended(policy, False)


class AutoTimeLayer(DeviceRestrictionLayer):
    """Forces network-provided time so the countdown can't be wound forward."""

    name = "auto_time"
    policy_flag = "time_protection_active"

    async def apply(self, policy: CommitmentPolicy) -> None:
        self._require_authority()
        self._call("Failed to force auto time", self._device.set_auto_time_required, True)
        logger.info("Automatic time enforced")

    async def remove(self, policy: CommitmentPolicy) -> None:
        self._call("Failed to release auto time", self._device.set_auto_time_required, False)


# -----------------------------------------------------------------------------
# Content filtering sub-layers
# -----------------------------------------------------------------------------


class DnsFilterLayer(DeviceRestrictionLayer):
    """Forces the filtering DNS resolver and locks the private DNS setting."""

    name = "content_filtering.dns"
    policy_flag = "dns_forced"

    def __init__(self, device: IDevicePolicyManager, host: str):
        super().__init__(device)
        self._host = host

    async def apply(self, policy: CommitmentPolicy) -> None:
        self._require_authority()
        self._call("DNS filtering failed", self._device.set_private_dns_host, self._host)
        self._call("DNS lock failed", self._device.add_user_restriction, DISALLOW_CONFIG_PRIVATE_DNS)
        logger.info(f"Private DNS forced to {self._host}")

    async def remove(self, policy: CommitmentPolicy) -> None:
        self._call("DNS unlock failed", self._device.clear_user_restriction, DISALLOW_CONFIG_PRIVATE_DNS)
        self._call("DNS reset failed", self._device.set_private_dns_mode, PRIVATE_DNS_MODE_OPPORTUNISTIC)


class ManagedBrowserLayer(DeviceRestrictionLayer):
    """Pushes the managed configuration (SafeSearch, no incognito, ...) to the browser."""

    name = "content_filtering.managed_browser"

    def __init__(self, device: IDevicePolicyManager, browser_package: str):
        super().__init__(device)
        self._browser_package = browser_package

    async def apply(self, policy: CommitmentPolicy) -> None:
        self._require_authority()
        self._call(
            "Browser configuration failed",
            self._device.set_application_restrictions,
            self._browser_package,
            MANAGED_BROWSER_POLICY,
        )
        logger.info(f"{self._browser_package} configured with {len(MANAGED_BROWSER_POLICY)} policies")

    async def remove(self, policy: CommitmentPolicy) -> None:
        self._call(
            "Browser configuration removal failed",
            self._device.set_application_restrictions,
            self._browser_package,
            {},
        )


class ResidualBrowserLayer(DeviceRestrictionLayer):
    """Hides every installed alternative browser. Missing ones are skipped."""

    name = "content_filtering.residual_browsers"

    async def _set_hidden(self, hidden: bool) -> int:
        changed = 0
        failed = []
        for package in RESIDUAL_BROWSERS:
            if not self._device.is_package_installed(package):
                continue
            try:
                if self._device.set_application_hidden(package, hidden):
                    changed += 1
                else:
                    failed.append(package)
            except Exception as e:
                logger.warning(f"Could not change visibility of {package}: {e}")
                failed.append(package)

        if failed:
            raise LayerFailureError(self.name, f"Browser blocking failed: {', '.join(failed)}")
        return changed

    async def apply(self, policy: CommitmentPolicy) -> None:
        self._require_authority()
        blocked = await self._set_hidden(True)
        logger.info(f"Browser blocking: {blocked} blocked")

    async def remove(self, policy: CommitmentPolicy) -> None:
        await self._set_hidden(False)


def build_default_layers(
    device: IDevicePolicyManager,
    settings: Optional[Settings] = None,
) -> list[IRestrictionLayer]:
    """The activation sequence, in the order it must run."""
    settings = settings or get_settings()
    return [
        UninstallBlockLayer(device, settings.app_package_name),
        AppHideLayer(device),
        AppSuspendLayer(device),
        AutoTimeLayer(device),
        DnsFilterLayer(device, settings.dns_filter_host),
        ManagedBrowserLayer(device, settings.managed_browser_package),
        ResidualBrowserLayer(device),
    ]
