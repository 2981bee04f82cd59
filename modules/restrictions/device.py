"""
Device policy manager stub and the device-owner authority.

InMemoryDevicePolicyManager keeps the whole device policy state in memory.
It backs dry runs and tests; on a device it is replaced by a platform
binding implementing IDevicePolicyManager.
"""

import logging
from typing import Any, Iterable, Optional

from .catalog import PRIVATE_DNS_MODE_HOSTNAME, PRIVATE_DNS_MODE_OPPORTUNISTIC
from .exceptions import DevicePolicyError
from .interfaces import IDeviceAuthority, IDevicePolicyManager

logger = logging.getLogger(__name__)


class InMemoryDevicePolicyManager(IDevicePolicyManager):
    """
    Stub implementation of the device policy manager.

    ``fail_on`` names operations that should be rejected, which lets a
    caller simulate a platform refusing one specific call. Every call is
    appended to ``calls`` as ``"<operation>:<argument>"``.
    """

    def __init__(
        self,
        installed_packages: Optional[Iterable[str]] = None,
        device_owner: bool = True,
        fail_on: Optional[Iterable[str]] = None,
    ):
        self.installed: set[str] = set(installed_packages or ())
        self.device_owner = device_owner
        self.fail_on: set[str] = set(fail_on or ())
        self.calls: list[str] = []

        self.uninstall_blocked: set[str] = set()
        self.hidden: set[str] = set()
        self.suspended: set[str] = set()
        self.auto_time_required = False
        self.private_dns_mode = PRIVATE_DNS_MODE_OPPORTUNISTIC
        self.private_dns_host: Optional[str] = None
        self.user_restrictions: set[str] = set()
        self.app_restrictions: dict[str, dict[str, Any]] = {}
        self.content_filter_running = False

    def _record(self, operation: str, argument: Any = "") -> None:
        self.calls.append(f"{operation}:{argument}")
        if operation in self.fail_on:
            raise DevicePolicyError(operation, "rejected by platform")

    def is_device_owner(self) -> bool:
        return self.device_owner

    def clear_device_owner(self) -> None:
        self._record("clear_device_owner")
        self.device_owner = False

    def is_package_installed(self, package_name: str) -> bool:
        return package_name in self.installed

    def set_uninstall_blocked(self, package_name: str, blocked: bool) -> None:
        self._record("set_uninstall_blocked", package_name)
        if blocked:
            self.uninstall_blocked.add(package_name)
        else:
            self.uninstall_blocked.discard(package_name)

    def set_application_hidden(self, package_name: str, hidden: bool) -> bool:
        self._record("set_application_hidden", package_name)
        if hidden:
            self.hidden.add(package_name)
        else:
            self.hidden.discard(package_name)
        return True

    def is_application_hidden(self, package_name: str) -> bool:
        return package_name in self.hidden

    def set_packages_suspended(self, package_names: list[str], suspended: bool) -> list[str]:
        self._record("set_packages_suspended", ",".join(package_names))
        if suspended:
            self.suspended.update(package_names)
        else:
            self.suspended.difference_update(package_names)
        return []

    def is_package_suspended(self, package_name: str) -> bool:
        return package_name in self.suspended

    def set_auto_time_required(self, required: bool) -> None:
        self._record("set_auto_time_required", required)
        self.auto_time_required = required

    def set_private_dns_host(self, host: str) -> None:
        self._record("set_private_dns_host", host)
        self.private_dns_mode = PRIVATE_DNS_MODE_HOSTNAME
        self.private_dns_host = host

    def set_private_dns_mode(self, mode: str) -> None:
        self._record("set_private_dns_mode", mode)
        self.private_dns_mode = mode
        if mode != PRIVATE_DNS_MODE_HOSTNAME:
            self.private_dns_host = None

    def get_private_dns_host(self) -> Optional[str]:
        return self.private_dns_host

    def add_user_restriction(self, key: str) -> None:
        self._record("add_user_restriction", key)
        self.user_restrictions.add(key)

    def clear_user_restriction(self, key: str) -> None:
        self._record("clear_user_restriction", key)
        self.user_restrictions.discard(key)

    def set_application_restrictions(self, package_name: str, restrictions: dict[str, Any]) -> None:
        self._record("set_application_restrictions", package_name)
        if restrictions:
            self.app_restrictions[package_name] = dict(restrictions)
        else:
            self.app_restrictions.pop(package_name, None)

    def get_application_restrictions(self, package_name: str) -> dict[str, Any]:
        return dict(self.app_restrictions.get(package_name, {}))

    def stop_content_filter_service(self) -> None:
        self._record("stop_content_filter_service")
        self.content_filter_running = False


class DeviceOwnerAuthority(IDeviceAuthority):
    """Device-owner authority backed by a device policy manager."""

    def __init__(self, device: IDevicePolicyManager):
        self._device = device

    async def is_held(self) -> bool:
        return self._device.is_device_owner()

    async def release(self) -> None:
        self._device.clear_device_owner()
        logger.info("Device owner authority released")


# Module-level instance getter
_device_instance: Optional[IDevicePolicyManager] = None


def get_device_policy_manager() -> IDevicePolicyManager:
    """
    Get the device policy manager.

    Falls back to the in-memory stub until a platform binding is
    registered with set_device_policy_manager().
    """
    global _device_instance
    if _device_instance is None:
        logger.warning("No platform device policy manager registered, using in-memory stub")
        _device_instance = InMemoryDevicePolicyManager()
    return _device_instance


def set_device_policy_manager(device: IDevicePolicyManager) -> None:
    """Register the platform device policy manager."""
    global _device_instance
    _device_instance = device


def reset_device_policy_manager() -> None:
    """Reset the device policy manager (for testing)."""
    global _device_instance
    _device_instance = None
