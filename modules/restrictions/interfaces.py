"""
Restrictions module interfaces.

IDevicePolicyManager is the thin platform seam: every call maps to one
device-policy API. The restriction layers and the device authority are
built on top of it, and the orchestrators only see IRestrictionLayer and
IDeviceAuthority.
"""

from typing import Any, Optional, Protocol, runtime_checkable

from modules.policies.models import CommitmentPolicy

from .models import BlockedApp


@runtime_checkable
class IDevicePolicyManager(Protocol):
    """
    Platform device-policy calls.

    Methods raise DevicePolicyError (or any platform exception) when the
    platform rejects a call. None of them block for long.
    """

    def is_device_owner(self) -> bool:
        """Whether this application currently holds device-owner authority."""
        ...

    def clear_device_owner(self) -> None:
        """Give device-owner authority up."""
        ...

    def is_package_installed(self, package_name: str) -> bool:
        ...

    def set_uninstall_blocked(self, package_name: str, blocked: bool) -> None:
        ...

    def set_application_hidden(self, package_name: str, hidden: bool) -> bool:
        """
        Hide or unhide one application.

        Returns:
            True if the platform applied the change
        """
        ...

    def is_application_hidden(self, package_name: str) -> bool:
        ...

    def set_packages_suspended(self, package_names: list[str], suspended: bool) -> list[str]:
        """
        Suspend or unsuspend a batch of applications.

        Returns:
            The packages the platform could NOT change
        """
        ...

    def is_package_suspended(self, package_name: str) -> bool:
        ...

    def set_auto_time_required(self, required: bool) -> None:
        ...

    def set_private_dns_host(self, host: str) -> None:
        """Force the private DNS resolver to ``host``."""
        ...

    def set_private_dns_mode(self, mode: str) -> None:
        """Reset private DNS to a non-host mode such as "opportunistic"."""
        ...

    def get_private_dns_host(self) -> Optional[str]:
        ...

    def add_user_restriction(self, key: str) -> None:
        ...

    def clear_user_restriction(self, key: str) -> None:
        ...

    def set_application_restrictions(self, package_name: str, restrictions: dict[str, Any]) -> None:
        """Replace the managed configuration of an application. Empty removes it."""
        ...

    def get_application_restrictions(self, package_name: str) -> dict[str, Any]:
        ...

    def stop_content_filter_service(self) -> None:
        """Stop the background content-filtering process if it runs."""
        ...


@runtime_checkable
class IDeviceAuthority(Protocol):
    """Elevated restriction authority (device owner)."""

    async def is_held(self) -> bool:
        ...

    async def release(self) -> None:
        """
        Release the authority.

        Every other restriction call needs it, so teardown calls this last.
        """
        ...


@runtime_checkable
class IRestrictionLayer(Protocol):
    """
    One named protection with its inverse.

    ``apply`` and ``remove`` are idempotent: calling either when the
    protection is already in the target state is a no-op.
    """

    name: str
    # CommitmentPolicy flag set when apply() succeeds, if the layer owns one
    policy_flag: Optional[str]

    async def apply(self, policy: CommitmentPolicy) -> None:
        """
        Apply the protection for ``policy``.

        Raises:
            AuthorityMissingError: If device-owner authority is not held
            LayerFailureError: If the platform rejected the change
        """
        ...

    async def remove(self, policy: CommitmentPolicy) -> None:
        """
        Undo the protection.

        Raises:
            LayerFailureError: If the platform rejected the change
        """
        ...


@runtime_checkable
class IBlockedAppStore(Protocol):
    """Local record of apps blocked on this device, including pre-blocks."""

    async def list_all(self) -> list[BlockedApp]:
        ...

    async def add(self, app: BlockedApp) -> None:
        ...

    async def delete(self, app_id: str) -> None:
        ...

    async def clear(self) -> int:
        """Delete every entry. Returns how many were removed."""
        ...


@runtime_checkable
class IUserBlockList(Protocol):
    """Secondary list of packages the user blocked by hand."""

    async def get_blocked_packages(self) -> list[str]:
        ...

    async def add_blocked_package(self, package_name: str) -> None:
        ...

    async def remove_blocked_package(self, package_name: str) -> None:
        ...
