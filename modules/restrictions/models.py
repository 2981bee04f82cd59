"""
Restrictions module data models.
"""

from typing import Optional
import uuid

from pydantic import BaseModel, Field

from shared.clock import now_millis

from .catalog import friendly_name, is_nuclear


class BlockedApp(BaseModel):
    """
    An app recorded as blocked on this device.

    Pre-blocked entries are added before the app is installed and take
    effect once it shows up.
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    package_name: str
    app_name: str = ""
    is_system_app: bool = False
    is_suspended: bool = True
    block_reason: str = ""
    detected_date: int = Field(default_factory=now_millis, description="Epoch millis")
    is_installed: bool = True
    is_pre_blocked: bool = False

    @classmethod
    def for_package(
        cls,
        package_name: str,
        reason: str = "",
        is_installed: bool = True,
        app_name: Optional[str] = None,
    ) -> "BlockedApp":
        return cls(
            package_name=package_name,
            app_name=app_name or friendly_name(package_name),
            block_reason=reason,
            is_installed=is_installed,
            is_pre_blocked=not is_installed,
        )

    def can_be_uninstalled(self) -> bool:
        return not self.is_system_app

    def is_blacklisted(self) -> bool:
        return is_nuclear(self.package_name)

    def should_be_hidden(self) -> bool:
        return self.is_blacklisted() and self.is_installed

    def should_be_suspended(self) -> bool:
        return not self.is_blacklisted() and self.is_suspended and self.is_installed

    def is_pending_block(self) -> bool:
        return self.is_pre_blocked and not self.is_installed


class ContentFilterStatus(BaseModel):
    """Live state of the three content-filtering sub-layers."""

    dns_filter_active: bool = False
    managed_browser_active: bool = False
    browsers_blocked: int = 0
    device_owner_active: bool = False

    @property
    def score(self) -> int:
        """0-100, 25 points per active protection."""
        return 25 * sum(
            (
                self.dns_filter_active,
                self.managed_browser_active,
                self.browsers_blocked > 0,
                self.device_owner_active,
            )
        )
