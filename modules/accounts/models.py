"""
Accounts module data models.

UserAccount is the remote identity record. Its commitment dates mirror
the device's local CommitmentPolicy but live in a different store, so the
two can drift; routing trusts this record.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator


# Device ids that mean "not bound to a device yet".
PLACEHOLDER_DEVICE_IDS = frozenset({"", "deviceid", "unknown_device"})


def is_placeholder_device_id(device_id: Optional[str]) -> bool:
    return device_id is None or device_id.strip() in PLACEHOLDER_DEVICE_IDS


class SubscriptionStatus(str, Enum):
    """Subscription lifecycle of an account."""

    PENDING = "PENDING"      # Registered, no plan selected
    TRIAL = "TRIAL"          # On the free trial plan
    ACTIVE = "ACTIVE"        # Paid plan running
    EXPIRED = "EXPIRED"      # Paid plan lapsed
    CANCELLED = "CANCELLED"  # Cancelled by the user

    def is_valid(self) -> bool:
        return self in (SubscriptionStatus.TRIAL, SubscriptionStatus.ACTIVE)

    def can_activate_fortress(self) -> bool:
        return self.is_valid()

    def requires_payment(self) -> bool:
        return self in (
            SubscriptionStatus.PENDING,
            SubscriptionStatus.EXPIRED,
            SubscriptionStatus.CANCELLED,
        )

    @property
    def display_name(self) -> str:
        return {
            SubscriptionStatus.PENDING: "Payment Pending",
            SubscriptionStatus.TRIAL: "Free Trial",
            SubscriptionStatus.ACTIVE: "Active",
            SubscriptionStatus.EXPIRED: "Expired",
            SubscriptionStatus.CANCELLED: "Cancelled",
        }[self]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserAccount(BaseModel):
    """
    Remote account record bound to exactly one physical device.

    ``commitment_end_date`` set means a commitment is scheduled; it then
    requires a start date strictly before it.
    """

    id: str = Field(..., description="Stable identity ID")
    email: str = Field(..., description="Account email")
    device_id: str = Field(default="", description="Bound device ID")
    subscription_status: SubscriptionStatus = SubscriptionStatus.PENDING
    has_device_owner: bool = False
    selected_plan: str = ""
    commitment_days: int = Field(default=0, ge=0)
    commitment_start_date: Optional[datetime] = None
    commitment_end_date: Optional[datetime] = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @field_validator(
        "commitment_start_date", "commitment_end_date", "created_at", "updated_at"
    )
    @classmethod
    def _assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @model_validator(mode="after")
    def _check_commitment_window(self) -> "UserAccount":
        if self.commitment_end_date is not None:
            if self.commitment_start_date is None:
                raise ValueError("commitment_end_date requires commitment_start_date")
            if self.commitment_end_date <= self.commitment_start_date:
                raise ValueError("commitment_end_date must be after commitment_start_date")
        return self

    def has_active_subscription(self) -> bool:
        return self.subscription_status.is_valid()

    def is_subscription_expired(self) -> bool:
        return self.subscription_status in (
            SubscriptionStatus.EXPIRED,
            SubscriptionStatus.CANCELLED,
        )

    def is_on_trial(self) -> bool:
        return self.subscription_status is SubscriptionStatus.TRIAL

    def is_in_commitment_period(self, now: Optional[datetime] = None) -> bool:
        if self.commitment_end_date is None:
            return False
        return (now or _utcnow()) < self.commitment_end_date

    def remaining_commitment_days(self, now: Optional[datetime] = None) -> int:
        if self.commitment_end_date is None:
            return 0
        remaining = self.commitment_end_date - (now or _utcnow())
        return max(0, remaining.days)

    def commitment_progress_percentage(self, now: Optional[datetime] = None) -> float:
        if self.commitment_days == 0:
            return 0.0
        completed = self.commitment_days - self.remaining_commitment_days(now)
        return completed / self.commitment_days * 100

    def is_reset(self) -> bool:
        """True when the record already has the post-clear shape."""
        return (
            not self.has_device_owner
            and self.subscription_status is SubscriptionStatus.PENDING
            and self.selected_plan == ""
            and self.commitment_days == 0
            and self.commitment_start_date is None
            and self.commitment_end_date is None
        )
