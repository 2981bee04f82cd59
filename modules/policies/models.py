"""
Policies module data models.

A CommitmentPolicy is the single source of truth for a device's lock
state. Time values are epoch milliseconds; every derived value (remaining
time, progress, unlock eligibility) is recomputed on demand from the
stored timestamps and an explicit ``now``.
"""

from enum import Enum
from typing import Optional
import uuid

from pydantic import BaseModel, Field, model_validator

from shared.clock import (
    MILLIS_PER_DAY,
    MILLIS_PER_HOUR,
    MILLIS_PER_MINUTE,
    MILLIS_PER_SECOND,
    now_millis,
)


class CommitmentPlan(str, Enum):
    """Fixed catalog of commitment lengths."""

    TRIAL_3 = "TRIAL_3"
    MONTHLY = "MONTHLY"
    QUARTERLY = "QUARTERLY"
    BIANNUAL = "BIANNUAL"
    ANNUAL = "ANNUAL"

    @property
    def days(self) -> int:
        return _PLAN_CATALOG[self].days

    @property
    def display_name(self) -> str:
        return _PLAN_CATALOG[self].display_name

    @property
    def description(self) -> str:
        return _PLAN_CATALOG[self].description

    @property
    def price_cents(self) -> int:
        return _PLAN_CATALOG[self].price_cents

    @property
    def is_free(self) -> bool:
        return self.price_cents == 0

    @property
    def price_display(self) -> str:
        if self.is_free:
            return "FREE"
        return f"${self.price_cents / 100:.2f}"

    @property
    def duration_millis(self) -> int:
        return self.days * MILLIS_PER_DAY

    @classmethod
    def from_days(cls, days: int) -> Optional["CommitmentPlan"]:
        """Find the plan with exactly ``days`` days, if any."""
        for plan in cls:
            if plan.days == days:
                return plan
        return None

    @classmethod
    def from_name(cls, name: str) -> Optional["CommitmentPlan"]:
        """Look a plan up by its stored name. Empty or unknown names give None."""
        try:
            return cls(name.strip().upper())
        except ValueError:
            return None


class PlanDetails(BaseModel):
    """Catalog entry behind a CommitmentPlan."""

    days: int = Field(..., gt=0)
    display_name: str
    description: str
    price_cents: int = Field(..., ge=0, description="0 means free")

    model_config = {"frozen": True}


_PLAN_CATALOG: dict[CommitmentPlan, PlanDetails] = {
    CommitmentPlan.TRIAL_3: PlanDetails(
        days=3,
        display_name="3-Day Free Trial",
        description="Try Taqwa Fortress completely free",
        price_cents=0,
    ),
    CommitmentPlan.MONTHLY: PlanDetails(
        days=30,
        display_name="1 Month",
        description="Monthly protection plan",
        price_cents=390,
    ),
    CommitmentPlan.QUARTERLY: PlanDetails(
        days=90,
        display_name="3 Months",
        description="Quarterly protection plan",
        price_cents=990,
    ),
    CommitmentPlan.BIANNUAL: PlanDetails(
        days=180,
        display_name="6 Months",
        description="Semi-annual protection plan",
        price_cents=1590,
    ),
    CommitmentPlan.ANNUAL: PlanDetails(
        days=365,
        display_name="1 Year",
        description="Full year protection plan",
        price_cents=2490,
    ),
}


class ActivationMethod(str, Enum):
    """How device-owner authority was obtained."""

    KNOX = "KNOX"
    WIRELESS_ADB = "WIRELESS_ADB"
    DESKTOP_ADB = "DESKTOP_ADB"

    @property
    def display_name(self) -> str:
        return {
            ActivationMethod.KNOX: "Samsung Knox",
            ActivationMethod.WIRELESS_ADB: "Wireless ADB",
            ActivationMethod.DESKTOP_ADB: "Desktop ADB (Legacy)",
        }[self]

    @property
    def requires_laptop(self) -> bool:
        return self is ActivationMethod.DESKTOP_ADB

    @property
    def setup_instructions(self) -> str:
        return {
            ActivationMethod.KNOX: "Tap 'Activate' and accept the system prompt",
            ActivationMethod.WIRELESS_ADB: "Enter the pairing code shown on your screen",
            ActivationMethod.DESKTOP_ADB: "Connect your phone to laptop via USB",
        }[self]


class FortressState(str, Enum):
    """Lifecycle state of a fortress policy."""

    INACTIVE = "INACTIVE"      # display only, never persisted
    ACTIVATING = "ACTIVATING"
    ACTIVE = "ACTIVE"
    UNLOCKABLE = "UNLOCKABLE"
    SUSPENDED = "SUSPENDED"    # display only, never persisted

    def is_locked(self) -> bool:
        return self in (FortressState.ACTIVATING, FortressState.ACTIVE)

    def can_unlock(self) -> bool:
        return self is FortressState.UNLOCKABLE

    def can_start_new_period(self) -> bool:
        return self in (FortressState.INACTIVE, FortressState.UNLOCKABLE)

    @property
    def display_message(self) -> str:
        return {
            FortressState.INACTIVE: "Fortress not activated",
            FortressState.ACTIVATING: "Activating fortress...",
            FortressState.ACTIVE: "Fortress is active and protecting you",
            FortressState.UNLOCKABLE: "Period complete! You can now unlock",
            FortressState.SUSPENDED: "Fortress temporarily suspended",
        }[self]


class RemainingTime(BaseModel):
    """Remaining commitment time split into display units."""

    days: int = 0
    hours: int = 0
    minutes: int = 0
    seconds: int = 0

    @classmethod
    def from_millis(cls, millis: int) -> "RemainingTime":
        millis = max(0, millis)
        return cls(
            days=millis // MILLIS_PER_DAY,
            hours=(millis // MILLIS_PER_HOUR) % 24,
            minutes=(millis // MILLIS_PER_MINUTE) % 60,
            seconds=(millis // MILLIS_PER_SECOND) % 60,
        )

    @property
    def is_zero(self) -> bool:
        return not (self.days or self.hours or self.minutes or self.seconds)


class CommitmentPolicy(BaseModel):
    """
    The lock state of one device for one commitment period.

    The four protection flags are written only when the restriction layer
    that owns them reports success. ``state`` is the only field the
    orchestrators mutate after persistence.
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    plan: CommitmentPlan
    activation_timestamp: int = Field(..., ge=0, description="Epoch millis")
    expiry_timestamp: int = Field(..., description="Epoch millis")
    activation_method: ActivationMethod
    is_device_owner_active: bool = True
    blocked_apps: frozenset[str] = Field(default_factory=frozenset)

    dns_forced: bool = False
    safe_mode_disabled: bool = False
    factory_reset_blocked: bool = False
    time_protection_active: bool = False

    state: FortressState = FortressState.ACTIVATING

    @model_validator(mode="after")
    def _check_expiry(self) -> "CommitmentPolicy":
        if self.expiry_timestamp <= self.activation_timestamp:
            raise ValueError("expiry_timestamp must be after activation_timestamp")
        return self

    @classmethod
    def create(
        cls,
        plan: CommitmentPlan,
        activation_method: ActivationMethod,
        blocked_apps: frozenset[str] | set[str],
        activation_timestamp: Optional[int] = None,
    ) -> "CommitmentPolicy":
        """Build a fresh, not yet persisted policy in the ACTIVATING state."""
        start = now_millis() if activation_timestamp is None else activation_timestamp
        return cls(
            plan=plan,
            activation_timestamp=start,
            expiry_timestamp=start + plan.duration_millis,
            activation_method=activation_method,
            blocked_apps=frozenset(blocked_apps),
            state=FortressState.ACTIVATING,
        )

    # ------------------------------------------------------------------
    # Time helpers
    # ------------------------------------------------------------------

    def remaining_millis(self, now: Optional[int] = None) -> int:
        now = now_millis() if now is None else now
        return max(0, self.expiry_timestamp - now)

    def remaining_time(self, now: Optional[int] = None) -> RemainingTime:
        return RemainingTime.from_millis(self.remaining_millis(now))

    def remaining_days(self, now: Optional[int] = None) -> int:
        return self.remaining_millis(now) // MILLIS_PER_DAY

    def remaining_hours(self, now: Optional[int] = None) -> int:
        return self.remaining_millis(now) // MILLIS_PER_HOUR

    def progress_percentage(self, now: Optional[int] = None) -> float:
        """Elapsed share of the commitment, clamped to [0, 100]."""
        now = now_millis() if now is None else now
        total = self.expiry_timestamp - self.activation_timestamp
        elapsed = now - self.activation_timestamp
        return min(100.0, max(0.0, elapsed / total * 100))

    def is_unlock_eligible(self, now: Optional[int] = None) -> bool:
        now = now_millis() if now is None else now
        return now >= self.expiry_timestamp

    def is_expired(self, now: Optional[int] = None) -> bool:
        return self.is_unlock_eligible(now)

    def is_historical(self, now: Optional[int] = None) -> bool:
        return self.state is FortressState.UNLOCKABLE or self.is_expired(now)

    # ------------------------------------------------------------------
    # Protection summary
    # ------------------------------------------------------------------

    def _protection_flags(self) -> tuple[bool, ...]:
        return (
            self.is_device_owner_active,
            self.dns_forced,
            self.safe_mode_disabled,
            self.factory_reset_blocked,
            self.time_protection_active,
        )

    def is_fully_protected(self) -> bool:
        return all(self._protection_flags())

    def protection_score(self) -> int:
        """0-100, twenty points per active protection."""
        return 20 * sum(self._protection_flags())
