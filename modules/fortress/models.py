"""
Fortress module data models.

Operation outcomes are returned as values, never raised. Each result
family is a Union of small models discriminated by ``kind``.
"""

from typing import Literal, Union

from pydantic import BaseModel, Field

from modules.policies.models import CommitmentPolicy


# =============================================================================
# Activation
# =============================================================================


class ActivationSuccess(BaseModel):
    """All layers applied; ``policy`` is now the device's active policy."""

    kind: Literal["success"] = "success"
    policy: CommitmentPolicy


class DeviceOwnerNotActive(BaseModel):
    """Restriction authority isn't held. The caller re-routes to setup."""

    kind: Literal["device_owner_not_active"] = "device_owner_not_active"


class AlreadyActive(BaseModel):
    """An active policy exists. No layer was attempted."""

    kind: Literal["already_active"] = "already_active"


class RestrictionsFailed(BaseModel):
    """
    At least one layer failed and nothing was persisted.

    ``errors`` maps each failed layer name to its failure message.
    ``rollback_errors`` lists layers whose undo also failed.
    """

    kind: Literal["restrictions_failed"] = "restrictions_failed"
    errors: dict[str, str]
    rollback_errors: dict[str, str] = Field(default_factory=dict)


ActivationResult = Union[ActivationSuccess, DeviceOwnerNotActive, AlreadyActive, RestrictionsFailed]


# =============================================================================
# Clear (full teardown)
# =============================================================================


class ClearSuccess(BaseModel):
    kind: Literal["success"] = "success"


class PartialSuccess(BaseModel):
    """
    Teardown ran to the end but some steps failed.

    Callers still treat the device as unlocked.
    """

    kind: Literal["partial_success"] = "partial_success"
    errors: dict[str, str]


ClearResult = Union[ClearSuccess, PartialSuccess]


# =============================================================================
# Deactivation (mark as unlockable)
# =============================================================================


class DeactivationSuccess(BaseModel):
    kind: Literal["success"] = "success"


class NoActivePolicy(BaseModel):
    kind: Literal["no_active_policy"] = "no_active_policy"


class PeriodNotExpired(BaseModel):
    kind: Literal["period_not_expired"] = "period_not_expired"
    remaining_days: int


DeactivationResult = Union[DeactivationSuccess, NoActivePolicy, PeriodNotExpired]


# =============================================================================
# Status
# =============================================================================


class FortressInactive(BaseModel):
    kind: Literal["inactive"] = "inactive"


class FortressActive(BaseModel):
    """Snapshot of the running commitment."""

    kind: Literal["active"] = "active"
    policy: CommitmentPolicy
    remaining_days: int
    progress_percentage: float
    protection_score: int


FortressStatus = Union[FortressInactive, FortressActive]
