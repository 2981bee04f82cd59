"""
Fortress module.

The commitment lifecycle: activation, unlock eligibility and teardown.

Public API:
- IFortressService: Interface for the lifecycle operations
- ActivationOrchestrator, DeactivationOrchestrator: The two orchestrators
- Result models: ActivationResult, ClearResult, DeactivationResult, FortressStatus
"""

from .interfaces import IFortressService
from .activation import ActivationOrchestrator
from .deactivation import DeactivationOrchestrator, TeardownStep
from .models import (
    ActivationResult,
    ActivationSuccess,
    DeviceOwnerNotActive,
    AlreadyActive,
    RestrictionsFailed,
    ClearResult,
    ClearSuccess,
    PartialSuccess,
    DeactivationResult,
    DeactivationSuccess,
    NoActivePolicy,
    PeriodNotExpired,
    FortressStatus,
    FortressInactive,
    FortressActive,
)

__all__ = [
    # Interface
    "IFortressService",
    # Orchestrators
    "ActivationOrchestrator",
    "DeactivationOrchestrator",
    "TeardownStep",
    # Activation results
    "ActivationResult",
    "ActivationSuccess",
    "DeviceOwnerNotActive",
    "AlreadyActive",
    "RestrictionsFailed",
    # Clear results
    "ClearResult",
    "ClearSuccess",
    "PartialSuccess",
    # Deactivation results
    "DeactivationResult",
    "DeactivationSuccess",
    "NoActivePolicy",
    "PeriodNotExpired",
    # Status
    "FortressStatus",
    "FortressInactive",
    "FortressActive",
]
