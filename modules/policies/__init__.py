"""
Policies module.

Owns the commitment data model: the plan catalog, the fortress policy
and its derived time values, and the policy store.

Public API:
- IPolicyStore: Interface for policy persistence
- CommitmentPlan, ActivationMethod, FortressState: Enumerations
- CommitmentPolicy: The device's lock state
- RemainingTime: Countdown split into units
- Policy exceptions: PolicyNotFoundError, PolicyStorageError,
  InvalidPolicyError
"""

from .interfaces import IPolicyStore
from .models import (
    CommitmentPlan,
    ActivationMethod,
    FortressState,
    CommitmentPolicy,
    RemainingTime,
)
from .exceptions import (
    PolicyError,
    PolicyNotFoundError,
    PolicyStorageError,
    InvalidPolicyError,
)

__all__ = [
    # Interface
    "IPolicyStore",
    # Models
    "CommitmentPlan",
    "ActivationMethod",
    "FortressState",
    "CommitmentPolicy",
    "RemainingTime",
    # Exceptions
    "PolicyError",
    "PolicyNotFoundError",
    "PolicyStorageError",
    "InvalidPolicyError",
]
