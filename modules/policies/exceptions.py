"""
Policies module exceptions.
"""

from shared.exceptions import FortressError, NotFoundError, StorageError, ValidationError


class PolicyError(FortressError):
    """Base exception for policy-related errors."""

    pass


class PolicyNotFoundError(NotFoundError):
    """Raised when updating a policy the store has never seen."""

    def __init__(self, policy_id: str):
        super().__init__(
            f"Fortress policy not found: {policy_id}",
            code="POLICY_NOT_FOUND",
            details={"policy_id": policy_id},
        )


class PolicyStorageError(StorageError):
    """Raised when the local policy store cannot be read or written."""

    def __init__(self, message: str):
        super().__init__(message, store="policies")


class InvalidPolicyError(ValidationError):
    """Raised when a policy cannot take the requested role."""

    def __init__(self, policy_id: str, reason: str):
        super().__init__(
            f"Invalid fortress policy {policy_id}: {reason}",
            code="INVALID_POLICY",
            details={"policy_id": policy_id, "reason": reason},
        )
