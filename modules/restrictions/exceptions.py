"""
Restrictions module exceptions.
"""

from typing import Optional

from shared.exceptions import AuthorizationError, FortressError, StorageError


class RestrictionError(FortressError):
    """Base exception for restriction-related errors."""

    pass


class AuthorityMissingError(AuthorizationError):
    """Raised when a restriction call needs device-owner authority the app doesn't hold."""

    def __init__(self, operation: Optional[str] = None):
        message = "Device owner authority is not held"
        if operation:
            message = f"{message} ({operation})"
        super().__init__(
            message,
            code="AUTHORITY_MISSING",
            details={"operation": operation} if operation else {},
        )


class LayerFailureError(RestrictionError):
    """Raised when one restriction layer fails to apply or remove."""

    def __init__(self, layer: str, cause: str):
        super().__init__(
            f"{layer}: {cause}",
            code="LAYER_FAILURE",
            details={"layer": layer, "cause": cause},
        )
        self.layer = layer
        self.cause = cause


class DevicePolicyError(RestrictionError):
    """Raised by a device policy manager when the platform rejects a call."""

    def __init__(self, operation: str, message: str):
        super().__init__(
            f"{operation} failed: {message}",
            code="DEVICE_POLICY_ERROR",
            details={"operation": operation},
        )
        self.operation = operation


class BlockListStorageError(StorageError):
    """Raised when a local blocked-app store cannot be read or written."""

    def __init__(self, message: str, store: str = "blocked_apps"):
        super().__init__(message, store=store)
