"""
Accounts module exceptions.
"""

from shared.exceptions import FortressError, NotFoundError, StorageError, ValidationError


class AccountError(FortressError):
    """Base exception for account-related errors."""

    pass


class AccountNotFoundError(NotFoundError):
    """Raised when an account record doesn't exist."""

    def __init__(self, account_id: str):
        super().__init__(
            f"Account not found: {account_id}",
            code="ACCOUNT_NOT_FOUND",
            details={"account_id": account_id},
        )


class AccountStorageError(StorageError):
    """Raised when the remote account store is unavailable."""

    def __init__(self, message: str):
        super().__init__(message, store="accounts")


class InvalidAccountError(ValidationError):
    """Raised when an account write would break the record's invariants."""

    def __init__(self, account_id: str, reason: str):
        super().__init__(
            f"Invalid account {account_id}: {reason}",
            code="INVALID_ACCOUNT",
            details={"account_id": account_id, "reason": reason},
        )
