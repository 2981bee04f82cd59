"""
Accounts module.

Owns the remote account record: its model, the account store and the
cached account service used by routing and teardown.

Public API:
- IAccountStore, IAccountService: Interfaces
- UserAccount, SubscriptionStatus: Models
- is_placeholder_device_id: Device binding helper
- Account exceptions: AccountNotFoundError, AccountStorageError, InvalidAccountError
"""

from .interfaces import IAccountStore, IAccountService
from .models import (
    PLACEHOLDER_DEVICE_IDS,
    SubscriptionStatus,
    UserAccount,
    is_placeholder_device_id,
)
from .exceptions import (
    AccountError,
    AccountNotFoundError,
    AccountStorageError,
    InvalidAccountError,
)

__all__ = [
    # Interfaces
    "IAccountStore",
    "IAccountService",
    # Models
    "PLACEHOLDER_DEVICE_IDS",
    "SubscriptionStatus",
    "UserAccount",
    "is_placeholder_device_id",
    # Exceptions
    "AccountError",
    "AccountNotFoundError",
    "AccountStorageError",
    "InvalidAccountError",
]
