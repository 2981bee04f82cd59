"""
Restrictions module.

The restriction layers the fortress applies, the device authority they
depend on, the package catalog and the local blocked-app state.

Public API:
- IRestrictionLayer, IDeviceAuthority, IDevicePolicyManager: Interfaces
- IBlockedAppStore, IUserBlockList: Local block list interfaces
- BlockedApp, ContentFilterStatus: Models
- Restriction exceptions: AuthorityMissingError, LayerFailureError, DevicePolicyError
"""

from .interfaces import (
    IRestrictionLayer,
    IDeviceAuthority,
    IDevicePolicyManager,
    IBlockedAppStore,
    IUserBlockList,
)
from .models import BlockedApp, ContentFilterStatus
from .exceptions import (
    RestrictionError,
    AuthorityMissingError,
    LayerFailureError,
    DevicePolicyError,
    BlockListStorageError,
)

__all__ = [
    # Interfaces
    "IRestrictionLayer",
    "IDeviceAuthority",
    "IDevicePolicyManager",
    "IBlockedAppStore",
    "IUserBlockList",
    # Models
    "BlockedApp",
    "ContentFilterStatus",
    # Exceptions
    "RestrictionError",
    "AuthorityMissingError",
    "LayerFailureError",
    "DevicePolicyError",
    "BlockListStorageError",
]
