"""
Routing module.

Chooses the next screen from the signed-in identity, the remote account
record and the local device ID.

Public API:
- resolve: The pure routing table
- RouteResolver: Account-loading wrapper around resolve
- RouteVerdict and its variants
"""

from .models import (
    RouteVerdict,
    Welcome,
    UnauthorizedDevice,
    CommitmentSelection,
    ExpiredDashboard,
    SubscriptionExpired,
    DeviceOwnerSetup,
    Dashboard,
)
from .service import RouteResolver, resolve

__all__ = [
    "resolve",
    "RouteResolver",
    "RouteVerdict",
    "Welcome",
    "UnauthorizedDevice",
    "CommitmentSelection",
    "ExpiredDashboard",
    "SubscriptionExpired",
    "DeviceOwnerSetup",
    "Dashboard",
]
