"""
Routing module data models.

A RouteVerdict names the screen the user should see next. Verdicts are
plain values; the UI layer maps each ``kind`` to a destination.
"""

from typing import Literal, Union

from pydantic import BaseModel


class Welcome(BaseModel):
    """Not signed in, or no account record could be loaded."""

    kind: Literal["welcome"] = "welcome"

    model_config = {"frozen": True}


class UnauthorizedDevice(BaseModel):
    """The account is bound to a different physical device."""

    kind: Literal["unauthorized_device"] = "unauthorized_device"
    current_device_id: str
    registered_device_id: str

    model_config = {"frozen": True}


class CommitmentSelection(BaseModel):
    """The user needs to pick a plan."""

    kind: Literal["commitment_selection"] = "commitment_selection"

    model_config = {"frozen": True}


class ExpiredDashboard(BaseModel):
    """The commitment just ended; the dashboard runs the teardown."""

    kind: Literal["expired_dashboard"] = "expired_dashboard"

    model_config = {"frozen": True}


class SubscriptionExpired(BaseModel):
    """Subscription lapsed or was cancelled."""

    kind: Literal["subscription_expired"] = "subscription_expired"

    model_config = {"frozen": True}


class DeviceOwnerSetup(BaseModel):
    """Plan selected but this device doesn't hold restriction authority yet."""

    kind: Literal["device_owner_setup"] = "device_owner_setup"

    model_config = {"frozen": True}


class Dashboard(BaseModel):
    """Commitment running; show the locked dashboard."""

    kind: Literal["dashboard"] = "dashboard"

    model_config = {"frozen": True}


RouteVerdict = Union[
    Welcome,
    UnauthorizedDevice,
    CommitmentSelection,
    ExpiredDashboard,
    SubscriptionExpired,
    DeviceOwnerSetup,
    Dashboard,
]
