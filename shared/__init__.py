"""
Shared infrastructure for the fortress core.

This package contains cross-cutting concerns used by multiple modules:
- config: Centralized settings management
- database: Supabase client factory
- repository: Base class for Supabase repositories
- local_store: JSON document store for on-device state
- clock: Epoch-millisecond helpers
- exceptions: Base exception classes

Note: Business logic should NOT go here. This is for infrastructure only.
"""

from .config import Settings, get_settings
from .clock import Clock, now_millis, to_datetime, to_millis
from .exceptions import (
    FortressError,
    NotFoundError,
    ValidationError,
    AuthenticationError,
    AuthorizationError,
    StorageError,
    ExternalServiceError,
)
from .local_store import JsonDocumentStore

__all__ = [
    "Settings",
    "get_settings",
    "Clock",
    "now_millis",
    "to_datetime",
    "to_millis",
    "FortressError",
    "NotFoundError",
    "ValidationError",
    "AuthenticationError",
    "AuthorizationError",
    "StorageError",
    "ExternalServiceError",
    "JsonDocumentStore",
]
