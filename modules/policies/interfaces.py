"""
Policies module interface.

The orchestrators depend on IPolicyStore, never on a concrete store, so
tests can inject a fresh store per test.
"""

from typing import Protocol, Optional, runtime_checkable

from .models import CommitmentPolicy


@runtime_checkable
class IPolicyStore(Protocol):
    """
    Durable storage for the device's fortress policies.

    Holds every policy ever persisted plus a single "active policy"
    pointer. Implementations must give a single caller read-your-writes
    consistency.
    """

    async def get_active(self) -> Optional[CommitmentPolicy]:
        """
        Get the policy under the active-policy pointer.

        Returns:
            The active policy, or None when no pointer is set
        """
        ...

    async def set_active(self, policy: CommitmentPolicy) -> None:
        """
        Persist a policy and point the active-policy pointer at it.

        Raises:
            PolicyStorageError: If the store cannot be written
        """
        ...

    async def clear_active(self) -> None:
        """
        Remove the active-policy pointer.

        Policy history is kept; only the pointer goes away.
        """
        ...

    async def update(self, policy: CommitmentPolicy) -> None:
        """
        Overwrite a previously persisted policy.

        Once the stored policy is historical only its state may change.

        Raises:
            PolicyNotFoundError: If the policy was never persisted
            InvalidPolicyError: If a historical policy would change more
                than its state
        """
        ...

    async def list_historical(self) -> list[CommitmentPolicy]:
        """
        Get policies that are UNLOCKABLE or past their expiry.

        Returns:
            Historical policies, most recent activation first
        """
        ...
