"""
Fortress module interface.

The dashboard and the CLI depend on IFortressService only.
"""

from typing import Optional, Protocol, runtime_checkable

from modules.policies.models import ActivationMethod, CommitmentPlan, CommitmentPolicy, RemainingTime

from .models import ActivationResult, ClearResult, DeactivationResult, FortressStatus


@runtime_checkable
class IFortressService(Protocol):
    """
    Interface for the fortress commitment lifecycle.

    Callers must not run activate() and clear_everything() concurrently;
    routing keeps a device in one lifecycle phase at a time.
    """

    async def activate(self, plan: CommitmentPlan, method: ActivationMethod) -> ActivationResult:
        """
        Lock the device for ``plan``.

        Args:
            plan: Chosen commitment plan
            method: How device-owner authority was obtained

        Returns:
            ActivationSuccess with the persisted policy, or the reason
            nothing was persisted
        """
        ...

    async def clear_everything(self, account_id: Optional[str] = None) -> ClearResult:
        """
        Tear down every restriction and reset local and remote state.

        Args:
            account_id: Account whose remote record is reset

        Returns:
            ClearSuccess or PartialSuccess. Both mean "unlocked".
        """
        ...

    async def deactivate_fortress(self) -> DeactivationResult:
        """
        Mark the active policy UNLOCKABLE once its period has passed.

        Restrictions stay in place; this is the user-facing "exit" step.
        """
        ...

    async def can_unlock(self) -> bool:
        """Whether an active policy exists and its period has passed."""
        ...

    async def get_status(self) -> FortressStatus:
        """Snapshot of the active policy, or FortressInactive."""
        ...

    async def get_remaining_time(self) -> Optional[RemainingTime]:
        """Countdown for the active policy, or None without one."""
        ...

    async def get_history(self) -> list[CommitmentPolicy]:
        """Finished policies, most recent first."""
        ...
