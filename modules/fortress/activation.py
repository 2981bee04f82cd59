"""
Fortress activation.

Applies the restriction layers one after another in their fixed order and
persists the new policy only if every layer succeeded. Layer failures are
collected rather than stopping the sequence, so one attempt reports every
layer that is broken.
"""

import logging
from typing import Iterable, Optional, Sequence

from shared.clock import Clock, now_millis
from shared.config import get_settings
from shared.exceptions import FortressError
from modules.policies.interfaces import IPolicyStore
from modules.policies.models import ActivationMethod, CommitmentPlan, CommitmentPolicy, FortressState
from modules.restrictions.catalog import ALL_BLOCKED
from modules.restrictions.exceptions import AuthorityMissingError
from modules.restrictions.interfaces import IDeviceAuthority, IRestrictionLayer

from .models import (
    ActivationResult,
    ActivationSuccess,
    AlreadyActive,
    DeviceOwnerNotActive,
    RestrictionsFailed,
)

logger = logging.getLogger(__name__)


def _failure_message(error: Exception) -> str:
    if isinstance(error, FortressError):
        return error.message
    return f"{type(error).__name__}: {error}"


class ActivationOrchestrator:
    """
    Turns a plan choice into an active, persisted fortress policy.

    Device side effects are not transactional: when a layer fails, the
    layers applied before it are rolled back (if enabled), but the policy
    store is only ever written on full success.
    """

    def __init__(
        self,
        policies: IPolicyStore,
        authority: IDeviceAuthority,
        layers: Sequence[IRestrictionLayer],
        clock: Clock = now_millis,
        blocked_apps: Iterable[str] = ALL_BLOCKED,
        rollback_on_failure: Optional[bool] = None,
    ):
        self._policies = policies
        self._authority = authority
        self._layers = list(layers)
        self._clock = clock
        self._blocked_apps = frozenset(blocked_apps)
        if rollback_on_failure is None:
            rollback_on_failure = get_settings().rollback_on_activation_failure
        self._rollback_on_failure = rollback_on_failure

    async def activate(self, plan: CommitmentPlan, method: ActivationMethod) -> ActivationResult:
        """
        Activate the fortress for ``plan``.

        Returns:
            ActivationSuccess, DeviceOwnerNotActive, AlreadyActive or
            RestrictionsFailed

        Raises:
            PolicyStorageError: If the store can't be read or the new
                policy can't be written
        """
        logger.info(f"Fortress activation started: plan={plan.value} method={method.value}")

        if not await self._authority.is_held():
            logger.error("Device owner not active")
            return DeviceOwnerNotActive()

        if await self._policies.get_active() is not None:
            logger.warning("Fortress already active")
            return AlreadyActive()

        policy = CommitmentPolicy.create(
            plan,
            method,
            self._blocked_apps,
            activation_timestamp=self._clock(),
        )
        logger.info(
            f"Policy {policy.id} created: activation={policy.activation_timestamp} "
            f"expiry={policy.expiry_timestamp} ({plan.days} days)"
        )

        errors: dict[str, str] = {}
        applied: list[IRestrictionLayer] = []

        for layer in self._layers:
            logger.info(f"Applying layer {layer.name}")
            try:
                await layer.apply(policy)
            except AuthorityMissingError as e:
                logger.error(f"Device owner lost during layer {layer.name}: {e.message}")
                if self._rollback_on_failure:
                    await self._rollback(applied, policy)
                return DeviceOwnerNotActive()
            except FortressError as e:
                errors[layer.name] = _failure_message(e)
                logger.error(f"Layer {layer.name} failed: {e.message}")
                continue
            except Exception as e:
                errors[layer.name] = _failure_message(e)
                logger.exception(f"Layer {layer.name} raised unexpectedly")
                continue

            applied.append(layer)
            if layer.policy_flag:
                policy = policy.model_copy(update={layer.policy_flag: True})

        if errors:
            logger.error(f"Activation failed, {len(errors)} layer(s): {', '.join(errors)}")
            rollback_errors = await self._rollback(applied, policy) if self._rollback_on_failure else {}
            return RestrictionsFailed(errors=errors, rollback_errors=rollback_errors)

        policy = policy.model_copy(update={"state": FortressState.ACTIVE})
        try:
            await self._policies.set_active(policy)
        except FortressError as e:
            logger.error(f"Could not persist policy {policy.id}: {e.message}")
            raise

        logger.info(f"Fortress activation successful, policy {policy.id} active")
        return ActivationSuccess(policy=policy)

    async def _rollback(
        self,
        applied: list[IRestrictionLayer],
        policy: CommitmentPolicy,
    ) -> dict[str, str]:
        """Undo the layers applied during this attempt, newest first."""
        rollback_errors: dict[str, str] = {}
        for layer in reversed(applied):
            try:
                await layer.remove(policy)
                logger.info(f"Rolled back layer {layer.name}")
            except Exception as e:
                rollback_errors[layer.name] = _failure_message(e)
                logger.warning(f"Rollback of layer {layer.name} failed: {e}")
        return rollback_errors
