"""
Policy stores.

- LocalPolicyRepository: JSON document on the device (production)
- InMemoryPolicyStore: dictionary-backed store for tests and dry runs

Both keep every policy they were given and a separate active-policy
pointer; clearing the pointer never deletes history.
"""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Optional

from shared.clock import Clock, now_millis
from shared.config import get_settings
from shared.exceptions import StorageError
from shared.local_store import JsonDocumentStore

from .exceptions import InvalidPolicyError, PolicyNotFoundError, PolicyStorageError
from .models import CommitmentPolicy

logger = logging.getLogger(__name__)

POLICIES_KEY = "policies"
ACTIVE_POLICY_KEY = "active_policy_id"


def _historical(policies: list[CommitmentPolicy], now: int) -> list[CommitmentPolicy]:
    history = [p for p in policies if p.is_historical(now)]
    return sorted(history, key=lambda p: p.activation_timestamp, reverse=True)


def _check_activatable(policy: CommitmentPolicy) -> None:
    if not policy.state.is_locked():
        raise InvalidPolicyError(policy.id, f"cannot be made active in state {policy.state.value}")


def _check_update(stored: CommitmentPolicy, policy: CommitmentPolicy, now: int) -> None:
    """Historical policies only ever change state."""
    if stored.is_historical(now) and stored.model_copy(update={"state": policy.state}) != policy:
        raise InvalidPolicyError(policy.id, "historical policies can only change state")


class LocalPolicyRepository:
    """
    Policy store backed by a JSON document in the local state directory.

    Document layout:
        {
            "policies": {"<id>": {...policy fields...}},
            "active_policy_id": "<id>" | null
        }
    """

    def __init__(self, path: Path, clock: Clock = now_millis) -> None:
        self._doc = JsonDocumentStore(path, store_name="policies")
        self._clock = clock

    def _load(self) -> dict[str, Any]:
        try:
            document = self._doc.load()
        except StorageError as e:
            raise PolicyStorageError(e.message) from e
        document.setdefault(POLICIES_KEY, {})
        document.setdefault(ACTIVE_POLICY_KEY, None)
        return document

    def _save(self, document: dict[str, Any]) -> None:
        try:
            self._doc.store(document)
        except StorageError as e:
            raise PolicyStorageError(e.message) from e

    @contextmanager
    def _locked(self) -> Iterator[None]:
        """Hold the document lock across one read-modify-write."""
        try:
            self._doc.acquire()
        except StorageError as e:
            raise PolicyStorageError(e.message) from e
        try:
            yield
        finally:
            self._doc.release()

    @staticmethod
    def _parse(policy_id: str, data: dict[str, Any]) -> Optional[CommitmentPolicy]:
        try:
            return CommitmentPolicy.model_validate(data)
        except ValueError as e:
            logger.warning(f"Skipping unreadable policy {policy_id}: {e}")
            return None

    async def get(self, policy_id: str) -> Optional[CommitmentPolicy]:
        data = self._load()[POLICIES_KEY].get(policy_id)
        if data is None:
            return None
        return self._parse(policy_id, data)

    async def get_active(self) -> Optional[CommitmentPolicy]:
        document = self._load()
        active_id = document[ACTIVE_POLICY_KEY]
        if not active_id:
            return None
        data = document[POLICIES_KEY].get(active_id)
        if data is None:
            logger.warning(f"Active policy pointer references missing policy {active_id}")
            return None
        return self._parse(active_id, data)

    async def set_active(self, policy: CommitmentPolicy) -> None:
        _check_activatable(policy)
        with self._locked():
            document = self._load()
            document[POLICIES_KEY][policy.id] = policy.model_dump(mode="json")
            document[ACTIVE_POLICY_KEY] = policy.id
            self._save(document)

    async def clear_active(self) -> None:
        with self._locked():
            document = self._load()
            if document[ACTIVE_POLICY_KEY] is None:
                return
            document[ACTIVE_POLICY_KEY] = None
            self._save(document)

    async def update(self, policy: CommitmentPolicy) -> None:
        with self._locked():
            document = self._load()
            if policy.id not in document[POLICIES_KEY]:
                raise PolicyNotFoundError(policy.id)
            stored = self._parse(policy.id, document[POLICIES_KEY][policy.id])
            if stored is not None:
                _check_update(stored, policy, self._clock())
            document[POLICIES_KEY][policy.id] = policy.model_dump(mode="json")
            self._save(document)

    async def list_all(self) -> list[CommitmentPolicy]:
        policies = []
        for policy_id, data in self._load()[POLICIES_KEY].items():
            policy = self._parse(policy_id, data)
            if policy is not None:
                policies.append(policy)
        return policies

    async def list_historical(self) -> list[CommitmentPolicy]:
        return _historical(await self.list_all(), self._clock())


class InMemoryPolicyStore:
    """
    Dictionary-backed policy store.

    Stores deep copies so callers mutating a returned policy never change
    the stored one behind the store's back.
    """

    def __init__(self, clock: Clock = now_millis) -> None:
        self._policies: dict[str, CommitmentPolicy] = {}
        self._active_id: Optional[str] = None
        self._clock = clock

    async def get_active(self) -> Optional[CommitmentPolicy]:
        if self._active_id is None:
            return None
        policy = self._policies.get(self._active_id)
        return policy.model_copy(deep=True) if policy else None

    async def set_active(self, policy: CommitmentPolicy) -> None:
        _check_activatable(policy)
        self._policies[policy.id] = policy.model_copy(deep=True)
        self._active_id = policy.id

    async def clear_active(self) -> None:
        self._active_id = None

    async def update(self, policy: CommitmentPolicy) -> None:
        if policy.id not in self._policies:
            raise PolicyNotFoundError(policy.id)
        _check_update(self._policies[policy.id], policy, self._clock())
        self._policies[policy.id] = policy.model_copy(deep=True)

    async def list_all(self) -> list[CommitmentPolicy]:
        return [p.model_copy(deep=True) for p in self._policies.values()]

    async def list_historical(self) -> list[CommitmentPolicy]:
        return _historical(await self.list_all(), self._clock())


# Module-level instance getter
_repository_instance: Optional[LocalPolicyRepository] = None


def get_policy_repository() -> LocalPolicyRepository:
    """Get the local policy repository singleton."""
    global _repository_instance
    if _repository_instance is None:
        settings = get_settings()
        _repository_instance = LocalPolicyRepository(settings.local_state_dir / "policies.json")
    return _repository_instance


def reset_policy_repository() -> None:
    """Reset the policy repository singleton (for testing)."""
    global _repository_instance
    _repository_instance = None
