"""
Local blocked-app state.

- LocalBlockedAppRepository: every app the fortress blocked on this
  device, including pre-blocks for apps not installed yet
- UserBlockList: packages the user blocked by hand
- CommitmentScratch: small key-value scratch state kept during a
  commitment (last shown countdown, setup progress, ...)

All three live in the local state directory and are wiped by teardown.
"""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Optional

from shared.config import get_settings
from shared.exceptions import StorageError
from shared.local_store import JsonDocumentStore

from .exceptions import BlockListStorageError
from .interfaces import IBlockedAppStore, IUserBlockList
from .models import BlockedApp

logger = logging.getLogger(__name__)


class _LocalDocument:
    """Wraps JsonDocumentStore so failures surface as BlockListStorageError."""

    def __init__(self, path: Path, store_name: str):
        self._doc = JsonDocumentStore(path, store_name=store_name)
        self._store_name = store_name

    def load(self) -> dict[str, Any]:
        try:
            return self._doc.load()
        except StorageError as e:
            raise BlockListStorageError(e.message, store=self._store_name) from e

    def save(self, document: dict[str, Any]) -> None:
        try:
            self._doc.store(document)
        except StorageError as e:
            raise BlockListStorageError(e.message, store=self._store_name) from e

    @contextmanager
    def locked(self) -> Iterator[None]:
        try:
            self._doc.acquire()
        except StorageError as e:
            raise BlockListStorageError(e.message, store=self._store_name) from e
        try:
            yield
        finally:
            self._doc.release()


class LocalBlockedAppRepository(IBlockedAppStore):
    """Blocked apps keyed by entry ID in ``blocked_apps.json``."""

    def __init__(self, path: Path):
        self._doc = _LocalDocument(path, "blocked_apps")

    def _apps(self) -> dict[str, Any]:
        return self._doc.load().get("apps", {})

    async def list_all(self) -> list[BlockedApp]:
        apps = []
        for app_id, data in self._apps().items():
            try:
                apps.append(BlockedApp.model_validate(data))
            except ValueError as e:
                logger.warning(f"Skipping unreadable blocked app {app_id}: {e}")
        return apps

    async def get_by_package(self, package_name: str) -> Optional[BlockedApp]:
        for app in await self.list_all():
            if app.package_name == package_name:
                return app
        return None

    async def is_app_blocked(self, package_name: str) -> bool:
        return await self.get_by_package(package_name) is not None

    async def list_suspended(self) -> list[BlockedApp]:
        return [a for a in await self.list_all() if a.is_suspended and not a.is_blacklisted()]

    async def list_nuclear(self) -> list[BlockedApp]:
        return [a for a in await self.list_all() if a.is_blacklisted()]

    async def add(self, app: BlockedApp) -> None:
        with self._doc.locked():
            apps = self._apps()
            apps[app.id] = app.model_dump(mode="json")
            self._doc.save({"apps": apps})

    async def delete(self, app_id: str) -> None:
        with self._doc.locked():
            apps = self._apps()
            if apps.pop(app_id, None) is None:
                return
            self._doc.save({"apps": apps})

    async def clear(self) -> int:
        with self._doc.locked():
            apps = self._apps()
            if apps:
                self._doc.save({"apps": {}})
        return len(apps)


class UserBlockList(IUserBlockList):
    """Hand-picked blocked packages in ``user_block_list.json``."""

    def __init__(self, path: Path):
        self._doc = _LocalDocument(path, "user_block_list")

    async def get_blocked_packages(self) -> list[str]:
        return list(self._doc.load().get("packages", []))

    async def add_blocked_package(self, package_name: str) -> None:
        with self._doc.locked():
            packages = await self.get_blocked_packages()
            if package_name in packages:
                return
            packages.append(package_name)
            self._doc.save({"packages": packages})

    async def remove_blocked_package(self, package_name: str) -> None:
        with self._doc.locked():
            packages = await self.get_blocked_packages()
            if package_name not in packages:
                return
            packages.remove(package_name)
            self._doc.save({"packages": packages})


class CommitmentScratch:
    """Free-form key-value state for the running commitment."""

    def __init__(self, path: Path):
        self._doc = _LocalDocument(path, "commitment_scratch")

    async def get(self, key: str, default: Any = None) -> Any:
        return self._doc.load().get(key, default)

    async def set(self, key: str, value: Any) -> None:
        with self._doc.locked():
            document = self._doc.load()
            document[key] = value
            self._doc.save(document)

    async def clear(self) -> None:
        with self._doc.locked():
            if self._doc.load():
                self._doc.save({})


def default_blocked_app_repository() -> LocalBlockedAppRepository:
    return LocalBlockedAppRepository(get_settings().local_state_dir / "blocked_apps.json")


def default_user_block_list() -> UserBlockList:
    return UserBlockList(get_settings().local_state_dir / "user_block_list.json")


def default_commitment_scratch() -> CommitmentScratch:
    return CommitmentScratch(get_settings().local_state_dir / "commitment_scratch.json")
