import pytest

from modules.restrictions.blocked_apps import (
    CommitmentScratch,
    LocalBlockedAppRepository,
    UserBlockList,
    default_blocked_app_repository,
)
from modules.restrictions.models import BlockedApp


class TestLocalBlockedAppRepository:
    @pytest.fixture
    def repo(self, tmp_path):
        return LocalBlockedAppRepository(tmp_path / "blocked_apps.json")

    @pytest.mark.asyncio
    async def test_add_and_list(self, repo):
        """Added apps should be listed."""
        app = BlockedApp.for_package("org.mozilla.firefox", reason="browser")
        await repo.add(app)

        apps = await repo.list_all()
        assert [a.package_name for a in apps] == ["org.mozilla.firefox"]
        assert apps[0].app_name == "Firefox"
        assert await repo.is_app_blocked("org.mozilla.firefox")

    @pytest.mark.asyncio
    async def test_nuclear_and_suspended_split(self, repo):
        """Nuclear apps and suspended browsers should be listed apart."""
        await repo.add(BlockedApp.for_package("org.telegram.messenger"))
        await repo.add(BlockedApp.for_package("com.brave.browser"))

        assert [a.package_name for a in await repo.list_nuclear()] == ["org.telegram.messenger"]
        assert [a.package_name for a in await repo.list_suspended()] == ["com.brave.browser"]

    @pytest.mark.asyncio
    async def test_delete(self, repo):
        """delete should remove one entry and ignore unknown ids."""
        app = BlockedApp.for_package("com.brave.browser")
        await repo.add(app)
        await repo.delete("unknown")
        await repo.delete(app.id)
        assert await repo.list_all() == []

    @pytest.mark.asyncio
    async def test_clear_returns_count(self, repo):
        """clear should report how many entries it removed."""
        await repo.add(BlockedApp.for_package("com.brave.browser"))
        await repo.add(BlockedApp.for_package("com.discord"))

        assert await repo.clear() == 2
        assert await repo.clear() == 0

    @pytest.mark.asyncio
    async def test_default_location(self, tmp_path):
        """The default repository writes under LOCAL_STATE_DIR."""
        repo = default_blocked_app_repository()
        await repo.add(BlockedApp.for_package("com.discord"))
        assert (tmp_path / "state" / "blocked_apps.json").exists()


class TestBlockedApp:
    def test_pre_blocked(self):
        """Apps blocked before install are pending."""
        app = BlockedApp.for_package("com.discord", is_installed=False)
        assert app.is_pre_blocked
        assert app.is_pending_block()
        assert not app.should_be_hidden()

    def test_hidden_vs_suspended(self):
        """Nuclear apps are hidden, browsers suspended."""
        assert BlockedApp.for_package("com.discord").should_be_hidden()
        assert BlockedApp.for_package("com.brave.browser").should_be_suspended()
        assert not BlockedApp.for_package("com.discord").should_be_suspended()


class TestUserBlockList:
    @pytest.mark.asyncio
    async def test_add_remove(self, tmp_path):
        """Packages can be added once and removed."""
        block_list = UserBlockList(tmp_path / "user_block_list.json")
        await block_list.add_blocked_package("com.example.game")
        await block_list.add_blocked_package("com.example.game")
        assert await block_list.get_blocked_packages() == ["com.example.game"]

        await block_list.remove_blocked_package("com.example.game")
        await block_list.remove_blocked_package("com.example.game")
        assert await block_list.get_blocked_packages() == []

    @pytest.mark.asyncio
    async def test_two_handles_keep_both_packages(self, tmp_path):
        """Adds through separate handles on one file are both kept."""
        path = tmp_path / "user_block_list.json"
        first = UserBlockList(path)
        second = UserBlockList(path)
        assert await second.get_blocked_packages() == []

        await first.add_blocked_package("com.example.game")
        await second.add_blocked_package("com.example.chat")

        assert await UserBlockList(path).get_blocked_packages() == ["com.example.game", "com.example.chat"]


class TestCommitmentScratch:
    @pytest.mark.asyncio
    async def test_set_get_clear(self, tmp_path):
        """Scratch values survive until clear."""
        scratch = CommitmentScratch(tmp_path / "scratch.json")
        await scratch.set("last_countdown", 12)
        assert await scratch.get("last_countdown") == 12

        await scratch.clear()
        assert await scratch.get("last_countdown", "gone") == "gone"
