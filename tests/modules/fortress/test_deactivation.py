from datetime import timedelta

import pytest

from shared.config import get_settings
from modules.accounts.models import SubscriptionStatus
from modules.accounts.repository import InMemoryAccountStore
from modules.accounts.service import AccountService
from modules.fortress.activation import ActivationOrchestrator
from modules.fortress.deactivation import DeactivationOrchestrator
from modules.fortress.models import ActivationSuccess, ClearSuccess, PartialSuccess
from modules.policies.models import ActivationMethod, CommitmentPlan, FortressState
from modules.policies.repository import InMemoryPolicyStore
from modules.restrictions.blocked_apps import (
    CommitmentScratch,
    LocalBlockedAppRepository,
    UserBlockList,
)
from modules.restrictions.catalog import (
    BEHAVIOURAL_RESTRICTIONS,
    DISALLOW_CONFIG_PRIVATE_DNS,
    PRIVATE_DNS_MODE_OPPORTUNISTIC,
)
from modules.restrictions.device import DeviceOwnerAuthority, InMemoryDevicePolicyManager
from modules.restrictions.layers import build_default_layers
from modules.restrictions.models import BlockedApp

from fakes import FakeClock, RecordingAccountStore, RecordingAuthority

STEP_NAMES = [
    "unsuspend_browsers",
    "unhide_apps",
    "unblock_recorded_apps",
    "unblock_user_apps",
    "clear_user_restrictions",
    "reset_dns",
    "release_auto_time",
    "stop_content_filter",
    "remove_browser_policies",
    "allow_uninstall",
    "clear_local_state",
    "reset_account",
    "release_device_owner",
]


class Harness:
    """A device with one active fortress and all the stores teardown touches."""

    def __init__(self, tmp_path, fail_on=(), account_store=None):
        self.clock = FakeClock()
        self.device = InMemoryDevicePolicyManager(
            installed_packages={"org.mozilla.firefox"},
            fail_on=fail_on,
        )
        self.authority = DeviceOwnerAuthority(self.device)
        self.policies = InMemoryPolicyStore(clock=self.clock)
        self.blocked_apps = LocalBlockedAppRepository(tmp_path / "blocked_apps.json")
        self.user_block_list = UserBlockList(tmp_path / "user_block_list.json")
        self.scratch = CommitmentScratch(tmp_path / "scratch.json")
        self.account_store = account_store if account_store is not None else InMemoryAccountStore()
        self.accounts = AccountService(self.account_store, clock=self.clock, cache_ttl_seconds=30)

    def orchestrator(self, authority=None, accounts="default"):
        return DeactivationOrchestrator(
            device=self.device,
            authority=authority or self.authority,
            policies=self.policies,
            blocked_apps=self.blocked_apps,
            user_block_list=self.user_block_list,
            scratch=self.scratch,
            accounts=self.accounts if accounts == "default" else accounts,
        )

    async def activate(self):
        # Activation must succeed on a clean device, so fail_on is applied afterwards.
        fail_on = set(self.device.fail_on)
        self.device.fail_on.clear()
        result = await ActivationOrchestrator(
            policies=self.policies,
            authority=self.authority,
            layers=build_default_layers(self.device),
            clock=self.clock,
        ).activate(CommitmentPlan.MONTHLY, ActivationMethod.WIRELESS_ADB)
        assert isinstance(result, ActivationSuccess)
        self.device.fail_on.update(fail_on)

        for package in ("com.example.game", "org.telegram.messenger"):
            await self.blocked_apps.add(BlockedApp.for_package(package))
        await self.user_block_list.add_blocked_package("com.example.chat")
        await self.scratch.set("last_countdown", 30)
        return result.policy


@pytest.fixture
def make_harness(tmp_path, make_account):
    async def _make(fail_on=(), account_store=None):
        harness = Harness(tmp_path, fail_on=fail_on, account_store=account_store)
        await harness.account_store.set(make_account())
        harness.policy = await harness.activate()
        return harness

    return _make


class TestClearWithAuthority:
    @pytest.mark.asyncio
    async def test_full_teardown(self, make_harness):
        """A clean teardown undoes every restriction and reports success."""
        h = await make_harness()

        result = await h.orchestrator().clear_everything("user-123")

        assert isinstance(result, ClearSuccess)
        assert h.device.hidden == set()
        assert h.device.suspended == set()
        assert h.device.uninstall_blocked == set()
        assert h.device.auto_time_required is False
        assert h.device.private_dns_mode == PRIVATE_DNS_MODE_OPPORTUNISTIC
        assert DISALLOW_CONFIG_PRIVATE_DNS not in h.device.user_restrictions
        assert h.device.app_restrictions == {}
        assert h.device.is_device_owner() is False

    @pytest.mark.asyncio
    async def test_behavioural_restrictions_cleared(self, make_harness):
        """Every behavioural restriction key is cleared."""
        h = await make_harness()
        for key in BEHAVIOURAL_RESTRICTIONS:
            h.device.add_user_restriction(key)

        await h.orchestrator().clear_everything("user-123")

        assert h.device.user_restrictions == set()

    @pytest.mark.asyncio
    async def test_local_state_cleared(self, make_harness):
        """Blocked apps, the user list, scratch and the pointer are cleared."""
        h = await make_harness()

        await h.orchestrator().clear_everything("user-123")

        assert await h.blocked_apps.list_all() == []
        assert await h.user_block_list.get_blocked_packages() == []
        assert await h.scratch.get("last_countdown") is None
        assert await h.policies.get_active() is None

    @pytest.mark.asyncio
    async def test_cleared_policy_kept_as_history(self, make_harness):
        """The cleared policy stays in history as UNLOCKABLE."""
        h = await make_harness()

        await h.orchestrator().clear_everything("user-123")

        history = await h.policies.list_historical()
        assert [p.id for p in history] == [h.policy.id]
        assert history[0].state is FortressState.UNLOCKABLE

    @pytest.mark.asyncio
    async def test_account_reset(self, make_harness, now):
        """The account returns to PENDING and keeps its identity fields."""
        h = await make_harness()

        await h.orchestrator().clear_everything("user-123")

        account = await h.account_store.get("user-123")
        assert account.subscription_status is SubscriptionStatus.PENDING
        assert account.has_device_owner is False
        assert account.selected_plan == ""
        assert account.commitment_days == 0
        assert account.commitment_start_date is None
        assert account.commitment_end_date is None
        assert account.email == "test@example.com"
        assert account.device_id == "device-abc-123"
        assert account.created_at == now - timedelta(days=60)

    @pytest.mark.asyncio
    async def test_release_is_last(self, make_harness):
        """Authority is released after every other step, account reset included."""
        log = []
        h = await make_harness(account_store=RecordingAccountStore(log))
        authority = RecordingAuthority(log)

        await h.orchestrator(authority=authority).clear_everything("user-123")

        assert log[-2:] == ["account_set:user-123", "release_authority"]
        # The real authority was not released, so the last device call is a teardown step.
        assert h.device.calls[-1] == f"set_uninstall_blocked:{get_settings().app_package_name}"

    @pytest.mark.asyncio
    async def test_release_is_last_device_call(self, make_harness):
        """Clearing device ownership is the final device call."""
        h = await make_harness()

        await h.orchestrator().clear_everything("user-123")

        assert h.device.calls[-1] == "clear_device_owner:"

    @pytest.mark.asyncio
    async def test_failed_steps_reported(self, make_harness):
        """Failed steps are named and the rest still run."""
        h = await make_harness(fail_on={"set_auto_time_required", "stop_content_filter_service"})

        result = await h.orchestrator().clear_everything("user-123")

        assert isinstance(result, PartialSuccess)
        assert set(result.errors) == {"release_auto_time", "stop_content_filter"}
        assert h.device.is_device_owner() is False
        assert await h.policies.get_active() is None

    @pytest.mark.asyncio
    async def test_every_step_attempted(self, make_harness):
        """With every device call rejected each device step is still tried, in order."""
        h = await make_harness(fail_on={
            "set_packages_suspended",
            "set_application_hidden",
            "clear_user_restriction",
            "set_private_dns_mode",
            "set_auto_time_required",
            "stop_content_filter_service",
            "set_application_restrictions",
            "set_uninstall_blocked",
            "clear_device_owner",
        })

        result = await h.orchestrator().clear_everything("user-123")

        expected = [name for name in STEP_NAMES if name not in ("clear_local_state", "reset_account")]
        assert list(result.errors) == expected
        assert await h.policies.get_active() is None
        assert (await h.account_store.get("user-123")).is_reset()

    @pytest.mark.asyncio
    async def test_bulk_step_fails_when_one_item_fails(self, make_harness):
        """An unhide failure fails the steps that unhide, not the others."""
        h = await make_harness(fail_on={"set_application_hidden"})

        result = await h.orchestrator().clear_everything("user-123")

        assert isinstance(result, PartialSuccess)
        assert set(result.errors) == {"unhide_apps", "unblock_recorded_apps", "unblock_user_apps"}
        # The user-blocked package that failed stays on the list.
        assert await h.user_block_list.get_blocked_packages() == ["com.example.chat"]

    @pytest.mark.asyncio
    async def test_refused_unhide_is_a_failure(self, make_harness):
        """An unhide the platform refuses counts as failed, and unsuspend is still tried."""
        h = await make_harness()
        h.device.set_application_hidden = lambda package_name, hidden: hidden

        result = await h.orchestrator().clear_everything("user-123")

        assert isinstance(result, PartialSuccess)
        assert set(result.errors) == {"unhide_apps", "unblock_recorded_apps", "unblock_user_apps"}
        assert "set_packages_suspended:com.example.game" in h.device.calls

    @pytest.mark.asyncio
    async def test_release_failure_reported(self, make_harness):
        """A failed release is reported as a step failure."""
        h = await make_harness(fail_on={"clear_device_owner"})

        result = await h.orchestrator().clear_everything("user-123")

        assert result.errors.keys() == {"release_device_owner"}

    @pytest.mark.asyncio
    async def test_account_failure_not_reported(self, make_harness):
        """A remote reset failure is logged but doesn't make the result partial."""

        class BrokenWrites(InMemoryAccountStore):
            async def set(self, account):
                if account.is_reset():
                    raise ConnectionError("offline")
                await super().set(account)

        h = await make_harness(account_store=BrokenWrites())

        result = await h.orchestrator().clear_everything("user-123")

        assert isinstance(result, ClearSuccess)
        assert await h.policies.get_active() is None
        assert h.device.is_device_owner() is False

    @pytest.mark.asyncio
    async def test_no_account_id_skips_remote_reset(self, make_harness):
        """Without an account id only local state is cleared."""
        h = await make_harness()
        writes = h.account_store.write_count

        result = await h.orchestrator().clear_everything()

        assert isinstance(result, ClearSuccess)
        assert h.account_store.write_count == writes

    @pytest.mark.asyncio
    async def test_without_account_service(self, make_harness):
        """An orchestrator without an account service still clears."""
        h = await make_harness()
        result = await h.orchestrator(accounts=None).clear_everything("user-123")
        assert isinstance(result, ClearSuccess)


class TestClearIdempotence:
    @pytest.mark.asyncio
    async def test_second_clear_succeeds(self, make_harness):
        """Clearing twice is safe; the second run takes the no-authority branch."""
        h = await make_harness()
        orchestrator = h.orchestrator()

        await orchestrator.clear_everything("user-123")
        calls = list(h.device.calls)
        writes = h.account_store.write_count

        result = await orchestrator.clear_everything("user-123")

        assert isinstance(result, ClearSuccess)
        assert h.device.calls == calls
        assert h.account_store.write_count == writes

    @pytest.mark.asyncio
    async def test_clear_twice_with_authority(self, make_harness):
        """Re-running the full teardown while still holding authority succeeds."""
        h = await make_harness()
        authority = RecordingAuthority([])
        orchestrator = h.orchestrator(authority=authority)

        first = await orchestrator.clear_everything("user-123")
        authority.held = True
        writes = h.account_store.write_count
        second = await orchestrator.clear_everything("user-123")

        assert isinstance(first, ClearSuccess)
        assert isinstance(second, ClearSuccess)
        assert h.account_store.write_count == writes
        assert len(await h.policies.list_historical()) == 1

    @pytest.mark.asyncio
    async def test_clear_with_nothing_active(self, tmp_path):
        """Clearing a device that was never locked succeeds."""
        h = Harness(tmp_path)
        result = await h.orchestrator().clear_everything("user-123")
        assert isinstance(result, ClearSuccess)


class TestClearWithoutAuthority:
    @pytest.mark.asyncio
    async def test_skips_device_calls(self, make_harness):
        """Without authority no restriction call is made."""
        h = await make_harness()
        h.device.device_owner = False
        calls = list(h.device.calls)

        result = await h.orchestrator().clear_everything("user-123")

        assert isinstance(result, ClearSuccess)
        assert h.device.calls == calls

    @pytest.mark.asyncio
    async def test_still_clears_local_and_remote(self, make_harness):
        """Local state and the account are reset even without authority."""
        h = await make_harness()
        h.device.device_owner = False

        await h.orchestrator().clear_everything("user-123")

        assert await h.policies.get_active() is None
        assert await h.blocked_apps.list_all() == []
        assert await h.scratch.get("last_countdown") is None
        assert (await h.account_store.get("user-123")).is_reset()

    @pytest.mark.asyncio
    async def test_failures_never_partial(self, make_harness):
        """The no-authority branch always reports success."""

        class BrokenReads(InMemoryAccountStore):
            async def get(self, account_id):
                raise ConnectionError("offline")

        h = await make_harness()
        h.accounts = AccountService(BrokenReads(), clock=h.clock, cache_ttl_seconds=30)
        h.device.device_owner = False

        result = await h.orchestrator().clear_everything("user-123")

        assert isinstance(result, ClearSuccess)
