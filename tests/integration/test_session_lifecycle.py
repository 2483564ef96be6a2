"""Integration tests for session startup, subscription and consumer surface."""

import asyncio
from decimal import Decimal
from unittest.mock import patch

from gavcoin_sync.api.base import RpcError
from gavcoin_sync.config.defaults import SyncParams, get_default_config
from gavcoin_sync.contract.resolver import name_hash
from gavcoin_sync.errors import EnumerationError, ResolutionError, StartupError, TransportError
from gavcoin_sync.session import SyncSession
from gavcoin_sync.state.models import ActionKind


def attach(session):
    return asyncio.run(session.attach())


class TestStartup:
    """Test the one-shot startup sequence."""

    def test_attach_publishes_initial_snapshot(self, fake_api):
        """Test that a successful attach publishes accounts and subscribes."""
        session = SyncSession(fake_api)

        assert session.get_snapshot().loading is True
        assert attach(session) is True

        snapshot = session.get_snapshot()
        assert snapshot.loading is False
        assert snapshot.address == fake_api.contract_address
        assert [a.address for a in snapshot.accounts] == fake_api.accounts
        assert [a.name for a in snapshot.accounts] == ["Alice", "Unnamed", "Unnamed"]
        assert all(a.gav_balance == 0 and not a.has_gav for a in snapshot.accounts)
        assert snapshot.block_number is None
        assert len(fake_api.active_subscriptions) == 1
        assert session.attached is True

    def test_registry_lookup_uses_hashed_name_and_tag(self, fake_api):
        """Test registry lookup arguments."""
        attach(SyncSession(fake_api))

        assert fake_api.lookups == [
            (fake_api.registry_address, name_hash("gavcoin"), "A")
        ]

    def test_registry_failure_keeps_session_loading(self, fake_api):
        """Test startup gating when the registry is unreachable."""
        fake_api.failures["resolve_registry_address"] = RpcError("connection refused")
        session = SyncSession(fake_api)

        assert attach(session) is False

        assert session.get_snapshot().loading is True
        assert isinstance(session.startup_error, ResolutionError)
        assert session.startup_error.stage == "registry"
        assert fake_api.subscriptions == []
        assert "list_accounts" not in fake_api.calls

    def test_unregistered_name_keeps_session_loading(self, fake_api):
        """Test startup gating when the registry has no entry."""
        fake_api.contract_address = "0x" + "00" * 20
        session = SyncSession(fake_api)

        assert attach(session) is False
        assert session.get_snapshot().loading is True
        assert isinstance(session.startup_error, ResolutionError)

    def test_enumeration_failure_keeps_session_loading(self, fake_api):
        """Test that no partial account list is published."""
        fake_api.failures["accounts_info"] = RpcError("locked")
        session = SyncSession(fake_api)

        assert attach(session) is False
        assert session.get_snapshot().loading is True
        assert session.get_snapshot().accounts == ()
        assert isinstance(session.startup_error, EnumerationError)
        assert fake_api.subscriptions == []

    def test_malformed_account_listing_keeps_session_loading(self, fake_api):
        """Test that junk addresses from the node fail startup cleanly."""
        fake_api.accounts = [None]
        session = SyncSession(fake_api)

        assert attach(session) is False
        assert session.get_snapshot().loading is True
        assert isinstance(session.startup_error, EnumerationError)
        assert fake_api.subscriptions == []

    def test_non_mapping_account_metadata_uses_fallback_name(self, fake_api):
        """Test that an unusable metadata entry does not block startup."""
        fake_api.infos = {fake_api.accounts[0]: "not-a-mapping"}
        session = SyncSession(fake_api)

        assert attach(session) is True
        assert session.get_snapshot().accounts[0].name == "Unnamed"

    def test_unexpected_startup_exception_is_contained(self, fake_api):
        """Test that a non-RPC failure during startup is logged, not raised."""
        session = SyncSession(fake_api)

        with patch("gavcoin_sync.session.AccountRegistry.enumerate",
                   side_effect=KeyError("address")):
            with patch.object(session, "logger") as mock_logger:
                assert attach(session) is False

        assert session.get_snapshot().loading is True
        assert isinstance(session.startup_error, StartupError)
        assert isinstance(session.startup_error.__cause__, KeyError)
        assert session.startup_error.context["cause_type"] == "KeyError"
        mock_logger.error.assert_called_once()
        assert fake_api.subscriptions == []

    def test_startup_failure_is_logged(self, fake_api):
        """Test that startup errors are logged, not raised."""
        fake_api.failures["registry_lookup"] = RpcError("bad call")
        session = SyncSession(fake_api)

        with patch.object(session, "logger") as mock_logger:
            assert attach(session) is False

        mock_logger.error.assert_called_once()
        assert mock_logger.error.call_args.kwargs["error_type"] == "ResolutionError"

    def test_attach_is_single_shot(self, fake_api):
        """Test that repeated and concurrent attach calls resolve only once."""
        session = SyncSession(fake_api)

        async def scenario():
            first, second = await asyncio.gather(session.attach(), session.attach())
            third = await session.attach()
            return first, second, third

        assert asyncio.run(scenario()) == (True, True, True)
        assert fake_api.calls.count("resolve_registry_address") == 1
        assert len(fake_api.subscriptions) == 1

    def test_failed_attach_is_not_retried(self, fake_api):
        """Test that a failed startup stays failed."""
        fake_api.failures["list_accounts"] = RpcError("down")
        session = SyncSession(fake_api)

        async def scenario():
            first = await session.attach()
            del fake_api.failures["list_accounts"]
            second = await session.attach()
            return first, second

        assert asyncio.run(scenario()) == (False, False)
        assert session.get_snapshot().loading is True

    def test_subscription_failure_is_transport_error(self, fake_api):
        """Test that a subscription that cannot be opened is reported."""
        def refuse(handler, on_error=None):
            raise RpcError("no filters")

        fake_api.subscribe_block_number = refuse
        session = SyncSession(fake_api)

        assert attach(session) is False
        assert isinstance(session.transport_error, TransportError)
        assert session.get_snapshot().loading is False


class TestBlockDrivenSync:
    """Test synchronization driven by block notifications."""

    def test_block_notification_refreshes_snapshot(self, fake_api):
        """Test the full path from notification to committed snapshot."""
        a = fake_api.accounts[0]
        fake_api.counters.update(totalSupply=7_000_000, remaining=3_000_000, price=10 ** 16)
        fake_api.gav[a] = 2_500_000
        fake_api.eth[a] = 3 * 10 ** 18
        session = SyncSession(fake_api)
        seen = []
        session.subscribe(seen.append)

        async def scenario():
            await session.attach()
            fake_api.emit_block(500)
            await session.engine.wait_idle()

        asyncio.run(scenario())

        snapshot = session.get_snapshot()
        assert snapshot.block_number == 500
        assert snapshot.total_supply == Decimal("7")
        assert snapshot.remaining == Decimal("3")
        assert snapshot.price == Decimal("0.01")
        assert snapshot.account(a).gav_balance == Decimal("2.5")
        assert snapshot.account(a).has_gav is True
        assert snapshot.gav_balance_total == Decimal("2.5")
        assert snapshot.eth_balance_total == Decimal("3")
        assert [s.block_number for s in seen] == [None, 500]

    def test_failed_pass_keeps_subscription(self, fake_api):
        """Test partial-failure containment at session level."""
        session = SyncSession(fake_api)

        async def scenario():
            await session.attach()
            fake_api.failures[("native_balance", fake_api.accounts[1])] = RpcError("boom")
            fake_api.emit_block(1)
            await session.engine.wait_idle()
            loaded = session.get_snapshot()

            fake_api.failures.clear()
            fake_api.emit_block(2)
            await session.engine.wait_idle()
            return loaded

        loaded = asyncio.run(scenario())

        assert loaded.block_number is None
        assert session.get_snapshot().block_number == 2
        assert len(fake_api.active_subscriptions) == 1

    def test_monotonic_policy_from_config(self, fake_api):
        """Test that the stale-pass policy flows from configuration to the store."""
        config = get_default_config()
        config = type(config)(
            rpc=config.rpc,
            registry=config.registry,
            display=config.display,
            sync=SyncParams(reject_stale_passes=True),
            logging=config.logging,
        )

        session = SyncSession(fake_api, config)

        assert session.store.reject_stale is True

    def test_detach_releases_subscription(self, fake_api):
        """Test teardown."""
        session = SyncSession(fake_api)

        async def scenario():
            await session.attach()
            session.detach()
            session.detach()
            fake_api.emit_block(9)
            await session.close()

        asyncio.run(scenario())

        assert fake_api.active_subscriptions == []
        assert session.attached is False
        assert session.get_snapshot().block_number is None

    def test_transport_error_is_recorded(self, fake_api):
        """Test that a lost block stream surfaces as a session-level event."""
        session = SyncSession(fake_api)
        attach(session)

        error = TransportError("stream lost", consecutive_failures=5)
        fake_api.subscriptions[0].on_error(error)

        assert session.transport_error is error
        assert session.attached is False
        assert session.get_snapshot().loading is False


class TestActionsDuringSync:
    """Test that action requests are independent of synchronization."""

    def test_actions_change_while_pass_in_flight(self, fake_api, read_waiter):
        """Test that an in-flight pass does not block action requests."""
        session = SyncSession(fake_api)

        async def scenario():
            await session.attach()
            gate = asyncio.Event()
            fake_api.gate = gate
            reads_before = fake_api.reads_started
            fake_api.emit_block(3)
            await read_waiter(fake_api, reads_before + 3)

            session.request_action("BuyIn")
            during = session.action
            session.request_action(ActionKind.TRANSFER)
            session.close_action()
            after_close = session.action

            gate.set()
            await session.engine.wait_idle()
            return during, after_close

        during, after_close = asyncio.run(scenario())

        assert during is ActionKind.BUY_IN
        assert after_close is ActionKind.NONE
        assert session.get_snapshot().block_number == 3
