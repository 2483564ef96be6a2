"""Pytest configuration and shared fixtures."""

import asyncio
from typing import Any, Callable, Dict, List, Optional

import pytest

REGISTRY_ADDRESS = "0x" + "11" * 20
GAVCOIN_ADDRESS = "0x" + "22" * 20
ACCOUNT_ADDRESSES = ["0x" + "a1" * 20, "0x" + "a2" * 20, "0x" + "a3" * 20]


class FakeSubscription:
    """Block subscription handed out by FakeRemoteApi."""

    def __init__(self, handler: Callable[[int], None], on_error: Optional[Callable]):
        self.handler = handler
        self.on_error = on_error
        self.active = True

    def unsubscribe(self) -> None:
        self.active = False


class FakeRemoteApi:
    """
    In-memory node.

    Read values are captured when a read is issued, then the read waits on
    ``gate`` (and ``balance_gate`` for balance reads) before completing, so
    tests can hold passes in flight while chain state changes underneath.
    Entries in ``failures`` make the matching read raise.
    """

    def __init__(self) -> None:
        self.registry_address = REGISTRY_ADDRESS
        self.contract_address: Any = GAVCOIN_ADDRESS
        self.accounts: List[str] = list(ACCOUNT_ADDRESSES)
        self.infos: Dict[str, Dict[str, Any]] = {
            ACCOUNT_ADDRESSES[0]: {"name": "Alice"},
            ACCOUNT_ADDRESSES[1]: {"name": ""},
        }
        self.counters = {"totalSupply": 0, "remaining": 0, "price": 0}
        self.gav: Dict[str, int] = {a: 0 for a in self.accounts}
        self.eth: Dict[str, int] = {a: 0 for a in self.accounts}

        self.failures: Dict[Any, Exception] = {}
        self.gate: Optional[asyncio.Event] = None
        self.balance_gate: Optional[asyncio.Event] = None

        self.reads_started = 0
        self.calls: List[Any] = []
        self.lookups: List[tuple] = []
        self.subscriptions: List[FakeSubscription] = []

    def set_accounts(self, addresses: List[str]) -> None:
        self.accounts = list(addresses)
        self.gav = {a: 0 for a in addresses}
        self.eth = {a: 0 for a in addresses}

    async def _finish(self, key: Any, value: Any, balance: bool = False) -> Any:
        self.calls.append(key)
        self.reads_started += 1
        gates = [self.gate, self.balance_gate if balance else None]
        for gate in gates:
            if gate is not None:
                await gate.wait()
        if key in self.failures:
            raise self.failures[key]
        return value

    async def resolve_registry_address(self) -> str:
        return await self._finish("resolve_registry_address", self.registry_address)

    async def registry_lookup(self, registry_address, name_hash, category_tag):
        self.lookups.append((registry_address, name_hash, category_tag))
        return await self._finish("registry_lookup", self.contract_address)

    async def list_accounts(self):
        return await self._finish("list_accounts", list(self.accounts))

    async def accounts_info(self):
        return await self._finish("accounts_info", dict(self.infos))

    async def contract_call(self, binding, method, args):
        if method == "balanceOf":
            return await self._finish(("balanceOf", args[0]), self.gav[args[0]], balance=True)
        return await self._finish(method, self.counters[method])

    async def native_balance(self, address):
        return await self._finish(("native_balance", address), self.eth[address], balance=True)

    def subscribe_block_number(self, handler, on_error=None) -> FakeSubscription:
        subscription = FakeSubscription(handler, on_error)
        self.subscriptions.append(subscription)
        return subscription

    def emit_block(self, block_number: int) -> None:
        for subscription in self.subscriptions:
            if subscription.active:
                subscription.handler(block_number)

    @property
    def active_subscriptions(self) -> List[FakeSubscription]:
        return [s for s in self.subscriptions if s.active]


async def wait_for_reads(api: FakeRemoteApi, count: int) -> None:
    """Yield to the loop until ``count`` reads have been issued."""
    for _ in range(500):
        if api.reads_started >= count:
            return
        await asyncio.sleep(0)
    raise AssertionError(f"Only {api.reads_started} of {count} reads were issued")


@pytest.fixture
def fake_api() -> FakeRemoteApi:
    """Node with three local accounts and zeroed chain state."""
    return FakeRemoteApi()


@pytest.fixture
def read_waiter() -> Callable:
    """Coroutine function that waits until a number of reads are in flight."""
    return wait_for_reads
