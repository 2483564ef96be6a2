"""
Block-triggered synchronization engine.

Each block notification spawns an independent pass:

    counters (3 reads) → balances (2 × N reads) → one new Snapshot → commit

Reads inside a stage run concurrently and meet at a fan-in barrier. A pass
either commits a complete snapshot or commits nothing. Passes are never
cancelled by newer notifications; whichever commits last wins unless the
store rejects stale blocks.
"""

import asyncio
from typing import Any, Awaitable, Optional, Sequence

import structlog

from .api.base import RemoteApi
from .config.defaults import DisplayParams
from .contract.binding import ContractBinding
from .errors import SyncReadError
from .logging.config import get_sync_logger, log_pass_outcome
from .models.snapshot import Account, GlobalState, Snapshot
from .state.store import SnapshotStore
from .utils.amounts import scale_down, to_base_units

logger = structlog.get_logger(__name__)
sync_logger = get_sync_logger(__name__)

GLOBAL_COUNTERS = ("totalSupply", "remaining", "price")


class SynchronizationEngine:
    """
    Refreshes the session snapshot on every new block.

    The binding and the account list are read-shared by every read of a pass
    and never change during it; the store is the only thing written, once,
    at the end of the pass.
    """

    def __init__(
        self,
        api: RemoteApi,
        binding: ContractBinding,
        store: SnapshotStore,
        display: DisplayParams = DisplayParams(),
    ) -> None:
        self.logger = logger
        self.sync_logger = sync_logger

        self.api = api
        self.binding = binding
        self.store = store
        self.display = display

        self._tasks: set[asyncio.Task] = set()

        self.passes_started = 0
        self.passes_committed = 0
        self.passes_failed = 0
        self.passes_rejected = 0

    def on_block(self, block_number: int) -> None:
        """Block notification handler; schedules a pass and returns immediately."""
        try:
            task = asyncio.get_running_loop().create_task(self.run_pass(block_number))
        except RuntimeError:
            self.logger.error("No running event loop for sync pass", block_number=block_number)
            return

        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    async def wait_idle(self) -> None:
        """Wait until every scheduled pass has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def run_pass(self, block_number: int) -> Optional[Snapshot]:
        """
        Run one synchronization pass.

        Returns:
            The committed snapshot, or None if the pass failed or was rejected
        """
        self.passes_started += 1
        base = self.store.current

        if base.loading:
            self.logger.warning("Sync pass skipped before initial snapshot", block_number=block_number)
            return None

        try:
            global_state = await self._read_global_state(block_number)
            raw_gav, raw_eth = await self._read_balances(base.accounts, block_number)
        except SyncReadError as e:
            self.passes_failed += 1
            log_pass_outcome(self.sync_logger, block_number, "failed", {
                "error": str(e),
                "method": e.method,
                "address": e.address,
            })
            return None

        snapshot = base.from_pass(
            global_state,
            raw_gav,
            raw_eth,
            token_decimals=self.display.token_decimals,
            native_decimals=self.display.native_decimals,
        )

        if not self.store.commit(snapshot):
            self.passes_rejected += 1
            log_pass_outcome(self.sync_logger, block_number, "rejected", {
                "committed_block": self.store.current.block_number,
            })
            return None

        self.passes_committed += 1
        log_pass_outcome(self.sync_logger, block_number, "committed", {
            "account_count": len(snapshot.accounts),
            "gav_balance_total": str(snapshot.gav_balance_total),
            "eth_balance_total": str(snapshot.eth_balance_total),
        })
        return snapshot

    def stats(self) -> dict[str, int]:
        return {
            "passes_started": self.passes_started,
            "passes_committed": self.passes_committed,
            "passes_failed": self.passes_failed,
            "passes_rejected": self.passes_rejected,
            "in_flight": self.in_flight,
        }

    async def _read_global_state(self, block_number: int) -> GlobalState:
        results = await asyncio.gather(
            *(
                self._read(self.binding.call(method), method, None, block_number)
                for method in GLOBAL_COUNTERS
            ),
            return_exceptions=True,
        )
        total_supply, remaining, price = self._unwrap(results)

        return GlobalState(
            block_number=block_number,
            total_supply=scale_down(total_supply, self.display.token_decimals),
            remaining=scale_down(remaining, self.display.token_decimals),
            price=scale_down(price, self.display.native_decimals),
        )

    async def _read_balances(
        self,
        accounts: Sequence[Account],
        block_number: int,
    ) -> tuple[list[int], list[int]]:
        gav_batch = asyncio.gather(
            *(
                self._read(self.binding.call("balanceOf", account.address),
                           "balanceOf", account.address, block_number)
                for account in accounts
            ),
            return_exceptions=True,
        )
        eth_batch = asyncio.gather(
            *(
                self._read(self.api.native_balance(account.address),
                           "native_balance", account.address, block_number)
                for account in accounts
            ),
            return_exceptions=True,
        )
        gav_results, eth_results = await asyncio.gather(gav_batch, eth_batch)

        return self._unwrap(gav_results), self._unwrap(eth_results)

    async def _read(
        self,
        read: Awaitable[Any],
        method: str,
        address: Optional[str],
        block_number: int,
    ) -> int:
        try:
            return to_base_units(await read)
        except asyncio.CancelledError:
            raise
        except SyncReadError:
            raise
        except Exception as e:
            raise SyncReadError(
                f"{method} read failed: {e}",
                method=method,
                address=address,
                block_number=block_number,
            ) from e

    @staticmethod
    def _unwrap(results: Sequence[Any]) -> list[int]:
        # Every branch has reached the barrier; surface the first failure
        for result in results:
            if isinstance(result, BaseException):
                raise result
        return list(results)
