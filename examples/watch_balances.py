#!/usr/bin/env python3
"""
Watch Balances Example - Gavcoin Sync

Attaches a session to a local node, prints every committed snapshot and
exits after a fixed duration. It shows how to:
- Load configuration
- Attach a session and listen for snapshots
- Drive the action request state machine

Run: python examples/watch_balances.py [seconds]
"""

import asyncio
import sys

from gavcoin_sync.api.jsonrpc import ParityRpcClient
from gavcoin_sync.config.loader import ConfigLoader
from gavcoin_sync.logging.config import configure_from_params
from gavcoin_sync.models.snapshot import Snapshot
from gavcoin_sync.session import SyncSession
from gavcoin_sync.state.models import ActionKind


def print_snapshot(snapshot: Snapshot) -> None:
    """Print a committed snapshot."""
    state = snapshot.global_state
    if state is None:
        print(f"📋 gavcoin at {snapshot.address}, {len(snapshot.accounts)} accounts")
        return

    print(f"\n⛓  Block #{state.block_number}")
    print(f"   Total supply: {state.total_supply}  Remaining: {state.remaining}  Price: {state.price} ETH")
    print(f"   Totals: {snapshot.gav_balance_total} GAV / {snapshot.eth_balance_total} ETH")
    for account in snapshot.accounts:
        marker = "💰" if account.has_gav else "  "
        print(f"   {marker} {account.name:<16} {account.address}  "
              f"{account.gav_balance_display:>16} GAV  {account.eth_balance_display:>12} ETH")


async def main(duration: float) -> int:
    config = ConfigLoader.create().load()
    configure_from_params(config.logging)

    async with ParityRpcClient(
        config.rpc.url,
        timeout_seconds=config.rpc.timeout_seconds,
        poll_interval_seconds=config.rpc.poll_interval_seconds,
        max_poll_failures=config.rpc.max_poll_failures,
    ) as api:
        session = SyncSession(api, config)
        session.subscribe(print_snapshot)

        if not await session.attach():
            print(f"❌ Could not attach: {session.startup_error or session.transport_error}")
            return 1

        session.request_action(ActionKind.BUY_IN)
        print(f"🪟 Open action: {session.action.value}")
        session.close_action()

        await asyncio.sleep(duration)
        await session.close()
        print(f"\n📊 {session.engine.stats()}")

    return 0


if __name__ == "__main__":
    seconds = float(sys.argv[1]) if len(sys.argv) > 1 else 30.0
    sys.exit(asyncio.run(main(seconds)))
