"""
Session lifecycle: one-shot attachment followed by indefinite subscription.

    registry → contract binding → accounts → initial snapshot → block stream

Any failure before the initial snapshot is published leaves the session
loading for good. After that, the only long-lived resource is the block
subscription, released by ``detach``.
"""

import asyncio
from typing import Callable, Optional, Union

import structlog

from .accounts.registry import AccountRegistry
from .api.base import RemoteApi, SubscriptionHandle
from .config.defaults import SessionConfig, get_default_config
from .contract.binding import ContractBinding
from .contract.resolver import ContractResolver
from .engine import SynchronizationEngine
from .errors import StartupError, TransportError
from .models.snapshot import Snapshot
from .state.machine import ActionListener, ActionStateMachine
from .state.models import ActionKind
from .state.store import SnapshotListener, SnapshotStore

logger = structlog.get_logger(__name__)


class SyncSession:
    """
    Process-wide synchronized view of the gavcoin contract.

    Consumers read ``get_snapshot()``, listen with ``subscribe()`` and drive
    the action dialog with ``request_action()`` / ``close_action()``.
    """

    def __init__(
        self,
        api: RemoteApi,
        config: Optional[SessionConfig] = None,
        store: Optional[SnapshotStore] = None,
    ) -> None:
        self.logger = logger
        self.api = api
        self.config = config or get_default_config()
        self.store = store or SnapshotStore(reject_stale=self.config.sync.reject_stale_passes)
        self.actions = ActionStateMachine()

        self.binding: Optional[ContractBinding] = None
        self.engine: Optional[SynchronizationEngine] = None
        self.subscription: Optional[SubscriptionHandle] = None
        self.startup_error: Optional[StartupError] = None
        self.transport_error: Optional[TransportError] = None

        self._attach_task: Optional[asyncio.Task] = None

    @property
    def attached(self) -> bool:
        return self.subscription is not None

    async def attach(self) -> bool:
        """
        Run the startup sequence once.

        Repeated or concurrent calls share the outcome of the first attempt.

        Returns:
            True if the initial snapshot was published and the block stream
            subscribed
        """
        if self._attach_task is None:
            self._attach_task = asyncio.get_running_loop().create_task(self._attach())
        return await self._attach_task

    async def _attach(self) -> bool:
        registry = self.config.registry

        try:
            binding = await ContractResolver(
                self.api,
                contract_name=registry.contract_name,
                category_tag=registry.category_tag,
            ).resolve()
            accounts = await AccountRegistry(self.api, self.config.display).enumerate()
        except StartupError as e:
            self._record_startup_failure(e)
            return False
        except Exception as e:
            error = StartupError(
                f"Unexpected startup failure: {e}",
                context={"cause_type": type(e).__name__},
            )
            error.__cause__ = e
            self._record_startup_failure(error)
            return False

        self.binding = binding
        self.engine = SynchronizationEngine(
            self.api, binding, self.store, display=self.config.display
        )
        self.store.publish_initial(Snapshot.initial(binding.address, accounts))

        try:
            self.subscription = self.api.subscribe_block_number(
                self.engine.on_block, on_error=self._on_transport_error
            )
        except Exception as e:
            self._on_transport_error(TransportError(
                f"Block subscription failed: {e}",
                context={"address": binding.address},
            ))
            return False

        self.logger.info(
            "Session attached",
            address=binding.address,
            account_count=len(accounts)
        )
        return True

    def detach(self) -> None:
        """Release the block subscription. Safe to call more than once."""
        if self.subscription is not None:
            self.subscription.unsubscribe()
            self.subscription = None
            self.logger.info("Session detached")

    async def close(self) -> None:
        """Detach and wait for in-flight passes to finish."""
        self.detach()
        if self.engine is not None:
            await self.engine.wait_idle()

    def get_snapshot(self) -> Snapshot:
        return self.store.current

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        """Register a snapshot change listener; returns its unsubscribe function."""
        return self.store.subscribe(listener)

    @property
    def action(self) -> ActionKind:
        return self.actions.current

    def request_action(self, kind: Union[ActionKind, str]) -> ActionKind:
        return self.actions.open(kind)

    def close_action(self) -> ActionKind:
        return self.actions.close()

    def subscribe_actions(self, listener: ActionListener) -> Callable[[], None]:
        return self.actions.subscribe(listener)

    def _record_startup_failure(self, error: StartupError) -> None:
        self.startup_error = error
        self.logger.error(
            "Session startup failed",
            error=str(error),
            error_type=type(error).__name__,
            context=error.context
        )

    def _on_transport_error(self, error: TransportError) -> None:
        self.transport_error = error
        self.subscription = None
        self.logger.error(
            "Block notification stream lost",
            error=str(error),
            consecutive_failures=error.consecutive_failures
        )
