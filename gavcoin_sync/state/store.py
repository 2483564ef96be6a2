"""
Snapshot store: the single commit point for session state.

Readers get whatever snapshot was last committed. Writers hand over a fully
built snapshot; replacing the reference is the only mutation, so a reader can
never observe half of a pass.
"""

from typing import Callable, Optional

import structlog

from ..models.snapshot import Snapshot

logger = structlog.get_logger(__name__)

SnapshotListener = Callable[[Snapshot], None]


class SnapshotStore:
    """Holds the current snapshot and notifies listeners on every commit."""

    def __init__(self, reject_stale: bool = False,
                 initial: Optional[Snapshot] = None) -> None:
        self.logger = logger
        self.reject_stale = reject_stale
        self._current = initial or Snapshot()
        self._listeners: list[SnapshotListener] = []
        self.commit_count = 0

    @property
    def current(self) -> Snapshot:
        return self._current

    def publish_initial(self, snapshot: Snapshot) -> None:
        """Publish the first loaded snapshot of a session."""
        self._replace(snapshot)
        self.logger.info(
            "Initial snapshot published",
            address=snapshot.address,
            account_count=len(snapshot.accounts)
        )

    def commit(self, snapshot: Snapshot) -> bool:
        """
        Replace the current snapshot with a pass result.

        With ``reject_stale`` set, a snapshot for an older block than the
        committed one is dropped and False is returned.
        """
        current_block = self._current.block_number
        if (self.reject_stale and current_block is not None
                and snapshot.block_number is not None
                and snapshot.block_number < current_block):
            return False

        self._replace(snapshot)
        return True

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        """Register a change listener; returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _replace(self, snapshot: Snapshot) -> None:
        self._current = snapshot
        self.commit_count += 1

        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                self.logger.exception(
                    "Snapshot listener raised",
                    block_number=snapshot.block_number
                )
