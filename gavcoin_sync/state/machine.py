"""
Action request state machine.

Exactly one action is open at any time. ``open`` moves from any state to the
requested kind, discarding whatever was open; ``close`` always returns to
``NONE``. There is no queue and no terminal state.
"""

from typing import Callable, Union

import structlog

from ..errors import StateTransitionError
from ..logging.config import get_action_logger, log_action_transition
from .models import ActionKind

logger = structlog.get_logger(__name__)
action_logger = get_action_logger(__name__)

ActionListener = Callable[[ActionKind], None]


class ActionStateMachine:
    """Tracks which action dialog, if any, is open."""

    def __init__(self) -> None:
        self.logger = logger
        self.action_logger = action_logger
        self._current = ActionKind.NONE
        self._listeners: list[ActionListener] = []

    @property
    def current(self) -> ActionKind:
        return self._current

    def open(self, kind: Union[ActionKind, str]) -> ActionKind:
        """
        Open an action, replacing any open one.

        Raises:
            StateTransitionError: If ``kind`` is not a known action
        """
        try:
            target = ActionKind(kind)
        except ValueError as e:
            raise StateTransitionError(
                f"Unknown action: {kind!r}",
                current_state=self._current.value,
                attempted_transition=str(kind),
            ) from e

        if target is ActionKind.NONE:
            return self.close()

        self._transition(target, trigger="open")
        return target

    def close(self) -> ActionKind:
        """Close whatever action is open."""
        self._transition(ActionKind.NONE, trigger="close")
        return ActionKind.NONE

    def subscribe(self, listener: ActionListener) -> Callable[[], None]:
        """Register a change listener; returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _transition(self, target: ActionKind, trigger: str) -> None:
        previous = self._current
        self._current = target

        log_action_transition(
            self.action_logger,
            from_action=previous.value,
            to_action=target.value,
            trigger=trigger,
        )

        for listener in list(self._listeners):
            try:
                listener(target)
            except Exception:
                self.logger.exception("Action listener raised", action=target.value)
