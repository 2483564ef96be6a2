"""
Session failure classifications.

These exceptions happen after the session is attached. They are contained
where they occur and never tear the session down.
"""

from typing import Optional, Dict, Any


class SessionError(Exception):
    """Base class for contained failures of a running session."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = True


class SyncReadError(SessionError):
    """A read within a synchronization pass failed; the pass is aborted."""

    def __init__(self, message: str, method: Optional[str] = None,
                 address: Optional[str] = None,
                 block_number: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.method = method
        self.address = address
        self.block_number = block_number


class TransportError(SessionError):
    """The block notification stream disconnected."""

    def __init__(self, message: str, consecutive_failures: int = 0, **kwargs):
        super().__init__(message, **kwargs)
        self.consecutive_failures = consecutive_failures


class StateTransitionError(SessionError):
    """An action request named a kind the state machine does not know."""

    def __init__(self, message: str, current_state: Optional[str] = None,
                 attempted_transition: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.current_state = current_state
        self.attempted_transition = attempted_transition


class ConfigurationError(SessionError):
    """Configuration failed validation."""

    def __init__(self, message: str, errors: Optional[list] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.errors = errors or []
        self.recoverable = False
