"""
Error classification for the synchronization client.

Startup failures end session attachment and leave the snapshot loading;
session failures are contained and the session keeps running.
"""

from .startup_failures import (
    StartupError,
    ResolutionError,
    EnumerationError,
)
from .session_failures import (
    SessionError,
    SyncReadError,
    TransportError,
    StateTransitionError,
    ConfigurationError,
)

__all__ = [
    # Startup Failures
    "StartupError",
    "ResolutionError",
    "EnumerationError",
    # Session Failures
    "SessionError",
    "SyncReadError",
    "TransportError",
    "StateTransitionError",
    "ConfigurationError",
]
