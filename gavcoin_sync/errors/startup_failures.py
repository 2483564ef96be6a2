"""
Startup failure classifications.

These exceptions are raised while a session attaches to the node. None of
them are retried: the session stays in its loading state until restart.
"""

from typing import Optional, Dict, Any


class StartupError(Exception):
    """Base class for failures that prevent the first snapshot from being published."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = False


class ResolutionError(StartupError):
    """Registry or contract lookup failed."""

    def __init__(self, message: str, stage: Optional[str] = None,
                 name: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.stage = stage
        self.name = name


class EnumerationError(StartupError):
    """The node's account store could not be listed."""

    def __init__(self, message: str, operation: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.operation = operation
