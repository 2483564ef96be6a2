"""
Account registry module.

Enumerates the node's local accounts into the session's initial account list.
"""

from .registry import AccountRegistry

__all__ = ["AccountRegistry"]
