"""
Data models module.

Immutable snapshot values shared between the sync engine and its consumers.
Every update builds a new value; nothing is mutated in place.
"""

from .snapshot import Account, GlobalState, Snapshot

__all__ = ["Account", "GlobalState", "Snapshot"]
