"""
Gavcoin Sync - Block-driven token state synchronization

Keeps a local, atomically replaced view of the gavcoin token contract and the
node's local accounts, refreshed from a remote node on every new block.
"""

__version__ = "0.1.0"
__author__ = "Gavcoin Sync Team"
