"""
Remote node API module.

The ``RemoteApi`` protocol is everything the sync core needs from a node;
``ParityRpcClient`` implements it over JSON-RPC.
"""

from .base import ContractCallError, RemoteApi, RpcError, SubscriptionHandle

__all__ = ["ContractCallError", "RemoteApi", "RpcError", "SubscriptionHandle"]
