"""
Contract binding module.

Resolves the token contract through the name registry and exposes a typed
handle for the calls the sync engine issues.
"""

from .binding import ContractBinding
from .interfaces import GAVCOIN_INTERFACE, REGISTRY_INTERFACE, ContractInterface, ContractMethod
from .resolver import ContractResolver, name_hash

__all__ = [
    "ContractBinding",
    "ContractInterface",
    "ContractMethod",
    "ContractResolver",
    "GAVCOIN_INTERFACE",
    "REGISTRY_INTERFACE",
    "name_hash",
]
