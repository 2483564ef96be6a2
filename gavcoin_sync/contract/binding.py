"""Resolved, callable handle to one contract deployment."""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from eth_utils import is_hex_address

from ..api.base import ContractCallError
from ..errors import ResolutionError
from .interfaces import ContractInterface

if TYPE_CHECKING:
    from ..api.base import RemoteApi


def is_zero_address(address: str) -> bool:
    return int(address, 16) == 0


@dataclass(frozen=True)
class ContractBinding:
    """
    Immutable binding of an address to a contract interface.

    Calls are delegated to the remote API, which owns the wire encoding.
    """

    address: str
    interface: ContractInterface
    api: "RemoteApi"

    @classmethod
    def create(cls, api: "RemoteApi", address: Any,
               interface: ContractInterface) -> "ContractBinding":
        """
        Build a binding, validating the address and interface.

        Raises:
            ResolutionError: If the address is malformed or zero, or the
                interface has no methods
        """
        if not is_hex_address(address) or not address.startswith("0x"):
            raise ResolutionError(
                f"Malformed contract address: {address!r}",
                stage="binding",
                name=interface.name,
            )

        if is_zero_address(address):
            raise ResolutionError(
                f"Contract {interface.name} is not registered",
                stage="lookup",
                name=interface.name,
            )

        if not interface.methods:
            raise ResolutionError(
                f"Interface {interface.name} declares no methods",
                stage="binding",
                name=interface.name,
            )

        return cls(address=address, interface=interface, api=api)

    async def call(self, method: str, *args: Any) -> Any:
        """Issue a read-only call against the latest chain state."""
        if method not in self.interface.methods:
            raise ContractCallError(
                f"{self.interface.name} has no method {method}",
                method=method,
            )
        return await self.api.contract_call(self, method, list(args))
