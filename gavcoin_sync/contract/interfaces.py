"""Call signatures of the contracts the client reads."""

from dataclasses import dataclass
from typing import Mapping


@dataclass(frozen=True)
class ContractMethod:
    """A read-only contract method with a single return value."""
    name: str
    inputs: tuple[str, ...] = ()
    output: str = "uint256"

    @property
    def signature(self) -> str:
        return f"{self.name}({','.join(self.inputs)})"


@dataclass(frozen=True)
class ContractInterface:
    """Named set of callable methods."""
    name: str
    methods: Mapping[str, ContractMethod]

    @classmethod
    def of(cls, name: str, *methods: ContractMethod) -> "ContractInterface":
        return cls(name=name, methods={m.name: m for m in methods})

    def method(self, name: str) -> ContractMethod:
        return self.methods[name]


GAVCOIN_INTERFACE = ContractInterface.of(
    "gavcoin",
    ContractMethod("totalSupply"),
    ContractMethod("remaining"),
    ContractMethod("price"),
    ContractMethod("balanceOf", inputs=("address",)),
)

REGISTRY_INTERFACE = ContractInterface.of(
    "registry",
    ContractMethod("getAddress", inputs=("bytes32", "string"), output="address"),
)
