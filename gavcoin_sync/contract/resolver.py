"""
Contract address resolution through the name registry.

Runs once per session: locate the registry, look up the hashed contract
name under its category tag, and bind the result.
"""

import structlog
from eth_hash.auto import keccak

from ..api.base import RemoteApi
from ..errors import ResolutionError
from .binding import ContractBinding
from .interfaces import GAVCOIN_INTERFACE, ContractInterface

logger = structlog.get_logger(__name__)


def name_hash(name: str) -> bytes:
    """Registry key for a symbolic name: keccak256 of its UTF-8 bytes."""
    return keccak(name.encode("utf-8"))


class ContractResolver:
    """Resolves a symbolic contract name into a ``ContractBinding``."""

    def __init__(
        self,
        api: RemoteApi,
        contract_name: str = "gavcoin",
        category_tag: str = "A",
        interface: ContractInterface = GAVCOIN_INTERFACE,
    ) -> None:
        self.api = api
        self.contract_name = contract_name
        self.category_tag = category_tag
        self.interface = interface
        self.logger = logger

    async def resolve(self) -> ContractBinding:
        """
        Resolve the contract binding.

        Raises:
            ResolutionError: If the registry is unreachable, the name is not
                registered, or the binding cannot be built
        """
        try:
            registry_address = await self.api.resolve_registry_address()
        except Exception as e:
            raise ResolutionError(
                f"Registry address lookup failed: {e}",
                stage="registry",
                name=self.contract_name,
            ) from e

        self.logger.info("Registry located", registry_address=registry_address)

        try:
            address = await self.api.registry_lookup(
                registry_address, name_hash(self.contract_name), self.category_tag
            )
        except Exception as e:
            raise ResolutionError(
                f"Registry lookup for {self.contract_name} failed: {e}",
                stage="lookup",
                name=self.contract_name,
                context={"registry_address": registry_address},
            ) from e

        if not address:
            raise ResolutionError(
                f"Name {self.contract_name} is not registered",
                stage="lookup",
                name=self.contract_name,
                context={"registry_address": registry_address},
            )

        binding = ContractBinding.create(self.api, address, self.interface)

        self.logger.info(
            "Contract located",
            contract=self.contract_name,
            address=binding.address
        )
        return binding
