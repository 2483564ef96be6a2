"""Base interface for remote node access."""

from typing import TYPE_CHECKING, Any, Callable, Mapping, Optional, Protocol, Sequence

if TYPE_CHECKING:
    from ..contract.binding import ContractBinding
    from ..errors import TransportError

BlockHandler = Callable[[int], None]
TransportErrorHandler = Callable[["TransportError"], None]


class RpcError(Exception):
    """Base exception for remote call failures."""

    def __init__(self, message: str, method: Optional[str] = None,
                 code: Optional[int] = None):
        super().__init__(message)
        self.method = method
        self.code = code


class ContractCallError(RpcError):
    """A contract call was malformed or its result could not be decoded."""
    pass


class SubscriptionHandle(Protocol):
    """Handle returned by a block subscription."""

    def unsubscribe(self) -> None:
        """Stop delivering notifications. Safe to call more than once."""
        ...


class RemoteApi(Protocol):
    """
    Node primitives consumed by the sync core.

    All reads are coroutines; failures raise ``RpcError`` (or any other
    exception, which callers wrap into the session error taxonomy).
    """

    async def resolve_registry_address(self) -> str:
        ...

    async def registry_lookup(self, registry_address: str, name_hash: bytes,
                              category_tag: str) -> str:
        ...

    async def list_accounts(self) -> Sequence[str]:
        ...

    async def accounts_info(self) -> Mapping[str, Mapping[str, Any]]:
        ...

    async def contract_call(self, binding: "ContractBinding", method: str,
                            args: Sequence[Any]) -> Any:
        ...

    async def native_balance(self, address: str) -> int:
        ...

    def subscribe_block_number(
        self,
        handler: BlockHandler,
        on_error: Optional[TransportErrorHandler] = None,
    ) -> SubscriptionHandle:
        ...
