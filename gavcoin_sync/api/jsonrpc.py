"""
JSON-RPC adapter for a Parity-style node.

Implements ``RemoteApi`` over HTTP with ``httpx``. Block notifications are
produced by polling ``eth_blockNumber`` and firing the handler whenever the
head changes.
"""

import asyncio
from itertools import count
from typing import Any, Awaitable, Callable, Mapping, Optional, Sequence

import httpx
import structlog

from ..contract.binding import ContractBinding
from ..contract.interfaces import REGISTRY_INTERFACE
from ..errors import TransportError
from ..utils.amounts import to_base_units
from .abi import decode_result, encode_call
from .base import BlockHandler, ContractCallError, RpcError, TransportErrorHandler

logger = structlog.get_logger(__name__)


class BlockNumberPoller:
    """Polls the chain head and reports each new block number once."""

    def __init__(
        self,
        fetch: Callable[[], Awaitable[int]],
        handler: BlockHandler,
        on_error: Optional[TransportErrorHandler] = None,
        interval_seconds: float = 1.0,
        max_failures: int = 5,
    ) -> None:
        self.fetch = fetch
        self.handler = handler
        self.on_error = on_error
        self.interval_seconds = interval_seconds
        self.max_failures = max_failures
        self.logger = logger
        self.last_block: Optional[int] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> "BlockNumberPoller":
        """Start polling on the running event loop."""
        if self._task is None:
            self._task = asyncio.get_running_loop().create_task(self._run())
        return self

    def unsubscribe(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
            self.logger.info("Block subscription cancelled", last_block=self.last_block)

    async def wait_stopped(self) -> None:
        """Wait for the polling task to end, whether cancelled or lost."""
        if self._task is not None:
            await asyncio.gather(self._task, return_exceptions=True)

    async def _run(self) -> None:
        failures = 0

        while True:
            try:
                number = await self.fetch()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                failures += 1
                self.logger.warning(
                    "Block number poll failed",
                    error=str(e),
                    consecutive_failures=failures
                )
                if failures >= self.max_failures:
                    self._report_lost(e, failures)
                    return
            else:
                failures = 0
                if number != self.last_block:
                    self.last_block = number
                    self._dispatch(number)

            await asyncio.sleep(self.interval_seconds)

    def _dispatch(self, number: int) -> None:
        try:
            self.handler(number)
        except Exception:
            self.logger.exception("Block handler raised", block_number=number)

    def _report_lost(self, cause: Exception, failures: int) -> None:
        error = TransportError(
            f"Block notification stream lost: {cause}",
            consecutive_failures=failures,
            context={"last_block": self.last_block},
        )
        self.logger.error(
            "Block notification stream lost",
            error=str(cause),
            consecutive_failures=failures
        )
        if self.on_error is not None:
            self.on_error(error)


class ParityRpcClient:
    """``RemoteApi`` implementation over HTTP JSON-RPC."""

    def __init__(
        self,
        url: str,
        timeout_seconds: float = 10.0,
        poll_interval_seconds: float = 1.0,
        max_poll_failures: int = 5,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.url = url
        self.poll_interval_seconds = poll_interval_seconds
        self.max_poll_failures = max_poll_failures
        self.logger = logger
        self._ids = count(1)
        self._client = httpx.AsyncClient(
            timeout=timeout_seconds,
            transport=transport,
            headers={"User-Agent": "gavcoin-sync/0.1"},
        )

    async def __aenter__(self) -> "ParityRpcClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(self, method: str, params: Optional[Sequence[Any]] = None) -> Any:
        """
        Send one JSON-RPC request and return its ``result``.

        Raises:
            RpcError: On HTTP failure, malformed response or error object
        """
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": list(params or []),
        }

        try:
            response = await self._client.post(self.url, json=payload)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPError as e:
            raise RpcError(f"{method} request failed: {e}", method=method) from e
        except ValueError as e:
            raise RpcError(f"{method} returned invalid JSON", method=method) from e

        if not isinstance(body, dict):
            raise RpcError(f"{method} returned a non-object response", method=method)

        error = body.get("error")
        if error:
            raise RpcError(
                f"{method} failed: {error.get('message', error)}",
                method=method,
                code=error.get("code"),
            )

        if "result" not in body:
            raise RpcError(f"{method} response has no result", method=method)

        return body["result"]

    async def resolve_registry_address(self) -> str:
        return await self.request("parity_registryAddress")

    async def registry_lookup(self, registry_address: str, name_hash: bytes,
                              category_tag: str) -> str:
        method = REGISTRY_INTERFACE.method("getAddress")
        data = encode_call(method.signature, method.inputs, [name_hash, category_tag])
        result = await self._eth_call(registry_address, data)
        return decode_result(method.output, result)

    async def list_accounts(self) -> Sequence[str]:
        return await self.request("personal_listAccounts")

    async def accounts_info(self) -> Mapping[str, Mapping[str, Any]]:
        return await self.request("parity_accountsInfo")

    async def contract_call(self, binding: ContractBinding, method: str,
                            args: Sequence[Any]) -> Any:
        try:
            contract_method = binding.interface.method(method)
        except KeyError as e:
            raise ContractCallError(
                f"{binding.interface.name} has no method {method}", method=method
            ) from e

        data = encode_call(contract_method.signature, contract_method.inputs, args)
        result = await self._eth_call(binding.address, data)
        return decode_result(contract_method.output, result)

    async def native_balance(self, address: str) -> int:
        result = await self.request("eth_getBalance", [address, "latest"])
        return to_base_units(result)

    async def block_number(self) -> int:
        result = await self.request("eth_blockNumber")
        return to_base_units(result)

    def subscribe_block_number(
        self,
        handler: BlockHandler,
        on_error: Optional[TransportErrorHandler] = None,
    ) -> BlockNumberPoller:
        """Start delivering new block numbers; must be called inside a running loop."""
        return BlockNumberPoller(
            self.block_number,
            handler,
            on_error=on_error,
            interval_seconds=self.poll_interval_seconds,
            max_failures=self.max_poll_failures,
        ).start()

    async def _eth_call(self, to: str, data: str) -> str:
        return await self.request("eth_call", [{"to": to, "data": data}, "latest"])
