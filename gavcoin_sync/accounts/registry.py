"""Enumeration of local accounts and their display names."""

import asyncio
from typing import Any, Mapping, Sequence

import structlog
from eth_utils import is_hex_address

from ..api.base import RemoteApi
from ..config.defaults import DisplayParams
from ..errors import EnumerationError
from ..models.snapshot import Account

logger = structlog.get_logger(__name__)


def _is_account_address(value: Any) -> bool:
    return is_hex_address(value) and value.startswith("0x")


class AccountRegistry:
    """Builds the ordered, zero-balance account list for a new session."""

    def __init__(self, api: RemoteApi, display: DisplayParams = DisplayParams()) -> None:
        self.api = api
        self.display = display
        self.logger = logger

    async def enumerate(self) -> tuple[Account, ...]:
        """
        List accounts and their names concurrently.

        Raises:
            EnumerationError: If either listing fails or returns malformed data
        """
        try:
            addresses, infos = await asyncio.gather(
                self.api.list_accounts(),
                self.api.accounts_info(),
            )
        except Exception as e:
            raise EnumerationError(
                f"Account enumeration failed: {e}",
                operation="list_accounts",
            ) from e

        if not isinstance(addresses, (list, tuple)):
            raise EnumerationError(
                "Account list is not a sequence",
                operation="list_accounts",
                context={"received": repr(addresses)},
            )

        if infos is not None and not isinstance(infos, dict):
            raise EnumerationError(
                "Account metadata is not a mapping",
                operation="accounts_info",
                context={"received": repr(infos)},
            )

        malformed = [a for a in addresses if not _is_account_address(a)]
        if malformed:
            raise EnumerationError(
                f"Account list contains {len(malformed)} malformed address(es)",
                operation="list_accounts",
                context={"received": [repr(a) for a in malformed]},
            )

        accounts = self.build_accounts(addresses, infos or {})

        self.logger.info("Accounts enumerated", account_count=len(accounts))
        return accounts

    def build_accounts(
        self,
        addresses: Sequence[str],
        infos: Mapping[str, Mapping[str, Any]],
    ) -> tuple[Account, ...]:
        """Pair addresses with names; the first occurrence of an address wins."""
        seen: set[str] = set()
        accounts = []

        for address in addresses:
            key = address.lower()
            if key in seen:
                self.logger.warning("Duplicate account skipped", address=address)
                continue
            seen.add(key)

            accounts.append(Account(
                address=address,
                name=self._name_for(address, infos),
                native_places=self.display.native_places,
                token_places=self.display.token_places,
            ))

        return tuple(accounts)

    def _name_for(self, address: str, infos: Mapping[str, Mapping[str, Any]]) -> str:
        info = infos.get(address)
        if info is None:
            # Node may report keys in a different case
            info = next(
                (v for k, v in infos.items()
                 if isinstance(k, str) and k.lower() == address.lower()),
                None,
            )
        if not isinstance(info, Mapping):
            return self.display.unnamed_label
        name = info.get("name")
        return name if isinstance(name, str) and name else self.display.unnamed_label
