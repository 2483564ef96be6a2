"""
Snapshot data models.

A ``Snapshot`` is the complete externally visible state of a session. It is
rebuilt wholesale by every synchronization pass and published in a single
step, so consumers never see global counters from one pass next to balances
from another.
"""

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Optional, Sequence

from ..utils.amounts import format_amount, scale_down, sum_scaled, WEI_DECIMALS

TOKEN_DECIMALS = 6
TOKEN_PLACES = 6
NATIVE_PLACES = 3

ZERO = Decimal(0)


@dataclass(frozen=True)
class Account:
    """A local account and its balances as of the last committed pass."""

    address: str
    name: str
    eth_balance: Decimal = ZERO
    gav_balance: Decimal = ZERO
    has_gav: bool = False

    # Base-unit amounts the display values were derived from
    raw_eth_balance: int = 0
    raw_gav_balance: int = 0

    native_places: int = NATIVE_PLACES
    token_places: int = TOKEN_PLACES

    def with_balances(
        self,
        raw_gav: int,
        raw_eth: int,
        token_decimals: int = TOKEN_DECIMALS,
        native_decimals: int = WEI_DECIMALS,
    ) -> "Account":
        """Return a copy carrying balances from a completed pass."""
        return replace(
            self,
            eth_balance=scale_down(raw_eth, native_decimals),
            gav_balance=scale_down(raw_gav, token_decimals),
            has_gav=raw_gav > 0,
            raw_eth_balance=raw_eth,
            raw_gav_balance=raw_gav,
        )

    @property
    def eth_balance_display(self) -> str:
        return format_amount(self.eth_balance, self.native_places)

    @property
    def gav_balance_display(self) -> str:
        return format_amount(self.gav_balance, self.token_places)


@dataclass(frozen=True)
class GlobalState:
    """Contract-wide counters as of one block."""

    block_number: int
    total_supply: Decimal
    remaining: Decimal
    price: Decimal


@dataclass(frozen=True)
class Snapshot:
    """
    Externally visible session state.

    While ``loading`` is True no other field is meaningful. Once loaded,
    ``address`` and account membership are fixed for the session; balances
    and global counters change only by replacing the whole snapshot.
    """

    loading: bool = True
    address: Optional[str] = None
    accounts: tuple[Account, ...] = ()
    eth_balance_total: Decimal = ZERO
    gav_balance_total: Decimal = ZERO
    block_number: Optional[int] = None
    total_supply: Optional[Decimal] = None
    remaining: Optional[Decimal] = None
    price: Optional[Decimal] = None

    @classmethod
    def initial(cls, address: str, accounts: Sequence[Account]) -> "Snapshot":
        """First published snapshot: accounts known, no pass completed yet."""
        return cls(loading=False, address=address, accounts=tuple(accounts))

    def from_pass(
        self,
        global_state: GlobalState,
        raw_gav_balances: Sequence[int],
        raw_eth_balances: Sequence[int],
        token_decimals: int = TOKEN_DECIMALS,
        native_decimals: int = WEI_DECIMALS,
    ) -> "Snapshot":
        """
        Build the snapshot produced by one pass over this snapshot's accounts.

        Balance sequences are positional, matching ``self.accounts``.
        """
        if not (len(raw_gav_balances) == len(raw_eth_balances) == len(self.accounts)):
            raise ValueError("Balance count does not match account count")

        accounts = tuple(
            account.with_balances(gav, eth, token_decimals, native_decimals)
            for account, gav, eth in zip(self.accounts, raw_gav_balances, raw_eth_balances)
        )

        return replace(
            self,
            accounts=accounts,
            eth_balance_total=sum_scaled(raw_eth_balances, native_decimals),
            gav_balance_total=sum_scaled(raw_gav_balances, token_decimals),
            block_number=global_state.block_number,
            total_supply=global_state.total_supply,
            remaining=global_state.remaining,
            price=global_state.price,
        )

    @property
    def global_state(self) -> Optional[GlobalState]:
        if self.block_number is None:
            return None
        return GlobalState(
            block_number=self.block_number,
            total_supply=self.total_supply,  # type: ignore[arg-type]
            remaining=self.remaining,  # type: ignore[arg-type]
            price=self.price,  # type: ignore[arg-type]
        )

    def account(self, address: str) -> Optional[Account]:
        """Look up an account by address (case-insensitive)."""
        wanted = address.lower()
        for account in self.accounts:
            if account.address.lower() == wanted:
                return account
        return None
