"""
Data models for the dark pool verifier.

Enums mirror the verifier contract's variant order (the felt it returns is
the variant index). Views are the decoded results of read-only calls.
Prices are 18-decimal fixed point; amounts are in token base units.
"""

from __future__ import annotations

from enum import Enum, IntEnum

from pydantic import BaseModel

PRICE_SCALE = 10**18
"""Fixed-point scale of order prices."""


class Side(IntEnum):
    """Order side. The integer value is the felt sent to the verifier."""
    BUY = 0
    SELL = 1

    @classmethod
    def parse(cls, value: Side | str | int) -> Side:
        if isinstance(value, Side):
            return value
        if isinstance(value, str):
            try:
                return cls[value.upper()]
            except KeyError:
                raise ValueError(f"Unknown side: {value!r}") from None
        return cls(value)


class EpochPhase(str, Enum):
    """Phase of the current epoch, as reported by the verifier."""
    COMMIT = "Commit"
    REVEAL = "Reveal"
    SETTLE = "Settle"
    CLOSED = "Closed"

    @classmethod
    def from_index(cls, index: int) -> EpochPhase:
        members = list(cls)
        # Unknown variants read as Closed
        return members[index] if 0 <= index < len(members) else cls.CLOSED


class OrderPhase(str, Enum):
    """Status of an order, as tracked by the verifier."""
    COMMITTED = "Committed"
    REVEALED = "Revealed"
    FILLED = "Filled"
    PARTIAL_FILL = "PartialFill"
    CANCELLED = "Cancelled"
    EXPIRED = "Expired"

    @classmethod
    def from_index(cls, index: int) -> OrderPhase:
        members = list(cls)
        if not 0 <= index < len(members):
            raise ValueError(f"Unknown order status index: {index}")
        return members[index]

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_PHASES


TERMINAL_PHASES = frozenset({
    OrderPhase.FILLED,
    OrderPhase.PARTIAL_FILL,
    OrderPhase.CANCELLED,
    OrderPhase.EXPIRED,
})


class EpochInfo(BaseModel):
    """Current epoch and phase, with an estimate of time left in the phase."""
    epoch: int
    phase: EpochPhase
    genesis_block: int = 0
    epoch_duration: int = 50
    current_block: int = 0
    blocks_in_phase: int = 50
    blocks_remaining: int = 1
    seconds_remaining: int = 4


class EpochResult(BaseModel):
    """Settlement outcome of one epoch."""
    epoch_id: int
    clearing_price: int
    total_buy_filled: int
    total_sell_filled: int
    num_fills: int
    settled_at: int

    @property
    def is_settled(self) -> bool:
        return self.settled_at > 0


class OrderView(BaseModel):
    """An order as stored by the verifier. Price/amount are 0 until revealed."""
    order_id: int
    trader: str
    side: Side
    give_asset: str
    want_asset: str
    epoch: int
    status: OrderPhase
    price: int = 0
    amount: int = 0
    fill_amount: int = 0
