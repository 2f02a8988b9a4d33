"""
Dark pool orders: construction, order hash and the local reveal check.

The order hash commits to every field the verifier will later see in the
clear at reveal time:

    hash = H_P(ORDER_HASH_DOMAIN,
               price_lo, price_hi, amount_lo, amount_hi, side, give, want, salt)

with price and amount split into Cairo u256 limbs. The salt makes the hash
unguessable from a small price/amount grid.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from stark_darkpool.crypto.field import CURVE_ORDER
from stark_darkpool.crypto.pedersen import Commitment, commit
from stark_darkpool.crypto.randomness import random_scalar
from stark_darkpool.crypto.transcript import ORDER_HASH_DOMAIN, as_felt, hash_to_field, split_u256
from stark_darkpool.darkpool.models import PRICE_SCALE, Side
from stark_darkpool.errors import MalformedInputError, ProofVerificationError


@dataclass(frozen=True)
class DarkPoolOrder:
    """
    A limit order as the trader sees it.

    Attributes:
        price: Limit price, 18-decimal fixed point (u256).
        amount: Order size in base units of the traded token (u256, < N).
        side: BUY or SELL.
        give_asset: Asset id (felt) the trader spends.
        want_asset: Asset id (felt) the trader receives.
        salt: Random felt binding the commit hash to this exact reveal.
        amount_blinding: Pedersen blinding factor for the amount commitment.
    """
    price: int
    amount: int
    side: Side
    give_asset: int
    want_asset: int
    salt: int = field(repr=False)
    amount_blinding: int = field(repr=False)

    def __post_init__(self) -> None:
        if isinstance(self.price, bool) or not isinstance(self.price, int) or self.price <= 0:
            raise MalformedInputError(f"price must be a positive integer, got {self.price!r}")
        if isinstance(self.amount, bool) or not isinstance(self.amount, int) or not 0 < self.amount < CURVE_ORDER:
            raise MalformedInputError(f"amount must be in [1, N-1], got {self.amount!r}")
        split_u256(self.price)
        if not isinstance(self.side, Side):
            raise MalformedInputError(f"side must be a Side, got {self.side!r}")
        as_felt(self.give_asset, "give_asset")
        as_felt(self.want_asset, "want_asset")
        if self.give_asset == self.want_asset:
            raise MalformedInputError("give_asset and want_asset must differ")
        as_felt(self.salt, "salt")
        if not 0 < self.amount_blinding < CURVE_ORDER:
            raise MalformedInputError("amount_blinding must be in [1, N-1]")

    @property
    def order_hash(self) -> int:
        return compute_order_hash(
            self.price, self.amount, self.side, self.give_asset, self.want_asset, self.salt
        )

    @property
    def required_give_amount(self) -> int:
        """
        Units of give_asset locked by this order.

        A sell gives `amount` of the base token; a buy gives amount × price
        of the quote token.
        """
        if self.side == Side.SELL:
            return self.amount
        return self.amount * self.price // PRICE_SCALE

    def amount_commitment(self) -> Commitment:
        """Pedersen commitment to the amount under this order's blinding."""
        return commit(self.amount, self.amount_blinding)


def create_order(
    price: int,
    amount: int,
    side: Side | str,
    give_asset: int | str,
    want_asset: int | str,
) -> DarkPoolOrder:
    """
    Build an order with a fresh salt and amount blinding.

    Args:
        price: 18-decimal fixed-point limit price.
        amount: Size in base units.
        side: Side or "buy"/"sell".
        give_asset: Felt (int or 0x-hex) of the asset spent.
        want_asset: Felt of the asset received.
    """
    try:
        parsed_side = Side.parse(side)
    except ValueError as err:
        raise MalformedInputError(str(err)) from err
    return DarkPoolOrder(
        price=price,
        amount=amount,
        side=parsed_side,
        give_asset=as_felt(give_asset, "give_asset"),
        want_asset=as_felt(want_asset, "want_asset"),
        salt=random_scalar(),
        amount_blinding=random_scalar(),
    )


def compute_order_hash(
    price: int,
    amount: int,
    side: Side | int,
    give_asset: int | str,
    want_asset: int | str,
    salt: int | str,
) -> int:
    """
    Hash the order fields into one felt. Pure: same inputs, same hash.
    """
    if int(side) not in (Side.BUY, Side.SELL):
        raise MalformedInputError(f"side must be 0 (buy) or 1 (sell), got {side!r}")
    price_lo, price_hi = split_u256(price)
    amount_lo, amount_hi = split_u256(amount)
    return hash_to_field(
        ORDER_HASH_DOMAIN,
        price_lo,
        price_hi,
        amount_lo,
        amount_hi,
        int(side),
        as_felt(give_asset, "give_asset"),
        as_felt(want_asset, "want_asset"),
        as_felt(salt, "salt"),
    )


def check_reveal(committed_hash: int, order: DarkPoolOrder) -> int:
    """
    Confirm that revealing `order` would open `committed_hash`.

    The verifier rejects a reveal whose fields do not hash to the committed
    value, so the mismatch is caught here before anything is sent.

    Returns:
        The matching hash.

    Raises:
        ProofVerificationError: If the hashes differ.
    """
    revealed_hash = order.order_hash
    if revealed_hash != committed_hash:
        raise ProofVerificationError(
            f"Reveal does not match commitment: committed {committed_hash:#x}, "
            f"reveal hashes to {revealed_hash:#x}"
        )
    return revealed_hash
