"""
Pedersen commitments over the Stark curve.

Provides:
- Commitment: (point, value, blinding)
- commit / verify_commitment
- add_commitments / subtract_commitments / scalar_mult_commitment
- commitment_to_felts / is_zero_commitment

Mathematical foundation:
    C = value·G + blinding·H
    where H = hash_to_curve(PEDERSEN_H_DOMAIN) has no known discrete log
    w.r.t. G.

A commitment is:
- **Hiding**: C reveals nothing about `value` without `blinding`
- **Binding**: C cannot be opened to a different (value', blinding') pair
  unless log_G(H) is known
- **Homomorphic**: C1 + C2 = (v1+v2)·G + (r1+r2)·H

References:
    [Ped91] T.P. Pedersen, "Non-Interactive and Information-Theoretic Secure
            Verifiable Secret Sharing", CRYPTO '91, §3.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from stark_darkpool.crypto.curve import INFINITY, Point, point_to_felts, require_on_curve
from stark_darkpool.crypto.field import CURVE_ORDER, validate_scalar
from stark_darkpool.crypto.generators import G, H
from stark_darkpool.crypto.randomness import random_scalar
from stark_darkpool.errors import MalformedInputError


@dataclass(frozen=True)
class Commitment:
    """
    A Pedersen commitment together with its opening.

    Only `point` is public. `value` and `blinding` are the committer's
    bookkeeping and are left out of repr.

    Attributes:
        point: value·G + blinding·H
        value: Committed amount, mod N.
        blinding: Blinding factor, mod N.
    """
    point: Point
    value: int = field(repr=False)
    blinding: int = field(repr=False)


def _require_value(value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise MalformedInputError(f"value must be an integer, got {type(value).__name__}")
    if not 0 <= value < CURVE_ORDER:
        raise MalformedInputError(f"value must be in [0, N-1], got {value}")
    return value


def commit(value: int, blinding: int | None = None) -> Commitment:
    """
    Create a Pedersen commitment C = value·G + blinding·H.

    Args:
        value: The committed amount in [0, N-1].
        blinding: Blinding factor in [1, N-1]; drawn from the scalar source
            when omitted.

    Returns:
        The Commitment with its opening.

    Raises:
        MalformedInputError: If value or blinding is out of range.
    """
    _require_value(value)
    if blinding is None:
        blinding = random_scalar()
    else:
        validate_scalar(blinding, "blinding")

    return Commitment(point=value * G + blinding * H, value=value, blinding=blinding)


def verify_commitment(point: Point, value: int, blinding: int) -> bool:
    """
    Check that `point` == value·G + blinding·H.

    Returns False (rather than raising) for malformed openings or points.
    """
    try:
        require_on_curve(point)
        expected = (value % CURVE_ORDER) * G + (blinding % CURVE_ORDER) * H
    except (MalformedInputError, TypeError):
        return False
    return expected == point


def add_commitments(a: Commitment, b: Commitment) -> Commitment:
    """Homomorphic sum: points added, values and blindings added mod N."""
    return Commitment(
        point=a.point + b.point,
        value=(a.value + b.value) % CURVE_ORDER,
        blinding=(a.blinding + b.blinding) % CURVE_ORDER,
    )


def subtract_commitments(a: Commitment, b: Commitment) -> Commitment:
    """Homomorphic difference: points subtracted, openings subtracted mod N."""
    return Commitment(
        point=a.point - b.point,
        value=(a.value - b.value) % CURVE_ORDER,
        blinding=(a.blinding - b.blinding) % CURVE_ORDER,
    )


def scalar_mult_commitment(k: int, c: Commitment) -> Commitment:
    """k·C commits to k·value under blinding k·blinding."""
    return Commitment(
        point=k * c.point,
        value=(k * c.value) % CURVE_ORDER,
        blinding=(k * c.blinding) % CURVE_ORDER,
    )


def is_zero_commitment(c: Commitment) -> bool:
    """True iff the commitment point is the identity (value 0, blinding 0)."""
    return c.point == INFINITY


def commitment_to_felts(c: Commitment) -> tuple[str, str]:
    """The commitment point as (x, y) 0x-hex felts."""
    return point_to_felts(c.point)
