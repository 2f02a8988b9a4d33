"""
Exponential ElGamal over the Stark curve.

Provides:
- KeyPair / generate_keypair
- Ciphertext: (c1, c2) = (r·G, value·H + r·PK)
- encrypt / decrypt (bounded baby-step giant-step)
- add_ciphertexts / subtract_ciphertexts / scalar_mult_ciphertext / rerandomize
- felt codecs for the verifier's balance slots

The plaintext is encoded on H, the same generator that carries the value in
a Pedersen commitment, so sums of encrypted balances and sums of commitments
move in lockstep.

Decryption recovers value·H = c2 - sk·c1 and then solves a discrete log in
base H. That is only feasible for small plaintexts, so decrypt() searches a
bounded range and raises when the value lies outside it.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from functools import lru_cache

from stark_darkpool.crypto.curve import INFINITY, Point, felts_to_point, is_on_curve, require_on_curve
from stark_darkpool.crypto.field import CURVE_ORDER, validate_scalar
from stark_darkpool.crypto.generators import G, H
from stark_darkpool.crypto.randomness import random_scalar
from stark_darkpool.crypto.transcript import as_felt
from stark_darkpool.errors import DecryptionRangeError, InvalidPointError, MalformedInputError

logger = logging.getLogger("stark_darkpool.elgamal")

DEFAULT_DECRYPT_BOUND = 2**32
"""Largest plaintext decrypt() searches for unless told otherwise."""


# ==============================================================================
# Types
# ==============================================================================


@dataclass(frozen=True)
class KeyPair:
    """
    An ElGamal keypair.

    Attributes:
        private_key: Scalar sk in [1, N-1]. Excluded from repr.
        public_key: sk·G.
    """
    private_key: int = field(repr=False)
    public_key: Point


@dataclass(frozen=True)
class Ciphertext:
    """
    An exponential ElGamal ciphertext.

    Attributes:
        c1: r·G
        c2: value·H + r·PK
    """
    c1: Point
    c2: Point


# ==============================================================================
# Keys
# ==============================================================================


def generate_keypair() -> KeyPair:
    """Sample sk from the scalar source and return (sk, sk·G)."""
    sk = random_scalar()
    return KeyPair(private_key=sk, public_key=sk * G)


def keypair_from_private_key(private_key: int) -> KeyPair:
    """Rebuild a keypair from a stored private key."""
    validate_scalar(private_key, "private_key")
    return KeyPair(private_key=private_key, public_key=private_key * G)


def _require_public_key(public_key: Point) -> Point:
    require_on_curve(public_key, "public_key")
    if public_key == INFINITY:
        raise InvalidPointError("public_key must not be the point at infinity")
    return public_key


def _require_value(value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise MalformedInputError(f"value must be an integer, got {type(value).__name__}")
    if not 0 <= value < CURVE_ORDER:
        raise MalformedInputError(f"value must be in [0, N-1], got {value}")
    return value


# ==============================================================================
# Encrypt / decrypt
# ==============================================================================


def encrypt(value: int, public_key: Point, randomness: int | None = None) -> Ciphertext:
    """
    Encrypt `value` to `public_key`.

    Args:
        value: Plaintext amount in [0, N-1].
        public_key: Recipient key, on curve and not the identity.
        randomness: Explicit r for deterministic test vectors only. Reusing r
            across two encryptions under one key leaks the plaintext
            difference; leave this as None in production.

    Returns:
        Ciphertext(c1 = r·G, c2 = value·H + r·PK).

    Raises:
        MalformedInputError: On a bad value, key or randomness.
    """
    _require_value(value)
    _require_public_key(public_key)
    if randomness is None:
        r = random_scalar()
    else:
        r = validate_scalar(randomness, "randomness")

    return Ciphertext(c1=r * G, c2=value * H + r * public_key)


def decrypt(ciphertext: Ciphertext, private_key: int, max_value: int = DEFAULT_DECRYPT_BOUND) -> int:
    """
    Decrypt by solving value·H = c2 - sk·c1 for value in [0, max_value].

    Uses baby-step giant-step, O(sqrt(max_value)) time and memory. Baby-step
    tables are cached per table size.

    Raises:
        DecryptionRangeError: If no value in [0, max_value] matches.
    """
    validate_scalar(private_key, "private_key")
    if max_value < 0:
        raise MalformedInputError(f"max_value must be non-negative, got {max_value}")
    require_on_curve(ciphertext.c1, "c1")
    require_on_curve(ciphertext.c2, "c2")

    target = ciphertext.c2 - private_key * ciphertext.c1
    if target == INFINITY:
        return 0

    step = math.isqrt(max_value) + 1
    baby_steps = _baby_step_table(step)
    giant = -(step * H)

    gamma = target
    for i in range(step + 1):
        j = baby_steps.get(gamma)
        if j is not None:
            value = i * step + j
            if value <= max_value:
                return value
            break
        gamma = gamma + giant

    raise DecryptionRangeError(f"Plaintext is outside the searched range [0, {max_value}]")


@lru_cache(maxsize=4)
def _baby_step_table(step: int) -> dict[Point, int]:
    logger.debug("Building baby-step table with %d entries", step)
    table: dict[Point, int] = {}
    current = INFINITY
    for j in range(step):
        table[current] = j
        current = current + H
    return table


# ==============================================================================
# Homomorphic operations
# ==============================================================================


def add_ciphertexts(a: Ciphertext, b: Ciphertext) -> Ciphertext:
    """Component-wise sum; decrypts to the sum of plaintexts under one key."""
    return Ciphertext(c1=a.c1 + b.c1, c2=a.c2 + b.c2)


def subtract_ciphertexts(a: Ciphertext, b: Ciphertext) -> Ciphertext:
    """Component-wise difference; decrypts to the plaintext difference."""
    return Ciphertext(c1=a.c1 - b.c1, c2=a.c2 - b.c2)


def scalar_mult_ciphertext(k: int, ciphertext: Ciphertext) -> Ciphertext:
    """Multiply the plaintext by k (mod N)."""
    return Ciphertext(c1=k * ciphertext.c1, c2=k * ciphertext.c2)


def rerandomize(ciphertext: Ciphertext, public_key: Point, randomness: int | None = None) -> Ciphertext:
    """Add a fresh encryption of zero so the ciphertext is unlinkable to the input."""
    return add_ciphertexts(ciphertext, encrypt(0, public_key, randomness))


def verify_ciphertext(ciphertext: Ciphertext) -> bool:
    """True iff both components are on the curve and neither is the identity."""
    for pt in (ciphertext.c1, ciphertext.c2):
        if not isinstance(pt, Point) or pt == INFINITY or not is_on_curve(pt):
            return False
    return True


# ==============================================================================
# Encoding
# ==============================================================================


def ciphertext_to_felts(ciphertext: Ciphertext) -> list[str]:
    """[c1.x, c1.y, c2.x, c2.y] as 0x-hex felts."""
    return [hex(ciphertext.c1.x), hex(ciphertext.c1.y), hex(ciphertext.c2.x), hex(ciphertext.c2.y)]


def felts_to_ciphertext(felts: list[int | str]) -> Ciphertext | None:
    """
    Decode four felts into a Ciphertext.

    The verifier reports an empty balance slot as four zero felts; that
    decodes to None rather than a ciphertext of two identity points.
    """
    if len(felts) != 4:
        raise MalformedInputError(f"Ciphertext needs 4 felts, got {len(felts)}")
    values = [as_felt(f) for f in felts]
    if all(v == 0 for v in values):
        return None
    return Ciphertext(c1=felts_to_point(values[0], values[1]), c2=felts_to_point(values[2], values[3]))
