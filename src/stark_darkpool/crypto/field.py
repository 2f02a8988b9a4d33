"""
Modular arithmetic over the Stark prime field and the Stark group order.

Two different moduli are in play and must never be confused:

    P: the field prime; every point coordinate lives in GF(P).
    N: the group order; every scalar (private key, blinding factor,
        randomness, challenge) is reduced mod N.

The Stark prime satisfies P ≡ 1 (mod 4), with P - 1 = 2^192 · q, so the
(P + 1) / 4 square-root shortcut used for secp256k1 does NOT apply here.
Square roots go through ecdsa's general prime-modulus routine.
"""

from __future__ import annotations

from ecdsa import numbertheory

from stark_darkpool.errors import CurveArithmeticError, MalformedInputError

# ==============================================================================
# Stark curve constants: y² = x³ + A·x + B (mod P)
# ==============================================================================

# Field prime: 2^251 + 17·2^192 + 1
STARK_PRIME = 0x800000000000011000000000000000000000000000000000000000000000001

# Group order (the curve has prime order, cofactor 1)
CURVE_ORDER = 0x800000000000010FFFFFFFFFFFFFFFFB781126DCAE7B2321E66A241ADC64D2F

CURVE_A = 1
CURVE_B = 0x6F21413EFBE40DE150E596D72F7A8C5609AD26C15C915C1F4CDFCB99CEE9E89


def mod(a: int, m: int) -> int:
    """Return the non-negative residue of a modulo m."""
    if m <= 0:
        raise CurveArithmeticError(f"Modulus must be positive, got {m}")
    return a % m


def mod_inverse(a: int, m: int) -> int:
    """
    Multiplicative inverse of a modulo m via the extended Euclidean algorithm.

    Raises:
        CurveArithmeticError: If a ≡ 0 (mod m) or gcd(a, m) != 1. Inverting
            zero is a programming error upstream, never a recoverable state.
    """
    a = mod(a, m)
    if a == 0:
        raise CurveArithmeticError(f"Cannot invert zero modulo 0x{m:x}")

    old_r, r = a, m
    old_s, s = 1, 0
    while r != 0:
        quotient = old_r // r
        old_r, r = r, old_r - quotient * r
        old_s, s = s, old_s - quotient * s

    if old_r != 1:
        raise CurveArithmeticError(f"0x{a:x} has no inverse modulo 0x{m:x}")
    return mod(old_s, m)


def is_quadratic_residue(a: int, p: int = STARK_PRIME) -> bool:
    """Legendre symbol test: True iff a is a non-zero square mod the prime p."""
    a = mod(a, p)
    if a == 0:
        return False
    return numbertheory.jacobi(a, p) == 1


def sqrt_mod(a: int, p: int = STARK_PRIME) -> int:
    """
    Square root of a modulo the prime p.

    Returns one of the two roots; callers canonicalize as they need.

    Raises:
        MalformedInputError: If a is not a quadratic residue mod p.
    """
    a = mod(a, p)
    if a == 0:
        return 0
    try:
        return numbertheory.square_root_mod_prime(a, p)
    except numbertheory.SquareRootError as err:
        raise MalformedInputError(f"0x{a:x} is not a square modulo 0x{p:x}") from err


def reduce_scalar(k: int) -> int:
    """Reduce a scalar into [0, N)."""
    return mod(k, CURVE_ORDER)


def validate_scalar(k: int, name: str = "scalar", allow_zero: bool = False) -> int:
    """
    Check that k is an integer already reduced into [1, N-1] (or [0, N-1]).

    Scalars arriving from callers are never silently coerced: an unreduced
    scalar is rejected so the caller learns about the mismatch.

    Raises:
        MalformedInputError: If k is not an int or lies outside the range.
    """
    if isinstance(k, bool) or not isinstance(k, int):
        raise MalformedInputError(f"{name} must be an integer, got {type(k).__name__}")
    low = 0 if allow_zero else 1
    if k < low or k >= CURVE_ORDER:
        raise MalformedInputError(f"{name} must be in [{low}, N-1], got {k}")
    return k
