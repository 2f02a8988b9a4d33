"""
Affine point arithmetic on the Stark curve y² = x³ + x + B over GF(P).

Provides:
- Point: immutable affine point, with ``+``, ``-`` and ``k * P`` sugar
- INFINITY: the group identity (encoded on the wire as (0, 0))
- point_add / point_double / point_neg / point_sub / scalar_mult
- is_on_curve / is_infinity
- felt and compressed point codecs

The curve object comes from the ecdsa library so membership checks use the
same ``CurveFp.contains_point`` as every other ecdsa curve; the group law is
written out here because the protocol needs the identity, negation and
strict error behaviour spelled out at each step.

(0, 0) is never a curve point because B != 0, which is why the contract and
this module can share it as the identity encoding.
"""

from __future__ import annotations

from dataclasses import dataclass

import ecdsa.ellipticcurve as ec

from stark_darkpool.crypto.field import (
    CURVE_A,
    CURVE_B,
    CURVE_ORDER,
    STARK_PRIME,
    mod_inverse,
    sqrt_mod,
)
from stark_darkpool.errors import CurveArithmeticError, InvalidPointError, MalformedInputError

# The Stark curve as an ecdsa curve object
STARK_CURVE = ec.CurveFp(STARK_PRIME, CURVE_A, CURVE_B)


# ==============================================================================
# Point type
# ==============================================================================


@dataclass(frozen=True)
class Point:
    """
    An affine point on the Stark curve, or the identity when x == y == 0.

    Construction does not validate membership; every group operation does.
    """
    x: int
    y: int

    def is_infinity(self) -> bool:
        return self.x == 0 and self.y == 0

    def __add__(self, other: Point) -> Point:
        return point_add(self, other)

    def __sub__(self, other: Point) -> Point:
        return point_sub(self, other)

    def __neg__(self) -> Point:
        return point_neg(self)

    def __rmul__(self, k: int) -> Point:
        return scalar_mult(k, self)

    def __mul__(self, k: int) -> Point:
        return scalar_mult(k, self)

    def __repr__(self) -> str:
        if self.is_infinity():
            return "Point(INFINITY)"
        return f"Point(x=0x{self.x:064x}, y=0x{self.y:064x})"


INFINITY = Point(0, 0)
"""The point at infinity (group identity)."""


# ==============================================================================
# Predicates
# ==============================================================================


def is_infinity(p: Point) -> bool:
    """True iff p is the group identity."""
    return p.x == 0 and p.y == 0


def is_on_curve(p: Point) -> bool:
    """
    True iff p satisfies y² = x³ + x + B (mod P) with reduced coordinates.

    The identity is treated as a valid group element.
    """
    if is_infinity(p):
        return True
    if not (0 <= p.x < STARK_PRIME and 0 <= p.y < STARK_PRIME):
        return False
    return STARK_CURVE.contains_point(p.x, p.y)


def require_on_curve(p: Point, label: str = "point") -> Point:
    """
    Return p unchanged if it is a valid group element.

    Raises:
        InvalidPointError: If p is not a Point or lies off the curve.
    """
    if not isinstance(p, Point):
        raise InvalidPointError(f"{label} must be a Point, got {type(p).__name__}")
    if not is_on_curve(p):
        raise InvalidPointError(f"{label} is not on the Stark curve: {p!r}")
    return p


# ==============================================================================
# Group law
# ==============================================================================


def point_neg(p: Point) -> Point:
    """Return -p."""
    require_on_curve(p)
    if is_infinity(p):
        return INFINITY
    return Point(p.x, (-p.y) % STARK_PRIME)


def point_double(p: Point) -> Point:
    """Return 2·p using the tangent slope (3x² + A) / 2y."""
    require_on_curve(p)
    return _double(p)


def point_add(p1: Point, p2: Point) -> Point:
    """
    Return p1 + p2.

    Special cases, in order:
        ∞ + ∞ = ∞;  ∞ + q = q;  p + ∞ = p
        x1 == x2, y1 == -y2  →  ∞
        p1 == p2             →  doubling formula

    Raises:
        InvalidPointError: If either input lies off the curve.
        CurveArithmeticError: If a slope denominator vanishes outside the
            special cases above (cannot happen for valid inputs).
    """
    require_on_curve(p1, "p1")
    require_on_curve(p2, "p2")
    return _add(p1, p2)


def point_sub(p1: Point, p2: Point) -> Point:
    """Return p1 - p2."""
    return point_add(p1, point_neg(p2))


def scalar_mult(k: int, p: Point) -> Point:
    """
    Return k·p by double-and-add, scanning the bits of k from least to most
    significant.

    k is reduced modulo the group order N first; k ≡ 0 or p = ∞ gives ∞.
    Negative k is handled by the reduction (k·p = (k mod N)·p).
    """
    if isinstance(k, bool) or not isinstance(k, int):
        raise MalformedInputError(f"Scalar must be an integer, got {type(k).__name__}")
    require_on_curve(p)

    k %= CURVE_ORDER
    if k == 0 or is_infinity(p):
        return INFINITY

    result = INFINITY
    addend = p
    while k > 0:
        if k & 1:
            result = _add(result, addend)
        addend = _double(addend)
        k >>= 1
    return result


# ------------------------------------------------------------------------------
# Unchecked kernels: inputs already validated
# ------------------------------------------------------------------------------


def _double(p: Point) -> Point:
    if is_infinity(p) or p.y == 0:
        return INFINITY
    numerator = (3 * p.x * p.x + CURVE_A) % STARK_PRIME
    slope = numerator * mod_inverse(2 * p.y, STARK_PRIME) % STARK_PRIME
    x3 = (slope * slope - 2 * p.x) % STARK_PRIME
    y3 = (slope * (p.x - x3) - p.y) % STARK_PRIME
    return Point(x3, y3)


def _add(p1: Point, p2: Point) -> Point:
    if is_infinity(p1):
        return p2
    if is_infinity(p2):
        return p1

    if p1.x == p2.x:
        if (p1.y + p2.y) % STARK_PRIME == 0:
            return INFINITY
        if p1.y == p2.y:
            return _double(p1)
        # Same x, unrelated y: impossible for two curve points
        raise CurveArithmeticError(
            f"Degenerate addition: shared x=0x{p1.x:x} with unrelated y values"
        )

    numerator = (p2.y - p1.y) % STARK_PRIME
    slope = numerator * mod_inverse(p2.x - p1.x, STARK_PRIME) % STARK_PRIME
    x3 = (slope * slope - p1.x - p2.x) % STARK_PRIME
    y3 = (slope * (p1.x - x3) - p1.y) % STARK_PRIME
    return Point(x3, y3)


# ==============================================================================
# Encoding
# ==============================================================================


def point_to_felts(p: Point) -> tuple[str, str]:
    """
    Encode a point as two big-endian hex field elements ("0x..."),
    the layout the verifier contract takes as (x, y) call data.
    """
    require_on_curve(p)
    return hex(p.x), hex(p.y)


def felts_to_point(x: int | str, y: int | str) -> Point:
    """
    Decode two field elements (ints or 0x-hex strings) into a validated Point.

    Raises:
        InvalidPointError: If the coordinates do not form a curve point.
    """
    try:
        xi = int(x, 16) if isinstance(x, str) else int(x)
        yi = int(y, 16) if isinstance(y, str) else int(y)
    except ValueError as err:
        raise InvalidPointError(f"Point coordinates must be hex felts: {x!r}, {y!r}") from err
    return require_on_curve(Point(xi, yi))


def compress_point(p: Point) -> str:
    """
    Encode a point as 33 bytes (02/03 parity prefix + 32-byte big-endian x).

    Raises:
        ValueError: If the point is the identity.
    """
    require_on_curve(p)
    if is_infinity(p):
        raise ValueError("Cannot compress the point at infinity")
    prefix = b"\x02" if p.y % 2 == 0 else b"\x03"
    return (prefix + p.x.to_bytes(32, "big")).hex()


def decompress_point(hex_str: str) -> Point:
    """
    Decode a 33-byte compressed point produced by compress_point.

    Raises:
        InvalidPointError: On malformed input or an x with no curve point.
    """
    try:
        raw = bytes.fromhex(hex_str)
    except ValueError as err:
        raise InvalidPointError("Compressed point is not valid hex") from err
    if len(raw) != 33:
        raise InvalidPointError(f"Expected 33 bytes, got {len(raw)}")
    prefix = raw[0]
    if prefix not in (0x02, 0x03):
        raise InvalidPointError(f"Invalid prefix byte: 0x{prefix:02x}")

    x = int.from_bytes(raw[1:], "big")
    if x >= STARK_PRIME:
        raise InvalidPointError(f"x coordinate 0x{x:x} is not reduced mod P")
    rhs = (pow(x, 3, STARK_PRIME) + CURVE_A * x + CURVE_B) % STARK_PRIME
    try:
        y = sqrt_mod(rhs)
    except MalformedInputError as err:
        raise InvalidPointError(
            f"X coordinate 0x{x:064x} does not correspond to a curve point"
        ) from err

    if (y % 2 == 0) != (prefix == 0x02):
        y = STARK_PRIME - y
    return Point(x, y)
