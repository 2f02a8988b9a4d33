"""
Unit tests for stark_darkpool.crypto.field and stark_darkpool.crypto.curve.

All tests are pure math — no network, no mocks. The ecdsa library serves as
an independent reference implementation of the group law.
"""

import secrets

import ecdsa.ellipticcurve as ec
import pytest

from stark_darkpool.crypto.curve import (
    INFINITY,
    STARK_CURVE,
    Point,
    compress_point,
    decompress_point,
    felts_to_point,
    is_infinity,
    is_on_curve,
    point_add,
    point_double,
    point_neg,
    point_sub,
    point_to_felts,
    scalar_mult,
)
from stark_darkpool.crypto.field import (
    CURVE_ORDER,
    STARK_PRIME,
    is_quadratic_residue,
    mod,
    mod_inverse,
    sqrt_mod,
    validate_scalar,
)
from stark_darkpool.crypto.generators import G
from stark_darkpool.errors import CurveArithmeticError, InvalidPointError, MalformedInputError

TWO_G = Point(
    0x759CA09377679ECD535A81E83039658BF40959283187C654C5416F439403CF5,
    0x6F524A3400E7708D5C01A28598AD272E7455AA88778B19F93B562D7A9646C41,
)


def _random_scalar() -> int:
    return secrets.randbelow(CURVE_ORDER - 1) + 1


# ==============================================================================
# Field arithmetic
# ==============================================================================


class TestFieldArithmetic:
    """Tests for residues, inverses and square roots."""

    def test_mod_non_negative(self):
        assert mod(-1, 7) == 6
        assert mod(-STARK_PRIME - 3, STARK_PRIME) == STARK_PRIME - 3

    def test_mod_rejects_non_positive_modulus(self):
        with pytest.raises(CurveArithmeticError):
            mod(5, 0)

    def test_inverse_small(self):
        assert mod_inverse(3, 7) == 5

    def test_inverse_over_prime(self):
        a = _random_scalar()
        assert a * mod_inverse(a, STARK_PRIME) % STARK_PRIME == 1

    def test_inverse_of_zero_fails_loudly(self):
        """Inverting zero is a programming error, never a sentinel."""
        with pytest.raises(CurveArithmeticError, match="invert zero"):
            mod_inverse(0, STARK_PRIME)
        with pytest.raises(CurveArithmeticError):
            mod_inverse(STARK_PRIME, STARK_PRIME)

    def test_inverse_of_non_unit(self):
        with pytest.raises(CurveArithmeticError, match="no inverse"):
            mod_inverse(2, 4)

    def test_sqrt_of_square(self):
        a = (123456789 * 123456789) % STARK_PRIME
        r = sqrt_mod(a)
        assert r * r % STARK_PRIME == a

    def test_sqrt_of_non_residue(self):
        n = 2
        while is_quadratic_residue(n):
            n += 1
        with pytest.raises(MalformedInputError, match="not a square"):
            sqrt_mod(n)

    def test_zero_is_not_a_residue(self):
        assert not is_quadratic_residue(0)
        assert sqrt_mod(0) == 0


class TestValidateScalar:
    """Scalars are rejected, never silently reduced."""

    def test_accepts_range_bounds(self):
        assert validate_scalar(1) == 1
        assert validate_scalar(CURVE_ORDER - 1) == CURVE_ORDER - 1

    @pytest.mark.parametrize("bad", [0, -1, CURVE_ORDER, CURVE_ORDER + 5])
    def test_rejects_out_of_range(self, bad):
        with pytest.raises(MalformedInputError):
            validate_scalar(bad)

    def test_rejects_non_int(self):
        with pytest.raises(MalformedInputError, match="integer"):
            validate_scalar("5")
        with pytest.raises(MalformedInputError):
            validate_scalar(True)

    def test_allow_zero(self):
        assert validate_scalar(0, allow_zero=True) == 0


# ==============================================================================
# Curve membership
# ==============================================================================


class TestMembership:
    """Tests for is_on_curve / is_infinity."""

    def test_generator_on_curve(self):
        assert is_on_curve(G)

    def test_identity(self):
        assert is_infinity(INFINITY)
        assert is_on_curve(INFINITY)
        assert INFINITY.is_infinity()

    def test_zero_zero_is_not_a_curve_point(self):
        """(0, 0) is free to encode the identity because B != 0."""
        assert not STARK_CURVE.contains_point(0, 0)

    def test_off_curve(self):
        assert not is_on_curve(Point(G.x, (G.y + 1) % STARK_PRIME))

    def test_unreduced_coordinates(self):
        assert not is_on_curve(Point(G.x + STARK_PRIME, G.y))


# ==============================================================================
# Group law
# ==============================================================================


class TestGroupLaw:
    """Tests for point_add / point_double / scalar_mult."""

    def test_double_generator(self):
        assert point_double(G) == TWO_G
        assert point_add(G, G) == TWO_G

    def test_identity_cases(self):
        assert point_add(INFINITY, INFINITY) == INFINITY
        assert point_add(INFINITY, G) == G
        assert point_add(G, INFINITY) == G
        assert point_double(INFINITY) == INFINITY

    def test_inverse_gives_identity(self):
        assert point_add(G, point_neg(G)) == INFINITY
        assert point_sub(TWO_G, TWO_G) == INFINITY

    def test_commutative(self):
        p, q = 3 * G, 5 * G
        assert point_add(p, q) == point_add(q, p)

    def test_associative(self):
        p, q, r = 3 * G, 5 * G, 7 * G
        assert point_add(point_add(p, q), r) == point_add(p, point_add(q, r))

    def test_distributive(self):
        a, b = _random_scalar(), _random_scalar()
        assert scalar_mult((a + b) % CURVE_ORDER, G) == scalar_mult(a, G) + scalar_mult(b, G)

    def test_scalar_zero_and_order(self):
        assert scalar_mult(0, G) == INFINITY
        assert scalar_mult(CURVE_ORDER, G) == INFINITY
        assert scalar_mult(5, INFINITY) == INFINITY

    def test_scalar_reduced_mod_order(self):
        assert scalar_mult(CURVE_ORDER + 1, G) == G
        assert scalar_mult(-1, G) == point_neg(G)

    def test_off_curve_input_rejected(self):
        bad = Point(G.x, (G.y + 1) % STARK_PRIME)
        with pytest.raises(InvalidPointError):
            point_add(G, bad)
        with pytest.raises(InvalidPointError):
            scalar_mult(3, bad)

    def test_non_int_scalar_rejected(self):
        with pytest.raises(MalformedInputError):
            scalar_mult(1.5, G)

    def test_operator_sugar(self):
        assert G + G == TWO_G
        assert TWO_G - G == G
        assert -G == point_neg(G)
        assert 2 * G == G * 2 == TWO_G

    @pytest.mark.parametrize("k", [1, 2, 3, 255, 2**64 + 13])
    def test_matches_ecdsa_reference(self, k):
        """Our double-and-add agrees with ecdsa's point multiplication."""
        ref = k * ec.Point(STARK_CURVE, G.x, G.y)
        ours = scalar_mult(k, G)
        assert (ours.x, ours.y) == (ref.x(), ref.y())

    def test_random_scalar_matches_ecdsa_reference(self):
        k = _random_scalar()
        ref = k * ec.Point(STARK_CURVE, G.x, G.y)
        ours = k * G
        assert (ours.x, ours.y) == (ref.x(), ref.y())


# ==============================================================================
# Encoding
# ==============================================================================


class TestPointEncoding:
    """Tests for felt and compressed codecs."""

    def test_felts_roundtrip(self):
        x, y = point_to_felts(TWO_G)
        assert x.startswith("0x")
        assert felts_to_point(x, y) == TWO_G
        assert felts_to_point(TWO_G.x, TWO_G.y) == TWO_G

    def test_zero_felts_decode_to_identity(self):
        assert felts_to_point("0x0", "0x0") == INFINITY

    def test_off_curve_felts_rejected(self):
        with pytest.raises(InvalidPointError):
            felts_to_point(G.x, G.y + 1)

    def test_garbage_felts_rejected(self):
        with pytest.raises(InvalidPointError, match="hex felts"):
            felts_to_point("0xZZ", "0x1")

    @pytest.mark.parametrize("k", [1, 2, 3, 11])
    def test_compress_roundtrip(self, k):
        pt = k * G
        encoded = compress_point(pt)
        assert len(encoded) == 66
        assert decompress_point(encoded) == pt

    def test_compress_identity_rejected(self):
        with pytest.raises(ValueError, match="infinity"):
            compress_point(INFINITY)

    def test_decompress_bad_prefix(self):
        encoded = "04" + compress_point(G)[2:]
        with pytest.raises(InvalidPointError, match="prefix"):
            decompress_point(encoded)

    def test_decompress_bad_length(self):
        with pytest.raises(InvalidPointError, match="33 bytes"):
            decompress_point("02abcd")
