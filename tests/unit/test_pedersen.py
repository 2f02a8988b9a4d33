"""
Unit tests for stark_darkpool.crypto.pedersen — Pedersen Commitments.

All tests are pure math — no network, no mocks.
"""

import secrets

import pytest

from stark_darkpool.crypto.curve import INFINITY, Point
from stark_darkpool.crypto.field import CURVE_ORDER
from stark_darkpool.crypto.generators import G, H
from stark_darkpool.crypto.pedersen import (
    Commitment,
    add_commitments,
    commit,
    commitment_to_felts,
    is_zero_commitment,
    scalar_mult_commitment,
    subtract_commitments,
    verify_commitment,
)
from stark_darkpool.crypto.randomness import SequenceScalarSource, use_scalar_source
from stark_darkpool.errors import MalformedInputError


def _random_r() -> int:
    """Generate a random blinding factor in [1, N-1]."""
    return secrets.randbelow(CURVE_ORDER - 1) + 1


# ==============================================================================
# commit / verify
# ==============================================================================


class TestCommit:
    """Tests for commitment creation."""

    def test_formula(self):
        """C = value·G + blinding·H."""
        c = commit(100, 7)
        assert c.point == 100 * G + 7 * H
        assert (c.value, c.blinding) == (100, 7)

    def test_samples_blinding_from_source(self):
        with use_scalar_source(SequenceScalarSource([31337])):
            c = commit(5)
        assert c.blinding == 31337

    def test_zero_value_is_pure_h_multiple(self):
        r = _random_r()
        assert commit(0, r).point == r * H

    def test_repr_hides_opening(self):
        c = commit(100, 7)
        assert "blinding" not in repr(c)
        assert "value" not in repr(c)

    @pytest.mark.parametrize("value", [-1, CURVE_ORDER])
    def test_rejects_value_out_of_range(self, value):
        with pytest.raises(MalformedInputError, match="value"):
            commit(value, 7)

    @pytest.mark.parametrize("blinding", [0, CURVE_ORDER, -3])
    def test_rejects_blinding_out_of_range(self, blinding):
        with pytest.raises(MalformedInputError, match="blinding"):
            commit(10, blinding)

    def test_felts(self):
        c = commit(1, 2)
        x, y = commitment_to_felts(c)
        assert int(x, 16) == c.point.x
        assert int(y, 16) == c.point.y


class TestVerify:
    """Tests for opening checks."""

    def test_valid_opening(self):
        r = _random_r()
        c = commit(1_000_000, r)
        assert verify_commitment(c.point, 1_000_000, r)

    def test_wrong_value(self):
        r = _random_r()
        c = commit(1_000_000, r)
        assert not verify_commitment(c.point, 999_999, r)

    def test_wrong_blinding(self):
        r = _random_r()
        c = commit(42, r)
        assert not verify_commitment(c.point, 42, (r + 1) % CURVE_ORDER)

    def test_garbage_returns_false(self):
        c = commit(42, 5)
        assert not verify_commitment(c.point, "abc", 5)
        assert not verify_commitment(Point(G.x, G.y + 1), 42, 5)


# ==============================================================================
# Homomorphism
# ==============================================================================


class TestHomomorphism:
    """Tests for commitment algebra."""

    def test_add(self):
        r1, r2 = _random_r(), _random_r()
        total = add_commitments(commit(300, r1), commit(700, r2))
        expected = commit(1000, (r1 + r2) % CURVE_ORDER)
        assert total.point == expected.point
        assert total.value == 1000
        assert total.blinding == (r1 + r2) % CURVE_ORDER

    def test_subtract_to_zero(self):
        """commit(100, 7) - commit(100, 7) is the zero commitment."""
        c = commit(100, 7)
        zero = subtract_commitments(c, commit(100, 7))
        assert is_zero_commitment(zero)
        assert zero.point == INFINITY
        assert zero.value == 0
        assert zero.blinding == 0

    def test_subtract_wraps_mod_n(self):
        diff = subtract_commitments(commit(5, 3), commit(8, 4))
        assert diff.value == CURVE_ORDER - 3
        assert diff.blinding == CURVE_ORDER - 1
        assert verify_commitment(diff.point, diff.value, diff.blinding)

    def test_scalar_mult(self):
        assert scalar_mult_commitment(3, commit(5, 11)).point == commit(15, 33).point

    def test_non_zero_commitment(self):
        assert not is_zero_commitment(commit(1, 1))

    def test_bookkeeping_stays_consistent(self):
        c = add_commitments(commit(10, 20), commit(30, 40))
        assert isinstance(c, Commitment)
        assert verify_commitment(c.point, c.value, c.blinding)


class TestBinding:
    """Statistical binding sanity checks."""

    def test_distinct_openings_distinct_points(self):
        openings = {(secrets.randbelow(2**32), _random_r()) for _ in range(20)}
        points = {commit(v, r).point for v, r in openings}
        assert len(points) == len(openings)

    def test_same_value_different_blinding(self):
        """Hiding: the same value commits to unrelated points."""
        assert commit(100, _random_r()).point != commit(100, _random_r()).point
