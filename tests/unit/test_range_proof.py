"""
Unit tests for stark_darkpool.crypto.range_proof — bit decomposition and
value conservation over Pedersen commitments.

All tests are pure math — no network, no mocks. Bit lengths are kept small.
"""

import dataclasses

import pytest

from stark_darkpool.crypto.field import CURVE_ORDER
from stark_darkpool.crypto.generators import G, H
from stark_darkpool.crypto.pedersen import commit
from stark_darkpool.crypto.range_proof import (
    BIT_LENGTH,
    ConservationProof,
    prove_conservation,
    prove_range,
    verify_conservation,
    verify_range,
)
from stark_darkpool.errors import MalformedInputError


# ==============================================================================
# Range check
# ==============================================================================


class TestRangeProof:
    """Tests for prove_range / verify_range."""

    @pytest.mark.parametrize("value", [0, 1, 77, 255])
    def test_valid_decomposition(self, value):
        proof = prove_range(value, 12345, bit_length=8)
        assert proof.bit_length == 8
        assert len(proof.bit_commitments) == 8
        assert proof.commitment == value * G + 12345 * H
        assert verify_range(proof)

    def test_default_bit_length(self):
        proof = prove_range(1_000_000, 99)
        assert proof.bit_length == BIT_LENGTH
        assert verify_range(proof)

    def test_single_bit(self):
        assert verify_range(prove_range(1, 5, bit_length=1))

    @pytest.mark.parametrize("value", [256, -1])
    def test_value_out_of_range(self, value):
        with pytest.raises(MalformedInputError, match="out of range"):
            prove_range(value, 7, bit_length=8)

    def test_bad_blinding(self):
        with pytest.raises(MalformedInputError, match="blinding"):
            prove_range(5, 0, bit_length=8)

    def test_bad_bit_length(self):
        with pytest.raises(MalformedInputError, match="bit_length"):
            prove_range(0, 7, bit_length=0)

    def test_tampered_bit_commitment(self):
        proof = prove_range(77, 12345, bit_length=8)
        bits = list(proof.bit_commitments)
        bits[0] = bits[0] + G
        forged = dataclasses.replace(proof, bit_commitments=tuple(bits))
        assert not verify_range(forged)

    def test_tampered_commitment(self):
        proof = prove_range(77, 12345, bit_length=8)
        forged = dataclasses.replace(proof, commitment=proof.commitment + G)
        assert not verify_range(forged)

    def test_truncated_bits(self):
        proof = prove_range(3, 12345, bit_length=8)
        forged = dataclasses.replace(proof, bit_commitments=proof.bit_commitments[:-1])
        assert not verify_range(forged)

    def test_hash_recomputed_after_tamper_still_fails(self):
        """Swapping two bit commitments breaks the weighted sum even with a fresh hash."""
        from stark_darkpool.crypto.range_proof import _range_proof_hash

        proof = prove_range(1, 12345, bit_length=4)
        bits = list(proof.bit_commitments)
        bits[0], bits[1] = bits[1], bits[0]
        forged = dataclasses.replace(
            proof,
            bit_commitments=tuple(bits),
            proof_hash=_range_proof_hash(proof.commitment, bits),
        )
        assert not verify_range(forged)


# ==============================================================================
# Conservation
# ==============================================================================


class TestConservation:
    """Tests for Σ inputs = Σ outputs + fee."""

    def test_balanced_no_fee(self):
        inputs = [commit(600, 11), commit(400, 22)]
        outputs = [commit(1000, 5)]
        proof = prove_conservation(inputs, outputs)
        assert proof.delta_r == (11 + 22 - 5) % CURVE_ORDER
        assert verify_conservation(proof)

    def test_balanced_with_fee(self):
        proof = prove_conservation([commit(100, 9)], [commit(70, 4)], fee=30)
        assert proof.residual == 5 * H
        assert verify_conservation(proof)

    def test_unbalanced_refused(self):
        with pytest.raises(MalformedInputError, match="don't balance"):
            prove_conservation([commit(100, 9)], [commit(71, 4)], fee=30)

    def test_negative_fee_refused(self):
        with pytest.raises(MalformedInputError, match="fee"):
            prove_conservation([commit(100, 9)], [commit(110, 4)], fee=-10)

    def test_wrong_fee_fails_verification(self):
        proof = prove_conservation([commit(100, 9)], [commit(70, 4)], fee=30)
        assert not verify_conservation(dataclasses.replace(proof, fee=31))

    def test_forged_residual_fails(self):
        """An imbalance hides in the G component; verification catches it."""
        inputs = (commit(100, 9).point,)
        outputs = (commit(90, 4).point,)
        residual = inputs[0] - outputs[0]
        forged = ConservationProof(
            input_commitments=inputs,
            output_commitments=outputs,
            fee=0,
            residual=residual,
            delta_r=5,
        )
        assert not verify_conservation(forged)

    def test_wrong_delta_r_fails(self):
        proof = prove_conservation([commit(100, 9)], [commit(100, 4)])
        assert not verify_conservation(dataclasses.replace(proof, delta_r=6))
