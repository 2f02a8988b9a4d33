"""
Range and value-conservation checks over Pedersen commitments.

Provides:
- RangeProof: bit-decomposition check that a commitment splits into
  2^i-weighted per-bit commitments
- ConservationProof: Σ inputs = Σ outputs + fee, with the residual a pure
  H-multiple

IMPORTANT: the range check here is NOT a zero-knowledge range proof. It does
not prove that each bit commitment hides 0 or 1, and the prover publishes
every per-bit commitment. It catches client-side mistakes (overflowing
amounts, mismatched decompositions) before anything reaches the verifier,
and nothing more. Amounts must be treated as unverified until a real range
proof system (Bulletproofs or a STARK prover) is wired in.

The conservation check is the algebraic core: with C = v·G + r·H,
conservation v_in == v_out + fee means

    D = Σ C_in - Σ C_out - fee·G = (Σ r_in - Σ r_out)·H

so the G components cancel and the residual is a pure multiple of H.

References:
    [Bun18] B. Bünz et al., "Bulletproofs: Short Proofs for Confidential
            Transactions and More", 2018 IEEE S&P, §4.2 (Range Proofs).
    [Ped91] T.P. Pedersen, "Non-Interactive and Information-Theoretic Secure
            Verifiable Secret Sharing", CRYPTO '91.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from stark_darkpool.crypto.curve import INFINITY, Point, require_on_curve
from stark_darkpool.crypto.field import CURVE_ORDER, mod_inverse, validate_scalar
from stark_darkpool.crypto.generators import G, H
from stark_darkpool.crypto.pedersen import Commitment
from stark_darkpool.crypto.randomness import random_scalar
from stark_darkpool.crypto.transcript import RANGE_PROOF_DOMAIN, hash_to_field
from stark_darkpool.errors import DarkPoolError, MalformedInputError

# ==============================================================================
# Constants
# ==============================================================================

BIT_LENGTH = 64
"""Default number of bits for range checks (u64 token amounts)."""

MAX_VALUE = 2**BIT_LENGTH - 1


# ==============================================================================
# Range check
# ==============================================================================


@dataclass(frozen=True)
class RangeProof:
    """
    A bit-decomposition range check for value ∈ [0, 2^bit_length).

    Attributes:
        commitment: The commitment C = v·G + r·H being checked.
        bit_commitments: C_i = b_i·G + r_i·H with Σ 2^i·C_i == C.
        proof_hash: Blake2b256 felt binding C and every C_i.
        bit_length: Number of bits decomposed.
    """
    commitment: Point
    bit_commitments: tuple[Point, ...]
    proof_hash: int
    bit_length: int = BIT_LENGTH


def _range_proof_hash(commitment: Point, bit_commitments: Sequence[Point]) -> int:
    elements = [commitment.x, commitment.y]
    for bc in bit_commitments:
        elements.extend((bc.x, bc.y))
    return hash_to_field(RANGE_PROOF_DOMAIN, *elements)


def prove_range(value: int, blinding: int, bit_length: int = BIT_LENGTH) -> RangeProof:
    """
    Decompose a committed value into per-bit commitments.

    The per-bit blindings are random except the last, which absorbs the
    remainder so that Σ 2^i·r_i ≡ r (mod N).

    Args:
        value: The committed value v, in [0, 2^bit_length).
        blinding: The commitment's blinding factor r, in [1, N-1].
        bit_length: Number of bits.

    Raises:
        MalformedInputError: If value or blinding is out of range.
    """
    if bit_length < 1:
        raise MalformedInputError(f"bit_length must be positive, got {bit_length}")
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value < (1 << bit_length):
        raise MalformedInputError(f"Value {value} out of range [0, 2^{bit_length})")
    validate_scalar(blinding, "blinding")

    commitment = value * G + blinding * H
    bits = [(value >> i) & 1 for i in range(bit_length)]

    bit_blindings: list[int] = []
    remaining_r = blinding
    for i in range(bit_length - 1):
        ri = random_scalar()
        bit_blindings.append(ri)
        remaining_r = (remaining_r - ri * (1 << i)) % CURVE_ORDER
    # r_last = remaining_r / 2^(n-1) mod N
    last_power_inv = mod_inverse(1 << (bit_length - 1), CURVE_ORDER)
    bit_blindings.append((remaining_r * last_power_inv) % CURVE_ORDER)

    bit_commitments = tuple(b * G + r * H for b, r in zip(bits, bit_blindings))

    return RangeProof(
        commitment=commitment,
        bit_commitments=bit_commitments,
        proof_hash=_range_proof_hash(commitment, bit_commitments),
        bit_length=bit_length,
    )


def verify_range(proof: RangeProof) -> bool:
    """
    Check the decomposition: Σ 2^i·C_i == C and the proof hash matches.

    Returns:
        True if the decomposition is consistent. This does not show that the
        bits are binary; see the module docstring.
    """
    if len(proof.bit_commitments) != proof.bit_length:
        return False
    try:
        require_on_curve(proof.commitment)
        for bc in proof.bit_commitments:
            require_on_curve(bc)
        if _range_proof_hash(proof.commitment, proof.bit_commitments) != proof.proof_hash:
            return False

        weighted_sum = INFINITY
        for i, bc in enumerate(proof.bit_commitments):
            weighted_sum = weighted_sum + (1 << i) * bc
    except DarkPoolError:
        return False

    return weighted_sum == proof.commitment


# ==============================================================================
# Value conservation
# ==============================================================================


@dataclass(frozen=True)
class ConservationProof:
    """
    Evidence that Σ input values = Σ output values + fee.

    Attributes:
        input_commitments: Input commitment points.
        output_commitments: Output commitment points.
        fee: Public fee, committed with zero blinding (fee·G).
        residual: D = Σ C_in - Σ C_out - fee·G.
        delta_r: Σ r_in - Σ r_out (mod N); D must equal delta_r·H.
    """
    input_commitments: tuple[Point, ...]
    output_commitments: tuple[Point, ...]
    fee: int
    residual: Point
    delta_r: int


def _residual(inputs: Sequence[Point], outputs: Sequence[Point], fee: int) -> Point:
    total = INFINITY
    for pt in inputs:
        total = total + pt
    for pt in outputs:
        total = total - pt
    return total - fee * G


def prove_conservation(
    inputs: Sequence[Commitment],
    outputs: Sequence[Commitment],
    fee: int = 0,
) -> ConservationProof:
    """
    Build a conservation proof from opened commitments.

    Raises:
        MalformedInputError: If the values do not balance or fee < 0.
    """
    if fee < 0:
        raise MalformedInputError(f"fee must be non-negative, got {fee}")
    total_in = sum(c.value for c in inputs)
    total_out = sum(c.value for c in outputs)
    if total_in != total_out + fee:
        raise MalformedInputError(
            f"Values don't balance: {total_in} ≠ {total_out} + fee {fee}"
        )

    input_points = tuple(c.point for c in inputs)
    output_points = tuple(c.point for c in outputs)
    delta_r = (sum(c.blinding for c in inputs) - sum(c.blinding for c in outputs)) % CURVE_ORDER

    return ConservationProof(
        input_commitments=input_points,
        output_commitments=output_points,
        fee=fee,
        residual=_residual(input_points, output_points, fee),
        delta_r=delta_r,
    )


def verify_conservation(proof: ConservationProof) -> bool:
    """
    Check that the stated residual matches the commitments and equals Δr·H.
    """
    try:
        residual = _residual(proof.input_commitments, proof.output_commitments, proof.fee)
    except DarkPoolError:
        return False
    if residual != proof.residual:
        return False
    return residual == proof.delta_r * H
