"""
Fiat-Shamir Schnorr balance proof bound to a trader and an asset.

Protocol (prover knows sk with PK = sk·G):
    1. k  ← random scalar,  R = k·G
    2. c  = H_N(BALANCE_PROOF_DOMAIN, R.x, R.y, trader, asset)
    3. s  = k + c·sk  (mod N)
    proof = (R, c, s)

Verifier:
    recompute c from (R, trader, asset), then check s·G == R + c·PK.

Binding the trader and asset into the challenge is what stops a proof made
for one identity or asset from being replayed for another.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from stark_darkpool.crypto.curve import INFINITY, Point, is_on_curve
from stark_darkpool.crypto.field import CURVE_ORDER, validate_scalar
from stark_darkpool.crypto.generators import G
from stark_darkpool.crypto.randomness import random_scalar
from stark_darkpool.crypto.transcript import BALANCE_PROOF_DOMAIN, as_felt, hash_to_scalar
from stark_darkpool.errors import DarkPoolError, MalformedInputError, ProofVerificationError

logger = logging.getLogger("stark_darkpool.balance_proof")


@dataclass(frozen=True)
class BalanceProof:
    """
    Attributes:
        commitment: R = k·G
        challenge: c, reduced mod N
        response: s = k + c·sk mod N
    """
    commitment: Point
    challenge: int
    response: int

    def to_felts(self) -> list[str]:
        """(R.x, R.y, c, s) as 0x-hex felts, the order the verifier reads them."""
        return [hex(self.commitment.x), hex(self.commitment.y), hex(self.challenge), hex(self.response)]

    @classmethod
    def from_felts(cls, felts: list[int | str]) -> BalanceProof:
        if len(felts) != 4:
            raise MalformedInputError(f"Balance proof needs 4 felts, got {len(felts)}")
        rx, ry, c, s = (as_felt(f) for f in felts)
        return cls(commitment=Point(rx, ry), challenge=c, response=s)


def compute_challenge(commitment: Point, trader: int | str, asset_id: int | str) -> int:
    """c = H_N(BALANCE_PROOF_DOMAIN, R.x, R.y, trader, asset)."""
    return hash_to_scalar(
        BALANCE_PROOF_DOMAIN,
        commitment.x,
        commitment.y,
        as_felt(trader, "trader"),
        as_felt(asset_id, "asset_id"),
    )


def build_balance_proof(secret_key: int | None, trader: int | str, asset_id: int | str) -> BalanceProof:
    """
    Prove knowledge of secret_key, bound to (trader, asset_id).

    Args:
        secret_key: The prover's secret scalar in [1, N-1].
        trader: Trader account address (felt).
        asset_id: Asset identifier (felt).

    Raises:
        MalformedInputError: If the key is missing, zero or out of range,
            or trader/asset are not felts.
    """
    if secret_key is None:
        raise MalformedInputError("Cannot build a balance proof without a secret key")
    validate_scalar(secret_key, "secret_key")
    as_felt(trader, "trader")
    as_felt(asset_id, "asset_id")

    k = random_scalar()
    commitment = k * G
    challenge = compute_challenge(commitment, trader, asset_id)
    response = (k + challenge * secret_key) % CURVE_ORDER
    return BalanceProof(commitment=commitment, challenge=challenge, response=response)


def verify_balance_proof(
    proof: BalanceProof,
    public_key: Point,
    trader: int | str,
    asset_id: int | str,
) -> bool:
    """
    Verify a balance proof. Any malformed component is a rejection.

    Returns:
        True iff the recomputed challenge matches and s·G == R + c·PK.
    """
    if not (0 <= proof.challenge < CURVE_ORDER and 0 <= proof.response < CURVE_ORDER):
        return False
    for pt in (proof.commitment, public_key):
        if not isinstance(pt, Point) or pt == INFINITY or not is_on_curve(pt):
            return False

    try:
        expected = compute_challenge(proof.commitment, trader, asset_id)
    except DarkPoolError:
        return False
    if expected != proof.challenge:
        return False

    return proof.response * G == proof.commitment + proof.challenge * public_key


def require_valid_balance_proof(
    proof: BalanceProof,
    public_key: Point,
    trader: int | str,
    asset_id: int | str,
) -> None:
    """
    Raises:
        ProofVerificationError: If verify_balance_proof rejects the proof.
    """
    if not verify_balance_proof(proof, public_key, trader, asset_id):
        logger.warning("Balance proof rejected for trader %s", trader)
        raise ProofVerificationError("Balance proof failed verification")
