"""
The fixed generator pair (G, H) shared by Pedersen commitments and ElGamal.

Provides:
- G: the canonical Stark base point
- H: a NUMS (Nothing-Up-My-Sleeve) secondary generator, hard-coded
- hash_to_curve: the try-and-increment derivation that produced H
- verify_generator_independence: small-multiple search guarding H ≠ k·G

H is derived once, offline, and pinned as constants. The derivation is kept
here so anyone can re-run it and compare (the unit tests do exactly that);
runtime code never recomputes it.

Deriving H as a small multiple of G (for example H = 2G) would let anyone
who knows the multiple open a commitment to any value, so a startup check
compares H against the first few multiples of G.

References:
    [Ped91] T.P. Pedersen, "Non-Interactive and Information-Theoretic Secure
            Verifiable Secret Sharing", CRYPTO '91, §3.
    [H2C]   IETF draft-irtf-cfrg-hash-to-curve, §5 (try-and-increment method).
"""

from __future__ import annotations

import hashlib
import logging

from stark_darkpool.crypto.curve import INFINITY, Point, is_on_curve
from stark_darkpool.crypto.field import CURVE_A, CURVE_B, STARK_PRIME, is_quadratic_residue, sqrt_mod
from stark_darkpool.errors import GeneratorSetupError

logger = logging.getLogger("stark_darkpool.generators")

# ==============================================================================
# Constants
# ==============================================================================

PEDERSEN_H_DOMAIN = b"STARK_DARKPOOL_PEDERSEN_H_V1"
"""Versioned domain tag fed to hash_to_curve to produce H."""

G = Point(
    0x1EF15C18599971B7BECED415A40F0C7DEACFD9B0D1819E03D723D8BC943CFCA,
    0x5668060AA49730B7BE4801DF46EC62DE53ECD11ABE43A32873000C36E8DC1F,
)
"""Canonical Stark curve generator."""

H = Point(
    0x01078D1EFB15EE95997F211055677A2E030396E0FCBB835AE50F0CB3F9B4E411,
    0x00D62DDD58A0BA4BDEB7390CC47AEF6ECC9F3845087B33901BE8BC6291EF25AC,
)
"""hash_to_curve(PEDERSEN_H_DOMAIN), found at counter 0."""

STARTUP_INDEPENDENCE_BOUND = 16
"""Multiples of G checked against H at import time."""


# ==============================================================================
# hash_to_curve
# ==============================================================================


def hash_to_curve(tag: bytes, max_attempts: int = 1000) -> Point:
    """
    Map a domain tag to a curve point with no known discrete log w.r.t. G.

    Algorithm (try-and-increment):
        1. x = int(Blake2b256(tag ‖ counter as 4 big-endian bytes)) mod P
        2. If x³ + A·x + B is not a quadratic residue, counter += 1 and retry
        3. y = sqrt(x³ + A·x + B), taking the root with y ≤ P/2

    Args:
        tag: ASCII domain-separation tag, versioned.
        max_attempts: Counter values to try before giving up.

    Returns:
        The first valid point found.

    Raises:
        GeneratorSetupError: If no counter in range yields a point.
    """
    for counter in range(max_attempts):
        digest = hashlib.blake2b(tag + counter.to_bytes(4, "big"), digest_size=32).digest()
        x = int.from_bytes(digest, "big") % STARK_PRIME
        rhs = (pow(x, 3, STARK_PRIME) + CURVE_A * x + CURVE_B) % STARK_PRIME
        if not is_quadratic_residue(rhs):
            continue
        y = sqrt_mod(rhs)
        if y > STARK_PRIME // 2:
            y = STARK_PRIME - y
        return Point(x, y)

    raise GeneratorSetupError(
        f"hash_to_curve: failed to find a valid point in {max_attempts} iterations"
    )


# ==============================================================================
# Independence check
# ==============================================================================


def verify_generator_independence(bound: int = STARTUP_INDEPENDENCE_BOUND) -> None:
    """
    Check that H is a usable second generator.

    H must be on the curve, must not be the identity, and must differ from
    ±k·G for every 1 ≤ k ≤ bound. Comparing x coordinates covers both signs.

    Raises:
        GeneratorSetupError: On any failed condition.
    """
    if not is_on_curve(G) or G == INFINITY:
        raise GeneratorSetupError("G is not a valid curve point")
    if not is_on_curve(H) or H == INFINITY:
        raise GeneratorSetupError("H is not a valid curve point")

    multiple = G
    for k in range(1, bound + 1):
        if multiple.x == H.x:
            raise GeneratorSetupError(f"H equals ±{k}·G; commitments would not be binding")
        multiple = multiple + G
    logger.debug("Generator independence verified up to k=%d", bound)


verify_generator_independence()
