"""
stark_darkpool.crypto — Cryptographic primitives on the Stark curve.

Provides:
- Field and curve arithmetic (affine points, identity at (0, 0))
- The (G, H) generator pair, with H from domain-separated hash-to-curve
- Exponential ElGamal encryption with bounded decryption
- Pedersen commitments (C = value·G + blinding·H)
- Fiat-Shamir Schnorr balance proofs bound to trader and asset
- Bit-decomposition range checks and value conservation (not zero-knowledge)
- A single injectable CSPRNG scalar source
"""

from stark_darkpool.crypto.balance_proof import (
    BalanceProof,
    build_balance_proof,
    require_valid_balance_proof,
    verify_balance_proof,
)
from stark_darkpool.crypto.curve import (
    INFINITY,
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
from stark_darkpool.crypto.elgamal import (
    Ciphertext,
    KeyPair,
    add_ciphertexts,
    decrypt,
    encrypt,
    generate_keypair,
    subtract_ciphertexts,
)
from stark_darkpool.crypto.generators import G, H, PEDERSEN_H_DOMAIN, hash_to_curve, verify_generator_independence
from stark_darkpool.crypto.pedersen import (
    Commitment,
    add_commitments,
    commit,
    subtract_commitments,
    verify_commitment,
)
from stark_darkpool.crypto.randomness import (
    SequenceScalarSource,
    SystemScalarSource,
    random_scalar,
    use_scalar_source,
)

__all__ = [
    # Curve
    "Point",
    "INFINITY",
    "is_infinity",
    "is_on_curve",
    "point_add",
    "point_double",
    "point_neg",
    "point_sub",
    "scalar_mult",
    "point_to_felts",
    "felts_to_point",
    "compress_point",
    "decompress_point",
    # Generators
    "G",
    "H",
    "PEDERSEN_H_DOMAIN",
    "hash_to_curve",
    "verify_generator_independence",
    # ElGamal
    "KeyPair",
    "Ciphertext",
    "generate_keypair",
    "encrypt",
    "decrypt",
    "add_ciphertexts",
    "subtract_ciphertexts",
    # Pedersen
    "Commitment",
    "commit",
    "verify_commitment",
    "add_commitments",
    "subtract_commitments",
    # Balance proof
    "BalanceProof",
    "build_balance_proof",
    "verify_balance_proof",
    "require_valid_balance_proof",
    # Randomness
    "SystemScalarSource",
    "SequenceScalarSource",
    "random_scalar",
    "use_scalar_source",
]
