"""
Transcript hashing and field-element helpers.

Every hash the protocol computes (order hashes, Fiat-Shamir challenges,
nullifiers, range-proof bindings) goes through one construction:

    Blake2b256(domain ‖ felt_1 ‖ felt_2 ‖ ...)   with each felt as 32 bytes BE

reduced mod P when the result is a field element, or mod N when it is a
challenge scalar. The domain tag keeps hashes of different message types
from ever colliding.
"""

from __future__ import annotations

import hashlib

from stark_darkpool.crypto.field import CURVE_ORDER, STARK_PRIME
from stark_darkpool.errors import MalformedInputError

# ==============================================================================
# Domain tags
# ==============================================================================

ORDER_HASH_DOMAIN = b"STARK_DARKPOOL_ORDER_V1"
BALANCE_PROOF_DOMAIN = b"STARK_DARKPOOL_BALANCE_PROOF_V1"
NULLIFIER_DOMAIN = b"STARK_DARKPOOL_NULLIFIER_V1"
RANGE_PROOF_DOMAIN = b"STARK_DARKPOOL_RANGE_PROOF_V1"

U128_MASK = (1 << 128) - 1
U256_MAX = (1 << 256) - 1


# ==============================================================================
# Felt helpers
# ==============================================================================


def as_felt(value: int | str, name: str = "felt") -> int:
    """
    Coerce an int, 0x-hex string or decimal string into a field element.

    Raises:
        MalformedInputError: If the value is not parseable or not in [0, P).
    """
    if isinstance(value, bool):
        raise MalformedInputError(f"{name} must be an integer or hex string, got bool")
    if isinstance(value, str):
        text = value.strip()
        try:
            result = int(text, 16) if text.lower().startswith("0x") else int(text, 10)
        except ValueError as err:
            raise MalformedInputError(f"{name} is not a valid felt: {value!r}") from err
    elif isinstance(value, int):
        result = value
    else:
        raise MalformedInputError(f"{name} must be an integer or hex string, got {type(value).__name__}")

    if not 0 <= result < STARK_PRIME:
        raise MalformedInputError(f"{name} out of field range: {value!r}")
    return result


def to_felt_hex(value: int | str) -> str:
    """Render a field element as 0x-prefixed lowercase hex."""
    return hex(as_felt(value))


def split_u256(value: int) -> tuple[int, int]:
    """Split a u256 into (low, high) 128-bit limbs, the Cairo u256 layout."""
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= U256_MAX:
        raise MalformedInputError(f"Value does not fit in u256: {value!r}")
    return value & U128_MASK, value >> 128


def join_u256(low: int | str, high: int | str) -> int:
    """Inverse of split_u256."""
    lo = as_felt(low, "u256.low")
    hi = as_felt(high, "u256.high")
    if lo > U128_MASK or hi > U128_MASK:
        raise MalformedInputError(f"u256 limbs must fit in 128 bits: ({lo:#x}, {hi:#x})")
    return (hi << 128) | lo


def short_string_to_felt(text: str) -> int:
    """
    Cairo short-string encoding: ASCII bytes read as a big-endian integer.

    Raises:
        MalformedInputError: If the text is not ASCII or longer than 31 chars.
    """
    try:
        raw = text.encode("ascii")
    except UnicodeEncodeError as err:
        raise MalformedInputError(f"Short string must be ASCII: {text!r}") from err
    if len(raw) > 31:
        raise MalformedInputError(f"Short string longer than 31 characters: {text!r}")
    return int.from_bytes(raw, "big")


def felt_to_short_string(value: int) -> str:
    """Decode a Cairo short string felt back to text."""
    felt = as_felt(value)
    length = (felt.bit_length() + 7) // 8
    return felt.to_bytes(length, "big").decode("ascii")


# ==============================================================================
# Hashes
# ==============================================================================


def _digest(domain: bytes, elements: tuple[int | str, ...]) -> int:
    hasher = hashlib.blake2b(digest_size=32)
    hasher.update(domain)
    for i, element in enumerate(elements):
        hasher.update(as_felt(element, f"element[{i}]").to_bytes(32, "big"))
    return int.from_bytes(hasher.digest(), "big")


def hash_to_field(domain: bytes, *elements: int | str) -> int:
    """Domain-separated Blake2b256 over felts, reduced mod P."""
    return _digest(domain, elements) % STARK_PRIME


def hash_to_scalar(domain: bytes, *elements: int | str) -> int:
    """Domain-separated Blake2b256 over felts, reduced mod N (for challenges)."""
    return _digest(domain, elements) % CURVE_ORDER
