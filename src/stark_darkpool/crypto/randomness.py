"""
Single injectable source of random scalars.

Every blinding factor, ElGamal randomness, nonce and salt in the package is
drawn through get_scalar_source(). Production code uses the `secrets` CSPRNG;
tests swap in a SequenceScalarSource to replay fixed vectors:

    with use_scalar_source(SequenceScalarSource([7, 42, 9])):
        c = commit(100)          # blinding = 7
"""

from __future__ import annotations

import secrets
import threading
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from typing import Protocol

from stark_darkpool.crypto.field import CURVE_ORDER
from stark_darkpool.errors import MalformedInputError


class ScalarSource(Protocol):
    """Anything that hands out scalars in [1, N-1]."""

    def scalar(self) -> int:
        ...


class SystemScalarSource:
    """Uniform scalars in [1, N-1] from the operating system CSPRNG."""

    def scalar(self) -> int:
        return secrets.randbelow(CURVE_ORDER - 1) + 1

    def __repr__(self) -> str:
        return "SystemScalarSource()"


class SequenceScalarSource:
    """
    Deterministic scalars for test vectors.

    Hands out the given values in order. A value that was already handed out
    is refused, so a test that accidentally reuses randomness fails loudly
    instead of producing linkable ciphertexts.

    Raises:
        MalformedInputError: On an out-of-range value, a repeated value,
            or when the sequence is exhausted.
    """

    def __init__(self, values: Iterable[int]) -> None:
        self._values = list(values)
        self._position = 0
        self._issued: set[int] = set()
        self._lock = threading.Lock()

    def scalar(self) -> int:
        with self._lock:
            if self._position >= len(self._values):
                raise MalformedInputError(
                    f"Scalar sequence exhausted after {len(self._values)} values"
                )
            value = self._values[self._position]
            self._position += 1
            if isinstance(value, bool) or not isinstance(value, int) or not 0 < value < CURVE_ORDER:
                raise MalformedInputError(f"Sequence scalar must be in [1, N-1], got {value!r}")
            if value in self._issued:
                raise MalformedInputError(f"Sequence scalar {value} was already used")
            self._issued.add(value)
            return value

    @property
    def remaining(self) -> int:
        return len(self._values) - self._position


_source: ScalarSource = SystemScalarSource()
_source_lock = threading.Lock()


def get_scalar_source() -> ScalarSource:
    """Return the currently installed scalar source."""
    with _source_lock:
        return _source


def random_scalar() -> int:
    """Draw one scalar in [1, N-1] from the installed source."""
    return get_scalar_source().scalar()


@contextmanager
def use_scalar_source(source: ScalarSource) -> Iterator[ScalarSource]:
    """Install `source` for the duration of the with-block, then restore."""
    global _source
    with _source_lock:
        previous = _source
        _source = source
    try:
        yield source
    finally:
        with _source_lock:
            _source = previous
