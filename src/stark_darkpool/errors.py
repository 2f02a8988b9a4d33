"""
Error taxonomy for the dark pool client.

Four protocol-level failure classes are distinguished so callers can decide
between aborting, waiting for the next phase, or fixing their inputs:

- MalformedInputError: off-curve points, unreduced scalars, reused randomness.
  Rejected locally before any protocol call.
- ProofVerificationError: a balance proof or reveal hash does not check out.
  Never retry with the same inputs.
- PhaseViolationError: a message was prepared outside its epoch phase.
  Wait for the next phase boundary.
- InsufficientValueError: the balance check failed before any crypto work.

CurveArithmeticError marks programming errors inside the primitives
(inverting zero, a degenerate slope) and is never meant to be caught and
retried.
"""

from __future__ import annotations


class DarkPoolError(Exception):
    """Base class for every error raised by stark_darkpool."""
    pass


class MalformedInputError(DarkPoolError, ValueError):
    """Raised when an input fails validation before any protocol call."""
    pass


class InvalidPointError(MalformedInputError):
    """Raised when a point is not on the Stark curve."""
    pass


class CurveArithmeticError(DarkPoolError, ArithmeticError):
    """Raised on impossible field/group operations such as inverting zero."""
    pass


class GeneratorSetupError(DarkPoolError):
    """Raised when the (G, H) generator pair fails its independence check."""
    pass


class DecryptionRangeError(DarkPoolError):
    """Raised when an ElGamal plaintext lies outside the searched range."""
    pass


class ProofVerificationError(DarkPoolError):
    """Raised when a balance proof or reveal hash is rejected."""
    pass


class PhaseViolationError(DarkPoolError):
    """Raised when a message is prepared outside its valid epoch phase."""

    def __init__(self, message: str, expected: str | None = None, actual: str | None = None) -> None:
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class InsufficientValueError(DarkPoolError, ValueError):
    """Raised when the available balance cannot cover an order or withdrawal."""

    def __init__(self, required: int, available: int, asset: str | None = None) -> None:
        label = f" of {asset}" if asset else ""
        super().__init__(
            f"Insufficient balance{label}: need {required}, have {available}"
        )
        self.required = required
        self.available = available
        self.asset = asset


class VerifierRpcError(DarkPoolError):
    """Raised when the verifier's JSON-RPC endpoint returns an error."""
    pass
