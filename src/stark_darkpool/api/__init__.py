"""
API module for stark-darkpool.

Provides FastAPI routes and models exposing order hashing, reveal checks
and balance proof verification as a REST API.
"""

from stark_darkpool.api.models import (
    BalanceProofVerifyRequest,
    BalanceProofVerifyResponse,
    OrderHashRequest,
    OrderHashResponse,
    RevealCheckRequest,
    RevealCheckResponse,
)

__all__ = [
    "BalanceProofVerifyRequest",
    "BalanceProofVerifyResponse",
    "OrderHashRequest",
    "OrderHashResponse",
    "RevealCheckRequest",
    "RevealCheckResponse",
]
