"""
stark-darkpool: Confidential commitments, encryption and balance proofs for a
commit/reveal dark pool on the Stark curve.

Usage:
    from stark_darkpool import DarkPoolTrader, VerifierClient, create_order
    from stark_darkpool.crypto import commit, encrypt, generate_keypair
"""

from stark_darkpool.config import DarkPoolConfig
from stark_darkpool.darkpool.lifecycle import DarkPoolTrader
from stark_darkpool.darkpool.order import DarkPoolOrder, create_order
from stark_darkpool.darkpool.rpc import VerifierClient

__version__ = "0.1.0"
__all__ = [
    "DarkPoolConfig",
    "DarkPoolTrader",
    "DarkPoolOrder",
    "VerifierClient",
    "create_order",
]
