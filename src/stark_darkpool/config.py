"""
Runtime configuration, read from DARKPOOL_* environment variables.

    DARKPOOL_RPC_URL            Starknet JSON-RPC endpoint
    DARKPOOL_CONTRACT_ADDRESS   Verifier contract address ("0x0" = not deployed)
    DARKPOOL_TIMEOUT            HTTP timeout in seconds
    DARKPOOL_POLL_INTERVAL      Seconds between phase polls
    DARKPOOL_DECRYPT_BOUND      Largest plaintext ElGamal decryption searches for
    DARKPOOL_EPOCH_DURATION     Blocks per phase when the verifier doesn't say
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from stark_darkpool.crypto.elgamal import DEFAULT_DECRYPT_BOUND

DEFAULT_RPC_URL = "https://starknet-sepolia.public.blastapi.io/rpc/v0_7"
DEFAULT_EPOCH_DURATION = 50
SECONDS_PER_BLOCK = 4


@dataclass(frozen=True)
class DarkPoolConfig:
    """
    Args:
        rpc_url:          Starknet JSON-RPC endpoint
        contract_address: Verifier contract; "0x0" means no deployment
        timeout:          HTTP timeout (seconds)
        poll_interval:    Delay between phase polls (seconds)
        decrypt_bound:    Upper bound for baby-step giant-step decryption
        epoch_duration:   Fallback blocks-per-phase
    """
    rpc_url: str = DEFAULT_RPC_URL
    contract_address: str = "0x0"
    timeout: float = 15.0
    poll_interval: float = 4.0
    decrypt_bound: int = DEFAULT_DECRYPT_BOUND
    epoch_duration: int = DEFAULT_EPOCH_DURATION

    def __post_init__(self) -> None:
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")
        if self.poll_interval <= 0:
            raise ValueError(f"poll_interval must be positive, got {self.poll_interval}")
        if self.decrypt_bound < 0:
            raise ValueError(f"decrypt_bound must be non-negative, got {self.decrypt_bound}")
        if self.epoch_duration <= 0:
            raise ValueError(f"epoch_duration must be positive, got {self.epoch_duration}")

    @property
    def has_contract(self) -> bool:
        return int(self.contract_address, 16) != 0

    @classmethod
    def from_env(cls) -> DarkPoolConfig:
        """Build a config from the environment, falling back to defaults."""
        return cls(
            rpc_url=os.getenv("DARKPOOL_RPC_URL", DEFAULT_RPC_URL),
            contract_address=os.getenv("DARKPOOL_CONTRACT_ADDRESS", "0x0"),
            timeout=float(os.getenv("DARKPOOL_TIMEOUT", "15")),
            poll_interval=float(os.getenv("DARKPOOL_POLL_INTERVAL", "4")),
            decrypt_bound=int(os.getenv("DARKPOOL_DECRYPT_BOUND", str(DEFAULT_DECRYPT_BOUND))),
            epoch_duration=int(os.getenv("DARKPOOL_EPOCH_DURATION", str(DEFAULT_EPOCH_DURATION))),
        )
