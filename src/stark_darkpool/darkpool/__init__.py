"""
stark_darkpool.darkpool — Commit/reveal batch auction client.

Provides:
- DarkPoolOrder, order hashing and the local reveal check
- DarkPoolTrader: phase-gated commit / reveal / settle / cancel / claim
- Call data builders for the verifier contract
- Deposit notes with export/import
- VerifierClient: read-only JSON-RPC access to epoch and order state
"""

from stark_darkpool.darkpool.calls import (
    AEHint,
    ContractCall,
    build_cancel_calls,
    build_claim_fill_calls,
    build_commit_calls,
    build_deposit_calls,
    build_note_deposit_calls,
    build_reveal_calls,
    build_settle_calls,
    build_withdraw_calls,
)
from stark_darkpool.darkpool.lifecycle import ClaimMessage, CommitMessage, DarkPoolTrader, OrderNote, validate_transition
from stark_darkpool.darkpool.models import EpochInfo, EpochPhase, EpochResult, OrderPhase, OrderView, Side
from stark_darkpool.darkpool.notes import DepositNote, compute_nullifier, create_deposit_note, export_note, import_note
from stark_darkpool.darkpool.order import DarkPoolOrder, check_reveal, compute_order_hash, create_order
from stark_darkpool.darkpool.rpc import VerifierClient, get_selector_from_name, parse_order_id_from_receipt

__all__ = [
    # Orders
    "DarkPoolOrder",
    "create_order",
    "compute_order_hash",
    "check_reveal",
    # Lifecycle
    "DarkPoolTrader",
    "OrderNote",
    "CommitMessage",
    "ClaimMessage",
    "validate_transition",
    # Models
    "Side",
    "EpochPhase",
    "OrderPhase",
    "EpochInfo",
    "EpochResult",
    "OrderView",
    # Calls
    "ContractCall",
    "AEHint",
    "build_commit_calls",
    "build_reveal_calls",
    "build_cancel_calls",
    "build_settle_calls",
    "build_deposit_calls",
    "build_note_deposit_calls",
    "build_claim_fill_calls",
    "build_withdraw_calls",
    # Notes
    "DepositNote",
    "create_deposit_note",
    "compute_nullifier",
    "export_note",
    "import_note",
    # RPC
    "VerifierClient",
    "get_selector_from_name",
    "parse_order_id_from_receipt",
]
