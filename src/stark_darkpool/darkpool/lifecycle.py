"""
Client-side order lifecycle: Commit → Reveal → Settle → Claim.

Provides:
- ORDER_TRANSITIONS / validate_transition: the legal order status moves
- OrderNote: immutable per-order record kept by the trader
- CommitMessage: everything produced at commit time
- ClaimMessage: encrypted fill amounts and claim_fill call data
- DarkPoolTrader: phase-gated message preparation and verifier sync

The verifier owns every status change. The trader only observes status
through apply_order_view() and prepares phase-appropriate call data; a
message prepared in the wrong phase raises PhaseViolationError, which means
"wait for the phase boundary", never "retry now".

The one local status change is Expired: once the reveal window of an
order's epoch has passed, the order can never be revealed and the note is
marked accordingly.
"""

from __future__ import annotations

import dataclasses
import logging
import time
from dataclasses import dataclass, field

from stark_darkpool.crypto.balance_proof import BalanceProof, build_balance_proof
from stark_darkpool.crypto.curve import Point
from stark_darkpool.crypto.elgamal import Ciphertext, encrypt
from stark_darkpool.darkpool.calls import (
    AEHint,
    ContractCall,
    build_cancel_calls,
    build_claim_fill_calls,
    build_commit_calls,
    build_reveal_calls,
    build_settle_calls,
)
from stark_darkpool.darkpool.models import PRICE_SCALE, EpochInfo, EpochPhase, EpochResult, OrderPhase, OrderView
from stark_darkpool.darkpool.order import DarkPoolOrder, check_reveal
from stark_darkpool.errors import InsufficientValueError, MalformedInputError, PhaseViolationError

logger = logging.getLogger("stark_darkpool.lifecycle")

# ==============================================================================
# Transition table
# ==============================================================================

ORDER_TRANSITIONS: dict[OrderPhase, frozenset[OrderPhase]] = {
    OrderPhase.COMMITTED: frozenset({OrderPhase.REVEALED, OrderPhase.CANCELLED, OrderPhase.EXPIRED}),
    OrderPhase.REVEALED: frozenset({
        OrderPhase.FILLED,
        OrderPhase.PARTIAL_FILL,
        OrderPhase.CANCELLED,
        OrderPhase.EXPIRED,
    }),
    OrderPhase.FILLED: frozenset(),
    OrderPhase.PARTIAL_FILL: frozenset(),
    OrderPhase.CANCELLED: frozenset(),
    OrderPhase.EXPIRED: frozenset(),
}


def validate_transition(current: OrderPhase, new: OrderPhase) -> None:
    """
    Raises:
        PhaseViolationError: If `current` cannot move to `new`.
    """
    if new not in ORDER_TRANSITIONS[current]:
        raise PhaseViolationError(
            f"Illegal order transition {current.value} → {new.value}",
            expected=", ".join(sorted(p.value for p in ORDER_TRANSITIONS[current])) or None,
            actual=new.value,
        )


# ==============================================================================
# Records
# ==============================================================================


@dataclass(frozen=True)
class OrderNote:
    """
    The trader's record of one committed order.

    The embedded order carries the salt and blinding needed to reveal;
    treat a note as secret material.
    """
    order: DarkPoolOrder
    order_id: int
    epoch: int
    phase: OrderPhase
    committed_hash: int
    commit_tx_hash: str | None = None
    reveal_tx_hash: str | None = None
    fill_amount: int = 0
    created_at: float = field(default_factory=time.time)

    def with_phase(self, phase: OrderPhase, **changes) -> OrderNote:
        """Return a copy moved to `phase`, after checking the transition."""
        validate_transition(self.phase, phase)
        return dataclasses.replace(self, phase=phase, **changes)


@dataclass(frozen=True)
class CommitMessage:
    """
    Output of DarkPoolTrader.prepare_commit.

    Attributes:
        order: The order being committed (secret until reveal).
        epoch: Epoch the commit targets.
        order_hash: Hash submitted on-chain.
        amount_commitment: Pedersen commitment point to the amount.
        balance_proof: Proof bound to (trader, give_asset).
        calls: commit_order call data.
    """
    order: DarkPoolOrder
    epoch: int
    trader: str
    order_hash: int
    amount_commitment: Point
    balance_proof: BalanceProof
    calls: list[ContractCall]


@dataclass(frozen=True)
class ClaimMessage:
    """
    Output of DarkPoolTrader.prepare_claim.

    Attributes:
        order_id: The settled order.
        receive_amount: want_asset units credited (the fill amount).
        spend_amount: give_asset units debited at the clearing price.
        receive_encrypted: receive_amount encrypted to the trader's key.
        spend_encrypted: spend_amount encrypted to the trader's key.
        calls: claim_fill call data.
    """
    order_id: int
    receive_amount: int
    spend_amount: int
    receive_encrypted: Ciphertext
    spend_encrypted: Ciphertext
    calls: list[ContractCall]


# ==============================================================================
# Trader state machine
# ==============================================================================


def _require_phase(epoch: EpochInfo, expected: EpochPhase, action: str) -> None:
    if epoch.phase != expected:
        raise PhaseViolationError(
            f"Cannot {action} during {epoch.phase.value} phase of epoch {epoch.epoch}; "
            f"wait for the {expected.value} phase",
            expected=expected.value,
            actual=epoch.phase.value,
        )


class DarkPoolTrader:
    """
    Drives orders through commit, reveal and settle for one verifier.

    Usage:
        trader = DarkPoolTrader(contract_address="0x...")
        msg = trader.prepare_commit(order, epoch_info, "0xabc", sk, balance)
        # ... wallet submits msg.calls, reads the order id from the receipt
        trader.record_commit(msg, order_id, tx_hash)
        # next phase
        calls = trader.prepare_reveal(order_id, epoch_info)
    """

    def __init__(self, contract_address: str) -> None:
        self.contract_address = contract_address
        self._notes: dict[int, OrderNote] = {}

    # ------------------------------------------------------------------
    # Commit
    # ------------------------------------------------------------------

    def prepare_commit(
        self,
        order: DarkPoolOrder,
        epoch: EpochInfo,
        trader: str,
        secret_key: int | None,
        available_balance: int,
    ) -> CommitMessage:
        """
        Build the commit_order message for `order`.

        The balance check runs first so that an unaffordable order costs no
        proof work. Then the phase gate, then hash, commitment and proof.

        Raises:
            InsufficientValueError: available_balance < required give amount.
            PhaseViolationError: Epoch is not in its Commit phase.
            MalformedInputError: Missing or invalid secret key.
        """
        required = order.required_give_amount
        if available_balance < required:
            raise InsufficientValueError(required, available_balance, hex(order.give_asset))

        _require_phase(epoch, EpochPhase.COMMIT, "commit an order")

        proof = build_balance_proof(secret_key, trader, order.give_asset)
        calls = build_commit_calls(self.contract_address, order, proof)
        logger.info("Prepared commit for epoch %d (side=%s)", epoch.epoch, order.side.name.lower())
        return CommitMessage(
            order=order,
            epoch=epoch.epoch,
            trader=trader,
            order_hash=order.order_hash,
            amount_commitment=order.amount_commitment().point,
            balance_proof=proof,
            calls=calls,
        )

    def record_commit(self, message: CommitMessage, order_id: int, tx_hash: str | None = None) -> OrderNote:
        """Store the note for a commit the verifier has accepted."""
        if order_id in self._notes:
            raise MalformedInputError(f"Order {order_id} is already tracked")
        note = OrderNote(
            order=message.order,
            order_id=order_id,
            epoch=message.epoch,
            phase=OrderPhase.COMMITTED,
            committed_hash=message.order_hash,
            commit_tx_hash=tx_hash,
        )
        self._notes[order_id] = note
        logger.info("Order %d committed in epoch %d", order_id, message.epoch)
        return note

    # ------------------------------------------------------------------
    # Reveal
    # ------------------------------------------------------------------

    def prepare_reveal(self, order_id: int, epoch: EpochInfo) -> list[ContractCall]:
        """
        Build reveal_order call data for a committed order.

        Raises:
            PhaseViolationError: Not the Reveal phase of the order's epoch.
                If the window has already passed the note is marked Expired.
            ProofVerificationError: The stored order no longer hashes to the
                committed value.
        """
        note = self.get_note(order_id)
        if note.phase != OrderPhase.COMMITTED:
            raise PhaseViolationError(
                f"Order {order_id} is {note.phase.value}; only Committed orders can be revealed",
                expected=OrderPhase.COMMITTED.value,
                actual=note.phase.value,
            )

        window_passed = epoch.epoch > note.epoch or (
            epoch.epoch == note.epoch and epoch.phase in (EpochPhase.SETTLE, EpochPhase.CLOSED)
        )
        if window_passed:
            self._notes[order_id] = note.with_phase(OrderPhase.EXPIRED)
            logger.warning("Order %d missed its reveal window (epoch %d)", order_id, note.epoch)
            raise PhaseViolationError(
                f"Reveal window for order {order_id} closed at the end of epoch {note.epoch}",
                expected=EpochPhase.REVEAL.value,
                actual=epoch.phase.value,
            )
        if epoch.epoch < note.epoch:
            raise PhaseViolationError(
                f"Order {order_id} belongs to epoch {note.epoch}, verifier reports {epoch.epoch}",
                expected=EpochPhase.REVEAL.value,
                actual=epoch.phase.value,
            )
        _require_phase(epoch, EpochPhase.REVEAL, "reveal an order")

        check_reveal(note.committed_hash, note.order)
        return build_reveal_calls(self.contract_address, order_id, note.order)

    def record_reveal(self, order_id: int, tx_hash: str) -> OrderNote:
        """Attach the reveal transaction hash. Status still comes from the verifier."""
        note = dataclasses.replace(self.get_note(order_id), reveal_tx_hash=tx_hash)
        self._notes[order_id] = note
        return note

    # ------------------------------------------------------------------
    # Settle / cancel
    # ------------------------------------------------------------------

    def prepare_settle(self, epoch: EpochInfo) -> list[ContractCall]:
        """settle_epoch call data. Anyone may call it during the Settle phase."""
        _require_phase(epoch, EpochPhase.SETTLE, "settle")
        return build_settle_calls(self.contract_address, epoch.epoch)

    def prepare_cancel(self, order_id: int) -> list[ContractCall]:
        """
        Raises:
            PhaseViolationError: The order is no longer Committed.
        """
        note = self.get_note(order_id)
        if note.phase != OrderPhase.COMMITTED:
            raise PhaseViolationError(
                f"Order {order_id} is {note.phase.value}; only Committed orders can be cancelled",
                expected=OrderPhase.COMMITTED.value,
                actual=note.phase.value,
            )
        return build_cancel_calls(self.contract_address, order_id)

    # ------------------------------------------------------------------
    # Claim
    # ------------------------------------------------------------------

    def prepare_claim(
        self,
        view: OrderView,
        epoch_result: EpochResult,
        public_key: Point,
        receive_hint: AEHint | None = None,
        spend_hint: AEHint | None = None,
    ) -> ClaimMessage:
        """
        Build claim_fill call data for a settled order.

        The trader receives fill_amount of want_asset and spends
        fill_amount × clearing_price of give_asset. Both amounts are
        encrypted to the trader's own key under fresh randomness. Without a
        clearing price the spend equals the fill.

        Raises:
            PhaseViolationError: The order is not Filled/PartialFill or its
                epoch has not settled.
            MalformedInputError: Nothing was filled, or the result belongs to
                another epoch.
        """
        if view.status not in (OrderPhase.FILLED, OrderPhase.PARTIAL_FILL):
            raise PhaseViolationError(
                f"Order {view.order_id} is {view.status.value}; only filled orders can be claimed",
                expected=f"{OrderPhase.FILLED.value}, {OrderPhase.PARTIAL_FILL.value}",
                actual=view.status.value,
            )
        if view.fill_amount <= 0:
            raise MalformedInputError(f"Order {view.order_id} has no fill amount to claim")
        if epoch_result.epoch_id != view.epoch:
            raise MalformedInputError(
                f"Epoch result {epoch_result.epoch_id} does not match order epoch {view.epoch}"
            )
        if not epoch_result.is_settled:
            raise PhaseViolationError(
                f"Epoch {view.epoch} has not settled yet",
                expected=EpochPhase.SETTLE.value,
                actual=None,
            )

        receive_amount = view.fill_amount
        if epoch_result.clearing_price > 0:
            spend_amount = view.fill_amount * epoch_result.clearing_price // PRICE_SCALE
        else:
            spend_amount = view.fill_amount

        receive_encrypted = encrypt(receive_amount, public_key)
        spend_encrypted = encrypt(spend_amount, public_key)
        calls = build_claim_fill_calls(
            self.contract_address,
            view.order_id,
            receive_encrypted,
            spend_encrypted,
            receive_hint,
            spend_hint,
        )
        logger.info("Prepared claim for order %d (fill=%d)", view.order_id, receive_amount)
        return ClaimMessage(
            order_id=view.order_id,
            receive_amount=receive_amount,
            spend_amount=spend_amount,
            receive_encrypted=receive_encrypted,
            spend_encrypted=spend_encrypted,
            calls=calls,
        )

    # ------------------------------------------------------------------
    # Verifier sync
    # ------------------------------------------------------------------

    def apply_order_view(self, view: OrderView) -> OrderNote:
        """
        Sync a note with the status and fill amount the verifier reports.

        Raises:
            PhaseViolationError: The reported status is not reachable from
                the note's current status.
        """
        note = self.get_note(view.order_id)
        if view.status == note.phase:
            if view.fill_amount != note.fill_amount:
                note = dataclasses.replace(note, fill_amount=view.fill_amount)
                self._notes[view.order_id] = note
            return note

        updated = note.with_phase(view.status, fill_amount=view.fill_amount)
        self._notes[view.order_id] = updated
        logger.info(
            "Order %d: %s → %s (fill=%d)",
            view.order_id,
            note.phase.value,
            view.status.value,
            view.fill_amount,
        )
        return updated

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def get_note(self, order_id: int) -> OrderNote:
        try:
            return self._notes[order_id]
        except KeyError:
            raise MalformedInputError(f"Unknown order id: {order_id}") from None

    def pending_reveals(self, epoch: int) -> list[OrderNote]:
        """Committed orders of `epoch` still waiting to be revealed."""
        return [
            n for n in self._notes.values()
            if n.epoch == epoch and n.phase == OrderPhase.COMMITTED
        ]

    @property
    def orders(self) -> list[OrderNote]:
        return list(self._notes.values())
