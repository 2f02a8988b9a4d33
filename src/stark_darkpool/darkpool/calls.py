"""
Call data builders for the dark pool verifier contract.

Each builder returns a list of ContractCall objects ready to be handed to a
wallet for signing. Nothing here signs or submits. All values are rendered
as 0x-hex felts; u256 values are split into (low, high) 128-bit limbs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from stark_darkpool.crypto.balance_proof import BalanceProof
from stark_darkpool.crypto.curve import Point, is_infinity, point_to_felts, require_on_curve
from stark_darkpool.crypto.elgamal import Ciphertext, ciphertext_to_felts
from stark_darkpool.crypto.transcript import split_u256, to_felt_hex
from stark_darkpool.darkpool.notes import DepositNote
from stark_darkpool.darkpool.order import DarkPoolOrder
from stark_darkpool.errors import InvalidPointError


@dataclass(frozen=True)
class ContractCall:
    """A single contract invocation."""
    contract_address: str
    entrypoint: str
    calldata: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Starknet wallet call format."""
        return {
            "contractAddress": self.contract_address,
            "entrypoint": self.entrypoint,
            "calldata": list(self.calldata),
        }


@dataclass(frozen=True)
class AEHint:
    """
    Authenticated-encryption hint that lets the owner read a balance without
    a discrete-log search. Produced by the wallet; passed through as-is.
    """
    encrypted_amount: int = 0
    nonce: int = 0
    mac: int = 0

    def to_felts(self) -> list[str]:
        return [to_felt_hex(self.encrypted_amount), to_felt_hex(self.nonce), to_felt_hex(self.mac)]


def u256_felts(value: int) -> list[str]:
    low, high = split_u256(value)
    return [hex(low), hex(high)]


def build_commit_calls(
    contract_address: str,
    order: DarkPoolOrder,
    proof: BalanceProof,
) -> list[ContractCall]:
    """
    commit_order(order_hash, amount_commitment.x, amount_commitment.y, side,
                 give_asset, want_asset, R.x, R.y, challenge, response)
    """
    commitment = order.amount_commitment().point
    calldata = [
        hex(order.order_hash),
        hex(commitment.x),
        hex(commitment.y),
        hex(int(order.side)),
        to_felt_hex(order.give_asset),
        to_felt_hex(order.want_asset),
        *proof.to_felts(),
    ]
    return [ContractCall(to_felt_hex(contract_address), "commit_order", calldata)]


def build_reveal_calls(
    contract_address: str,
    order_id: int,
    order: DarkPoolOrder,
) -> list[ContractCall]:
    """reveal_order(order_id: u256, price: u256, amount: u256, salt, blinding)"""
    calldata = [
        *u256_felts(order_id),
        *u256_felts(order.price),
        *u256_felts(order.amount),
        hex(order.salt),
        hex(order.amount_blinding),
    ]
    return [ContractCall(to_felt_hex(contract_address), "reveal_order", calldata)]


def build_cancel_calls(contract_address: str, order_id: int) -> list[ContractCall]:
    """cancel_order(order_id: u256)"""
    return [ContractCall(to_felt_hex(contract_address), "cancel_order", u256_felts(order_id))]


def build_settle_calls(contract_address: str, epoch_id: int) -> list[ContractCall]:
    """settle_epoch(epoch_id). Permissionless."""
    return [ContractCall(to_felt_hex(contract_address), "settle_epoch", [to_felt_hex(epoch_id)])]


def build_deposit_calls(
    contract_address: str,
    token_address: str,
    asset_id: int | str,
    amount: int,
    commitment: Point,
    encrypted_amount: Ciphertext,
    ae_hint: AEHint | None = None,
) -> list[ContractCall]:
    """
    ERC20 approve on the token, then
    deposit(commitment (2 felts), encrypted_amount (4 felts), asset,
            amount: u256, ae_hint (3 felts)).

    Raises:
        InvalidPointError: If the commitment is off the curve or the identity.
    """
    require_on_curve(commitment, "commitment")
    if is_infinity(commitment):
        raise InvalidPointError("Deposit commitment must not be the point at infinity")
    hint = ae_hint or AEHint()
    pool = to_felt_hex(contract_address)
    amount_felts = u256_felts(amount)
    return [
        ContractCall(to_felt_hex(token_address), "approve", [pool, *amount_felts]),
        ContractCall(
            pool,
            "deposit",
            [
                *point_to_felts(commitment),
                *ciphertext_to_felts(encrypted_amount),
                to_felt_hex(asset_id),
                *amount_felts,
                *hint.to_felts(),
            ],
        ),
    ]


def build_note_deposit_calls(
    contract_address: str,
    token_address: str,
    note: DepositNote,
    ae_hint: AEHint | None = None,
) -> list[ContractCall]:
    """Deposit call data for a note made by create_deposit_note."""
    return build_deposit_calls(
        contract_address,
        token_address,
        note.asset_id,
        note.value,
        note.commitment.point,
        note.encrypted_amount,
        ae_hint,
    )


def build_withdraw_calls(
    contract_address: str,
    asset_id: int | str,
    amount: int,
    encrypted_amount: Ciphertext,
    proof: BalanceProof,
    ae_hint: AEHint | None = None,
) -> list[ContractCall]:
    """
    withdraw(asset, amount: u256, encrypted_amount (4 felts), ae_hint (3 felts),
             balance_proof (4 felts))
    """
    hint = ae_hint or AEHint()
    calldata = [
        to_felt_hex(asset_id),
        *u256_felts(amount),
        *ciphertext_to_felts(encrypted_amount),
        *hint.to_felts(),
        *proof.to_felts(),
    ]
    return [ContractCall(to_felt_hex(contract_address), "withdraw", calldata)]


def build_claim_fill_calls(
    contract_address: str,
    order_id: int,
    receive_encrypted: Ciphertext,
    spend_encrypted: Ciphertext,
    receive_hint: AEHint | None = None,
    spend_hint: AEHint | None = None,
) -> list[ContractCall]:
    """
    claim_fill(order_id: u256, receive_encrypted (4 felts), receive_hint (3 felts),
               spend_encrypted (4 felts), spend_hint (3 felts))

    Credits the filled amount of want_asset and debits the matching amount
    of give_asset once the epoch has settled.
    """
    calldata = [
        *u256_felts(order_id),
        *ciphertext_to_felts(receive_encrypted),
        *(receive_hint or AEHint()).to_felts(),
        *ciphertext_to_felts(spend_encrypted),
        *(spend_hint or AEHint()).to_felts(),
    ]
    return [ContractCall(to_felt_hex(contract_address), "claim_fill", calldata)]
