"""
Unit tests for stark_darkpool.darkpool.calls — verifier call data layouts.
"""

import pytest

from stark_darkpool.crypto.balance_proof import build_balance_proof
from stark_darkpool.crypto.curve import INFINITY, Point
from stark_darkpool.crypto.elgamal import ciphertext_to_felts, encrypt
from stark_darkpool.crypto.generators import G
from stark_darkpool.crypto.pedersen import commit
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
    u256_felts,
)
from stark_darkpool.darkpool.models import Side
from stark_darkpool.darkpool.notes import create_deposit_note
from stark_darkpool.darkpool.order import DarkPoolOrder
from stark_darkpool.errors import InvalidPointError

POOL = "0x00ABC"
TOKEN = "0x049d36570d4e46f48e99674bd3fcc84644ddd6b96f7c741b1562b82f9e004dc7"
SK = 0x5EED
PK = SK * G

ORDER = DarkPoolOrder(
    price=(1 << 128) + 5,
    amount=9,
    side=Side.BUY,
    give_asset=0x55534443,
    want_asset=0x455448,
    salt=0x77,
    amount_blinding=0x88,
)


class TestContractCall:
    """Tests for the wallet call format."""

    def test_to_dict(self):
        call = ContractCall("0x1", "settle_epoch", ["0x2"])
        assert call.to_dict() == {
            "contractAddress": "0x1",
            "entrypoint": "settle_epoch",
            "calldata": ["0x2"],
        }

    def test_u256_limbs(self):
        assert u256_felts(5) == ["0x5", "0x0"]
        assert u256_felts((3 << 128) | 1) == ["0x1", "0x3"]

    def test_address_normalized(self):
        (call,) = build_settle_calls(POOL, 3)
        assert call.contract_address == "0xabc"


class TestOrderCalls:
    """commit / reveal / cancel / settle layouts."""

    def test_commit_layout(self):
        proof = build_balance_proof(SK, "0x1", ORDER.give_asset)
        (call,) = build_commit_calls(POOL, ORDER, proof)
        commitment = ORDER.amount_commitment().point
        assert call.entrypoint == "commit_order"
        assert call.calldata == [
            hex(ORDER.order_hash),
            hex(commitment.x),
            hex(commitment.y),
            "0x0",
            "0x55534443",
            "0x455448",
            *proof.to_felts(),
        ]

    def test_reveal_layout(self):
        (call,) = build_reveal_calls(POOL, 12, ORDER)
        assert call.calldata == ["0xc", "0x0", "0x5", "0x1", "0x9", "0x0", "0x77", "0x88"]

    def test_cancel_layout(self):
        (call,) = build_cancel_calls(POOL, 12)
        assert (call.entrypoint, call.calldata) == ("cancel_order", ["0xc", "0x0"])

    def test_settle_layout(self):
        (call,) = build_settle_calls(POOL, 255)
        assert (call.entrypoint, call.calldata) == ("settle_epoch", ["0xff"])


class TestBalanceCalls:
    """deposit / withdraw layouts."""

    def test_deposit_approves_then_deposits(self):
        ct = encrypt(1000, PK, randomness=3)
        point = commit(1000, blinding=4).point
        approve, deposit = build_deposit_calls(POOL, TOKEN, "0x455448", 1000, point, ct)
        assert approve.contract_address == hex(int(TOKEN, 16))
        assert approve.entrypoint == "approve"
        assert approve.calldata == ["0xabc", "0x3e8", "0x0"]
        assert deposit.contract_address == "0xabc"
        assert deposit.entrypoint == "deposit"
        assert deposit.calldata == [
            hex(point.x),
            hex(point.y),
            *ciphertext_to_felts(ct),
            "0x455448",
            "0x3e8",
            "0x0",
            "0x0",
            "0x0",
            "0x0",
        ]

    def test_deposit_with_hint(self):
        ct = encrypt(1, PK, randomness=3)
        _, deposit = build_deposit_calls(POOL, TOKEN, 1, 1, commit(1).point, ct, AEHint(10, 11, 12))
        assert len(deposit.calldata) == 12
        assert deposit.calldata[-3:] == ["0xa", "0xb", "0xc"]

    def test_note_deposit_carries_commitment(self):
        note = create_deposit_note(250, PK, "0x455448")
        approve, deposit = build_note_deposit_calls(POOL, TOKEN, note)
        assert approve.calldata[1:] == ["0xfa", "0x0"]
        assert deposit.calldata[:2] == [hex(note.commitment.point.x), hex(note.commitment.point.y)]
        assert deposit.calldata[2:6] == ciphertext_to_felts(note.encrypted_amount)
        assert deposit.calldata[6:9] == ["0x455448", "0xfa", "0x0"]

    def test_deposit_rejects_identity_commitment(self):
        ct = encrypt(1, PK, randomness=3)
        with pytest.raises(InvalidPointError, match="infinity"):
            build_deposit_calls(POOL, TOKEN, 1, 1, INFINITY, ct)

    def test_deposit_rejects_off_curve_commitment(self):
        ct = encrypt(1, PK, randomness=3)
        with pytest.raises(InvalidPointError):
            build_deposit_calls(POOL, TOKEN, 1, 1, Point(G.x, G.y + 1), ct)

    def test_withdraw_layout(self):
        ct = encrypt(40, PK, randomness=3)
        proof = build_balance_proof(SK, "0x1", 0x455448)
        (call,) = build_withdraw_calls(POOL, 0x455448, 40, ct, proof)
        assert call.entrypoint == "withdraw"
        assert len(call.calldata) == 14
        assert call.calldata[:3] == ["0x455448", "0x28", "0x0"]
        assert call.calldata[-4:] == proof.to_felts()


class TestClaimCalls:
    """claim_fill layout."""

    def test_layout(self):
        receive = encrypt(2, PK, randomness=5)
        spend = encrypt(4_000, PK, randomness=6)
        (call,) = build_claim_fill_calls(POOL, (1 << 128) + 3, receive, spend)
        assert call.contract_address == "0xabc"
        assert call.entrypoint == "claim_fill"
        assert len(call.calldata) == 16
        assert call.calldata[:2] == ["0x3", "0x1"]
        assert call.calldata[2:6] == ciphertext_to_felts(receive)
        assert call.calldata[6:9] == ["0x0", "0x0", "0x0"]
        assert call.calldata[9:13] == ciphertext_to_felts(spend)
        assert call.calldata[13:] == ["0x0", "0x0", "0x0"]

    def test_hints(self):
        ct = encrypt(1, PK, randomness=5)
        (call,) = build_claim_fill_calls(POOL, 1, ct, ct, AEHint(1, 2, 3), AEHint(4, 5, 6))
        assert call.calldata[6:9] == ["0x1", "0x2", "0x3"]
        assert call.calldata[13:] == ["0x4", "0x5", "0x6"]
