"""
Deposit notes: the secret material behind a confidential deposit.

A note holds everything the owner needs to later prove, spend or audit a
deposit: the Pedersen opening, the nullifier secret and the ElGamal
randomness. Exported notes are credentials. They must be stored like a
private key and never written to a log.

Nullifier = H_P(NULLIFIER_DOMAIN, nullifier_secret, leaf_index)
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any

from stark_darkpool.crypto.curve import Point, felts_to_point
from stark_darkpool.crypto.elgamal import (
    Ciphertext,
    ciphertext_to_felts,
    encrypt,
    felts_to_ciphertext,
    keypair_from_private_key,
)
from stark_darkpool.crypto.pedersen import Commitment, commit, verify_commitment
from stark_darkpool.crypto.randomness import random_scalar
from stark_darkpool.crypto.transcript import NULLIFIER_DOMAIN, as_felt, hash_to_field
from stark_darkpool.errors import MalformedInputError

NOTE_TYPE = "stark_darkpool_note"
NOTE_VERSION = 1


@dataclass(frozen=True)
class DepositNote:
    """
    A confidential deposit.

    SECURITY: blinding, nullifier_secret and encryption_randomness are
    secrets. Loss = loss of funds. Disclosure = loss of privacy.
    """
    asset_id: int
    commitment: Commitment
    encrypted_amount: Ciphertext
    nullifier_secret: int = field(repr=False)
    encryption_randomness: int = field(repr=False)
    leaf_index: int | None = None

    @property
    def value(self) -> int:
        return self.commitment.value

    @property
    def blinding(self) -> int:
        return self.commitment.blinding

    def nullifier(self) -> int:
        """
        Raises:
            MalformedInputError: If the note has no leaf index yet.
        """
        if self.leaf_index is None:
            raise MalformedInputError("Note has no leaf index; nullifier is undefined until inserted")
        return compute_nullifier(self.nullifier_secret, self.leaf_index)


@dataclass(frozen=True)
class ImportedNote:
    """A note read back from its exported record."""
    note: DepositNote
    private_key: int = field(repr=False)
    tx_hash: str | None = None
    timestamp: int = 0


def create_deposit_note(value: int, public_key: Point, asset_id: int | str) -> DepositNote:
    """
    Create a fresh note for depositing `value` of `asset_id`.

    The amount is committed under a fresh blinding and encrypted to
    `public_key` under fresh randomness.
    """
    asset = as_felt(asset_id, "asset_id")
    randomness = random_scalar()
    return DepositNote(
        asset_id=asset,
        commitment=commit(value),
        encrypted_amount=encrypt(value, public_key, randomness),
        nullifier_secret=random_scalar(),
        encryption_randomness=randomness,
    )


def compute_nullifier(nullifier_secret: int, leaf_index: int) -> int:
    """Nullifier = H_P(NULLIFIER_DOMAIN, nullifier_secret, leaf_index)."""
    if leaf_index < 0:
        raise MalformedInputError(f"leaf_index must be non-negative, got {leaf_index}")
    return hash_to_field(NULLIFIER_DOMAIN, nullifier_secret, leaf_index)


# ==============================================================================
# Export / import
# ==============================================================================


def export_note(
    note: DepositNote,
    private_key: int,
    tx_hash: str | None = None,
    timestamp: int | None = None,
) -> dict[str, Any]:
    """
    Export a note as a JSON-safe record for backup or audit.

    The record contains the private key. Treat it as a credential.
    """
    point = note.commitment.point
    return {
        "type": NOTE_TYPE,
        "version": NOTE_VERSION,
        "asset": hex(note.asset_id),
        "commitment": {"x": hex(point.x), "y": hex(point.y)},
        "value": str(note.value),
        "blinding": hex(note.blinding),
        "nullifierSecret": hex(note.nullifier_secret),
        "encryptionRandomness": hex(note.encryption_randomness),
        "encryptedAmount": ciphertext_to_felts(note.encrypted_amount),
        "leafIndex": note.leaf_index,
        "privateKey": hex(private_key),
        "txHash": tx_hash,
        "timestamp": int(time.time()) if timestamp is None else timestamp,
    }


def import_note(data: dict[str, Any]) -> ImportedNote:
    """
    Import a note record produced by export_note.

    The commitment is recomputed from (value, blinding) and the ciphertext
    from (value, randomness, private key); both must match the record.

    Raises:
        MalformedInputError: On a foreign record, missing fields, or a
            failed integrity check.
    """
    if data.get("type") != NOTE_TYPE:
        raise MalformedInputError("Invalid note format")

    try:
        point = felts_to_point(data["commitment"]["x"], data["commitment"]["y"])
        value = int(data["value"])
        blinding = as_felt(data["blinding"], "blinding")
        nullifier_secret = as_felt(data["nullifierSecret"], "nullifierSecret")
        randomness = as_felt(data["encryptionRandomness"], "encryptionRandomness")
        private_key = as_felt(data["privateKey"], "privateKey")
        asset = as_felt(data["asset"], "asset")
        leaf_index = data.get("leafIndex")
        if leaf_index is not None and (
            isinstance(leaf_index, bool) or not isinstance(leaf_index, int) or leaf_index < 0
        ):
            raise ValueError(f"leafIndex must be a non-negative integer, got {leaf_index!r}")
    except (KeyError, TypeError, ValueError) as err:
        raise MalformedInputError(f"Note record is malformed: {err}") from err

    if not verify_commitment(point, value, blinding):
        raise MalformedInputError(
            "Note integrity check failed: commitment doesn't match (value, blinding)"
        )

    keypair = keypair_from_private_key(private_key)
    expected_ct = encrypt(value, keypair.public_key, randomness)
    stored_ct = felts_to_ciphertext(data.get("encryptedAmount") or [0, 0, 0, 0])
    if stored_ct is not None and stored_ct != expected_ct:
        raise MalformedInputError(
            "Note integrity check failed: encrypted amount doesn't match (value, randomness, key)"
        )

    note = DepositNote(
        asset_id=asset,
        commitment=Commitment(point=point, value=value, blinding=blinding),
        encrypted_amount=expected_ct,
        nullifier_secret=nullifier_secret,
        encryption_randomness=randomness,
        leaf_index=leaf_index,
    )
    return ImportedNote(
        note=note,
        private_key=private_key,
        tx_hash=data.get("txHash"),
        timestamp=int(data.get("timestamp") or 0),
    )
