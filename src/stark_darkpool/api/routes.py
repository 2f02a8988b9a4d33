from fastapi import APIRouter, HTTPException, Request

from stark_darkpool.api.models import (
    BalanceProofVerifyRequest,
    BalanceProofVerifyResponse,
    OrderHashRequest,
    OrderHashResponse,
    RevealCheckRequest,
    RevealCheckResponse,
)
from stark_darkpool.crypto.balance_proof import BalanceProof, verify_balance_proof
from stark_darkpool.crypto.curve import Point, felts_to_point
from stark_darkpool.crypto.transcript import as_felt
from stark_darkpool.darkpool.models import EpochInfo
from stark_darkpool.darkpool.order import compute_order_hash

router = APIRouter(tags=["Dark Pool"])


def get_verifier(request: Request):
    """Dependency to retrieve the VerifierClient from app state."""
    verifier = getattr(request.app.state, "verifier", None)
    if not verifier:
        raise HTTPException(status_code=500, detail="Verifier client not configured")
    return verifier


@router.get("/epoch", response_model=EpochInfo)
def current_epoch(request: Request):
    """Current epoch, phase and blocks remaining, read from the verifier."""
    return get_verifier(request).get_epoch_info()


@router.post("/orders/hash", response_model=OrderHashResponse)
async def order_hash(req: OrderHashRequest):
    """
    Compute the commit hash of an order.

    The salt is secret until reveal; only call this against a trusted server.
    """
    h = compute_order_hash(req.price, req.amount, req.side, req.give_asset, req.want_asset, req.salt)
    return OrderHashResponse(order_hash=hex(h))


@router.post("/orders/reveal-check", response_model=RevealCheckResponse)
async def reveal_check(req: RevealCheckRequest):
    """Check that revealed order fields open the hash submitted at commit time."""
    committed = as_felt(req.committed_hash, "committed_hash")
    h = compute_order_hash(req.price, req.amount, req.side, req.give_asset, req.want_asset, req.salt)
    return RevealCheckResponse(valid=h == committed, order_hash=hex(h), committed_hash=hex(committed))


@router.post("/proofs/balance/verify", response_model=BalanceProofVerifyResponse)
async def verify_balance(req: BalanceProofVerifyRequest):
    """Verify a balance proof against a public key, trader and asset."""
    proof = BalanceProof(
        commitment=Point(as_felt(req.proof.commitment.x), as_felt(req.proof.commitment.y)),
        challenge=as_felt(req.proof.challenge, "challenge"),
        response=as_felt(req.proof.response, "response"),
    )
    public_key = felts_to_point(req.public_key.x, req.public_key.y)
    valid = verify_balance_proof(proof, public_key, req.trader, req.asset_id)
    return BalanceProofVerifyResponse(valid=valid)
