from pydantic import BaseModel, Field

from stark_darkpool.darkpool.models import Side


class OrderHashRequest(BaseModel):
    """Request model for hashing an order's public and secret fields."""

    price: int = Field(..., gt=0, description="Limit price, 18-decimal fixed point")
    amount: int = Field(..., gt=0, description="Order size in token base units")
    side: Side = Field(..., description="0 = buy, 1 = sell")
    give_asset: str = Field(..., description="Asset id spent (felt, 0x-hex)")
    want_asset: str = Field(..., description="Asset id received (felt, 0x-hex)")
    salt: str = Field(..., description="Order salt (felt, 0x-hex)")


class OrderHashResponse(BaseModel):
    """Response model carrying an order hash."""

    order_hash: str = Field(..., description="Order hash as a 0x-hex felt")


class RevealCheckRequest(OrderHashRequest):
    """Request model for checking a reveal against a committed hash."""

    committed_hash: str = Field(..., description="Hash submitted at commit time (0x-hex)")


class RevealCheckResponse(BaseModel):
    """Response model for a reveal check."""

    valid: bool = Field(..., description="True if the reveal opens the committed hash")
    order_hash: str = Field(..., description="Hash of the revealed fields")
    committed_hash: str = Field(..., description="Hash the reveal was checked against")


class PointModel(BaseModel):
    """An affine curve point as 0x-hex felts."""

    x: str
    y: str


class BalanceProofModel(BaseModel):
    """A Schnorr balance proof (R, c, s)."""

    commitment: PointModel = Field(..., description="R = k·G")
    challenge: str = Field(..., description="Fiat-Shamir challenge c (0x-hex)")
    response: str = Field(..., description="Response s = k + c·sk (0x-hex)")


class BalanceProofVerifyRequest(BaseModel):
    """Request model for verifying a balance proof."""

    proof: BalanceProofModel
    public_key: PointModel = Field(..., description="Prover public key sk·G")
    trader: str = Field(..., description="Trader address the proof is bound to")
    asset_id: str = Field(..., description="Asset id the proof is bound to")


class BalanceProofVerifyResponse(BaseModel):
    """Response model for a balance proof verification."""

    valid: bool
