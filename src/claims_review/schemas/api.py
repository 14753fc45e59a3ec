"""Request and response bodies for the REST gateway."""

from __future__ import annotations

from typing import Optional

from pydantic import Field

from claims_review.schemas.base import CamelModel
from claims_review.schemas.claim import Claim


class ApproveRequest(CamelModel):
    notes: Optional[str] = Field(default=None, description="Agent notes stored on the claim")


class RejectRequest(CamelModel):
    # Blank reasons are rejected by the workflow (400), not by the schema (422)
    reason: Optional[str] = Field(default=None, description="Mandatory rejection reason")


class SendToShopRequest(CamelModel):
    shop_id: str = Field(..., description="Repair shop identifier, e.g. shop-1")
    notes: Optional[str] = Field(default=None, description="Adjuster notes for the shop")


class BatchApproveRequest(CamelModel):
    confidence: str = Field(default="high", description="AI confidence tier to auto-approve")


class BatchFailure(CamelModel):
    """A candidate claim the batch could not approve."""

    claim_id: str
    claim_number: str
    error: str


class BatchApproveResult(CamelModel):
    message: str
    approved_claims: int = Field(..., ge=0, description="Number of claims approved")
    confidence: str
    claims: list[Claim] = Field(default_factory=list)
    failures: list[BatchFailure] = Field(default_factory=list)


class MessageResponse(CamelModel):
    message: str
