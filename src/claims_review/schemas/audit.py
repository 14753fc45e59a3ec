"""Audit-trail models.

Each audit entry carries a typed metadata payload; the payload's ``action``
literal is the discriminator, and the entry's own ``action`` is derived from
it so the two can never disagree.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import ConfigDict, Field, computed_field

from claims_review.schemas.base import CamelModel
from claims_review.schemas.claim import ConfidenceTier, CostCategory, Severity


class AuditAction(str, Enum):
    CLAIM_SUBMITTED = "claim_submitted"
    AI_ANALYSIS_COMPLETED = "ai_analysis_completed"
    PHOTOS_UPLOADED = "photos_uploaded"
    CLAIM_UPDATED = "claim_updated"
    CLAIM_APPROVED = "claim_approved"
    CLAIM_REJECTED = "claim_rejected"
    SENT_TO_SHOP = "sent_to_shop"
    CLAIM_BATCH_APPROVED = "claim_batch_approved"
    DAMAGE_ITEM_ADDED = "damage_item_added"
    COST_LINE_ADDED = "cost_line_added"


# ---------------------------------------------------------------------------
# Metadata variants
# ---------------------------------------------------------------------------


class ClaimSubmitted(CamelModel):
    action: Literal["claim_submitted"] = "claim_submitted"


class AiAnalysisCompleted(CamelModel):
    action: Literal["ai_analysis_completed"] = "ai_analysis_completed"
    confidence: str
    areas_identified: int = Field(..., ge=0)


class PhotosUploaded(CamelModel):
    action: Literal["photos_uploaded"] = "photos_uploaded"
    photo_count: int = Field(..., ge=0)
    processed_by_cv: bool = False


class ClaimUpdated(CamelModel):
    action: Literal["claim_updated"] = "claim_updated"
    updates: dict[str, Any]


class ClaimApproved(CamelModel):
    action: Literal["claim_approved"] = "claim_approved"
    notes: Optional[str] = None
    estimate_amount: Optional[Decimal] = None


class ClaimRejected(CamelModel):
    action: Literal["claim_rejected"] = "claim_rejected"
    reason: str


class SentToShop(CamelModel):
    action: Literal["sent_to_shop"] = "sent_to_shop"
    shop_id: str
    notes: Optional[str] = None


class ClaimBatchApproved(CamelModel):
    action: Literal["claim_batch_approved"] = "claim_batch_approved"
    confidence: ConfidenceTier
    batch_size: int = Field(..., ge=0)
    estimate_amount: Optional[Decimal] = None


class DamageItemAdded(CamelModel):
    action: Literal["damage_item_added"] = "damage_item_added"
    damage_item_id: str
    damage_type: str
    severity: Severity


class CostLineAdded(CamelModel):
    action: Literal["cost_line_added"] = "cost_line_added"
    cost_line_id: str
    category: CostCategory
    amount: Decimal


AuditMetadata = Annotated[
    Union[
        ClaimSubmitted,
        AiAnalysisCompleted,
        PhotosUploaded,
        ClaimUpdated,
        ClaimApproved,
        ClaimRejected,
        SentToShop,
        ClaimBatchApproved,
        DamageItemAdded,
        CostLineAdded,
    ],
    Field(discriminator="action"),
]


# ---------------------------------------------------------------------------
# Entries
# ---------------------------------------------------------------------------


class AuditLogCreate(CamelModel):
    """An audit record before the store stamps id, time and sequence."""

    claim_id: str
    description: str
    performed_by: Optional[str] = None
    metadata: AuditMetadata


class AuditLogEntry(AuditLogCreate):
    """Immutable record of one action taken on a claim."""

    model_config = ConfigDict(frozen=True)

    id: str
    timestamp: datetime
    sequence: int = Field(..., ge=0, description="Store-wide append order")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def action(self) -> AuditAction:
        return AuditAction(self.metadata.action)
