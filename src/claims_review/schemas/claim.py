"""Pydantic models for claims and their child records."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Optional

from pydantic import ConfigDict, Field, field_validator

from claims_review.schemas.base import CamelModel

# Currency: non-negative, cents precision
Money = Annotated[Decimal, Field(ge=0, max_digits=10, decimal_places=2)]
Percent = Annotated[float, Field(ge=0, le=100)]


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class ClaimStatus(str, Enum):
    """Review status of a claim."""

    PENDING_REVIEW = "pending_review"
    APPROVED = "approved"
    REJECTED = "rejected"
    SENT_TO_SHOP = "sent_to_shop"


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ConfidenceTier(str, Enum):
    """Categorical confidence of the damage-detection assessment."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Severity(str, Enum):
    MINOR = "minor"
    MODERATE = "moderate"
    SEVERE = "severe"


class CostCategory(str, Enum):
    LABOR = "labor"
    PARTS = "parts"
    PAINT = "paint"
    SUPPLIES = "supplies"
    CUSTOM = "custom"


# ---------------------------------------------------------------------------
# Claim
# ---------------------------------------------------------------------------


class Claim(CamelModel):
    """One insurance claim under review."""

    id: str = Field(..., description="Immutable internal identifier")
    claim_number: str = Field(..., description="Human-facing claim number (e.g. CLM-2024-001847)")
    policyholder_name: str
    vehicle_info: str = Field(..., description="Vehicle year/make/model")
    vin: str
    incident_date: datetime
    incident_description: str
    status: ClaimStatus = ClaimStatus.PENDING_REVIEW
    priority: Priority = Priority.MEDIUM
    ai_confidence: Optional[ConfidenceTier] = None
    submitted_at: datetime
    total_estimate: Optional[Money] = None
    agent_notes: Optional[str] = None
    adjuster_notes: Optional[str] = None
    assigned_agent: Optional[str] = None
    assigned_shop_id: Optional[str] = None


class ClaimCreate(CamelModel):
    """Intake payload — a new claim always starts in ``pending_review``."""

    model_config = ConfigDict(extra="forbid")

    claim_number: str = Field(..., min_length=1)
    policyholder_name: str = Field(..., min_length=1)
    vehicle_info: str
    vin: str
    incident_date: datetime
    incident_description: str
    priority: Priority = Priority.MEDIUM
    ai_confidence: Optional[ConfidenceTier] = None
    total_estimate: Optional[Money] = None
    assigned_agent: Optional[str] = None


class ClaimUpdate(CamelModel):
    """Patchable subset of a claim.

    Status, identifiers and the shop assignment only change through workflow
    transitions and are therefore not accepted here.
    """

    model_config = ConfigDict(extra="forbid")

    total_estimate: Optional[Money] = None
    priority: Optional[Priority] = None
    ai_confidence: Optional[ConfidenceTier] = None
    agent_notes: Optional[str] = None
    adjuster_notes: Optional[str] = None
    assigned_agent: Optional[str] = None

    @field_validator("priority")
    @classmethod
    def priority_not_null(cls, v: Optional[Priority]) -> Optional[Priority]:
        # Omit the field to leave it unchanged; a claim always has a priority.
        if v is None:
            raise ValueError("priority cannot be null")
        return v


# ---------------------------------------------------------------------------
# Damage items
# ---------------------------------------------------------------------------


class BoundingBox(CamelModel):
    """Damage region as percentages of the image extent."""

    x: Percent
    y: Percent
    width: Percent
    height: Percent


class DamageItemCreate(CamelModel):
    damage_type: str = Field(..., alias="type", description="Damage class, e.g. structural_dent")
    severity: Severity
    location: str = Field(..., description="Location slug, e.g. front_bumper")
    description: str
    area: Optional[str] = None
    depth: Optional[str] = None
    repair_type: Optional[str] = None
    confidence: Percent
    coordinates: Optional[BoundingBox] = None


class DamageItem(DamageItemCreate):
    """One AI-identified (or agent-added) damage region on a claim."""

    id: str
    claim_id: str


# ---------------------------------------------------------------------------
# Photos
# ---------------------------------------------------------------------------


class PhotoCreate(CamelModel):
    category: str
    url: str
    thumbnail_url: Optional[str] = None
    is_primary: bool = False


class Photo(PhotoCreate):
    id: str
    claim_id: str
    uploaded_at: datetime


# ---------------------------------------------------------------------------
# Cost breakdown
# ---------------------------------------------------------------------------


class CostLineCreate(CamelModel):
    category: CostCategory
    description: str
    amount: Money
    hours: Optional[Annotated[Decimal, Field(ge=0, max_digits=5, decimal_places=2)]] = None
    rate: Optional[Money] = None


class CostBreakdownLine(CostLineCreate):
    """One line item of a repair estimate."""

    id: str
    claim_id: str
