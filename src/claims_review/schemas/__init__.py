"""Pydantic schemas for the claims-review service."""

from claims_review.schemas.audit import AuditAction, AuditLogCreate, AuditLogEntry
from claims_review.schemas.claim import (
    Claim,
    ClaimCreate,
    ClaimStatus,
    ClaimUpdate,
    ConfidenceTier,
    CostBreakdownLine,
    CostLineCreate,
    DamageItem,
    DamageItemCreate,
    Photo,
    PhotoCreate,
)
from claims_review.schemas.shop import RepairShop

__all__ = [
    "AuditAction",
    "AuditLogCreate",
    "AuditLogEntry",
    "Claim",
    "ClaimCreate",
    "ClaimStatus",
    "ClaimUpdate",
    "ConfidenceTier",
    "CostBreakdownLine",
    "CostLineCreate",
    "DamageItem",
    "DamageItemCreate",
    "Photo",
    "PhotoCreate",
    "RepairShop",
]
