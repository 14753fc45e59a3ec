"""Canonical demo dataset restored by the reset operation.

Timestamps are expressed relative to *now* so that a freshly reset dashboard
always shows claims submitted "a few hours ago".
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from claims_review.schemas.audit import (
    AiAnalysisCompleted,
    AuditLogEntry,
    AuditMetadata,
    ClaimApproved,
    ClaimRejected,
    ClaimSubmitted,
    PhotosUploaded,
)
from claims_review.schemas.claim import (
    BoundingBox,
    Claim,
    ClaimStatus,
    ConfidenceTier,
    CostBreakdownLine,
    CostCategory,
    DamageItem,
    Photo,
    Priority,
    Severity,
)
from claims_review.schemas.shop import RepairShop

_IMG = "https://images.unsplash.com/{photo}?ixlib=rb-4.0.3&auto=format&fit=crop&w={w}&h={h}"


@dataclass
class SeedDataset:
    """Everything the entity store holds, in load order."""

    claims: list[Claim] = field(default_factory=list)
    damage_items: list[DamageItem] = field(default_factory=list)
    photos: list[Photo] = field(default_factory=list)
    cost_lines: list[CostBreakdownLine] = field(default_factory=list)
    audit_entries: list[AuditLogEntry] = field(default_factory=list)
    repair_shops: list[RepairShop] = field(default_factory=list)

    @property
    def claim_numbers(self) -> list[str]:
        return [c.claim_number for c in self.claims]


REPAIR_SHOPS: list[RepairShop] = [
    RepairShop(
        id="shop-1",
        name="Premier Auto Body",
        address="1245 Main St, San Francisco, CA",
        phone="(415) 555-0123",
        rating=4.8,
        distance="2.3 miles",
        specialties=["Collision Repair", "Paint & Bodywork", "BMW Certified"],
        estimated_days="3-4 days",
        certified=True,
        availability="immediate",
    ),
    RepairShop(
        id="shop-2",
        name="Golden Gate Collision",
        address="567 Market St, San Francisco, CA",
        phone="(415) 555-0456",
        rating=4.6,
        distance="4.1 miles",
        specialties=["Insurance Claims", "Foreign Vehicles", "Paint Matching"],
        estimated_days="4-5 days",
        certified=True,
        availability="next_week",
    ),
    RepairShop(
        id="shop-3",
        name="Bay Area Auto Restoration",
        address="890 Industrial Blvd, San Francisco, CA",
        phone="(415) 555-0789",
        rating=4.9,
        distance="6.8 miles",
        specialties=["High-End Vehicles", "Custom Paint", "European Cars"],
        estimated_days="5-7 days",
        certified=True,
        availability="2_weeks",
    ),
]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def build_seed_dataset(now: datetime | None = None) -> SeedDataset:
    """Return a fresh copy of the demo dataset with new identifiers."""
    now = now or datetime.now(timezone.utc)
    ds = SeedDataset(repair_shops=[s.model_copy(deep=True) for s in REPAIR_SHOPS])

    # ── CLM-2024-001847: fully documented parking-lot collision ─────────
    camry = _claim(
        now,
        claim_number="CLM-2024-001847",
        policyholder_name="Michael Rodriguez",
        vehicle_info="2022 Toyota Camry",
        vin="4T1C11AK*N*123456",
        incident_date=datetime(2024, 3, 15, tzinfo=timezone.utc),
        incident_description="Parking lot collision",
        priority=Priority.HIGH,
        ai_confidence=ConfidenceTier.HIGH,
        hours_ago=2,
        total_estimate="2847.00",
        assigned_agent="Sarah Johnson",
    )
    ds.claims.append(camry)
    ds.damage_items += [
        _damage(camry, "paint_scratches", Severity.MODERATE, "front_bumper", "Paint Scratches",
                '12" x 4"', "Surface level", "Paint & buff", 87, (35, 45, 25, 15)),
        _damage(camry, "structural_dent", Severity.SEVERE, "front_bumper", "Structural Dent",
                '8" x 6"', '2.5" deep', "Panel replacement", 94, (20, 60, 15, 10)),
        _damage(camry, "surface_abrasion", Severity.MINOR, "headlight_housing", "Minor Scuff",
                '3" x 1"', "Surface only", "Polish/compound", 76, (45, 35, 10, 8)),
    ]
    uploaded = now - timedelta(hours=2, minutes=5)
    ds.photos += [
        _photo(camry, "front_bumper", "photo-1449965408869-eaa3f722e40d", uploaded, primary=True),
        _photo(camry, "front_bumper", "photo-1603584173870-7f23fdae1b7a", uploaded),
        _photo(camry, "side_panel", "photo-1609244314066-f69aae9f7f82", uploaded),
    ]
    ds.cost_lines += [
        _cost(camry, CostCategory.LABOR, "Labor", "1020.00", hours="12.00", rate="85.00"),
        _cost(camry, CostCategory.PARTS, "Front bumper assembly", "1485.00"),
        _cost(camry, CostCategory.PAINT, "Paint & Materials", "285.00"),
        _cost(camry, CostCategory.SUPPLIES, "Shop Supplies", "57.00"),
    ]
    _history(
        ds,
        camry,
        (now - timedelta(hours=3), "Claim Submitted", "Michael Rodriguez", ClaimSubmitted()),
        (uploaded, "Photos Uploaded", "system", PhotosUploaded(photo_count=9, processed_by_cv=True)),
        (now - timedelta(hours=2), "AI Analysis Completed", "system",
         AiAnalysisCompleted(confidence="87%", areas_identified=3)),
    )

    # ── CLM-2024-001852: high-confidence rear-end collision ─────────────
    accord = _claim(
        now,
        claim_number="CLM-2024-001852",
        policyholder_name="Jennifer Walsh",
        vehicle_info="2021 Honda Accord",
        vin="1HGCV1F3*M*204417",
        incident_date=datetime(2024, 3, 17, tzinfo=timezone.utc),
        incident_description="Rear-end collision at stoplight",
        priority=Priority.MEDIUM,
        ai_confidence=ConfidenceTier.HIGH,
        hours_ago=4,
        total_estimate="1650.00",
        assigned_agent="Sarah Johnson",
    )
    ds.claims.append(accord)
    ds.damage_items.append(
        _damage(accord, "structural_dent", Severity.MODERATE, "rear_bumper", "Rear Bumper Dent",
                '10" x 5"', '1" deep', "Dent repair & refinish", 91, (30, 50, 30, 18)),
    )
    ds.photos.append(
        _photo(accord, "rear_bumper", "photo-1552519507-da3b142c6e3d", now - timedelta(hours=4), primary=True),
    )
    ds.cost_lines += [
        _cost(accord, CostCategory.LABOR, "Labor", "680.00", hours="8.00", rate="85.00"),
        _cost(accord, CostCategory.PARTS, "Rear bumper cover", "720.00"),
        _cost(accord, CostCategory.PAINT, "Paint & Materials", "250.00"),
    ]
    _history(
        ds,
        accord,
        (now - timedelta(hours=5), "Claim Submitted", "Jennifer Walsh", ClaimSubmitted()),
        (now - timedelta(hours=4), "AI Analysis Completed", "system",
         AiAnalysisCompleted(confidence="91%", areas_identified=1)),
    )

    # ── Remaining queue, minimal detail ─────────────────────────────────
    hail = _claim(
        now,
        claim_number="CLM-2024-001859",
        policyholder_name="David Park",
        vehicle_info="2020 Ford F-150",
        vin="1FTEW1E5*L*318862",
        incident_date=datetime(2024, 3, 12, tzinfo=timezone.utc),
        incident_description="Hail damage to hood and roof",
        priority=Priority.HIGH,
        ai_confidence=ConfidenceTier.MEDIUM,
        hours_ago=6,
        total_estimate="4320.00",
    )
    tesla = _claim(
        now,
        claim_number="CLM-2024-001863",
        policyholder_name="Lisa Thompson",
        vehicle_info="2023 Tesla Model 3",
        vin="5YJ3E1EA*P*551093",
        incident_date=datetime(2024, 3, 18, tzinfo=timezone.utc),
        incident_description="Side-swipe on highway on-ramp",
        priority=Priority.LOW,
        ai_confidence=ConfidenceTier.LOW,
        hours_ago=1,
        total_estimate="6180.00",
    )
    for claim, confidence in ((hail, "68%"), (tesla, "42%")):
        ds.claims.append(claim)
        _history(
            ds,
            claim,
            (claim.submitted_at, "Claim Submitted", claim.policyholder_name, ClaimSubmitted()),
            (claim.submitted_at + timedelta(minutes=20), "AI Analysis Completed", "system",
             AiAnalysisCompleted(confidence=confidence, areas_identified=2)),
        )

    # ── Already decided ─────────────────────────────────────────────────
    outback = _claim(
        now,
        claim_number="CLM-2024-001838",
        policyholder_name="Robert Kim",
        vehicle_info="2019 Subaru Outback",
        vin="4S4BSANC*K*270145",
        incident_date=datetime(2024, 3, 8, tzinfo=timezone.utc),
        incident_description="Backed into parking garage pillar",
        priority=Priority.MEDIUM,
        ai_confidence=ConfidenceTier.HIGH,
        hours_ago=26,
        total_estimate="980.00",
        status=ClaimStatus.APPROVED,
        agent_notes="Damage consistent with description; estimate within market range.",
        assigned_agent="Sarah Johnson",
    )
    malibu = _claim(
        now,
        claim_number="CLM-2024-001829",
        policyholder_name="Amanda Foster",
        vehicle_info="2018 Chevrolet Malibu",
        vin="1G1ZD5ST*J*144908",
        incident_date=datetime(2024, 3, 2, tzinfo=timezone.utc),
        incident_description="Door dent from shopping cart",
        priority=Priority.LOW,
        ai_confidence=ConfidenceTier.MEDIUM,
        hours_ago=50,
        total_estimate="3200.00",
        status=ClaimStatus.REJECTED,
        agent_notes="Pre-existing damage documented in a prior claim.",
        assigned_agent="Sarah Johnson",
    )
    ds.claims += [outback, malibu]
    _history(
        ds,
        outback,
        (outback.submitted_at, "Claim Submitted", "Robert Kim", ClaimSubmitted()),
        (outback.submitted_at + timedelta(hours=3), "Claim approved by agent", "Sarah Johnson",
         ClaimApproved(notes=outback.agent_notes, estimate_amount=outback.total_estimate)),
    )
    _history(
        ds,
        malibu,
        (malibu.submitted_at, "Claim Submitted", "Amanda Foster", ClaimSubmitted()),
        (malibu.submitted_at + timedelta(hours=5), "Claim rejected by agent", "Sarah Johnson",
         ClaimRejected(reason=malibu.agent_notes or "")),
    )

    return ds


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def _new_id() -> str:
    return str(uuid.uuid4())


def _claim(now: datetime, *, hours_ago: int, total_estimate: str, **fields) -> Claim:
    return Claim(
        id=_new_id(),
        submitted_at=now - timedelta(hours=hours_ago),
        total_estimate=Decimal(total_estimate),
        **fields,
    )


def _damage(
    claim: Claim,
    damage_type: str,
    severity: Severity,
    location: str,
    description: str,
    area: str,
    depth: str,
    repair_type: str,
    confidence: float,
    box: tuple[float, float, float, float],
) -> DamageItem:
    x, y, width, height = box
    return DamageItem(
        id=_new_id(),
        claim_id=claim.id,
        damage_type=damage_type,
        severity=severity,
        location=location,
        description=description,
        area=area,
        depth=depth,
        repair_type=repair_type,
        confidence=confidence,
        coordinates=BoundingBox(x=x, y=y, width=width, height=height),
    )


def _photo(claim: Claim, category: str, photo: str, uploaded_at: datetime, primary: bool = False) -> Photo:
    return Photo(
        id=_new_id(),
        claim_id=claim.id,
        category=category,
        url=_IMG.format(photo=photo, w=800, h=600),
        thumbnail_url=_IMG.format(photo=photo, w=200, h=150),
        is_primary=primary,
        uploaded_at=uploaded_at,
    )


def _cost(
    claim: Claim,
    category: CostCategory,
    description: str,
    amount: str,
    hours: str | None = None,
    rate: str | None = None,
) -> CostBreakdownLine:
    return CostBreakdownLine(
        id=_new_id(),
        claim_id=claim.id,
        category=category,
        description=description,
        amount=Decimal(amount),
        hours=Decimal(hours) if hours else None,
        rate=Decimal(rate) if rate else None,
    )


def _history(
    ds: SeedDataset,
    claim: Claim,
    *events: tuple[datetime, str, str, AuditMetadata],
) -> None:
    """Append historical audit entries for *claim*, oldest first."""
    for timestamp, description, actor, metadata in events:
        ds.audit_entries.append(
            AuditLogEntry(
                id=_new_id(),
                claim_id=claim.id,
                description=description,
                performed_by=actor,
                metadata=metadata,
                timestamp=timestamp,
                sequence=len(ds.audit_entries),
            )
        )
