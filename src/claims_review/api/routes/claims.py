"""Claims-review API routes.

Endpoints (all under ``/api/v1``)
---------------------------------
GET    /claims                          list claims
POST   /claims                          submit a new claim
GET    /claims/number/{claim_number}    fetch by human-facing number
GET    /claims/{id}                     fetch by id
PATCH  /claims/{id}                     patch non-status fields
POST   /claims/{id}/approve             pending_review → approved
POST   /claims/{id}/reject              pending_review → rejected
POST   /claims/{id}/send-to-shop        approved → sent_to_shop
POST   /claims/batch-approve            approve all pending claims of a confidence tier
GET    /claims/{id}/damage-items | photos | cost-breakdown | audit-log
POST   /claims/{id}/damage-items | photos | cost-breakdown
GET    /repair-shops                    certified repair shops
POST   /reset-data                      restore the demo dataset
GET    /health                          lightweight health-check

The acting user comes from the ``X-Actor`` header and falls back to
``cfg.workflow.default_actor``.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, HTTPException, Request
from loguru import logger

from claims_review.core.errors import (
    ClaimNotFoundError,
    ClaimsReviewError,
    ClaimValidationError,
    DuplicateClaimNumberError,
    StateConflictError,
)
from claims_review.core.store import ClaimStore
from claims_review.core.workflow import ClaimWorkflow
from claims_review.schemas.api import (
    ApproveRequest,
    BatchApproveRequest,
    BatchApproveResult,
    BatchFailure,
    MessageResponse,
    RejectRequest,
    SendToShopRequest,
)
from claims_review.schemas.audit import AuditLogEntry
from claims_review.schemas.claim import (
    Claim,
    ClaimCreate,
    ClaimUpdate,
    CostBreakdownLine,
    CostLineCreate,
    DamageItem,
    DamageItemCreate,
    Photo,
    PhotoCreate,
)
from claims_review.schemas.shop import RepairShop

router = APIRouter()

ACTOR_HEADER = "X-Actor"

_STATUS_CODES: dict[type[ClaimsReviewError], int] = {
    ClaimNotFoundError: 404,
    ClaimValidationError: 400,
    StateConflictError: 409,
    DuplicateClaimNumberError: 409,
}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _store(request: Request) -> ClaimStore:
    return request.app.state.store


def _workflow(request: Request) -> ClaimWorkflow:
    return request.app.state.workflow


def _actor(request: Request) -> str:
    actor = request.headers.get(ACTOR_HEADER, "").strip()
    return actor or request.app.state.cfg.workflow.default_actor


def _http_error(exc: ClaimsReviewError) -> HTTPException:
    """Translate a workflow failure into an HTTP error response."""
    status = next(
        (code for cls, code in _STATUS_CODES.items() if isinstance(exc, cls)),
        400,
    )
    return HTTPException(status_code=status, detail=str(exc))


# ---------------------------------------------------------------------------
# Claims
# ---------------------------------------------------------------------------

@router.get("/claims", response_model=list[Claim], summary="List claims")
async def list_claims(request: Request) -> list[Claim]:
    return _store(request).list_claims()


@router.post(
    "/claims",
    response_model=Claim,
    status_code=201,
    summary="Submit a claim",
    description="Create a new claim in pending_review.",
)
async def submit_claim(data: ClaimCreate, request: Request) -> Claim:
    try:
        return _workflow(request).submit_claim(data, _actor(request))
    except ClaimsReviewError as exc:
        raise _http_error(exc) from exc


@router.post(
    "/claims/batch-approve",
    response_model=BatchApproveResult,
    summary="Batch-approve claims by AI confidence",
    description="Approve every pending_review claim whose AI confidence matches the tier.",
)
async def batch_approve(
    request: Request,
    body: Optional[BatchApproveRequest] = None,
) -> BatchApproveResult:
    """Partial success still returns 200; failed candidates are listed."""
    body = body or BatchApproveRequest()
    try:
        outcome = _workflow(request).batch_approve(body.confidence, _actor(request))
    except ClaimsReviewError as exc:
        raise _http_error(exc) from exc

    tier = outcome.confidence.value
    return BatchApproveResult(
        message=f"Batch approved {outcome.approved_count} {tier} confidence claims",
        approved_claims=outcome.approved_count,
        confidence=tier,
        claims=outcome.approved,
        failures=[
            BatchFailure(claim_id=c.id, claim_number=c.claim_number, error=str(err))
            for c, err in outcome.failures
        ],
    )


@router.get("/claims/number/{claim_number}", response_model=Claim, summary="Get claim by number")
async def get_claim_by_number(claim_number: str, request: Request) -> Claim:
    claim = _store(request).get_claim_by_number(claim_number)
    if claim is None:
        raise HTTPException(status_code=404, detail="Claim not found")
    return claim


@router.get("/claims/{claim_id}", response_model=Claim, summary="Get claim by id")
async def get_claim(claim_id: str, request: Request) -> Claim:
    claim = _store(request).get_claim(claim_id)
    if claim is None:
        raise HTTPException(status_code=404, detail="Claim not found")
    return claim


@router.patch("/claims/{claim_id}", response_model=Claim, summary="Update claim fields")
async def update_claim(claim_id: str, updates: ClaimUpdate, request: Request) -> Claim:
    try:
        return _workflow(request).update_fields(claim_id, updates, _actor(request))
    except ClaimsReviewError as exc:
        raise _http_error(exc) from exc


@router.post("/claims/{claim_id}/approve", response_model=Claim, summary="Approve a claim")
async def approve_claim(
    claim_id: str,
    request: Request,
    body: Optional[ApproveRequest] = None,
) -> Claim:
    body = body or ApproveRequest()
    try:
        return _workflow(request).approve(claim_id, body.notes, _actor(request))
    except ClaimsReviewError as exc:
        raise _http_error(exc) from exc


@router.post("/claims/{claim_id}/reject", response_model=Claim, summary="Reject a claim")
async def reject_claim(claim_id: str, body: RejectRequest, request: Request) -> Claim:
    try:
        return _workflow(request).reject(claim_id, body.reason, _actor(request))
    except ClaimsReviewError as exc:
        raise _http_error(exc) from exc


@router.post(
    "/claims/{claim_id}/send-to-shop",
    response_model=Claim,
    summary="Send an approved claim to a repair shop",
)
async def send_to_shop(claim_id: str, body: SendToShopRequest, request: Request) -> Claim:
    try:
        return _workflow(request).send_to_shop(
            claim_id, body.shop_id, body.notes, _actor(request)
        )
    except ClaimsReviewError as exc:
        raise _http_error(exc) from exc


# ---------------------------------------------------------------------------
# Child records
# ---------------------------------------------------------------------------

@router.get("/claims/{claim_id}/damage-items", response_model=list[DamageItem])
async def list_damage_items(claim_id: str, request: Request) -> list[DamageItem]:
    return _store(request).list_damage_items(claim_id)


@router.post("/claims/{claim_id}/damage-items", response_model=DamageItem, status_code=201)
async def add_damage_item(claim_id: str, data: DamageItemCreate, request: Request) -> DamageItem:
    try:
        return _workflow(request).add_damage_item(claim_id, data, _actor(request))
    except ClaimsReviewError as exc:
        raise _http_error(exc) from exc


@router.get("/claims/{claim_id}/photos", response_model=list[Photo])
async def list_photos(claim_id: str, request: Request) -> list[Photo]:
    return _store(request).list_photos(claim_id)


@router.post("/claims/{claim_id}/photos", response_model=Photo, status_code=201)
async def add_photo(claim_id: str, data: PhotoCreate, request: Request) -> Photo:
    try:
        return _workflow(request).add_photo(claim_id, data, _actor(request))
    except ClaimsReviewError as exc:
        raise _http_error(exc) from exc


@router.get("/claims/{claim_id}/cost-breakdown", response_model=list[CostBreakdownLine])
async def list_cost_breakdown(claim_id: str, request: Request) -> list[CostBreakdownLine]:
    return _store(request).list_cost_lines(claim_id)


@router.post("/claims/{claim_id}/cost-breakdown", response_model=CostBreakdownLine, status_code=201)
async def add_cost_line(
    claim_id: str, data: CostLineCreate, request: Request
) -> CostBreakdownLine:
    try:
        return _workflow(request).add_cost_line(claim_id, data, _actor(request))
    except ClaimsReviewError as exc:
        raise _http_error(exc) from exc


@router.get("/claims/{claim_id}/audit-log", response_model=list[AuditLogEntry])
async def list_audit_log(claim_id: str, request: Request) -> list[AuditLogEntry]:
    """Audit entries for a claim, newest first."""
    return _store(request).list_audit_log(claim_id)


# ---------------------------------------------------------------------------
# Repair shops / maintenance
# ---------------------------------------------------------------------------

@router.get("/repair-shops", response_model=list[RepairShop], summary="List repair shops")
async def list_repair_shops(request: Request) -> list[RepairShop]:
    return _store(request).list_repair_shops()


@router.post(
    "/reset-data",
    response_model=MessageResponse,
    summary="Reset demo data",
    description="Replace every claim and audit entry with the canonical seed dataset.",
)
async def reset_data(request: Request) -> MessageResponse:
    count = _workflow(request).reset_demo_data(_actor(request))
    logger.info("API: demo data reset ({n} claims)", n=count)
    return MessageResponse(message="Data reset to initial state successfully")


@router.get(
    "/health",
    summary="Health check",
    description="Returns service health status and the number of claims held.",
)
async def health(request: Request) -> dict:
    """Return a lightweight health-check response."""
    return {"status": "healthy", "claims": len(_store(request).list_claims())}
