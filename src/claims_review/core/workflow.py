"""Claim review workflow — status transitions and their audit trail.

State machine::

    pending_review ──approve──► approved ──send_to_shop──► sent_to_shop
          │
          └──────reject──────► rejected

``approved`` only leaves via ``send_to_shop``; ``rejected`` and
``sent_to_shop`` are terminal.  Every successful operation appends exactly
one audit entry while holding the store lock, so a claim's history always
reflects the order in which transitions were applied.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional

from loguru import logger

from claims_review.core.errors import (
    ClaimNotFoundError,
    ClaimsReviewError,
    ClaimValidationError,
    StateConflictError,
)
from claims_review.core.store import ClaimStore
from claims_review.schemas.audit import (
    AuditLogCreate,
    AuditLogEntry,
    AuditMetadata,
    ClaimApproved,
    ClaimBatchApproved,
    ClaimRejected,
    ClaimSubmitted,
    ClaimUpdated,
    CostLineAdded,
    DamageItemAdded,
    PhotosUploaded,
    SentToShop,
)
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

# Allowed source status for each transition
_TRANSITIONS: dict[str, ClaimStatus] = {
    "approve": ClaimStatus.PENDING_REVIEW,
    "reject": ClaimStatus.PENDING_REVIEW,
    "send to shop": ClaimStatus.APPROVED,
}

BATCH_NOTE = "Auto-approved via batch approval for {confidence} confidence claims"

_CENT = Decimal("0.01")


@dataclass
class BatchOutcome:
    """Result of :meth:`ClaimWorkflow.batch_approve`."""

    confidence: ConfidenceTier
    approved: list[Claim] = field(default_factory=list)
    failures: list[tuple[Claim, ClaimsReviewError]] = field(default_factory=list)

    @property
    def approved_count(self) -> int:
        return len(self.approved)


class ClaimWorkflow:
    """Owns every claim status transition.

    Parameters
    ----------
    store:
        The entity store to operate on.  Injected so each test (or app
        instance) works against its own isolated store.
    """

    def __init__(self, store: ClaimStore) -> None:
        self.store = store

    # -----------------------------------------------------------------
    # Transitions
    # -----------------------------------------------------------------

    def approve(self, claim_id: str, notes: Optional[str], actor: str) -> Claim:
        """Move a ``pending_review`` claim to ``approved``.

        Raises
        ------
        ClaimNotFoundError
            If the claim does not exist.
        StateConflictError
            If the claim is not ``pending_review`` (re-approval included).
        """
        with self.store.transaction():
            claim = self._require_status(claim_id, "approve")
            updated = self._update(claim_id, status=ClaimStatus.APPROVED, agent_notes=notes)
            self._audit(
                updated,
                "Claim approved by agent",
                actor,
                ClaimApproved(notes=notes, estimate_amount=claim.total_estimate),
            )
        return updated

    def reject(self, claim_id: str, reason: Optional[str], actor: str) -> Claim:
        """Move a ``pending_review`` claim to ``rejected``; *reason* is mandatory."""
        if not reason or not reason.strip():
            logger.warning("Refusing to reject claim {id}: blank reason", id=claim_id)
            raise ClaimValidationError("A rejection reason is required")

        with self.store.transaction():
            self._require_status(claim_id, "reject")
            updated = self._update(claim_id, status=ClaimStatus.REJECTED, agent_notes=reason)
            self._audit(updated, "Claim rejected by agent", actor, ClaimRejected(reason=reason))
        return updated

    def send_to_shop(
        self,
        claim_id: str,
        shop_id: str,
        notes: Optional[str],
        actor: str,
    ) -> Claim:
        """Route an ``approved`` claim to a certified repair shop."""
        if not shop_id or not shop_id.strip():
            raise ClaimValidationError("A repair shop id is required")

        with self.store.transaction():
            claim = self._require_status(claim_id, "send to shop")
            if self.store.get_repair_shop(shop_id) is None:
                logger.warning(
                    "Unknown repair shop {shop} for claim {num}",
                    shop=shop_id,
                    num=claim.claim_number,
                )
                raise ClaimValidationError(f"Unknown repair shop '{shop_id}'")
            updated = self._update(
                claim_id,
                status=ClaimStatus.SENT_TO_SHOP,
                assigned_shop_id=shop_id,
                adjuster_notes=notes,
            )
            self._audit(
                updated,
                f"Claim sent to repair shop (ID: {shop_id})",
                actor,
                SentToShop(shop_id=shop_id, notes=notes),
            )
        return updated

    def update_fields(self, claim_id: str, updates: ClaimUpdate, actor: str) -> Claim:
        """Patch non-status fields (estimate override, priority, notes...)."""
        changes = updates.model_dump(exclude_unset=True)
        if not changes:
            raise ClaimValidationError("No fields to update")
        if "priority" in changes and changes["priority"] is None:
            raise ClaimValidationError("priority cannot be null")

        with self.store.transaction():
            self._require(claim_id)
            updated = self._update(claim_id, **changes)
            self._audit(
                updated,
                "Claim updated by agent",
                actor,
                ClaimUpdated(updates=updates.model_dump(mode="json", by_alias=True, exclude_unset=True)),
            )
        return updated

    # -----------------------------------------------------------------
    # Batch / maintenance
    # -----------------------------------------------------------------

    def batch_approve(self, confidence: str | ConfidenceTier, actor: str) -> BatchOutcome:
        """Approve every ``pending_review`` claim with the given AI confidence tier.

        Candidates are processed in store order and independently: a claim
        that fails is recorded in :attr:`BatchOutcome.failures` and the batch
        carries on.
        """
        tier = _parse_tier(confidence)
        outcome = BatchOutcome(confidence=tier)
        note = BATCH_NOTE.format(confidence=tier.value)

        with self.store.transaction():
            candidates = [
                c
                for c in self.store.list_claims()
                if c.status == ClaimStatus.PENDING_REVIEW and c.ai_confidence == tier
            ]
            logger.info(
                "Batch approval: {n} pending {tier}-confidence candidates",
                n=len(candidates),
                tier=tier.value,
            )

            for candidate in candidates:
                try:
                    claim = self._require_status(candidate.id, "approve")
                    updated = self._update(claim.id, status=ClaimStatus.APPROVED, agent_notes=note)
                    self._audit(
                        updated,
                        f"Claim batch-approved for {tier.value} confidence",
                        actor,
                        ClaimBatchApproved(
                            confidence=tier,
                            batch_size=len(candidates),
                            estimate_amount=updated.total_estimate,
                        ),
                    )
                except ClaimsReviewError as exc:
                    logger.warning(
                        "Batch approval skipped claim {num}: {err}",
                        num=candidate.claim_number,
                        err=exc,
                    )
                    outcome.failures.append((candidate, exc))
                    continue
                outcome.approved.append(updated)

        logger.info(
            "Batch approval finished: {ok} approved, {failed} failed",
            ok=outcome.approved_count,
            failed=len(outcome.failures),
        )
        return outcome

    def reset_demo_data(self, actor: str) -> int:
        """Replace the whole store with the seed dataset; returns the claim count."""
        with self.store.transaction():
            before = self.store.list_claims()
            logger.info(
                "Reset requested by {actor}: {n} claims, {p} high-confidence pending",
                actor=actor,
                n=len(before),
                p=_pending_high(before),
            )
            dataset = self.store.reset_to_seed()
        return len(dataset.claims)

    # -----------------------------------------------------------------
    # Intake & agent adjustments
    # -----------------------------------------------------------------

    def submit_claim(self, data: ClaimCreate, actor: str) -> Claim:
        """Create a new ``pending_review`` claim."""
        with self.store.transaction():
            claim = self.store.create_claim(data)
            self._audit(claim, "Claim Submitted", actor, ClaimSubmitted())
        return claim

    def add_damage_item(self, claim_id: str, data: DamageItemCreate, actor: str) -> DamageItem:
        with self.store.transaction():
            claim = self._require(claim_id)
            item = self.store.create_damage_item(claim_id, data)
            self._audit(
                claim,
                f"Damage item added: {item.description}",
                actor,
                DamageItemAdded(
                    damage_item_id=item.id,
                    damage_type=item.damage_type,
                    severity=item.severity,
                ),
            )
        return item

    def add_cost_line(self, claim_id: str, data: CostLineCreate, actor: str) -> CostBreakdownLine:
        """Append an estimate line; hourly lines must satisfy amount = hours × rate."""
        if data.hours is not None and data.rate is not None:
            expected = (data.hours * data.rate).quantize(_CENT)
            if expected != data.amount.quantize(_CENT):
                raise ClaimValidationError(
                    f"Amount {data.amount} does not match {data.hours} h x {data.rate} = {expected}"
                )

        with self.store.transaction():
            claim = self._require(claim_id)
            line = self.store.create_cost_line(claim_id, data)
            self._audit(
                claim,
                f"Cost line added: {line.description}",
                actor,
                CostLineAdded(cost_line_id=line.id, category=line.category, amount=line.amount),
            )
        return line

    def add_photo(self, claim_id: str, data: PhotoCreate, actor: str) -> Photo:
        with self.store.transaction():
            claim = self._require(claim_id)
            photo = self.store.create_photo(claim_id, data)
            self._audit(claim, "Photos Uploaded", actor, PhotosUploaded(photo_count=1))
        return photo

    # -----------------------------------------------------------------
    # Helpers
    # -----------------------------------------------------------------

    def _require(self, claim_id: str) -> Claim:
        claim = self.store.get_claim(claim_id)
        if claim is None:
            logger.warning("Claim {id} not found", id=claim_id)
            raise ClaimNotFoundError(claim_id)
        return claim

    def _require_status(self, claim_id: str, operation: str) -> Claim:
        claim = self._require(claim_id)
        if claim.status != _TRANSITIONS[operation]:
            logger.warning(
                "Refused to {op} claim {num}: status is {status}",
                op=operation,
                num=claim.claim_number,
                status=claim.status.value,
            )
            raise StateConflictError(claim_id, claim.status.value, operation)
        return claim

    def _update(self, claim_id: str, **changes: object) -> Claim:
        updated = self.store.update_claim(claim_id, changes)
        if updated is None:
            raise ClaimNotFoundError(claim_id)
        return updated

    def _audit(
        self,
        claim: Claim,
        description: str,
        actor: str,
        metadata: AuditMetadata,
    ) -> AuditLogEntry:
        entry = self.store.append_audit_log(
            AuditLogCreate(
                claim_id=claim.id,
                description=description,
                performed_by=actor,
                metadata=metadata,
            )
        )
        logger.info(
            "AUDIT: {action} | {actor} | claim {num}",
            action=entry.action.value,
            actor=actor,
            num=claim.claim_number,
        )
        return entry


def _parse_tier(confidence: str | ConfidenceTier) -> ConfidenceTier:
    try:
        return ConfidenceTier(confidence)
    except ValueError:
        allowed = ", ".join(t.value for t in ConfidenceTier)
        raise ClaimValidationError(
            f"Unknown confidence tier '{confidence}'; expected one of {allowed}"
        ) from None


def _pending_high(claims: list[Claim]) -> int:
    return sum(
        1
        for c in claims
        if c.status == ClaimStatus.PENDING_REVIEW and c.ai_confidence == ConfidenceTier.HIGH
    )
