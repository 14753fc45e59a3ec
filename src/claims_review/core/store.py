"""In-memory entity store for claims and their child records.

Pure data access: no status rules live here.  Reads return deep copies so
callers can never mutate stored state behind the store's back.

Every public method takes the store lock.  The lock is re-entrant and is
also exposed through :meth:`ClaimStore.transaction` so the workflow engine
can hold it across a whole read-check-write transition.
"""

from __future__ import annotations

import threading
import uuid
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from typing import Any

from loguru import logger

from claims_review.core.errors import DuplicateClaimNumberError
from claims_review.core.seed import SeedDataset, build_seed_dataset
from claims_review.schemas.audit import AuditLogCreate, AuditLogEntry
from claims_review.schemas.claim import (
    Claim,
    ClaimCreate,
    ClaimStatus,
    CostBreakdownLine,
    CostLineCreate,
    DamageItem,
    DamageItemCreate,
    Photo,
    PhotoCreate,
)
from claims_review.schemas.shop import RepairShop

Clock = Callable[[], datetime]

_TICK = timedelta(microseconds=1)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ClaimStore:
    """Process-lifetime storage keyed by identifier.

    Usage::

        store = ClaimStore(seed=True)
        claim = store.get_claim_by_number("CLM-2024-001847")
        store.update_claim(claim.id, {"priority": Priority.LOW})
        store.list_audit_log(claim.id)   # newest first

    Parameters
    ----------
    clock:
        Source of "now" for submission, upload and audit timestamps.
    seed:
        Load the canonical demo dataset on construction.
    """

    def __init__(self, clock: Clock | None = None, *, seed: bool = False) -> None:
        self._clock = clock or utc_now
        self._lock = threading.RLock()
        self._clear()
        if seed:
            self.reset_to_seed()

    @contextmanager
    def transaction(self) -> Iterator[ClaimStore]:
        """Hold the store lock for a multi-step operation."""
        with self._lock:
            yield self

    # -----------------------------------------------------------------
    # Claims
    # -----------------------------------------------------------------

    def get_claim(self, claim_id: str) -> Claim | None:
        with self._lock:
            claim = self._claims.get(claim_id)
            return claim.model_copy(deep=True) if claim else None

    def get_claim_by_number(self, claim_number: str) -> Claim | None:
        with self._lock:
            for claim in self._claims.values():
                if claim.claim_number == claim_number:
                    return claim.model_copy(deep=True)
            return None

    def list_claims(self) -> list[Claim]:
        """All claims in insertion order (callers must not rely on it)."""
        with self._lock:
            return [c.model_copy(deep=True) for c in self._claims.values()]

    def create_claim(self, data: ClaimCreate) -> Claim:
        """Insert a new claim with a fresh id, ``pending_review`` status and submission time.

        Raises
        ------
        DuplicateClaimNumberError
            If *data.claim_number* is already taken.
        """
        with self._lock:
            if self._number_taken(data.claim_number):
                raise DuplicateClaimNumberError(data.claim_number)
            claim = Claim(
                id=str(uuid.uuid4()),
                status=ClaimStatus.PENDING_REVIEW,
                submitted_at=self._clock(),
                **data.model_dump(),
            )
            self._claims[claim.id] = claim
            return claim.model_copy(deep=True)

    def update_claim(self, claim_id: str, updates: dict[str, Any]) -> Claim | None:
        """Merge *updates* (snake_case field names) into the stored claim.

        Values are not re-validated; enum domains are the caller's concern.
        Returns ``None`` when the claim does not exist.
        """
        with self._lock:
            claim = self._claims.get(claim_id)
            if claim is None:
                return None
            updated = claim.model_copy(update=updates)
            self._claims[claim_id] = updated
            return updated.model_copy(deep=True)

    # -----------------------------------------------------------------
    # Child records
    # -----------------------------------------------------------------

    def list_damage_items(self, claim_id: str) -> list[DamageItem]:
        return self._children(self._damage_items, claim_id)

    def create_damage_item(self, claim_id: str, data: DamageItemCreate) -> DamageItem:
        item = DamageItem(id=str(uuid.uuid4()), claim_id=claim_id, **data.model_dump())
        return self._insert(self._damage_items, item)

    def list_photos(self, claim_id: str) -> list[Photo]:
        return self._children(self._photos, claim_id)

    def create_photo(self, claim_id: str, data: PhotoCreate) -> Photo:
        photo = Photo(
            id=str(uuid.uuid4()),
            claim_id=claim_id,
            uploaded_at=self._clock(),
            **data.model_dump(),
        )
        return self._insert(self._photos, photo)

    def list_cost_lines(self, claim_id: str) -> list[CostBreakdownLine]:
        return self._children(self._cost_lines, claim_id)

    def create_cost_line(self, claim_id: str, data: CostLineCreate) -> CostBreakdownLine:
        line = CostBreakdownLine(id=str(uuid.uuid4()), claim_id=claim_id, **data.model_dump())
        return self._insert(self._cost_lines, line)

    # -----------------------------------------------------------------
    # Audit log
    # -----------------------------------------------------------------

    def list_audit_log(self, claim_id: str) -> list[AuditLogEntry]:
        """Audit entries for *claim_id*, newest first."""
        entries = self._children(self._audit_log, claim_id)
        return sorted(entries, key=lambda e: (e.timestamp, e.sequence), reverse=True)

    def append_audit_log(self, data: AuditLogCreate) -> AuditLogEntry:
        """Stamp and append an audit entry.

        Timestamps are strictly increasing across the store even when the
        clock stalls or steps backwards.
        """
        with self._lock:
            timestamp = self._clock()
            if self._last_audit_at is not None and timestamp <= self._last_audit_at:
                timestamp = self._last_audit_at + _TICK
            entry = AuditLogEntry(
                id=str(uuid.uuid4()),
                timestamp=timestamp,
                sequence=self._next_sequence,
                **data.model_dump(),
            )
            self._next_sequence += 1
            self._last_audit_at = timestamp
            self._audit_log[entry.id] = entry
            return entry

    # -----------------------------------------------------------------
    # Repair shops
    # -----------------------------------------------------------------

    def list_repair_shops(self) -> list[RepairShop]:
        with self._lock:
            return [s.model_copy(deep=True) for s in self._shops.values()]

    def get_repair_shop(self, shop_id: str) -> RepairShop | None:
        with self._lock:
            shop = self._shops.get(shop_id)
            return shop.model_copy(deep=True) if shop else None

    # -----------------------------------------------------------------
    # Reset
    # -----------------------------------------------------------------

    def reset_to_seed(self) -> SeedDataset:
        """Replace the entire store contents with the canonical demo dataset."""
        dataset = build_seed_dataset(self._clock())
        with self._lock:
            self._clear()
            self._load(dataset)
        logger.info(
            "Store reset to seed: {claims} claims, {audit} audit entries",
            claims=len(dataset.claims),
            audit=len(dataset.audit_entries),
        )
        return dataset

    # -----------------------------------------------------------------
    # Internals
    # -----------------------------------------------------------------

    def _clear(self) -> None:
        self._claims: dict[str, Claim] = {}
        self._damage_items: dict[str, DamageItem] = {}
        self._photos: dict[str, Photo] = {}
        self._cost_lines: dict[str, CostBreakdownLine] = {}
        self._audit_log: dict[str, AuditLogEntry] = {}
        self._shops: dict[str, RepairShop] = {}
        self._next_sequence = 0
        self._last_audit_at: datetime | None = None

    def _load(self, dataset: SeedDataset) -> None:
        for claim in dataset.claims:
            self._claims[claim.id] = claim
        for item in dataset.damage_items:
            self._damage_items[item.id] = item
        for photo in dataset.photos:
            self._photos[photo.id] = photo
        for line in dataset.cost_lines:
            self._cost_lines[line.id] = line
        for shop in dataset.repair_shops:
            self._shops[shop.id] = shop
        for entry in dataset.audit_entries:
            self._audit_log[entry.id] = entry
        if dataset.audit_entries:
            self._next_sequence = max(e.sequence for e in dataset.audit_entries) + 1
            self._last_audit_at = max(e.timestamp for e in dataset.audit_entries)

    def _number_taken(self, claim_number: str) -> bool:
        return any(c.claim_number == claim_number for c in self._claims.values())

    def _children(self, table: dict[str, Any], claim_id: str) -> list[Any]:
        # Linear scan; fine at demo scale
        with self._lock:
            return [r.model_copy(deep=True) for r in table.values() if r.claim_id == claim_id]

    def _insert(self, table: dict[str, Any], record: Any) -> Any:
        with self._lock:
            table[record.id] = record
            return record.model_copy(deep=True)
