"""Shared fixtures for the claims-review test suite."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Optional

import pytest
from omegaconf import OmegaConf

from claims_review.core.store import ClaimStore
from claims_review.core.workflow import ClaimWorkflow
from claims_review.schemas.claim import (
    Claim,
    ClaimCreate,
    ClaimStatus,
    ConfidenceTier,
    Priority,
)

ACTOR = "Sarah Johnson"


# ---------------------------------------------------------------------------
# Clock
# ---------------------------------------------------------------------------


class FrozenClock:
    """Deterministic clock; call :meth:`advance` to move time forward."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> None:
        self.now += timedelta(**delta)


@pytest.fixture()
def clock() -> FrozenClock:
    return FrozenClock(datetime(2026, 10, 19, 9, 30, tzinfo=timezone.utc))


# ---------------------------------------------------------------------------
# Store / workflow
# ---------------------------------------------------------------------------


@pytest.fixture()
def store(clock: FrozenClock) -> ClaimStore:
    """An empty, isolated store."""
    return ClaimStore(clock)


@pytest.fixture()
def seeded_store(clock: FrozenClock) -> ClaimStore:
    """An isolated store loaded with the demo dataset."""
    return ClaimStore(clock, seed=True)


@pytest.fixture()
def workflow(store: ClaimStore) -> ClaimWorkflow:
    return ClaimWorkflow(store)


# ---------------------------------------------------------------------------
# Claim fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def claim_data() -> ClaimCreate:
    """Intake payload for a fresh claim."""
    return ClaimCreate(
        claim_number="CLM-TEST-1",
        policyholder_name="Jane Doe",
        vehicle_info="2022 Toyota Camry",
        vin="4T1C11AK*N*999999",
        incident_date=datetime(2026, 10, 1, tzinfo=timezone.utc),
        incident_description="Rear-end collision at intersection",
        priority=Priority.HIGH,
        ai_confidence=ConfidenceTier.HIGH,
        total_estimate=Decimal("2847.00"),
        assigned_agent=ACTOR,
    )


@pytest.fixture()
def make_claim(store: ClaimStore) -> Callable[..., Claim]:
    """Factory inserting a claim directly into *store* in any status."""
    counter = iter(range(1, 1000))

    def _make(
        claim_number: Optional[str] = None,
        status: ClaimStatus = ClaimStatus.PENDING_REVIEW,
        ai_confidence: Optional[ConfidenceTier] = ConfidenceTier.HIGH,
        total_estimate: str = "1500.00",
        **extra: Any,
    ) -> Claim:
        claim = store.create_claim(
            ClaimCreate(
                claim_number=claim_number or f"CLM-TEST-{next(counter)}",
                policyholder_name="Test Holder",
                vehicle_info="2020 Honda Civic",
                vin="2HGFC2F5*L*000000",
                incident_date=datetime(2026, 9, 30, tzinfo=timezone.utc),
                incident_description="Test incident",
                ai_confidence=ai_confidence,
                total_estimate=Decimal(total_estimate),
            )
        )
        updates = {"status": status, **extra}
        return store.update_claim(claim.id, updates)  # type: ignore[return-value]

    return _make


# ---------------------------------------------------------------------------
# Config fixture (test overrides)
# ---------------------------------------------------------------------------


@pytest.fixture()
def test_cfg() -> Any:
    """Return a minimal OmegaConf DictConfig with test overrides."""
    return OmegaConf.create(
        {
            "server": {
                "host": "127.0.0.1",
                "port": 8000,
                "debug": False,
                "cors_origins": ["http://localhost:5173"],
            },
            "logging": {"level": "WARNING", "colored": False, "format": "pretty"},
            "store": {"seed_on_startup": False},
            "workflow": {"default_actor": ACTOR},
        }
    )
