"""Integration tests for the FastAPI gateway.

Uses ``httpx.AsyncClient`` (via ``pytest-asyncio``) against an app wired to
an isolated, seeded store.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from omegaconf import DictConfig

from claims_review.api.app import create_app
from claims_review.core.store import ClaimStore

CAMRY = "CLM-2024-001847"      # pending_review, high confidence
ACCORD = "CLM-2024-001852"     # pending_review, high confidence
HAIL = "CLM-2024-001859"       # pending_review, medium confidence
OUTBACK = "CLM-2024-001838"    # approved
MALIBU = "CLM-2024-001829"     # rejected

# ---------------------------------------------------------------------------
# App fixture
# ---------------------------------------------------------------------------


@pytest.fixture()
def app(test_cfg: DictConfig, seeded_store: ClaimStore) -> FastAPI:
    return create_app(test_cfg, store=seeded_store)


@pytest_asyncio.fixture()
async def client(app: FastAPI) -> AsyncClient:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def _claim(client: AsyncClient, number: str) -> dict[str, Any]:
    resp = await client.get(f"/api/v1/claims/number/{number}")
    assert resp.status_code == 200
    return resp.json()


# ═══════════════════════════════════════════════════════════════════════
# Read paths
# ═══════════════════════════════════════════════════════════════════════


class TestReadEndpoints:
    @pytest.mark.asyncio
    async def test_health(self, client: AsyncClient) -> None:
        resp = await client.get("/api/v1/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "healthy", "claims": 6}

    @pytest.mark.asyncio
    async def test_list_claims(self, client: AsyncClient) -> None:
        resp = await client.get("/api/v1/claims")
        assert resp.status_code == 200
        numbers = {c["claimNumber"] for c in resp.json()}
        assert {CAMRY, ACCORD, HAIL, OUTBACK, MALIBU} <= numbers

    @pytest.mark.asyncio
    async def test_get_by_id_and_number(self, client: AsyncClient) -> None:
        by_number = await _claim(client, CAMRY)
        resp = await client.get(f"/api/v1/claims/{by_number['id']}")
        assert resp.status_code == 200
        body = resp.json()
        assert body == by_number
        assert body["totalEstimate"] == "2847.00"
        assert body["aiConfidence"] == "high"

    @pytest.mark.asyncio
    async def test_unknown_claim_404(self, client: AsyncClient) -> None:
        assert (await client.get("/api/v1/claims/nope")).status_code == 404
        assert (await client.get("/api/v1/claims/number/CLM-NOPE")).status_code == 404

    @pytest.mark.asyncio
    async def test_child_collections(self, client: AsyncClient) -> None:
        claim = await _claim(client, CAMRY)
        base = f"/api/v1/claims/{claim['id']}"

        damage = (await client.get(f"{base}/damage-items")).json()
        assert len(damage) == 3
        assert {d["type"] for d in damage} >= {"structural_dent"}
        assert all("coordinates" in d for d in damage)

        photos = (await client.get(f"{base}/photos")).json()
        assert sum(p["isPrimary"] for p in photos) == 1

        costs = (await client.get(f"{base}/cost-breakdown")).json()
        assert {c["category"] for c in costs} == {"labor", "parts", "paint", "supplies"}

    @pytest.mark.asyncio
    async def test_children_of_unknown_claim_are_empty(self, client: AsyncClient) -> None:
        for suffix in ("damage-items", "photos", "cost-breakdown", "audit-log"):
            resp = await client.get(f"/api/v1/claims/nope/{suffix}")
            assert resp.status_code == 200
            assert resp.json() == []

    @pytest.mark.asyncio
    async def test_audit_log_newest_first(self, client: AsyncClient) -> None:
        claim = await _claim(client, CAMRY)
        log = (await client.get(f"/api/v1/claims/{claim['id']}/audit-log")).json()
        stamps = [datetime.fromisoformat(e["timestamp"]) for e in log]
        assert stamps == sorted(stamps, reverse=True)
        assert log[-1]["action"] == "claim_submitted"

    @pytest.mark.asyncio
    async def test_repair_shops(self, client: AsyncClient) -> None:
        shops = (await client.get("/api/v1/repair-shops")).json()
        assert [s["id"] for s in shops] == ["shop-1", "shop-2", "shop-3"]
        assert shops[0]["estimatedDays"] == "3-4 days"


# ═══════════════════════════════════════════════════════════════════════
# Transitions
# ═══════════════════════════════════════════════════════════════════════


class TestTransitions:
    @pytest.mark.asyncio
    async def test_approve(self, client: AsyncClient) -> None:
        claim = await _claim(client, CAMRY)
        resp = await client.post(
            f"/api/v1/claims/{claim['id']}/approve",
            json={"notes": "looks good"},
            headers={"X-Actor": "Priya Patel"},
        )
        assert resp.status_code == 200
        assert resp.json()["status"] == "approved"
        assert resp.json()["agentNotes"] == "looks good"

        log = (await client.get(f"/api/v1/claims/{claim['id']}/audit-log")).json()
        assert log[0]["action"] == "claim_approved"
        assert log[0]["performedBy"] == "Priya Patel"
        assert log[0]["metadata"]["estimateAmount"] == "2847.00"

    @pytest.mark.asyncio
    async def test_approve_twice_conflicts(self, client: AsyncClient) -> None:
        claim = await _claim(client, OUTBACK)
        resp = await client.post(f"/api/v1/claims/{claim['id']}/approve", json={})
        assert resp.status_code == 409
        assert "approved" in resp.json()["detail"]

    @pytest.mark.asyncio
    async def test_approve_without_body(self, client: AsyncClient) -> None:
        claim = await _claim(client, ACCORD)
        resp = await client.post(f"/api/v1/claims/{claim['id']}/approve")
        assert resp.status_code == 200
        assert resp.json()["status"] == "approved"
        assert resp.json()["agentNotes"] is None

    @pytest.mark.asyncio
    async def test_approve_unknown_claim(self, client: AsyncClient) -> None:
        resp = await client.post("/api/v1/claims/nope/approve", json={"notes": "x"})
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_reject(self, client: AsyncClient) -> None:
        claim = await _claim(client, HAIL)
        resp = await client.post(
            f"/api/v1/claims/{claim['id']}/reject", json={"reason": "Damage predates policy"}
        )
        assert resp.status_code == 200
        assert resp.json()["status"] == "rejected"

        log = (await client.get(f"/api/v1/claims/{claim['id']}/audit-log")).json()
        assert log[0]["action"] == "claim_rejected"
        assert log[0]["performedBy"] == "Sarah Johnson"  # configured default actor

    @pytest.mark.asyncio
    async def test_reject_blank_reason_400(self, client: AsyncClient) -> None:
        claim = await _claim(client, HAIL)
        log_before = (await client.get(f"/api/v1/claims/{claim['id']}/audit-log")).json()

        resp = await client.post(f"/api/v1/claims/{claim['id']}/reject", json={"reason": "  "})

        assert resp.status_code == 400
        assert (await _claim(client, HAIL))["status"] == "pending_review"
        log_after = (await client.get(f"/api/v1/claims/{claim['id']}/audit-log")).json()
        assert log_after == log_before

    @pytest.mark.asyncio
    async def test_reject_unknown_claim_404(self, client: AsyncClient) -> None:
        resp = await client.post("/api/v1/claims/nope/reject", json={"reason": "fraud"})
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_send_to_shop(self, client: AsyncClient) -> None:
        claim = await _claim(client, OUTBACK)
        resp = await client.post(
            f"/api/v1/claims/{claim['id']}/send-to-shop",
            json={"shopId": "shop-1", "notes": "rush job"},
            headers={"X-Actor": "Michael Chen"},
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "sent_to_shop"
        assert body["assignedShopId"] == "shop-1"
        assert body["adjusterNotes"] == "rush job"

    @pytest.mark.asyncio
    async def test_send_pending_claim_to_shop_conflicts(self, client: AsyncClient) -> None:
        claim = await _claim(client, CAMRY)
        resp = await client.post(
            f"/api/v1/claims/{claim['id']}/send-to-shop", json={"shopId": "shop-1"}
        )
        assert resp.status_code == 409

    @pytest.mark.asyncio
    async def test_send_to_unknown_shop_400(self, client: AsyncClient) -> None:
        claim = await _claim(client, OUTBACK)
        resp = await client.post(
            f"/api/v1/claims/{claim['id']}/send-to-shop", json={"shopId": "shop-42"}
        )
        assert resp.status_code == 400

    @pytest.mark.asyncio
    async def test_send_to_shop_missing_body_field_422(self, client: AsyncClient) -> None:
        claim = await _claim(client, OUTBACK)
        resp = await client.post(f"/api/v1/claims/{claim['id']}/send-to-shop", json={})
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_patch(self, client: AsyncClient) -> None:
        claim = await _claim(client, CAMRY)
        resp = await client.patch(
            f"/api/v1/claims/{claim['id']}",
            json={"totalEstimate": "3100.00", "priority": "low"},
        )
        assert resp.status_code == 200
        assert resp.json()["totalEstimate"] == "3100.00"
        assert resp.json()["status"] == "pending_review"

        log = (await client.get(f"/api/v1/claims/{claim['id']}/audit-log")).json()
        assert log[0]["action"] == "claim_updated"
        assert log[0]["metadata"]["updates"] == {"totalEstimate": "3100.00", "priority": "low"}

    @pytest.mark.asyncio
    async def test_patch_status_rejected(self, client: AsyncClient) -> None:
        claim = await _claim(client, CAMRY)
        resp = await client.patch(f"/api/v1/claims/{claim['id']}", json={"status": "approved"})
        assert resp.status_code == 422
        assert (await _claim(client, CAMRY))["status"] == "pending_review"

    @pytest.mark.asyncio
    async def test_patch_null_priority_422(self, client: AsyncClient) -> None:
        claim = await _claim(client, CAMRY)
        resp = await client.patch(f"/api/v1/claims/{claim['id']}", json={"priority": None})
        assert resp.status_code == 422

        assert (await _claim(client, CAMRY))["priority"] == claim["priority"]
        log = (await client.get(f"/api/v1/claims/{claim['id']}/audit-log")).json()
        assert all(e["action"] != "claim_updated" for e in log)
        priorities = [c["priority"] for c in (await client.get("/api/v1/claims")).json()]
        assert None not in priorities

    @pytest.mark.asyncio
    async def test_patch_unknown_claim_404(self, client: AsyncClient) -> None:
        resp = await client.patch("/api/v1/claims/nope", json={"priority": "low"})
        assert resp.status_code == 404


# ═══════════════════════════════════════════════════════════════════════
# Batch / reset / intake
# ═══════════════════════════════════════════════════════════════════════


class TestBatchAndReset:
    @pytest.mark.asyncio
    async def test_batch_approve_defaults_to_high(self, client: AsyncClient) -> None:
        resp = await client.post("/api/v1/claims/batch-approve")
        assert resp.status_code == 200
        body = resp.json()
        assert body["confidence"] == "high"
        assert body["approvedClaims"] == 2
        assert {c["claimNumber"] for c in body["claims"]} == {CAMRY, ACCORD}
        assert body["failures"] == []
        assert (await _claim(client, HAIL))["status"] == "pending_review"

    @pytest.mark.asyncio
    async def test_batch_approve_nothing_left(self, client: AsyncClient) -> None:
        await client.post("/api/v1/claims/batch-approve", json={"confidence": "high"})
        resp = await client.post("/api/v1/claims/batch-approve", json={"confidence": "high"})
        assert resp.status_code == 200
        assert resp.json()["approvedClaims"] == 0
        assert resp.json()["claims"] == []

    @pytest.mark.asyncio
    async def test_batch_approve_bad_tier_400(self, client: AsyncClient) -> None:
        resp = await client.post("/api/v1/claims/batch-approve", json={"confidence": "certain"})
        assert resp.status_code == 400

    @pytest.mark.asyncio
    async def test_reset_restores_seed(self, client: AsyncClient) -> None:
        before = sorted(c["claimNumber"] for c in (await client.get("/api/v1/claims")).json())
        await client.post("/api/v1/claims/batch-approve")

        resp = await client.post("/api/v1/reset-data")

        assert resp.status_code == 200
        assert "reset" in resp.json()["message"].lower()
        claims = (await client.get("/api/v1/claims")).json()
        assert sorted(c["claimNumber"] for c in claims) == before
        assert (await _claim(client, CAMRY))["status"] == "pending_review"

    @pytest.mark.asyncio
    async def test_submit_claim(self, client: AsyncClient) -> None:
        payload = {
            "claimNumber": "CLM-2026-000001",
            "policyholderName": "Jane Doe",
            "vehicleInfo": "2024 Mazda CX-5",
            "vin": "JM3KFBCM*R*000001",
            "incidentDate": "2026-10-18T14:00:00Z",
            "incidentDescription": "Hit a deer on a rural road",
            "aiConfidence": "medium",
            "totalEstimate": "5400.00",
        }
        resp = await client.post("/api/v1/claims", json=payload)
        assert resp.status_code == 201
        assert resp.json()["status"] == "pending_review"

        dup = await client.post("/api/v1/claims", json=payload)
        assert dup.status_code == 409

    @pytest.mark.asyncio
    async def test_add_cost_line_mismatch_400(self, client: AsyncClient) -> None:
        claim = await _claim(client, ACCORD)
        resp = await client.post(
            f"/api/v1/claims/{claim['id']}/cost-breakdown",
            json={
                "category": "labor",
                "description": "Extra labor",
                "amount": "100.00",
                "hours": "2.00",
                "rate": "85.00",
            },
        )
        assert resp.status_code == 400

    @pytest.mark.asyncio
    async def test_add_damage_item(self, client: AsyncClient) -> None:
        claim = await _claim(client, ACCORD)
        resp = await client.post(
            f"/api/v1/claims/{claim['id']}/damage-items",
            json={
                "type": "paint_scratches",
                "severity": "minor",
                "location": "rear_door",
                "description": "Key scratch",
                "confidence": 60,
                "coordinates": {"x": 10, "y": 20, "width": 5, "height": 5},
            },
        )
        assert resp.status_code == 201
        assert resp.json()["claimId"] == claim["id"]
