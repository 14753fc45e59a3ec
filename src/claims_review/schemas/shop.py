"""Pydantic model for certified repair shops."""

from __future__ import annotations

from typing import Literal

from pydantic import Field

from claims_review.schemas.base import CamelModel


class RepairShop(CamelModel):
    """A repair shop that approved claims can be routed to."""

    id: str
    name: str
    address: str
    phone: str
    rating: float = Field(..., ge=0, le=5)
    distance: str
    specialties: list[str] = Field(default_factory=list)
    estimated_days: str
    certified: bool = True
    availability: Literal["immediate", "next_week", "2_weeks"]
