"""
Schemas for the barangay and vaccine catalogues.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


# ── Barangay ──────────────────────────────────────────


class BarangayCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=200)
    municipality: str | None = Field(None, max_length=200)


class BarangayResponse(BaseModel):
    id: UUID
    name: str
    municipality: str | None = None
    created_at: datetime

    model_config = {"from_attributes": True}


# ── Vaccine ───────────────────────────────────────────


class VaccineCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    doses_per_vial: int | None = Field(
        None, ge=1, description="Defaults to the vial catalogue when omitted"
    )
    notes: str | None = None


class VaccineResponse(BaseModel):
    id: UUID
    name: str
    doses_per_vial: int | None = None
    notes: str | None = None
    created_at: datetime

    model_config = {"from_attributes": True}


class VialInfo(BaseModel):
    vaccine: str
    doses_per_vial: int | None = None
    label: str
