"""
Schemas for barangay vaccine inventory and the ledger operations.
"""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, Field, model_validator


# ── Lots ──────────────────────────────────────────────


class LotCreate(BaseModel):
    barangay_id: UUID
    vaccine_id: UUID
    quantity_dose: int | None = Field(None, ge=0, description="Doses received")
    quantity_vial: int | None = Field(
        None, ge=0, description="Vials received, converted with doses_per_vial"
    )
    batch_number: str | None = Field(None, max_length=100)
    expiry_date: date | None = None
    notes: str | None = None

    @model_validator(mode="after")
    def _require_quantity(self):
        if self.quantity_dose is None and self.quantity_vial is None:
            raise ValueError("quantity_dose or quantity_vial is required")
        return self


class LotResponse(BaseModel):
    id: UUID
    barangay_id: UUID
    vaccine_id: UUID
    quantity_on_hand: int
    quantity_reserved: int
    batch_number: str | None = None
    expiry_date: date | None = None
    received_date: datetime
    notes: str | None = None
    created_at: datetime
    updated_at: datetime

    # Enriched
    vaccine_name: str | None = None
    vials_on_hand: int | None = None


class LowStockLot(BaseModel):
    lot_id: UUID
    vaccine_id: UUID
    vaccine_name: str
    batch_number: str | None = None
    quantity_on_hand: int
    threshold: int


class VaccineStockSummary(BaseModel):
    vaccine_id: UUID
    vaccine_name: str
    lots: int
    quantity_on_hand: int
    quantity_reserved: int
    quantity_available: int = Field(description="On hand minus reserved, floor 0")
    vials_on_hand: int


class InventorySummary(BaseModel):
    barangay_id: UUID
    vaccines: list[VaccineStockSummary]
    total_on_hand: int
    total_reserved: int


# ── Ledger operations ─────────────────────────────────


class DeductRequest(BaseModel):
    barangay_id: UUID
    vaccine_id: UUID
    # Validated by the ledger (InvalidQuantity, 400)
    quantity_to_deduct: int


class DeductedRecord(BaseModel):
    lot_id: UUID
    amount: int


class DeductResult(BaseModel):
    deducted_records: list[DeductedRecord]


class RecalculateReservedRequest(BaseModel):
    barangay_id: UUID
    vaccine_id: UUID


class RecalculateReservedResult(BaseModel):
    quantity_reserved: int


# ── Movements ─────────────────────────────────────────


class MovementResponse(BaseModel):
    id: UUID
    lot_id: UUID
    barangay_id: UUID
    vaccine_id: UUID
    movement_type: str
    quantity: int
    stock_before: int
    stock_after: int
    session_id: UUID | None = None
    created_by: UUID | None = None
    notes: str | None = None
    created_at: datetime


class MovementListResponse(BaseModel):
    items: list[MovementResponse]
    total: int
    page: int
    size: int
    pages: int
