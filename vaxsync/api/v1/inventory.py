"""
REST endpoints for barangay vaccine inventory.
Lots, stock listings, movements and the two ledger operations
(deduct, recalculate reserved).
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from vaxsync.auth.dependencies import TokenPayload, ensure_barangay_access, require_permission
from vaxsync.database import get_db
from vaxsync.schemas.common import Envelope, ErrorEnvelope
from vaxsync.schemas.inventory import (
    DeductedRecord,
    DeductRequest,
    DeductResult,
    InventorySummary,
    LotCreate,
    LotResponse,
    LowStockLot,
    MovementListResponse,
    RecalculateReservedRequest,
    RecalculateReservedResult,
)
from vaxsync.services import inventory_service, ledger_service

router = APIRouter()

_LEDGER_ERRORS = {
    400: {"model": ErrorEnvelope, "description": "Invalid quantity"},
    404: {"model": ErrorEnvelope, "description": "No inventory for the pair"},
    409: {"model": ErrorEnvelope, "description": "Insufficient stock or write conflict"},
    500: {"model": ErrorEnvelope, "description": "Storage failure"},
}


# ── Ledger ────────────────────────────────────────────


@router.post(
    "/deduct",
    response_model=Envelope[DeductResult],
    responses=_LEDGER_ERRORS,
)
async def deduct_inventory(
    data: DeductRequest,
    user: TokenPayload = Depends(require_permission("inventory", "deduct")),
    db: AsyncSession = Depends(get_db),
):
    """Deduct administered doses (first-expired, first-out), all-or-nothing."""
    ensure_barangay_access(user, data.barangay_id)
    plan = await ledger_service.deduct(
        db,
        data.barangay_id,
        data.vaccine_id,
        data.quantity_to_deduct,
        user_id=user.user_id,
    )
    return Envelope(
        data=DeductResult(
            deducted_records=[DeductedRecord(lot_id=d.lot_id, amount=d.amount) for d in plan]
        )
    )


@router.post(
    "/recalculate-reserved",
    response_model=Envelope[RecalculateReservedResult],
    responses=_LEDGER_ERRORS,
)
async def recalculate_reserved(
    data: RecalculateReservedRequest,
    user: TokenPayload = Depends(require_permission("inventory", "recalculate")),
    db: AsyncSession = Depends(get_db),
):
    """Recompute reserved doses from the open sessions of the pair."""
    reserved = await ledger_service.recalculate_reserved(
        db, data.barangay_id, data.vaccine_id
    )
    return Envelope(data=RecalculateReservedResult(quantity_reserved=reserved))


# ── Lots ──────────────────────────────────────────────


@router.post("/lots", response_model=LotResponse, status_code=201)
async def register_lot(
    data: LotCreate,
    user: TokenPayload = Depends(require_permission("inventory", "create")),
    db: AsyncSession = Depends(get_db),
):
    """Register a received lot of vaccine stock."""
    return await inventory_service.register_lot(db, user.user_id, data)


@router.get("", response_model=list[LotResponse])
async def list_inventory(
    barangay_id: UUID = Query(...),
    vaccine_id: UUID | None = Query(None),
    user: TokenPayload = Depends(require_permission("inventory", "read")),
    db: AsyncSession = Depends(get_db),
):
    """Lots of a barangay, optionally for one vaccine."""
    ensure_barangay_access(user, barangay_id)
    return await inventory_service.list_lots(db, barangay_id, vaccine_id=vaccine_id)


@router.get("/summary", response_model=InventorySummary)
async def inventory_summary(
    barangay_id: UUID = Query(...),
    user: TokenPayload = Depends(require_permission("inventory", "read")),
    db: AsyncSession = Depends(get_db),
):
    """On hand, reserved and available doses per vaccine."""
    ensure_barangay_access(user, barangay_id)
    return await inventory_service.get_inventory_summary(db, barangay_id)


@router.get("/low-stock", response_model=list[LowStockLot])
async def low_stock(
    barangay_id: UUID = Query(...),
    threshold: int | None = Query(None, ge=0),
    user: TokenPayload = Depends(require_permission("inventory", "read")),
    db: AsyncSession = Depends(get_db),
):
    """Lots below the low-stock threshold."""
    ensure_barangay_access(user, barangay_id)
    return await inventory_service.get_low_stock_lots(db, barangay_id, threshold)


@router.get("/movements", response_model=MovementListResponse)
async def list_movements(
    barangay_id: UUID = Query(...),
    vaccine_id: UUID | None = Query(None),
    movement_type: str | None = Query(None, description="receipt | deduction"),
    page: int = Query(1, ge=1),
    size: int = Query(50, ge=1, le=200),
    user: TokenPayload = Depends(require_permission("inventory", "read")),
    db: AsyncSession = Depends(get_db),
):
    """Movement trail of a barangay's stock."""
    ensure_barangay_access(user, barangay_id)
    return await inventory_service.list_movements(
        db, barangay_id, vaccine_id=vaccine_id, page=page, size=size,
        movement_type=movement_type,
    )
