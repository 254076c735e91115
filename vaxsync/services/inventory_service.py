"""
Business logic for barangay vaccine inventory.
Lot registration, stock listings, low-stock alerts and the movement trail.
"""

import logging
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from vaxsync.config import get_settings
from vaxsync.core.exceptions import ValidationException
from vaxsync.core.vials import calculate_vials_needed
from vaxsync.models.inventory import BarangayVaccineInventory, InventoryMovement, MovementType
from vaxsync.models.vaccine import Vaccine
from vaxsync.schemas.inventory import (
    InventorySummary,
    LotCreate,
    LotResponse,
    LowStockLot,
    MovementListResponse,
    MovementResponse,
    VaccineStockSummary,
)
from vaxsync.services import catalog_service

logger = logging.getLogger(__name__)


# ── Helpers ───────────────────────────────────────────


def _lot_to_response(lot: BarangayVaccineInventory, vaccine: Vaccine | None) -> LotResponse:
    return LotResponse(
        id=lot.id,
        barangay_id=lot.barangay_id,
        vaccine_id=lot.vaccine_id,
        quantity_on_hand=lot.quantity_on_hand,
        quantity_reserved=lot.quantity_reserved,
        batch_number=lot.batch_number,
        expiry_date=lot.expiry_date,
        received_date=lot.received_date,
        notes=lot.notes,
        created_at=lot.created_at,
        updated_at=lot.updated_at,
        vaccine_name=vaccine.name if vaccine else None,
        vials_on_hand=(
            calculate_vials_needed(vaccine.doses_per_vial, lot.quantity_on_hand)
            if vaccine else None
        ),
    )


def _movement_to_response(mov: InventoryMovement) -> MovementResponse:
    return MovementResponse(
        id=mov.id,
        lot_id=mov.lot_id,
        barangay_id=mov.barangay_id,
        vaccine_id=mov.vaccine_id,
        movement_type=mov.movement_type.value,
        quantity=mov.quantity,
        stock_before=mov.stock_before,
        stock_after=mov.stock_after,
        session_id=mov.session_id,
        created_by=mov.created_by,
        notes=mov.notes,
        created_at=mov.created_at,
    )


# ── Lots ──────────────────────────────────────────────


async def register_lot(
    db: AsyncSession, user_id: UUID | None, data: LotCreate
) -> LotResponse:
    """Register a received stock lot and record it in the movement trail."""
    await catalog_service.get_barangay(db, data.barangay_id)
    vaccine = await catalog_service.get_vaccine(db, data.vaccine_id)

    if data.quantity_dose is not None:
        doses = data.quantity_dose
    else:
        doses = data.quantity_vial * (vaccine.doses_per_vial or 1)

    if data.quantity_dose is not None and data.quantity_vial is not None and vaccine.doses_per_vial:
        if data.quantity_dose > data.quantity_vial * vaccine.doses_per_vial:
            raise ValidationException(
                f"{data.quantity_dose} doses do not fit in {data.quantity_vial} vials "
                f"of {vaccine.doses_per_vial} doses"
            )

    lot = BarangayVaccineInventory(
        barangay_id=data.barangay_id,
        vaccine_id=data.vaccine_id,
        quantity_on_hand=doses,
        quantity_reserved=0,
        batch_number=data.batch_number,
        expiry_date=data.expiry_date,
        notes=data.notes,
    )
    db.add(lot)
    await db.flush()

    db.add(
        InventoryMovement(
            lot_id=lot.id,
            barangay_id=lot.barangay_id,
            vaccine_id=lot.vaccine_id,
            movement_type=MovementType.RECEIPT,
            quantity=doses,
            stock_before=0,
            stock_after=doses,
            created_by=user_id,
            notes=data.notes,
        )
    )
    await db.commit()

    logger.info(
        f"Lot registered: {vaccine.name} batch={lot.batch_number} "
        f"doses={doses} barangay={lot.barangay_id}"
    )
    return _lot_to_response(lot, vaccine)


async def list_lots(
    db: AsyncSession,
    barangay_id: UUID,
    vaccine_id: UUID | None = None,
) -> list[LotResponse]:
    query = (
        select(BarangayVaccineInventory, Vaccine)
        .join(Vaccine, Vaccine.id == BarangayVaccineInventory.vaccine_id)
        .where(BarangayVaccineInventory.barangay_id == barangay_id)
    )
    if vaccine_id:
        query = query.where(BarangayVaccineInventory.vaccine_id == vaccine_id)

    query = query.order_by(Vaccine.name.asc(), BarangayVaccineInventory.created_at.desc())
    result = await db.execute(query)
    return [_lot_to_response(lot, vaccine) for lot, vaccine in result.all()]


async def get_inventory_summary(
    db: AsyncSession, barangay_id: UUID
) -> InventorySummary:
    """Per-vaccine totals for a barangay. Read-only, no locking."""
    result = await db.execute(
        select(
            Vaccine.id,
            Vaccine.name,
            Vaccine.doses_per_vial,
            func.count(BarangayVaccineInventory.id),
            func.coalesce(func.sum(BarangayVaccineInventory.quantity_on_hand), 0),
            func.coalesce(func.sum(BarangayVaccineInventory.quantity_reserved), 0),
        )
        .join(Vaccine, Vaccine.id == BarangayVaccineInventory.vaccine_id)
        .where(BarangayVaccineInventory.barangay_id == barangay_id)
        .group_by(Vaccine.id, Vaccine.name, Vaccine.doses_per_vial)
        .order_by(Vaccine.name.asc())
    )

    vaccines = []
    for vaccine_id, name, doses_per_vial, lots, on_hand, reserved in result.all():
        on_hand, reserved = int(on_hand), int(reserved)
        vaccines.append(
            VaccineStockSummary(
                vaccine_id=vaccine_id,
                vaccine_name=name,
                lots=lots,
                quantity_on_hand=on_hand,
                quantity_reserved=reserved,
                quantity_available=max(0, on_hand - reserved),
                vials_on_hand=calculate_vials_needed(doses_per_vial, on_hand),
            )
        )

    return InventorySummary(
        barangay_id=barangay_id,
        vaccines=vaccines,
        total_on_hand=sum(v.quantity_on_hand for v in vaccines),
        total_reserved=sum(v.quantity_reserved for v in vaccines),
    )


async def get_low_stock_lots(
    db: AsyncSession, barangay_id: UUID, threshold: int | None = None
) -> list[LowStockLot]:
    threshold = threshold if threshold is not None else get_settings().LOW_STOCK_THRESHOLD
    result = await db.execute(
        select(BarangayVaccineInventory, Vaccine)
        .join(Vaccine, Vaccine.id == BarangayVaccineInventory.vaccine_id)
        .where(
            BarangayVaccineInventory.barangay_id == barangay_id,
            BarangayVaccineInventory.quantity_on_hand < threshold,
        )
        .order_by(BarangayVaccineInventory.quantity_on_hand.asc())
        .limit(50)
    )
    return [
        LowStockLot(
            lot_id=lot.id,
            vaccine_id=vaccine.id,
            vaccine_name=vaccine.name,
            batch_number=lot.batch_number,
            quantity_on_hand=lot.quantity_on_hand,
            threshold=threshold,
        )
        for lot, vaccine in result.all()
    ]


# ── Movements ─────────────────────────────────────────


async def list_movements(
    db: AsyncSession,
    barangay_id: UUID,
    vaccine_id: UUID | None = None,
    page: int = 1,
    size: int = 50,
    movement_type: str | None = None,
) -> MovementListResponse:
    query = select(InventoryMovement).where(InventoryMovement.barangay_id == barangay_id)
    count_query = select(func.count()).select_from(InventoryMovement).where(
        InventoryMovement.barangay_id == barangay_id
    )

    if vaccine_id:
        query = query.where(InventoryMovement.vaccine_id == vaccine_id)
        count_query = count_query.where(InventoryMovement.vaccine_id == vaccine_id)

    if movement_type:
        try:
            mt = MovementType(movement_type)
        except ValueError:
            raise ValidationException(f"Invalid movement type: {movement_type}")
        query = query.where(InventoryMovement.movement_type == mt)
        count_query = count_query.where(InventoryMovement.movement_type == mt)

    total_result = await db.execute(count_query)
    total = total_result.scalar() or 0

    query = query.order_by(InventoryMovement.created_at.desc())
    query = query.offset((page - 1) * size).limit(size)

    result = await db.execute(query)
    movements = result.scalars().all()

    pages = (total + size - 1) // size if total > 0 else 1

    return MovementListResponse(
        items=[_movement_to_response(m) for m in movements],
        total=total,
        page=page,
        size=size,
        pages=pages,
    )
