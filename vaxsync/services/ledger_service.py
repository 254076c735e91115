"""
Inventory reservation ledger.

Deducts consumed doses from barangay vaccine lots (first-expired, first-out)
and recomputes the doses reserved by open vaccination sessions.

Every mutation of a lot row runs as one unit of work: the pair's lots are
re-read under ``FOR UPDATE`` (locked in id order) and committed with a
compare-and-swap on ``BarangayVaccineInventory.version``. A lost race raises
``StaleDataError``; the unit of work is rolled back and re-run.
"""

import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from datetime import date, datetime
from typing import TypeVar
from uuid import UUID

from fastapi import HTTPException
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from vaxsync.config import get_settings
from vaxsync.core.exceptions import (
    InsufficientStock,
    InvalidQuantity,
    LotNotFound,
    StorageError,
    WriteConflict,
)
from vaxsync.models.inventory import BarangayVaccineInventory, InventoryMovement, MovementType
from vaxsync.models.vaccination_session import OPEN_STATUSES, VaccinationSession

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Deduction:
    lot_id: UUID
    amount: int


# ── Unit of work ──────────────────────────────────────


async def run_in_transaction(
    db: AsyncSession,
    work: Callable[[], Awaitable[T]],
    *,
    label: str,
    max_attempts: int | None = None,
) -> T:
    """
    Run ``work`` and commit. On a version conflict roll back and run it again.

    ``work`` must re-read every row it mutates, since a rollback discards the
    previous attempt entirely. Business errors roll back and propagate
    unchanged; any other database failure becomes ``StorageError``.
    """
    attempts = max_attempts or get_settings().LEDGER_MAX_RETRIES
    for attempt in range(1, attempts + 1):
        try:
            result = await work()
            await db.commit()
            return result
        except StaleDataError:
            await db.rollback()
            logger.warning(
                f"{label}: concurrent update detected "
                f"(attempt {attempt}/{attempts}), retrying"
            )
        except HTTPException:
            await db.rollback()
            raise
        except SQLAlchemyError as exc:
            await db.rollback()
            logger.error(f"{label}: storage failure: {exc}")
            raise StorageError(f"{label} failed: {type(exc).__name__}") from exc

    logger.error(f"{label}: giving up after {attempts} conflicting attempts")
    raise WriteConflict(attempts)


# ── Helpers ───────────────────────────────────────────


def validate_quantity(quantity) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise InvalidQuantity(quantity)
    return quantity


def fefo_key(lot: BarangayVaccineInventory):
    """Earliest expiry first, lots without expiry last, then oldest receipt, then id."""
    return (
        lot.expiry_date is None,
        lot.expiry_date or date.max,
        lot.received_date is None,
        lot.received_date or datetime.min,
        str(lot.id),
    )


def plan_deduction(
    lots: Iterable[BarangayVaccineInventory], quantity: int
) -> list[Deduction]:
    """
    Decide how much to take from each lot, without touching any of them.
    Raises InsufficientStock when the lots cannot cover ``quantity``.
    """
    candidates = sorted(
        (lot for lot in lots if lot.quantity_on_hand > 0), key=fefo_key
    )
    available = sum(lot.quantity_on_hand for lot in candidates)
    if available < quantity:
        raise InsufficientStock(requested=quantity, available=available)

    plan: list[Deduction] = []
    remaining = quantity
    for lot in candidates:
        if remaining == 0:
            break
        amount = min(remaining, lot.quantity_on_hand)
        plan.append(Deduction(lot_id=lot.id, amount=amount))
        remaining -= amount
    return plan


async def lock_lots(
    db: AsyncSession, barangay_id: UUID, vaccine_id: UUID
) -> list[BarangayVaccineInventory]:
    """Fresh, row-locked copies of every lot of the pair."""
    result = await db.execute(
        select(BarangayVaccineInventory)
        .where(
            BarangayVaccineInventory.barangay_id == barangay_id,
            BarangayVaccineInventory.vaccine_id == vaccine_id,
        )
        .order_by(BarangayVaccineInventory.id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    lots = list(result.scalars().all())
    if not lots:
        raise LotNotFound(barangay_id, vaccine_id)
    return lots


async def _open_demand_by_lot(
    db: AsyncSession, lot_ids: list[UUID]
) -> dict[UUID, int]:
    result = await db.execute(
        select(
            VaccinationSession.lot_id,
            func.coalesce(func.sum(VaccinationSession.target), 0),
        )
        .where(
            VaccinationSession.lot_id.in_(lot_ids),
            VaccinationSession.status.in_(list(OPEN_STATUSES)),
        )
        .group_by(VaccinationSession.lot_id)
    )
    return {lot_id: int(total) for lot_id, total in result.all()}


# ── Building blocks (no commit) ───────────────────────


async def apply_deduction(
    db: AsyncSession,
    barangay_id: UUID,
    vaccine_id: UUID,
    quantity: int,
    *,
    session_id: UUID | None = None,
    user_id: UUID | None = None,
) -> list[Deduction]:
    """Deduct inside the caller's unit of work. Never touches quantity_reserved."""
    quantity = validate_quantity(quantity)
    lots = await lock_lots(db, barangay_id, vaccine_id)
    plan = plan_deduction(lots, quantity)

    by_id = {lot.id: lot for lot in lots}
    for step in plan:
        lot = by_id[step.lot_id]
        stock_before = lot.quantity_on_hand
        lot.quantity_on_hand = stock_before - step.amount
        db.add(
            InventoryMovement(
                lot_id=lot.id,
                barangay_id=barangay_id,
                vaccine_id=vaccine_id,
                movement_type=MovementType.DEDUCTION,
                quantity=step.amount,
                stock_before=stock_before,
                stock_after=lot.quantity_on_hand,
                session_id=session_id,
                created_by=user_id,
            )
        )

    await db.flush()
    return plan


async def apply_reserved_recalculation(
    db: AsyncSession, barangay_id: UUID, vaccine_id: UUID
) -> int:
    """
    Overwrite quantity_reserved on every lot of the pair with the sum of
    ``target`` over the open sessions drawing on it. Returns the pair total.
    Never touches quantity_on_hand.
    """
    lots = await lock_lots(db, barangay_id, vaccine_id)
    demand = await _open_demand_by_lot(db, [lot.id for lot in lots])

    total = 0
    for lot in lots:
        reserved = demand.get(lot.id, 0)
        if lot.quantity_reserved != reserved:
            logger.info(
                f"Lot {lot.id}: reserved {lot.quantity_reserved} -> {reserved}"
            )
            lot.quantity_reserved = reserved
        if reserved > lot.quantity_on_hand:
            logger.warning(
                f"Lot {lot.id}: reserved {reserved} exceeds on hand {lot.quantity_on_hand}"
            )
        total += reserved

    await db.flush()
    return total


# ── Ledger operations ─────────────────────────────────


async def deduct(
    db: AsyncSession,
    barangay_id: UUID,
    vaccine_id: UUID,
    quantity_to_deduct,
    *,
    session_id: UUID | None = None,
    user_id: UUID | None = None,
) -> list[Deduction]:
    """
    Atomically remove ``quantity_to_deduct`` doses from the pair's lots.

    Returns the (lot_id, amount) pairs applied. All-or-nothing: on
    InsufficientStock no lot is modified.
    """
    quantity = validate_quantity(quantity_to_deduct)

    async def _work() -> list[Deduction]:
        return await apply_deduction(
            db, barangay_id, vaccine_id, quantity,
            session_id=session_id, user_id=user_id,
        )

    plan = await run_in_transaction(db, _work, label="deduct")
    logger.info(
        f"Deducted {quantity} doses of vaccine {vaccine_id} in barangay {barangay_id}: "
        + ", ".join(f"{d.lot_id}={d.amount}" for d in plan)
    )
    return plan


async def recalculate_reserved(
    db: AsyncSession, barangay_id: UUID, vaccine_id: UUID
) -> int:
    """Recompute quantity_reserved for the pair from its open sessions."""

    async def _work() -> int:
        return await apply_reserved_recalculation(db, barangay_id, vaccine_id)

    return await run_in_transaction(db, _work, label="recalculate_reserved")


async def reconcile_all_reserved(db: AsyncSession) -> dict:
    """
    Recalculate reserved doses for every (barangay, vaccine) pair with lots.
    Failures are logged per pair and reported in the result.
    """
    result = await db.execute(
        select(
            BarangayVaccineInventory.barangay_id,
            BarangayVaccineInventory.vaccine_id,
        ).distinct()
    )
    pairs = result.all()
    # End the read transaction; each pair commits on its own.
    await db.commit()

    reconciled = 0
    failed: list[dict] = []
    for barangay_id, vaccine_id in pairs:
        try:
            await recalculate_reserved(db, barangay_id, vaccine_id)
            reconciled += 1
        except HTTPException as exc:
            logger.error(
                f"Reconcile failed for barangay {barangay_id} vaccine {vaccine_id}: {exc.detail}"
            )
            failed.append({
                "barangay_id": str(barangay_id),
                "vaccine_id": str(vaccine_id),
                "error": exc.detail,
            })

    logger.info(f"Reserved reconciliation: {reconciled} pairs ok, {len(failed)} failed")
    return {"reconciled": reconciled, "failed": failed}
