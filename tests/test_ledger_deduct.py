"""
Tests for FEFO deduction from barangay vaccine lots.
"""

from datetime import date, datetime, timedelta, timezone
from uuid import uuid4

import pytest
from sqlalchemy import select

from vaxsync.core.exceptions import InsufficientStock, InvalidQuantity, LotNotFound
from vaxsync.models.inventory import BarangayVaccineInventory, InventoryMovement, MovementType
from vaxsync.services import ledger_service
from vaxsync.services.ledger_service import Deduction, plan_deduction, validate_quantity


def _lot(on_hand, expiry=None, received_days_ago=0):
    return BarangayVaccineInventory(
        id=uuid4(),
        barangay_id=uuid4(),
        vaccine_id=uuid4(),
        quantity_on_hand=on_hand,
        quantity_reserved=0,
        expiry_date=expiry,
        received_date=datetime.now(timezone.utc) - timedelta(days=received_days_ago),
    )


# ── plan_deduction (pure) ─────────────────────────────


def test_plan_takes_earliest_expiry_first():
    later = _lot(10, expiry=date(2027, 6, 1))
    sooner = _lot(10, expiry=date(2027, 1, 1))

    plan = plan_deduction([later, sooner], 12)

    assert plan == [
        Deduction(lot_id=sooner.id, amount=10),
        Deduction(lot_id=later.id, amount=2),
    ]


def test_plan_puts_lots_without_expiry_last():
    no_expiry = _lot(10, received_days_ago=90)
    dated = _lot(3, expiry=date(2027, 3, 1))

    plan = plan_deduction([no_expiry, dated], 5)

    assert plan == [
        Deduction(lot_id=dated.id, amount=3),
        Deduction(lot_id=no_expiry.id, amount=2),
    ]


def test_plan_breaks_expiry_ties_by_oldest_receipt():
    newer = _lot(5, expiry=date(2027, 1, 1), received_days_ago=1)
    older = _lot(5, expiry=date(2027, 1, 1), received_days_ago=30)

    plan = plan_deduction([newer, older], 4)

    assert plan == [Deduction(lot_id=older.id, amount=4)]


def test_plan_skips_empty_lots():
    empty = _lot(0, expiry=date(2026, 1, 1))
    stocked = _lot(8, expiry=date(2027, 1, 1))

    plan = plan_deduction([empty, stocked], 8)

    assert plan == [Deduction(lot_id=stocked.id, amount=8)]


def test_plan_reports_shortfall():
    with pytest.raises(InsufficientStock) as exc_info:
        plan_deduction([_lot(3), _lot(2)], 10)

    assert exc_info.value.available == 5
    assert exc_info.value.shortfall == 5


@pytest.mark.parametrize("quantity", [0, -3, 2.5, "4", True, None])
def test_validate_quantity_rejects_non_positive_integers(quantity):
    with pytest.raises(InvalidQuantity):
        validate_quantity(quantity)


# ── deduct (database) ─────────────────────────────────


async def test_deduct_from_single_lot(db_session, barangay, vaccine, make_lot, fetch_lot):
    lot = await make_lot(barangay.id, vaccine.id, 20)

    plan = await ledger_service.deduct(db_session, barangay.id, vaccine.id, 7)

    assert plan == [Deduction(lot_id=lot.id, amount=7)]
    assert (await fetch_lot(lot.id)).quantity_on_hand == 13


async def test_deduct_spans_lots_in_fefo_order(
    db_session, barangay, vaccine, make_lot, fetch_lot
):
    first = await make_lot(barangay.id, vaccine.id, 5, expiry_date=date(2027, 1, 31))
    second = await make_lot(barangay.id, vaccine.id, 10, expiry_date=date(2027, 4, 30))
    last = await make_lot(barangay.id, vaccine.id, 10)

    plan = await ledger_service.deduct(db_session, barangay.id, vaccine.id, 12)

    assert [(d.lot_id, d.amount) for d in plan] == [(first.id, 5), (second.id, 7)]
    assert (await fetch_lot(first.id)).quantity_on_hand == 0
    assert (await fetch_lot(second.id)).quantity_on_hand == 3
    assert (await fetch_lot(last.id)).quantity_on_hand == 10


async def test_deduct_total_decrease_equals_quantity(
    db_session, barangay, vaccine, make_lot, fetch_lot
):
    lots = [
        await make_lot(barangay.id, vaccine.id, n, expiry_date=date(2027, m, 1))
        for n, m in ((4, 2), (6, 3), (9, 5))
    ]

    await ledger_service.deduct(db_session, barangay.id, vaccine.id, 15)

    remaining = [(await fetch_lot(lot.id)).quantity_on_hand for lot in lots]
    assert sum(remaining) == 19 - 15
    assert all(q >= 0 for q in remaining)


async def test_deduct_records_movements(db_session, barangay, vaccine, make_lot):
    lot = await make_lot(barangay.id, vaccine.id, 10)
    user_id = uuid4()

    await ledger_service.deduct(db_session, barangay.id, vaccine.id, 4, user_id=user_id)

    result = await db_session.execute(
        select(InventoryMovement).where(InventoryMovement.lot_id == lot.id)
    )
    movement = result.scalar_one()
    assert movement.movement_type == MovementType.DEDUCTION
    assert movement.quantity == 4
    assert (movement.stock_before, movement.stock_after) == (10, 6)
    assert movement.created_by == user_id


async def test_deduct_does_not_touch_reserved(
    db_session, barangay, vaccine, make_lot, fetch_lot
):
    lot = await make_lot(barangay.id, vaccine.id, 10, reserved=6)

    await ledger_service.deduct(db_session, barangay.id, vaccine.id, 8)

    assert (await fetch_lot(lot.id)).quantity_reserved == 6


async def test_insufficient_stock_leaves_lots_unchanged(
    db_session, barangay, vaccine, make_lot, fetch_lot
):
    lot = await make_lot(barangay.id, vaccine.id, 5)

    with pytest.raises(InsufficientStock) as exc_info:
        await ledger_service.deduct(db_session, barangay.id, vaccine.id, 10)

    assert exc_info.value.status_code == 409
    assert exc_info.value.shortfall == 5
    assert (await fetch_lot(lot.id)).quantity_on_hand == 5

    movements = await db_session.execute(select(InventoryMovement))
    assert movements.scalars().all() == []


async def test_insufficient_across_lots_modifies_none(
    db_session, barangay, vaccine, make_lot, fetch_lot
):
    a = await make_lot(barangay.id, vaccine.id, 3, expiry_date=date(2027, 1, 1))
    b = await make_lot(barangay.id, vaccine.id, 4)

    with pytest.raises(InsufficientStock) as exc_info:
        await ledger_service.deduct(db_session, barangay.id, vaccine.id, 9)

    assert exc_info.value.shortfall == 2
    assert (await fetch_lot(a.id)).quantity_on_hand == 3
    assert (await fetch_lot(b.id)).quantity_on_hand == 4


async def test_invalid_quantity_rejected_before_reading_lots(db_session, barangay, vaccine):
    with pytest.raises(InvalidQuantity) as exc_info:
        await ledger_service.deduct(db_session, barangay.id, vaccine.id, 0)

    assert exc_info.value.status_code == 400


async def test_deduct_without_lots_raises_lot_not_found(db_session, barangay, vaccine):
    with pytest.raises(LotNotFound) as exc_info:
        await ledger_service.deduct(db_session, barangay.id, vaccine.id, 1)

    assert exc_info.value.status_code == 404


async def test_deduct_ignores_other_barangays(
    db_session, barangay, other_barangay, vaccine, make_lot, fetch_lot
):
    mine = await make_lot(barangay.id, vaccine.id, 2)
    theirs = await make_lot(other_barangay.id, vaccine.id, 50)

    with pytest.raises(InsufficientStock):
        await ledger_service.deduct(db_session, barangay.id, vaccine.id, 3)

    assert (await fetch_lot(mine.id)).quantity_on_hand == 2
    assert (await fetch_lot(theirs.id)).quantity_on_hand == 50
