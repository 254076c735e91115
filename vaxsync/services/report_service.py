"""
Inventory reports: weekly and monthly vaccine consumption per barangay.
Reads may observe slightly stale data; nothing here takes locks.
"""

from datetime import date, datetime, timedelta, timezone
from uuid import UUID

from dateutil.relativedelta import relativedelta
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from vaxsync.core.exceptions import ValidationException
from vaxsync.models.inventory import BarangayVaccineInventory, InventoryMovement, MovementType
from vaxsync.models.vaccination_session import SessionStatus, VaccinationSession
from vaxsync.models.vaccine import Vaccine
from vaxsync.schemas.report import (
    DailyDoses,
    MonthlyReportResponse,
    VaccineMonthlyUsage,
    WeeklyReportResponse,
    WeeklyVaccineRow,
)

WEEKDAYS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


def _month_bounds(year: int, month: int) -> tuple[datetime, datetime]:
    if not 1 <= month <= 12:
        raise ValidationException(f"Invalid month: {month}")
    start = datetime(year, month, 1, tzinfo=timezone.utc)
    return start, start + relativedelta(months=1)


async def get_monthly_report(
    db: AsyncSession,
    barangay_id: UUID,
    year: int,
    month: int,
) -> MonthlyReportResponse:
    """Receipts, deductions and completed sessions per vaccine for one month."""
    start, end = _month_bounds(year, month)

    # Vaccines stocked in the barangay, with current stock
    stock_result = await db.execute(
        select(
            Vaccine.id,
            Vaccine.name,
            func.coalesce(func.sum(BarangayVaccineInventory.quantity_on_hand), 0),
        )
        .join(Vaccine, Vaccine.id == BarangayVaccineInventory.vaccine_id)
        .where(BarangayVaccineInventory.barangay_id == barangay_id)
        .group_by(Vaccine.id, Vaccine.name)
        .order_by(Vaccine.name.asc())
    )
    stock = stock_result.all()

    # Movements in the period
    movement_result = await db.execute(
        select(
            InventoryMovement.vaccine_id,
            InventoryMovement.movement_type,
            func.coalesce(func.sum(InventoryMovement.quantity), 0),
        )
        .where(
            InventoryMovement.barangay_id == barangay_id,
            InventoryMovement.created_at >= start,
            InventoryMovement.created_at < end,
        )
        .group_by(InventoryMovement.vaccine_id, InventoryMovement.movement_type)
    )
    movements: dict[tuple[UUID, MovementType], int] = {
        (vaccine_id, movement_type): int(total)
        for vaccine_id, movement_type, total in movement_result.all()
    }

    # Completed sessions in the period
    session_result = await db.execute(
        select(
            BarangayVaccineInventory.vaccine_id,
            func.count(VaccinationSession.id),
            func.coalesce(func.sum(VaccinationSession.administered), 0),
            func.coalesce(func.sum(VaccinationSession.target), 0),
        )
        .join(
            BarangayVaccineInventory,
            BarangayVaccineInventory.id == VaccinationSession.lot_id,
        )
        .where(
            VaccinationSession.barangay_id == barangay_id,
            VaccinationSession.status == SessionStatus.COMPLETED,
            VaccinationSession.session_date >= start.date(),
            VaccinationSession.session_date < end.date(),
        )
        .group_by(BarangayVaccineInventory.vaccine_id)
    )
    sessions = {
        vaccine_id: (count, int(administered), int(target))
        for vaccine_id, count, administered, target in session_result.all()
    }

    vaccines = []
    for vaccine_id, name, on_hand in stock:
        count, administered, target = sessions.get(vaccine_id, (0, 0, 0))
        vaccines.append(
            VaccineMonthlyUsage(
                vaccine_id=vaccine_id,
                vaccine_name=name,
                doses_received=movements.get((vaccine_id, MovementType.RECEIPT), 0),
                doses_deducted=movements.get((vaccine_id, MovementType.DEDUCTION), 0),
                sessions_completed=count,
                doses_administered=administered,
                target_total=target,
                quantity_on_hand=int(on_hand),
            )
        )

    return MonthlyReportResponse(
        barangay_id=barangay_id,
        period=f"{year}-{month:02d}",
        vaccines=vaccines,
    )


async def get_weekly_report(
    db: AsyncSession,
    barangay_id: UUID,
    week_start: date,
) -> WeeklyReportResponse:
    """
    Doses administered per vaccine for each of the seven days from
    ``week_start``, with a TOTAL row and per-day chart data.
    """
    days = [week_start + timedelta(days=i) for i in range(7)]
    labels = {day: WEEKDAYS[day.weekday()] for day in days}

    result = await db.execute(
        select(
            Vaccine.id,
            Vaccine.name,
            VaccinationSession.session_date,
            func.coalesce(func.sum(VaccinationSession.administered), 0),
        )
        .join(
            BarangayVaccineInventory,
            BarangayVaccineInventory.id == VaccinationSession.lot_id,
        )
        .join(Vaccine, Vaccine.id == BarangayVaccineInventory.vaccine_id)
        .where(
            VaccinationSession.barangay_id == barangay_id,
            VaccinationSession.session_date >= days[0],
            VaccinationSession.session_date <= days[-1],
            VaccinationSession.status != SessionStatus.CANCELLED,
        )
        .group_by(Vaccine.id, Vaccine.name, VaccinationSession.session_date)
        .order_by(Vaccine.name.asc())
    )

    rows: dict[UUID, WeeklyVaccineRow] = {}
    daily_totals = {day: 0 for day in days}
    for vaccine_id, name, session_date, administered in result.all():
        row = rows.get(vaccine_id)
        if row is None:
            row = WeeklyVaccineRow(
                vaccine_id=vaccine_id,
                vaccine_name=name,
                daily_breakdown={labels[day]: 0 for day in days},
                weekly_total=0,
            )
            rows[vaccine_id] = row
        doses = int(administered)
        row.daily_breakdown[labels[session_date]] += doses
        row.weekly_total += doses
        daily_totals[session_date] += doses

    totals = WeeklyVaccineRow(
        vaccine_name="TOTAL",
        daily_breakdown={labels[day]: daily_totals[day] for day in days},
        weekly_total=sum(daily_totals.values()),
    )
    return WeeklyReportResponse(
        barangay_id=barangay_id,
        week_start=days[0],
        week_end=days[-1],
        vaccines=list(rows.values()),
        totals=totals,
        chart_data=[
            DailyDoses(day=labels[day], session_date=day, doses=daily_totals[day])
            for day in days
        ],
    )
