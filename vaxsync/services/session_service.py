"""
Vaccination session service: scheduling, administered counts and status
transitions.

Sessions earmark doses on their lot while open. Every change that can alter
that demand recalculates the reserved counter for the lot's
(barangay, vaccine) pair in the same unit of work, and completing a session
deducts the administered doses from stock.
"""

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from vaxsync.core.exceptions import ForbiddenException, NotFoundException, ValidationException
from vaxsync.core.vials import calculate_vials_needed
from vaxsync.models.inventory import BarangayVaccineInventory
from vaxsync.models.vaccination_session import (
    TERMINAL_STATUSES,
    SessionStatus,
    VaccinationSession,
)
from vaxsync.models.vaccine import Vaccine
from vaxsync.schemas.vaccination_session import (
    SessionAdministeredUpdate,
    SessionCreate,
    SessionResponse,
)
from vaxsync.services import catalog_service
from vaxsync.services.ledger_service import (
    Deduction,
    apply_deduction,
    apply_reserved_recalculation,
    run_in_transaction,
)

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: dict[SessionStatus, set[SessionStatus]] = {
    SessionStatus.SCHEDULED: {
        SessionStatus.IN_PROGRESS,
        SessionStatus.COMPLETED,
        SessionStatus.CANCELLED,
    },
    SessionStatus.IN_PROGRESS: {
        SessionStatus.COMPLETED,
        SessionStatus.CANCELLED,
    },
}


# ── Helpers ───────────────────────────────────────────


async def _get_lot(db: AsyncSession, lot_id: UUID) -> BarangayVaccineInventory:
    result = await db.execute(
        select(BarangayVaccineInventory).where(BarangayVaccineInventory.id == lot_id)
    )
    lot = result.scalar_one_or_none()
    if not lot:
        raise NotFoundException("Inventory lot")
    return lot


async def _doses_per_vial(db: AsyncSession, vaccine_id: UUID) -> int | None:
    result = await db.execute(
        select(Vaccine.doses_per_vial).where(Vaccine.id == vaccine_id)
    )
    return result.scalar_one_or_none()


async def _load_session_for_update(
    db: AsyncSession, session_id: UUID, barangay_scope: UUID | None
) -> VaccinationSession:
    result = await db.execute(
        select(VaccinationSession)
        .where(VaccinationSession.id == session_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    session = result.scalar_one_or_none()
    if not session:
        raise NotFoundException("Vaccination session")
    if barangay_scope is not None and session.barangay_id != barangay_scope:
        raise ForbiddenException("You can only manage sessions in your assigned barangay")
    return session


def _check_transition(current: SessionStatus, new: SessionStatus) -> None:
    if current in TERMINAL_STATUSES:
        raise ValidationException(f"Session is already {current.value}")
    if new != current and new not in ALLOWED_TRANSITIONS.get(current, set()):
        raise ValidationException(
            f"Cannot change session status from {current.value} to {new.value}"
        )


def _to_response(
    session: VaccinationSession,
    doses_per_vial: int | None,
    deductions: list[Deduction] | None = None,
) -> SessionResponse:
    response = SessionResponse.model_validate(session)
    response.vials_needed = calculate_vials_needed(doses_per_vial, session.target)
    response.deducted_records = [
        {"lot_id": str(d.lot_id), "amount": d.amount} for d in deductions or []
    ]
    return response


async def _apply_changes(
    db: AsyncSession,
    session: VaccinationSession,
    user_id: UUID | None,
    *,
    administered: int | None = None,
    status: SessionStatus | None = None,
) -> list[Deduction]:
    """Mutate a loaded session and keep the ledger in step. No commit."""
    if session.status in TERMINAL_STATUSES:
        raise ValidationException(f"Session is already {session.status.value}")

    if administered is not None:
        session.administered = administered

    deductions: list[Deduction] = []
    if status is not None and status != session.status:
        _check_transition(session.status, status)
        session.status = status

    lot = await _get_lot(db, session.lot_id)
    if session.status == SessionStatus.COMPLETED and session.administered > 0:
        deductions = await apply_deduction(
            db,
            lot.barangay_id,
            lot.vaccine_id,
            session.administered,
            session_id=session.id,
            user_id=user_id,
        )

    await db.flush()
    await apply_reserved_recalculation(db, lot.barangay_id, lot.vaccine_id)
    return deductions


# ── Sessions ──────────────────────────────────────────


async def create_session(
    db: AsyncSession, user_id: UUID | None, data: SessionCreate
) -> SessionResponse:
    """Schedule a session against a lot of the same barangay and reserve its target."""
    await catalog_service.get_barangay(db, data.barangay_id)
    lot = await _get_lot(db, data.lot_id)
    if lot.barangay_id != data.barangay_id:
        raise ValidationException("Inventory lot does not belong to this barangay")

    barangay_id, vaccine_id = lot.barangay_id, lot.vaccine_id

    async def _work() -> VaccinationSession:
        session = VaccinationSession(
            barangay_id=data.barangay_id,
            lot_id=data.lot_id,
            session_date=data.session_date,
            session_time=data.session_time,
            target=data.target,
            administered=0,
            status=SessionStatus.SCHEDULED,
            created_by=user_id,
        )
        db.add(session)
        await db.flush()
        reserved = await apply_reserved_recalculation(db, barangay_id, vaccine_id)
        logger.info(
            f"Session scheduled {session.session_date} target={session.target}, "
            f"pair reserved now {reserved}"
        )
        return session

    session = await run_in_transaction(db, _work, label="create_session")
    return _to_response(session, await _doses_per_vial(db, vaccine_id))


async def list_sessions(
    db: AsyncSession,
    barangay_id: UUID | None = None,
    status: SessionStatus | None = None,
) -> list[SessionResponse]:
    query = select(VaccinationSession, Vaccine.doses_per_vial).join(
        BarangayVaccineInventory,
        BarangayVaccineInventory.id == VaccinationSession.lot_id,
    ).join(Vaccine, Vaccine.id == BarangayVaccineInventory.vaccine_id)

    if barangay_id:
        query = query.where(VaccinationSession.barangay_id == barangay_id)
    if status:
        query = query.where(VaccinationSession.status == status)

    query = query.order_by(VaccinationSession.session_date.desc())
    result = await db.execute(query)
    return [_to_response(session, per_vial) for session, per_vial in result.all()]


async def update_administered(
    db: AsyncSession,
    session_id: UUID,
    user_id: UUID | None,
    data: SessionAdministeredUpdate,
    barangay_scope: UUID | None = None,
) -> SessionResponse:
    """Record doses given so far, optionally moving the session along."""

    async def _work():
        session = await _load_session_for_update(db, session_id, barangay_scope)
        deductions = await _apply_changes(
            db, session, user_id, administered=data.administered, status=data.status
        )
        return session, deductions

    session, deductions = await run_in_transaction(db, _work, label="update_administered")
    lot = await _get_lot(db, session.lot_id)
    return _to_response(session, await _doses_per_vial(db, lot.vaccine_id), deductions)


async def update_status(
    db: AsyncSession,
    session_id: UUID,
    user_id: UUID | None,
    status: SessionStatus,
    barangay_scope: UUID | None = None,
) -> SessionResponse:
    """
    Transition a session. Completing it deducts the administered doses
    (first-expired, first-out) in the same transaction; an InsufficientStock
    leaves the session unchanged.
    """

    async def _work():
        session = await _load_session_for_update(db, session_id, barangay_scope)
        deductions = await _apply_changes(db, session, user_id, status=status)
        return session, deductions

    session, deductions = await run_in_transaction(db, _work, label="update_status")
    logger.info(f"Session {session.id} is now {session.status.value}")
    lot = await _get_lot(db, session.lot_id)
    return _to_response(session, await _doses_per_vial(db, lot.vaccine_id), deductions)
