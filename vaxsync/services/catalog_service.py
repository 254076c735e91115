"""
Barangay and vaccine catalogue.
"""

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from vaxsync.core.exceptions import ConflictException, NotFoundException
from vaxsync.core.vials import get_doses_per_vial
from vaxsync.models.barangay import Barangay
from vaxsync.models.vaccine import Vaccine
from vaxsync.schemas.catalog import BarangayCreate, VaccineCreate

logger = logging.getLogger(__name__)


# ── Barangays ─────────────────────────────────────────


async def create_barangay(db: AsyncSession, data: BarangayCreate) -> Barangay:
    existing = await db.execute(select(Barangay).where(Barangay.name == data.name))
    if existing.scalar_one_or_none():
        raise ConflictException(f"Barangay '{data.name}' already exists")

    barangay = Barangay(name=data.name, municipality=data.municipality)
    db.add(barangay)
    await db.commit()
    logger.info(f"Barangay created: {barangay.name}")
    return barangay


async def list_barangays(db: AsyncSession) -> list[Barangay]:
    result = await db.execute(select(Barangay).order_by(Barangay.name))
    return list(result.scalars().all())


async def get_barangay(db: AsyncSession, barangay_id: UUID) -> Barangay:
    result = await db.execute(select(Barangay).where(Barangay.id == barangay_id))
    barangay = result.scalar_one_or_none()
    if not barangay:
        raise NotFoundException("Barangay")
    return barangay


# ── Vaccines ──────────────────────────────────────────


async def create_vaccine(db: AsyncSession, data: VaccineCreate) -> Vaccine:
    existing = await db.execute(select(Vaccine).where(Vaccine.name == data.name))
    if existing.scalar_one_or_none():
        raise ConflictException(f"Vaccine '{data.name}' already exists")

    doses_per_vial = data.doses_per_vial or get_doses_per_vial(data.name)
    vaccine = Vaccine(name=data.name, doses_per_vial=doses_per_vial, notes=data.notes)
    db.add(vaccine)
    await db.commit()
    logger.info(f"Vaccine created: {vaccine.name} ({doses_per_vial or 'N/A'} doses/vial)")
    return vaccine


async def list_vaccines(db: AsyncSession) -> list[Vaccine]:
    result = await db.execute(select(Vaccine).order_by(Vaccine.name))
    return list(result.scalars().all())


async def get_vaccine(db: AsyncSession, vaccine_id: UUID) -> Vaccine:
    result = await db.execute(select(Vaccine).where(Vaccine.id == vaccine_id))
    vaccine = result.scalar_one_or_none()
    if not vaccine:
        raise NotFoundException("Vaccine")
    return vaccine
