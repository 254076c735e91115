"""
Endpoints for the barangay and vaccine catalogues.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from vaxsync.auth.dependencies import TokenPayload, require_permission
from vaxsync.core.vials import vial_info
from vaxsync.database import get_db
from vaxsync.schemas.catalog import (
    BarangayCreate,
    BarangayResponse,
    VaccineCreate,
    VaccineResponse,
    VialInfo,
)
from vaxsync.services import catalog_service

barangays_router = APIRouter()
vaccines_router = APIRouter()


# ── Barangays ─────────────────────────────────────────


@barangays_router.post("", response_model=BarangayResponse, status_code=201)
async def create_barangay(
    data: BarangayCreate,
    user: TokenPayload = Depends(require_permission("catalog", "create")),
    db: AsyncSession = Depends(get_db),
):
    return await catalog_service.create_barangay(db, data)


@barangays_router.get("", response_model=list[BarangayResponse])
async def list_barangays(
    user: TokenPayload = Depends(require_permission("catalog", "read")),
    db: AsyncSession = Depends(get_db),
):
    return await catalog_service.list_barangays(db)


# ── Vaccines ──────────────────────────────────────────


@vaccines_router.post("", response_model=VaccineResponse, status_code=201)
async def create_vaccine(
    data: VaccineCreate,
    user: TokenPayload = Depends(require_permission("catalog", "create")),
    db: AsyncSession = Depends(get_db),
):
    """Create a vaccine. doses_per_vial defaults to the vial catalogue."""
    return await catalog_service.create_vaccine(db, data)


@vaccines_router.get("", response_model=list[VaccineResponse])
async def list_vaccines(
    user: TokenPayload = Depends(require_permission("catalog", "read")),
    db: AsyncSession = Depends(get_db),
):
    return await catalog_service.list_vaccines(db)


@vaccines_router.get("/vial-mapping", response_model=list[VialInfo])
async def vial_mapping(
    user: TokenPayload = Depends(require_permission("catalog", "read")),
):
    """Doses per vial for every catalogued vaccine."""
    return vial_info()
