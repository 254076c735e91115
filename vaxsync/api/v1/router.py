"""
Main router for API v1.
Groups every v1 sub-router.
"""

from fastapi import APIRouter

from vaxsync.api.v1.catalog import barangays_router, vaccines_router
from vaxsync.api.v1.inventory import router as inventory_router
from vaxsync.api.v1.reports import router as reports_router
from vaxsync.api.v1.sessions import router as sessions_router

api_v1_router = APIRouter()

api_v1_router.include_router(
    barangays_router,
    prefix="/barangays",
    tags=["Barangays"],
)

api_v1_router.include_router(
    vaccines_router,
    prefix="/vaccines",
    tags=["Vaccines"],
)

api_v1_router.include_router(
    inventory_router,
    prefix="/inventory",
    tags=["Inventory"],
)

api_v1_router.include_router(
    sessions_router,
    prefix="/sessions",
    tags=["Vaccination Sessions"],
)

api_v1_router.include_router(
    reports_router,
    prefix="/reports",
    tags=["Reports"],
)
