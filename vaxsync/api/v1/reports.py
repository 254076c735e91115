"""
Endpoints for inventory reports.
"""

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from vaxsync.auth.dependencies import TokenPayload, require_permission
from vaxsync.database import get_db
from vaxsync.schemas.report import MonthlyReportResponse, WeeklyReportResponse
from vaxsync.services import report_service

router = APIRouter()


@router.get("/monthly", response_model=MonthlyReportResponse)
async def monthly_report(
    barangay_id: UUID = Query(...),
    year: int = Query(..., ge=2000, le=2100),
    month: int = Query(..., ge=1, le=12),
    user: TokenPayload = Depends(require_permission("report", "read")),
    db: AsyncSession = Depends(get_db),
):
    """Monthly receipts, deductions and completed sessions per vaccine."""
    return await report_service.get_monthly_report(db, barangay_id, year, month)


@router.get("/weekly", response_model=WeeklyReportResponse)
async def weekly_report(
    barangay_id: UUID = Query(...),
    week_start: date = Query(..., description="First day of the week (YYYY-MM-DD)"),
    user: TokenPayload = Depends(require_permission("report", "read")),
    db: AsyncSession = Depends(get_db),
):
    """Doses administered per vaccine for each day of the week."""
    return await report_service.get_weekly_report(db, barangay_id, week_start)
