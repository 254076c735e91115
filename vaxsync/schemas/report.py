"""
Schemas for inventory reports.
"""

from datetime import date
from uuid import UUID

from pydantic import BaseModel, Field


class VaccineMonthlyUsage(BaseModel):
    vaccine_id: UUID
    vaccine_name: str
    doses_received: int
    doses_deducted: int
    sessions_completed: int
    doses_administered: int
    target_total: int
    quantity_on_hand: int


class MonthlyReportResponse(BaseModel):
    barangay_id: UUID
    period: str
    vaccines: list[VaccineMonthlyUsage]


class WeeklyVaccineRow(BaseModel):
    vaccine_id: UUID | None = None
    vaccine_name: str
    daily_breakdown: dict[str, int] = Field(description="Doses administered per weekday")
    weekly_total: int


class DailyDoses(BaseModel):
    day: str
    session_date: date
    doses: int


class WeeklyReportResponse(BaseModel):
    barangay_id: UUID
    week_start: date
    week_end: date
    vaccines: list[WeeklyVaccineRow]
    totals: WeeklyVaccineRow
    chart_data: list[DailyDoses]
