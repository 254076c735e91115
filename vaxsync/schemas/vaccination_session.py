"""
Schemas for vaccination sessions.
"""

from datetime import date, datetime, time
from uuid import UUID

from pydantic import BaseModel, Field

from vaxsync.models.vaccination_session import SessionStatus


class SessionCreate(BaseModel):
    barangay_id: UUID
    lot_id: UUID
    session_date: date
    session_time: time | None = None
    target: int = Field(..., gt=0, description="Planned doses")


class SessionAdministeredUpdate(BaseModel):
    administered: int = Field(..., ge=0)
    status: SessionStatus | None = None


class SessionStatusUpdate(BaseModel):
    status: SessionStatus


class SessionResponse(BaseModel):
    id: UUID
    barangay_id: UUID
    lot_id: UUID
    session_date: date
    session_time: time | None = None
    target: int
    administered: int
    status: SessionStatus
    created_by: UUID | None = None
    created_at: datetime
    updated_at: datetime

    # Enriched
    vials_needed: int | None = None
    deducted_records: list[dict] = Field(
        default=[], description="Lots drawn on when the session was completed"
    )

    model_config = {"from_attributes": True}
