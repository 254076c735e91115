"""
VaccinationSession model: a scheduled vaccination activity in a barangay
that draws doses from one inventory lot.
"""

import enum
import uuid
from datetime import date, datetime, time

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Time,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from vaxsync.database import Base, utcnow


class SessionStatus(str, enum.Enum):
    SCHEDULED = "Scheduled"
    IN_PROGRESS = "In progress"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


OPEN_STATUSES = frozenset({SessionStatus.SCHEDULED, SessionStatus.IN_PROGRESS})
TERMINAL_STATUSES = frozenset({SessionStatus.COMPLETED, SessionStatus.CANCELLED})


class VaccinationSession(Base):
    __tablename__ = "vaccination_sessions"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    barangay_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("barangays.id"), nullable=False
    )
    lot_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("barangay_vaccine_inventory.id"), nullable=False,
        comment="Inventory lot the session draws on"
    )
    session_date: Mapped[date] = mapped_column(Date, nullable=False)
    session_time: Mapped[time | None] = mapped_column(Time)
    target: Mapped[int] = mapped_column(
        Integer, nullable=False, comment="Planned doses"
    )
    administered: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, comment="Doses actually given"
    )
    status: Mapped[SessionStatus] = mapped_column(
        Enum(
            SessionStatus,
            name="session_status",
            values_callable=lambda e: [x.value for x in e],
        ),
        nullable=False,
        default=SessionStatus.SCHEDULED,
    )
    created_by: Mapped[uuid.UUID | None] = mapped_column(Uuid(as_uuid=True))

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    lot: Mapped["BarangayVaccineInventory"] = relationship("BarangayVaccineInventory")  # noqa: F821

    __table_args__ = (
        CheckConstraint("target > 0", name="ck_session_target_positive"),
        CheckConstraint("administered >= 0", name="ck_session_administered_non_negative"),
        Index("idx_session_lot_status", "lot_id", "status"),
        Index("idx_session_barangay_date", "barangay_id", "session_date"),
    )

    def __repr__(self) -> str:
        return f"<VaccinationSession {self.session_date} [{self.status.value}] {self.administered}/{self.target}>"
