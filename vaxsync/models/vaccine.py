"""
Vaccine model: a vaccine-dose definition stocked by barangays.
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from vaxsync.database import Base, utcnow


class Vaccine(Base):
    __tablename__ = "vaccines"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    name: Mapped[str] = mapped_column(
        String(200), nullable=False, unique=True,
        comment="Vaccine name (e.g. Pentavalent)"
    )
    doses_per_vial: Mapped[int | None] = mapped_column(
        Integer, comment="Doses per vial, null when not applicable"
    )
    notes: Mapped[str | None] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )

    def __repr__(self) -> str:
        return f"<Vaccine {self.name}>"
