"""
Inventory models: barangay vaccine lots and their movement ledger.

BarangayVaccineInventory holds one lot (barangay + vaccine + batch) with the
doses on hand and the doses reserved by open vaccination sessions.
InventoryMovement records every receipt and deduction applied to a lot.
"""

import enum
import uuid
from datetime import date, datetime

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from vaxsync.database import Base, utcnow


class MovementType(str, enum.Enum):
    """Kind of inventory movement."""
    RECEIPT = "receipt"
    DEDUCTION = "deduction"


# ── BarangayVaccineInventory ──────────────────────────


class BarangayVaccineInventory(Base):
    __tablename__ = "barangay_vaccine_inventory"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    barangay_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("barangays.id"), nullable=False
    )
    vaccine_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("vaccines.id"), nullable=False
    )
    quantity_on_hand: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0,
        comment="Doses physically available"
    )
    quantity_reserved: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0,
        comment="Doses earmarked by open sessions (derived)"
    )
    batch_number: Mapped[str | None] = mapped_column(String(100))
    expiry_date: Mapped[date | None] = mapped_column(Date)
    received_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )
    notes: Mapped[str | None] = mapped_column(Text)
    version: Mapped[int] = mapped_column(
        Integer, nullable=False,
        comment="Optimistic lock counter"
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    # Relations
    barangay: Mapped["Barangay"] = relationship("Barangay")  # noqa: F821
    vaccine: Mapped["Vaccine"] = relationship("Vaccine")  # noqa: F821

    __table_args__ = (
        CheckConstraint("quantity_on_hand >= 0", name="ck_bvi_on_hand_non_negative"),
        CheckConstraint("quantity_reserved >= 0", name="ck_bvi_reserved_non_negative"),
        Index("idx_bvi_barangay_vaccine", "barangay_id", "vaccine_id"),
    )

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self) -> str:
        return (
            f"<BarangayVaccineInventory {self.batch_number or self.id} "
            f"on_hand={self.quantity_on_hand} reserved={self.quantity_reserved}>"
        )


# ── InventoryMovement ─────────────────────────────────


class InventoryMovement(Base):
    __tablename__ = "inventory_movements"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    lot_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("barangay_vaccine_inventory.id"), nullable=False
    )
    barangay_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("barangays.id"), nullable=False
    )
    vaccine_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("vaccines.id"), nullable=False
    )
    movement_type: Mapped[MovementType] = mapped_column(
        Enum(
            MovementType,
            name="inventory_movement_type",
            values_callable=lambda e: [x.value for x in e],
        ),
        nullable=False,
    )
    quantity: Mapped[int] = mapped_column(
        Integer, nullable=False, comment="Doses (always positive)"
    )
    stock_before: Mapped[int] = mapped_column(Integer, nullable=False)
    stock_after: Mapped[int] = mapped_column(Integer, nullable=False)
    session_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("vaccination_sessions.id"),
        comment="Session that consumed the doses"
    )
    created_by: Mapped[uuid.UUID | None] = mapped_column(Uuid(as_uuid=True))
    notes: Mapped[str | None] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )

    lot: Mapped["BarangayVaccineInventory"] = relationship("BarangayVaccineInventory")

    __table_args__ = (
        Index("idx_movement_lot", "lot_id"),
        Index("idx_movement_barangay_date", "barangay_id", "created_at"),
    )

    def __repr__(self) -> str:
        sign = "+" if self.movement_type == MovementType.RECEIPT else "-"
        return f"<InventoryMovement {sign}{self.quantity} lot={self.lot_id}>"
