"""Create barangays, vaccines, barangay_vaccine_inventory, vaccination_sessions, inventory_movements tables

Revision ID: a1c4e7b20d31
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql
from sqlalchemy.dialects.postgresql import UUID

# revision identifiers, used by Alembic.
revision: str = 'a1c4e7b20d31'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ── barangays ─────────────────────────────────
    op.create_table(
        'barangays',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(200), nullable=False, unique=True),
        sa.Column('municipality', sa.String(200), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # ── vaccines ──────────────────────────────────
    op.create_table(
        'vaccines',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(200), nullable=False, unique=True),
        sa.Column('doses_per_vial', sa.Integer(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # ── barangay_vaccine_inventory ────────────────
    op.create_table(
        'barangay_vaccine_inventory',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('barangay_id', UUID(as_uuid=True), sa.ForeignKey('barangays.id'), nullable=False),
        sa.Column('vaccine_id', UUID(as_uuid=True), sa.ForeignKey('vaccines.id'), nullable=False),
        sa.Column('quantity_on_hand', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('quantity_reserved', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('batch_number', sa.String(100), nullable=True),
        sa.Column('expiry_date', sa.Date(), nullable=True),
        sa.Column('received_date', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint('quantity_on_hand >= 0', name='ck_bvi_on_hand_non_negative'),
        sa.CheckConstraint('quantity_reserved >= 0', name='ck_bvi_reserved_non_negative'),
    )
    op.create_index('idx_bvi_barangay_vaccine', 'barangay_vaccine_inventory', ['barangay_id', 'vaccine_id'])

    # ── vaccination_sessions ──────────────────────
    op.execute(
        "CREATE TYPE session_status AS ENUM "
        "('Scheduled', 'In progress', 'Completed', 'Cancelled')"
    )
    op.create_table(
        'vaccination_sessions',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('barangay_id', UUID(as_uuid=True), sa.ForeignKey('barangays.id'), nullable=False),
        sa.Column('lot_id', UUID(as_uuid=True), sa.ForeignKey('barangay_vaccine_inventory.id'), nullable=False),
        sa.Column('session_date', sa.Date(), nullable=False),
        sa.Column('session_time', sa.Time(), nullable=True),
        sa.Column('target', sa.Integer(), nullable=False),
        sa.Column('administered', sa.Integer(), nullable=False, server_default='0'),
        sa.Column(
            'status',
            postgresql.ENUM(
                'Scheduled', 'In progress', 'Completed', 'Cancelled',
                name='session_status', create_type=False,
            ),
            nullable=False,
            server_default='Scheduled',
        ),
        sa.Column('created_by', UUID(as_uuid=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint('target > 0', name='ck_session_target_positive'),
        sa.CheckConstraint('administered >= 0', name='ck_session_administered_non_negative'),
    )
    op.create_index('idx_session_lot_status', 'vaccination_sessions', ['lot_id', 'status'])
    op.create_index('idx_session_barangay_date', 'vaccination_sessions', ['barangay_id', 'session_date'])

    # ── inventory_movements ───────────────────────
    op.execute(
        "CREATE TYPE inventory_movement_type AS ENUM ('receipt', 'deduction')"
    )
    op.create_table(
        'inventory_movements',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('lot_id', UUID(as_uuid=True), sa.ForeignKey('barangay_vaccine_inventory.id'), nullable=False),
        sa.Column('barangay_id', UUID(as_uuid=True), sa.ForeignKey('barangays.id'), nullable=False),
        sa.Column('vaccine_id', UUID(as_uuid=True), sa.ForeignKey('vaccines.id'), nullable=False),
        sa.Column(
            'movement_type',
            postgresql.ENUM('receipt', 'deduction', name='inventory_movement_type', create_type=False),
            nullable=False,
        ),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('stock_before', sa.Integer(), nullable=False),
        sa.Column('stock_after', sa.Integer(), nullable=False),
        sa.Column('session_id', UUID(as_uuid=True), sa.ForeignKey('vaccination_sessions.id'), nullable=True),
        sa.Column('created_by', UUID(as_uuid=True), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('idx_movement_lot', 'inventory_movements', ['lot_id'])
    op.create_index('idx_movement_barangay_date', 'inventory_movements', ['barangay_id', 'created_at'])


def downgrade() -> None:
    op.drop_table('inventory_movements')
    op.execute("DROP TYPE IF EXISTS inventory_movement_type")
    op.drop_table('vaccination_sessions')
    op.execute("DROP TYPE IF EXISTS session_status")
    op.drop_table('barangay_vaccine_inventory')
    op.drop_table('vaccines')
    op.drop_table('barangays')
