"""create_vehicle_trips

Revision ID: 3f2a9c1d7e40
Revises:
Create Date: 2024-01-15 09:00:00

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '3f2a9c1d7e40'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """
    Create the vehicle_trips table.

    Lifecycle state and GPS waypoints live in the `notes` column, so the
    table has no status or coordinate columns.
    """
    print("[MIGRATION] Creating vehicle_trips...")

    op.create_table(
        'vehicle_trips',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('vehicle_id', sa.String(length=100), nullable=False),
        sa.Column('trip_date', sa.Date(), nullable=False),
        sa.Column('trip_time', sa.Time(), nullable=True),
        sa.Column('trip_type', sa.String(length=20), server_default='other', nullable=False),
        sa.Column('start_km', sa.Integer(), nullable=False),
        sa.Column('end_km', sa.Integer(), nullable=False),
        sa.Column('distance_km', sa.Integer(), server_default='0', nullable=False),
        sa.Column('start_location', sa.String(length=300), nullable=True),
        sa.Column('end_location', sa.String(length=300), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(
            "trip_type IN ('work', 'business', 'service', 'leisure', 'hometown', 'other')",
            name='check_trip_type'
        ),
        sa.CheckConstraint('start_km >= 0', name='check_start_km'),
        sa.CheckConstraint('end_km >= start_km', name='valid_km_range'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_vehicle_trips_vehicle_id'), 'vehicle_trips', ['vehicle_id'], unique=False)
    op.create_index('idx_vehicle_trips_vehicle_date', 'vehicle_trips', ['vehicle_id', 'trip_date'], unique=False)

    print("[MIGRATION] ✅ vehicle_trips created")


def downgrade() -> None:
    op.drop_index('idx_vehicle_trips_vehicle_date', table_name='vehicle_trips')
    op.drop_index(op.f('ix_vehicle_trips_vehicle_id'), table_name='vehicle_trips')
    op.drop_table('vehicle_trips')
