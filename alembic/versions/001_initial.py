"""Initial migration

Revision ID: 001
Revises:
Create Date: 2024-01-01 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Create reservations table
    op.create_table(
        'reservations',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('guest_name', sa.String(100), nullable=False),
        sa.Column('guest_phone', sa.String(20), nullable=False),
        sa.Column('guest_email', sa.String(100)),
        sa.Column('expected_arrival_date', sa.DateTime(), nullable=False),
        sa.Column('expected_arrival_time', sa.String(20), nullable=False, server_default='dinner'),
        sa.Column('table_size', sa.Integer(), nullable=False),
        sa.Column('special_requests', sa.Text(), server_default=''),
        sa.Column('status', sa.String(20), nullable=False, server_default='requested'),
        sa.Column('reservation_code', sa.String(16), nullable=False),
        sa.Column('remarks', sa.String(100), server_default=''),
        sa.Column('approved_by', sa.String(64)),
        sa.Column('cancelled_by', sa.String(64)),
        sa.Column('approved_at', sa.DateTime()),
        sa.Column('cancelled_at', sa.DateTime()),
        sa.Column('completed_at', sa.DateTime()),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now()),
        sa.UniqueConstraint('reservation_code', name='uq_reservations_reservation_code'),
    )

    # Create indexes
    op.create_index('ix_reservations_status', 'reservations', ['status'])
    op.create_index('ix_reservations_guest_phone', 'reservations', ['guest_phone'])
    op.create_index('ix_reservations_guest_email', 'reservations', ['guest_email'])
    op.create_index('ix_reservations_created_at', 'reservations', ['created_at'])
    op.create_index(
        'ix_reservations_arrival_slot_status',
        'reservations',
        ['expected_arrival_date', 'expected_arrival_time', 'status'],
    )


def downgrade() -> None:
    op.drop_index('ix_reservations_arrival_slot_status', 'reservations')
    op.drop_index('ix_reservations_created_at', 'reservations')
    op.drop_index('ix_reservations_guest_email', 'reservations')
    op.drop_index('ix_reservations_guest_phone', 'reservations')
    op.drop_index('ix_reservations_status', 'reservations')
    op.drop_table('reservations')
