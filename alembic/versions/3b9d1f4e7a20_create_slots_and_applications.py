"""create_slots_and_applications

Revision ID: 3b9d1f4e7a20
Revises:
Create Date: 2026-10-18 10:12:44.118302

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3b9d1f4e7a20'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """
    Create the roster tables.

    - slots.position is unique: a second initialization cannot add rows
    - applications.slot_id is unique: one application per slot
    """
    op.create_table(
        'slots',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=10), server_default='open', nullable=False),
        sa.Column('occupant_name', sa.String(length=200), nullable=True),
        sa.Column('occupant_role', sa.String(length=20), nullable=True),
        sa.Column('avatar_reference', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('position'),
    )
    op.create_index('idx_slots_status_position', 'slots', ['status', 'position'])

    op.create_table(
        'applications',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('email', sa.String(length=320), nullable=False),
        sa.Column('whatsapp_number', sa.String(length=50), nullable=False),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('profile_image', sa.Text(), nullable=False),
        sa.Column('status', sa.String(length=10), server_default='pending', nullable=False),
        sa.Column('slot_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['slot_id'], ['slots.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('slot_id'),
    )
    op.create_index('idx_applications_status_created', 'applications', ['status', 'created_at'])
    op.create_index('idx_applications_created_at', 'applications', ['created_at'])


def downgrade() -> None:
    """Drop the roster tables."""
    op.drop_index('idx_applications_created_at', table_name='applications')
    op.drop_index('idx_applications_status_created', table_name='applications')
    op.drop_table('applications')
    op.drop_index('idx_slots_status_position', table_name='slots')
    op.drop_table('slots')
