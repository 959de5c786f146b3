"""Create sightings table.

Revision ID: 001
Revises: 
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'sightings',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('title', sa.String(length=120), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('name', sa.String(length=80), nullable=True),
        sa.Column('email', sa.String(length=120), nullable=True),
        sa.Column('suspicious_meter', sa.Integer(), nullable=False),
        sa.Column('photos_json', sa.JSON(), nullable=False),
        sa.Column('submitted_at', sa.DateTime(), nullable=False),
        sa.Column('approved_at', sa.DateTime(), nullable=True),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.CheckConstraint("status IN ('pending', 'approved')", name='ck_sightings_status'),
        sa.CheckConstraint(
            "(status = 'pending' AND approved_at IS NULL) OR "
            "(status = 'approved' AND approved_at IS NOT NULL AND approved_at >= submitted_at)",
            name='ck_sightings_approval',
        ),
        sa.CheckConstraint('suspicious_meter BETWEEN 1 AND 10', name='ck_sightings_meter'),
    )

    op.create_index('idx_sightings_status', 'sightings', ['status'])
    op.create_index('idx_sightings_approved', 'sightings', ['approved_at'])
    op.create_index('idx_sightings_submitted', 'sightings', ['submitted_at'])


def downgrade() -> None:
    op.drop_index('idx_sightings_submitted', table_name='sightings')
    op.drop_index('idx_sightings_approved', table_name='sightings')
    op.drop_index('idx_sightings_status', table_name='sightings')
    op.drop_table('sightings')
