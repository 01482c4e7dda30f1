"""users, units, counts, locks

Revision ID: a1b2c3boletas01
Revises:
Create Date: 2026-02-02

"""

from alembic import op
import sqlalchemy as sa


revision = 'a1b2c3boletas01'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'units',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column('area_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
    )
    op.create_index('ix_units_area_id', 'units', ['area_id'], unique=False)

    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('username', sa.String(length=120), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('unit_id', sa.Integer(), sa.ForeignKey('units.id'), nullable=True),
    )
    op.create_index('ix_users_username', 'users', ['username'], unique=True)
    op.create_index('ix_users_unit_id', 'users', ['unit_id'], unique=False)

    op.create_table(
        'counts',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('unit_id', sa.Integer(), nullable=False),
        sa.Column('date', sa.String(length=10), nullable=False),
        sa.Column('manual', sa.Integer(), nullable=False),
        sa.Column('electronic', sa.Integer(), nullable=False),
        sa.UniqueConstraint('unit_id', 'date', name='uq_counts_unit_date'),
    )
    op.create_index('ix_counts_unit_id', 'counts', ['unit_id'], unique=False)
    op.create_index('ix_counts_date', 'counts', ['date'], unique=False)

    op.create_table(
        'locks',
        sa.Column('date', sa.String(length=10), primary_key=True),
    )


def downgrade():
    op.drop_table('locks')
    op.drop_index('ix_counts_date', table_name='counts')
    op.drop_index('ix_counts_unit_id', table_name='counts')
    op.drop_table('counts')
    op.drop_index('ix_users_unit_id', table_name='users')
    op.drop_index('ix_users_username', table_name='users')
    op.drop_table('users')
    op.drop_index('ix_units_area_id', table_name='units')
    op.drop_table('units')
