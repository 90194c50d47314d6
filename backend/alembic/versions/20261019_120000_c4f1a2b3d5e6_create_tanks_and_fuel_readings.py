"""create tanks and fuel_readings

Revision ID: c4f1a2b3d5e6
Revises:
Create Date: 2026-10-19 12:00:00.000000

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = 'c4f1a2b3d5e6'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'tanks',
        sa.Column('id', sa.String(length=50), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('diameter', sa.Float(), nullable=False),
        sa.Column('height', sa.Float(), nullable=False),
        sa.Column('capacity', sa.Float(), nullable=False),
        sa.Column('sensor_height', sa.Float(), nullable=False),
        sa.Column('location', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_tanks_id'), 'tanks', ['id'], unique=False)

    op.create_table(
        'fuel_readings',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('tank_id', sa.String(length=50), nullable=False),
        sa.Column('distance_to_fuel', sa.Float(), nullable=False),
        sa.Column('fuel_height', sa.Float(), nullable=False),
        sa.Column('fuel_level_liters', sa.Float(), nullable=False),
        sa.Column('fuel_level_percentage', sa.Float(), nullable=False),
        sa.Column('timestamp', sa.DateTime(), nullable=False),
        sa.Column('sequence', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['tank_id'], ['tanks.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_fuel_readings_tank_id'), 'fuel_readings', ['tank_id'], unique=False)
    op.create_index(op.f('ix_fuel_readings_timestamp'), 'fuel_readings', ['timestamp'], unique=False)
    op.create_index('ix_fuel_readings_tank_timestamp', 'fuel_readings', ['tank_id', 'timestamp'], unique=False)


def downgrade() -> None:
    op.drop_index('ix_fuel_readings_tank_timestamp', table_name='fuel_readings')
    op.drop_index(op.f('ix_fuel_readings_timestamp'), table_name='fuel_readings')
    op.drop_index(op.f('ix_fuel_readings_tank_id'), table_name='fuel_readings')
    op.drop_table('fuel_readings')
    op.drop_index(op.f('ix_tanks_id'), table_name='tanks')
    op.drop_table('tanks')
