"""create activities and trackpoints

Revision ID: 4f1c2d9e8a10
Revises:
Create Date: 2025-11-26 00:25:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql
from geoalchemy2 import Geography


# revision identifiers, used by Alembic.
revision: str = '4f1c2d9e8a10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute('CREATE EXTENSION IF NOT EXISTS postgis')

    op.create_table(
        'activities',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('started_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('sport', sa.String(), nullable=True),
        sa.Column('duration_sec', sa.Integer(), nullable=True),
        sa.Column('distance_m', sa.Integer(), nullable=True),
        sa.Column('avg_hr', sa.Integer(), nullable=True),
        sa.Column('max_hr', sa.Integer(), nullable=True),
        sa.Column('bounds', Geography(geometry_type='POLYGON', srid=4326, spatial_index=False), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_activities_started_at', 'activities', ['started_at'])
    op.create_index('ix_activities_bounds', 'activities', ['bounds'], postgresql_using='gist')

    op.create_table(
        'trackpoints',
        sa.Column('id', sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column('activity_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('t', sa.DateTime(timezone=True), nullable=False),
        sa.Column('ele_m', sa.Float(), nullable=True),
        sa.Column('hr', sa.Integer(), nullable=True),
        sa.Column('speed_mps', sa.Float(), nullable=True),
        sa.Column('geom', Geography(geometry_type='POINT', srid=4326, spatial_index=False), nullable=False),
        sa.ForeignKeyConstraint(['activity_id'], ['activities.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_trackpoints_activity_id_t', 'trackpoints', ['activity_id', 't'])


def downgrade() -> None:
    op.drop_index('ix_trackpoints_activity_id_t', table_name='trackpoints')
    op.drop_table('trackpoints')
    op.drop_index('ix_activities_bounds', table_name='activities')
    op.drop_index('ix_activities_started_at', table_name='activities')
    op.drop_table('activities')
