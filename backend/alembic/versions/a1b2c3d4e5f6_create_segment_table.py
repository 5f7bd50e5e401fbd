"""create_segment_table

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2025-07-15 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
import sqlmodel


# revision identifiers, used by Alembic.
revision: str = 'a1b2c3d4e5f6'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table('segment',
        sa.Column('id', sqlmodel.sql.sqltypes.GUID(), nullable=False),
        sa.Column('date', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('start_time', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('end_time', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('machine_name', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('segment_type', sa.Enum('UPTIME', 'DOWNTIME', 'IDLE', 'UNSET', name='segmenttype'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_segment_date', 'segment', ['date'])
    op.create_index('ix_segment_machine_name', 'segment', ['machine_name'])
    op.create_index('ix_segment_segment_type', 'segment', ['segment_type'])
    op.create_index('ix_segment_machine_name_date', 'segment', ['machine_name', 'date'])


def downgrade() -> None:
    op.drop_index('ix_segment_machine_name_date', table_name='segment')
    op.drop_index('ix_segment_segment_type', table_name='segment')
    op.drop_index('ix_segment_machine_name', table_name='segment')
    op.drop_index('ix_segment_date', table_name='segment')
    op.drop_table('segment')
    sa.Enum(name='segmenttype').drop(op.get_bind(), checkfirst=True)
