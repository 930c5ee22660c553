"""Add occurred_at to mistakes

The event time is separate from the row creation time. Existing rows
take their created_at, or the migration time when that is missing too.

Revision ID: e713f9a4c268
Revises: 2a8c6e0f95d3
Create Date: 2025-08-05 07:15:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from missnote.core.validators import now_timestamp
from missnote.database.migration_utils import (
    add_column_if_missing,
    create_index_if_missing,
)


# revision identifiers, used by Alembic.
revision: str = 'e713f9a4c268'
down_revision: Union[str, Sequence[str], None] = '2a8c6e0f95d3'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    add_column_if_missing('mistakes', sa.Column('occurred_at', sa.String(), nullable=True))
    op.execute(
        sa.text(
            "UPDATE mistakes "
            "SET occurred_at = COALESCE(NULLIF(created_at, ''), :now) "
            "WHERE occurred_at IS NULL OR occurred_at = ''"
        ).bindparams(now=now_timestamp())
    )
    create_index_if_missing('ix_mistakes_occurred_at', 'mistakes', ['occurred_at'])


def downgrade() -> None:
    op.drop_index('ix_mistakes_occurred_at', table_name='mistakes')
    with op.batch_alter_table('mistakes', schema=None) as batch_op:
        batch_op.drop_column('occurred_at')
