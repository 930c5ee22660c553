"""Add updated_at to mistakes

Revision ID: 5fb2d7c08e1a
Revises: e713f9a4c268
Create Date: 2025-08-19 22:30:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from missnote.core.validators import now_timestamp
from missnote.database.migration_utils import add_column_if_missing


# revision identifiers, used by Alembic.
revision: str = '5fb2d7c08e1a'
down_revision: Union[str, Sequence[str], None] = 'e713f9a4c268'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Add updated_at, backfilled from created_at or the migration time."""
    add_column_if_missing('mistakes', sa.Column('updated_at', sa.String(), nullable=True))
    op.execute(
        sa.text(
            "UPDATE mistakes "
            "SET updated_at = COALESCE(NULLIF(created_at, ''), :now) "
            "WHERE updated_at IS NULL OR updated_at = ''"
        ).bindparams(now=now_timestamp())
    )


def downgrade() -> None:
    with op.batch_alter_table('mistakes', schema=None) as batch_op:
        batch_op.drop_column('updated_at')
