"""Add created_at to mistakes

Revision ID: 9d27b3e5a1c4
Revises: 4c1e8a2f7b90
Create Date: 2025-06-24 12:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from missnote.core.validators import now_timestamp
from missnote.database.migration_utils import add_column_if_missing


# revision identifiers, used by Alembic.
revision: str = '9d27b3e5a1c4'
down_revision: Union[str, Sequence[str], None] = '4c1e8a2f7b90'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Add created_at; rows without one get the migration time."""
    add_column_if_missing('mistakes', sa.Column('created_at', sa.String(), nullable=True))
    op.execute(
        sa.text(
            "UPDATE mistakes SET created_at = :now "
            "WHERE created_at IS NULL OR created_at = ''"
        ).bindparams(now=now_timestamp())
    )


def downgrade() -> None:
    with op.batch_alter_table('mistakes', schema=None) as batch_op:
        batch_op.drop_column('created_at')
