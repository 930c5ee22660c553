"""Add importance to mistakes

Revision ID: b6f04d18e37a
Revises: 9d27b3e5a1c4
Create Date: 2025-07-08 18:30:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from missnote.database.configs.defaults import DEFAULT_IMPORTANCE
from missnote.database.migration_utils import add_column_if_missing


# revision identifiers, used by Alembic.
revision: str = 'b6f04d18e37a'
down_revision: Union[str, Sequence[str], None] = '9d27b3e5a1c4'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Add importance, defaulting existing rows to mid."""
    add_column_if_missing(
        'mistakes',
        sa.Column(
            'importance',
            sa.Integer(),
            nullable=False,
            server_default=str(DEFAULT_IMPORTANCE),
        ),
    )
    op.execute(
        sa.text(
            "UPDATE mistakes SET importance = :importance WHERE importance IS NULL"
        ).bindparams(importance=DEFAULT_IMPORTANCE)
    )


def downgrade() -> None:
    with op.batch_alter_table('mistakes', schema=None) as batch_op:
        batch_op.drop_column('importance')
