"""Add subject to mistakes

Revision ID: 2a8c6e0f95d3
Revises: b6f04d18e37a
Create Date: 2025-07-22 21:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from missnote.database.configs.defaults import DEFAULT_SUBJECT
from missnote.database.migration_utils import add_column_if_missing


# revision identifiers, used by Alembic.
revision: str = '2a8c6e0f95d3'
down_revision: Union[str, Sequence[str], None] = 'b6f04d18e37a'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Add subject; rows without one get the default subject."""
    add_column_if_missing(
        'mistakes',
        sa.Column('subject', sa.String(), nullable=False, server_default=DEFAULT_SUBJECT),
    )
    op.execute(
        sa.text(
            "UPDATE mistakes SET subject = :subject "
            "WHERE subject IS NULL OR subject = ''"
        ).bindparams(subject=DEFAULT_SUBJECT)
    )


def downgrade() -> None:
    with op.batch_alter_table('mistakes', schema=None) as batch_op:
        batch_op.drop_column('subject')
