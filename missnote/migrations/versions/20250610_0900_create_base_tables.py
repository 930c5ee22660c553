"""Create base tables

Creates mistakes, subjects and mistake_photos in their first shape when
they are absent. Databases from earlier app versions already have them.

Revision ID: 4c1e8a2f7b90
Revises:
Create Date: 2025-06-10 09:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from missnote.database.migration_utils import create_index_if_missing, table_names


# revision identifiers, used by Alembic.
revision: str = '4c1e8a2f7b90'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create any missing base table."""
    existing = table_names()

    if 'mistakes' not in existing:
        op.create_table(
            'mistakes',
            sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column('title', sa.Text(), nullable=False),
            sa.Column('body', sa.Text(), nullable=False),
        )

    if 'subjects' not in existing:
        op.create_table(
            'subjects',
            sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column('name', sa.String(), nullable=False, unique=True),
            sa.Column('sort_order', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('is_active', sa.Boolean(), nullable=False, server_default='1'),
        )

    if 'mistake_photos' not in existing:
        op.create_table(
            'mistake_photos',
            sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column(
                'mistake_id',
                sa.Integer(),
                sa.ForeignKey('mistakes.id', ondelete='CASCADE'),
                nullable=False,
            ),
            sa.Column('uri', sa.Text(), nullable=False),
            sa.Column('created_at', sa.String(), nullable=False),
        )

    create_index_if_missing(
        'ix_mistake_photos_mistake_id', 'mistake_photos', ['mistake_id']
    )


def downgrade() -> None:
    op.drop_table('mistake_photos')
    op.drop_table('subjects')
    op.drop_table('mistakes')
