"""create users and catalog entries

Revision ID: 3f9c2a7d1b40
Revises:
Create Date: 2026-10-12 09:00:00.000000+00:00

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '3f9c2a7d1b40'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('login', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('display_name', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('password_changed_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('login'),
    )
    op.create_index('ix_users_id', 'users', ['id'], unique=False)

    op.create_table(
        'catalog_entries',
        sa.Column('part_code', sa.String(length=255), nullable=False),
        sa.Column('directory_path', sa.Text(), nullable=False),
        sa.Column('last_indexed_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('part_code'),
    )


def downgrade() -> None:
    op.drop_table('catalog_entries')
    op.drop_index('ix_users_id', table_name='users')
    op.drop_table('users')
