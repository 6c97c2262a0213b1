"""Policy tables: banned_ips and system_settings.

Revision ID: 001_policy_tables
Revises:
Create Date: 2026-10-19

banned_ips holds one row per banned requester IP. system_settings holds
keyed operational documents; the "store_config" row carries is_global_open.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001_policy_tables'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'banned_ips',
        sa.Column('ip', sa.String(45), primary_key=True),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column(
            'banned_at', sa.DateTime(timezone=True), nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_table(
        'system_settings',
        sa.Column('key', sa.String(64), primary_key=True),
        sa.Column(
            'is_global_open', sa.Boolean(), nullable=False,
            server_default=sa.true(),
        ),
        sa.Column(
            'updated_at', sa.DateTime(timezone=True), nullable=False,
            server_default=sa.func.now(),
        ),
    )


def downgrade() -> None:
    op.drop_table('system_settings')
    op.drop_table('banned_ips')
