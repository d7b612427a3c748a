"""create_ignore_rules_table

Revision ID: 3c9e1a7d5b20
Revises:
Create Date: 2026-10-19 10:12:44.318205

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from schema_config import get_schema


# revision identifiers, used by Alembic.
revision: str = '3c9e1a7d5b20'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    schema = get_schema()

    op.create_table(
        'ignore_rules',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('token', sa.String(length=255), nullable=False),
        sa.Column('type', sa.String(length=50), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('NOW()')),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'token', 'type', name='uq_ignore_rules_user_token_type'),
        schema=schema
    )

    op.create_index(
        'ix_ignore_rules_user_id',
        'ignore_rules',
        ['user_id'],
        unique=False,
        schema=schema
    )


def downgrade() -> None:
    schema = get_schema()
    op.drop_index('ix_ignore_rules_user_id', 'ignore_rules', schema=schema)
    op.drop_table('ignore_rules', schema=schema)
