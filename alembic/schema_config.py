"""
Schema configuration helper for Alembic migrations.

Migrations read the target schema from settings so a test run can use an
isolated schema (DB_SCHEMA=proofline_test) against the same database.

Usage in migrations:
    from schema_config import get_schema

    def upgrade():
        schema = get_schema()
        op.create_table('ignore_rules', ..., schema=schema)
"""
from proofline.config import settings


def get_schema() -> str:
    """
    Get the database schema name for migrations.

    Returns:
        str: Value of the DB_SCHEMA setting (default 'proofline')
    """
    return settings.DB_SCHEMA
