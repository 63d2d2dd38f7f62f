"""create jot_kv table for store storage

Revision ID: 001
Revises:
Create Date: 2026-10-19 09:12:00.000000
"""
from typing import Sequence, Union

from alembic import op


revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # One row per "<store name>:<key>" (data, schema, options, audit_log)
    op.execute("""
        CREATE TABLE jot_kv (
            key TEXT PRIMARY KEY,
            value JSONB NOT NULL,
            updated_at TIMESTAMPTZ DEFAULT now()
        );
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS jot_kv;")
