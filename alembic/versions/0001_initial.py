"""initial teamdesk schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-18 00:00:00
"""

from pathlib import Path
from typing import Sequence, Union

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _sql_path() -> Path:
    return Path(__file__).resolve().parents[2] / "sql" / "001_initial.sql"


def upgrade() -> None:
    sql_blob = _sql_path().read_text(encoding="utf-8")
    bind = op.get_bind()
    statements = [stmt.strip() for stmt in sql_blob.split(";") if stmt.strip()]
    for statement in statements:
        bind.exec_driver_sql(statement)


def downgrade() -> None:
    bind = op.get_bind()
    drop_statements = [
        "DROP TABLE IF EXISTS activity_logs CASCADE",
        "DROP TABLE IF EXISTS suggestions CASCADE",
        "DROP TABLE IF EXISTS documentation_items CASCADE",
        "DROP TABLE IF EXISTS announcements CASCADE",
        "DROP TABLE IF EXISTS tasks CASCADE",
        "DROP TABLE IF EXISTS domains CASCADE",
        "DROP TABLE IF EXISTS users CASCADE",
    ]
    for statement in drop_statements:
        bind.exec_driver_sql(statement)
