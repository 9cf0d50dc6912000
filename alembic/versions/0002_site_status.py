"""site status flags

Revision ID: 0002_site_status
Revises: 0001_initial
Create Date: 2026-10-18 00:00:00
"""

from pathlib import Path
from typing import Sequence, Union

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0002_site_status"
down_revision: Union[str, None] = "0001_initial"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _sql_path() -> Path:
    return Path(__file__).resolve().parents[2] / "sql" / "002_site_status.sql"


def upgrade() -> None:
    sql_blob = _sql_path().read_text(encoding="utf-8")
    bind = op.get_bind()
    statements = [stmt.strip() for stmt in sql_blob.split(";") if stmt.strip()]
    for statement in statements:
        bind.exec_driver_sql(statement)


def downgrade() -> None:
    op.get_bind().exec_driver_sql("DROP TABLE IF EXISTS site_status CASCADE")
