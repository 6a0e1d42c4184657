"""Capture lines table.

Revision ID: 001_capture_lines
Revises: None
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_capture_lines"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "capture_lines",
        sa.Column("code", sa.String(27), primary_key=True),
        sa.Column("entity_code", sa.String(2), nullable=False),
        sa.Column("concept_code", sa.String(2), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("description", sa.String(255), nullable=True),
        sa.Column("external_reference", sa.String(64), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="available"),
        sa.Column("issued_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("expiry_date", sa.Date, nullable=False),
        sa.Column("used_by", sa.String(255), nullable=True),
        sa.Column("used_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("payment_reference", sa.String(128), nullable=True),
    )
    op.create_index("ix_capture_lines_status", "capture_lines", ["status"])
    op.create_index("ix_capture_lines_expiry_date", "capture_lines", ["expiry_date"])


def downgrade() -> None:
    op.drop_index("ix_capture_lines_expiry_date", table_name="capture_lines")
    op.drop_index("ix_capture_lines_status", table_name="capture_lines")
    op.drop_table("capture_lines")
