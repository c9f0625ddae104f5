"""create bom dependency rule audits table

Revision ID: 20261019_02
Revises: 20261019_01
Create Date: 2026-10-19
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261019_02"
down_revision = "20261019_01"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "bom_dependency_rule_audits",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("rule_id", sa.Integer(), nullable=False),
        sa.Column("action", sa.String(length=16), nullable=False),
        sa.Column("actor", sa.String(length=128), nullable=True),
        sa.Column("changes", sa.JSON(), nullable=False),
        sa.Column("before", sa.JSON(), nullable=True),
        sa.Column("after", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_bom_dependency_rule_audits_rule_id", "bom_dependency_rule_audits", ["rule_id"])


def downgrade() -> None:
    op.drop_index("ix_bom_dependency_rule_audits_rule_id", table_name="bom_dependency_rule_audits")
    op.drop_table("bom_dependency_rule_audits")
