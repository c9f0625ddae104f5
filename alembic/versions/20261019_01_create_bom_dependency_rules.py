"""create bom dependency rules table

Revision ID: 20261019_01
Revises: 
Create Date: 2026-10-19
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision = "20261019_01"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    json_type = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")
    op.create_table(
        "bom_dependency_rules",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("conditions", json_type, nullable=False),
        sa.Column("condition_operator", sa.String(length=10), nullable=False, server_default="AND"),
        sa.Column("actions", json_type, nullable=False),
        sa.Column("category", sa.String(length=50), nullable=True),
        sa.Column("system_type", sa.String(length=50), nullable=True),
        sa.Column("priority", sa.Integer(), nullable=False, server_default=sa.text("10")),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_bom_dependency_rules_category", "bom_dependency_rules", ["category"])
    op.create_index("ix_bom_dependency_rules_system_type", "bom_dependency_rules", ["system_type"])
    op.create_index("ix_bom_dependency_rules_active", "bom_dependency_rules", ["active"])


def downgrade() -> None:
    op.drop_index("ix_bom_dependency_rules_active", table_name="bom_dependency_rules")
    op.drop_index("ix_bom_dependency_rules_system_type", table_name="bom_dependency_rules")
    op.drop_index("ix_bom_dependency_rules_category", table_name="bom_dependency_rules")
    op.drop_table("bom_dependency_rules")
