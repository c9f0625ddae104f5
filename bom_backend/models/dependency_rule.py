"""
ORM model for BOM dependency rules.

A rule holds a list of conditions over material categories and a list of
actions that are applied when the conditions hold. Both lists are stored as
JSON documents in the shape the admin UI sends them (camelCase keys).
Rules are never deleted; deactivation keeps the audit trail intact.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from . import Base


class BomDependencyRule(Base):
    __tablename__ = "bom_dependency_rules"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    conditions: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)
    condition_operator: Mapped[str] = mapped_column(String(10), nullable=False, default="AND")
    actions: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)
    # Scoping; both NULL makes the rule global.
    category: Mapped[str | None] = mapped_column(String(50), nullable=True, index=True)
    system_type: Mapped[str | None] = mapped_column(String(50), nullable=True, index=True)
    priority: Mapped[int] = mapped_column(Integer, nullable=False, default=10)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow)
