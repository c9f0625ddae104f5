"""
SQLAlchemy model base class for the BOM dependency rules backend.

This package defines ORM models for dependency rules and their audit
trail. All models should inherit from the declarative `Base` defined here.
"""

from __future__ import annotations

from sqlalchemy import JSON
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.dialects.postgresql import JSONB


@compiles(JSONB, "sqlite")
def _compile_jsonb_sqlite(type_, compiler, **kw):
    return compiler.process(JSON(), **kw)


from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models."""

    pass


from .dependency_rule import BomDependencyRule  # noqa: E402,F401
from .dependency_rule_audit import BomDependencyRuleAudit  # noqa: E402,F401

__all__ = [
    "Base",
    "BomDependencyRule",
    "BomDependencyRuleAudit",
]
