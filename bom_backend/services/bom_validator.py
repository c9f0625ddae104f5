"""
Validate a proposed bill of materials against stored dependency rules.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence

from sqlalchemy.orm import Session

from ..models.dependency_rule import BomDependencyRule
from .dependency_engine import (
    DependencyAction,
    DependencyCondition,
    DependencyRuleSpec,
    Material,
    ValidationResult,
    evaluate_rules,
)

_logger = logging.getLogger("bom_validator")


def load_applicable_rules(
    db: Session,
    category: Optional[str] = None,
    system_type: Optional[str] = None,
) -> list[BomDependencyRule]:
    """
    Active rules scoped to ``category``/``system_type`` plus all global rules.

    Without any scoping argument every active rule is returned. The merged
    list is ordered by (priority, id).
    """
    scoped_q = db.query(BomDependencyRule).filter(BomDependencyRule.active == True)  # noqa: E712
    if category:
        scoped_q = scoped_q.filter(BomDependencyRule.category == category)
    if system_type:
        scoped_q = scoped_q.filter(BomDependencyRule.system_type == system_type)

    global_q = db.query(BomDependencyRule).filter(
        BomDependencyRule.active == True,  # noqa: E712
        BomDependencyRule.category.is_(None),
        BomDependencyRule.system_type.is_(None),
    )

    merged: dict[int, BomDependencyRule] = {}
    for rule in scoped_q.all():
        merged[rule.id] = rule
    for rule in global_q.all():
        merged.setdefault(rule.id, rule)
    return sorted(merged.values(), key=lambda r: (r.priority, r.id))


def to_rule_spec(rule: BomDependencyRule) -> DependencyRuleSpec:
    conditions = tuple(
        DependencyCondition.from_dict(item) for item in (rule.conditions or []) if isinstance(item, dict)
    )
    actions = tuple(
        DependencyAction.from_dict(item) for item in (rule.actions or []) if isinstance(item, dict)
    )
    return DependencyRuleSpec(
        id=rule.id,
        name=rule.name,
        conditions=conditions,
        actions=actions,
        condition_operator=rule.condition_operator or "AND",
        priority=rule.priority if rule.priority is not None else 10,
    )


def validate_materials(rules: Iterable[BomDependencyRule], materials: Sequence[Material]) -> ValidationResult:
    return evaluate_rules([to_rule_spec(rule) for rule in rules], materials)


def validate_bom(
    db: Session,
    materials: Sequence[Material],
    category: Optional[str] = None,
    system_type: Optional[str] = None,
) -> ValidationResult:
    """
    Validate ``materials`` against the rules applicable to the given scope.

    Database errors while loading rules propagate; there is no partial
    result without the rule set.
    """
    rules = load_applicable_rules(db, category=category, system_type=system_type)
    _logger.debug(
        "Validating BOM materials=%s rules=%s category=%s system_type=%s",
        len(materials),
        len(rules),
        category,
        system_type,
    )
    result = validate_materials(rules, materials)
    _logger.info(
        "BOM validation valid=%s errors=%s warnings=%s suggestions=%s",
        result.valid,
        len(result.errors),
        len(result.warnings),
        len(result.suggestions),
    )
    return result
