"""
Dependency rule administration: CRUD, soft delete and audit trail.
"""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..core.errors import RuleNotFoundError
from ..core.pagination import page_offset
from ..models.dependency_rule import BomDependencyRule
from ..models.dependency_rule_audit import BomDependencyRuleAudit

_logger = logging.getLogger("dependency_rules")

RULE_FIELDS = (
    "name",
    "description",
    "conditions",
    "condition_operator",
    "actions",
    "category",
    "system_type",
    "priority",
    "active",
)
NULLABLE_FIELDS = frozenset({"description", "category", "system_type"})
DEFAULT_PRIORITY = 10


def rule_snapshot(rule: BomDependencyRule) -> dict:
    return {key: getattr(rule, key) for key in RULE_FIELDS}


def _diff(before: dict, after: dict) -> dict:
    changes = {}
    for key, before_val in before.items():
        after_val = after.get(key)
        if before_val != after_val:
            changes[key] = {"from": before_val, "to": after_val}
    return changes


def _record_audit(
    db: Session,
    rule: BomDependencyRule,
    action: str,
    *,
    actor: Optional[str],
    before: Optional[dict],
    after: Optional[dict],
    changes: dict,
) -> None:
    db.add(
        BomDependencyRuleAudit(
            rule_id=rule.id,
            action=action,
            actor=actor,
            changes=changes,
            before=before,
            after=after,
        )
    )


def list_rules(
    db: Session,
    *,
    category: Optional[str] = None,
    system_type: Optional[str] = None,
    active: Optional[bool] = None,
    page: int = 1,
    page_size: int = 50,
) -> tuple[list[BomDependencyRule], int]:
    query = db.query(BomDependencyRule)
    if category:
        query = query.filter(BomDependencyRule.category == category)
    if system_type:
        query = query.filter(BomDependencyRule.system_type == system_type)
    if active is not None:
        query = query.filter(BomDependencyRule.active == active)
    total = query.count()
    items = (
        query.order_by(BomDependencyRule.priority.asc(), BomDependencyRule.name.asc(), BomDependencyRule.id.asc())
        .offset(page_offset(page, page_size))
        .limit(page_size)
        .all()
    )
    return items, total


def get_rule(db: Session, rule_id: int) -> BomDependencyRule:
    rule = db.get(BomDependencyRule, rule_id)
    if rule is None:
        raise RuleNotFoundError(rule_id)
    return rule


def create_rule(db: Session, data: dict, *, actor: Optional[str] = None) -> BomDependencyRule:
    priority = data.get("priority")
    active = data.get("active")
    rule = BomDependencyRule(
        name=data["name"].strip(),
        description=data.get("description"),
        conditions=list(data.get("conditions") or []),
        condition_operator=data.get("condition_operator") or "AND",
        actions=list(data.get("actions") or []),
        category=data.get("category"),
        system_type=data.get("system_type"),
        priority=priority if priority is not None else DEFAULT_PRIORITY,
        active=active if active is not None else True,
    )
    db.add(rule)
    db.flush()
    _record_audit(db, rule, "create", actor=actor, before=None, after=rule_snapshot(rule), changes={})
    db.commit()
    db.refresh(rule)
    _logger.info("Dependency rule created id=%s name=%s actor=%s", rule.id, rule.name, actor)
    return rule


def update_rule(db: Session, rule_id: int, updates: dict, *, actor: Optional[str] = None) -> BomDependencyRule:
    rule = get_rule(db, rule_id)
    before = rule_snapshot(rule)
    for key in RULE_FIELDS:
        if key not in updates:
            continue
        value = updates[key]
        if value is None and key not in NULLABLE_FIELDS:
            continue
        setattr(rule, key, value)
    db.add(rule)
    db.flush()
    after = rule_snapshot(rule)
    changes = _diff(before, after)
    if changes:
        _record_audit(db, rule, "update", actor=actor, before=before, after=after, changes=changes)
    db.commit()
    db.refresh(rule)
    if changes:
        _logger.info("Dependency rule updated id=%s fields=%s actor=%s", rule.id, ",".join(sorted(changes)), actor)
    return rule


def delete_rule(db: Session, rule_id: int, *, actor: Optional[str] = None) -> BomDependencyRule:
    """Deactivate a rule; rows are kept so the audit trail stays complete."""
    rule = get_rule(db, rule_id)
    before = rule_snapshot(rule)
    rule.active = False
    db.add(rule)
    db.flush()
    after = rule_snapshot(rule)
    _record_audit(db, rule, "delete", actor=actor, before=before, after=after, changes=_diff(before, after))
    db.commit()
    db.refresh(rule)
    _logger.info("Dependency rule deactivated id=%s actor=%s", rule.id, actor)
    return rule


def list_rule_audits(db: Session, rule_id: int, *, limit: int = 50) -> list[BomDependencyRuleAudit]:
    get_rule(db, rule_id)
    return (
        db.query(BomDependencyRuleAudit)
        .filter(BomDependencyRuleAudit.rule_id == rule_id)
        .order_by(BomDependencyRuleAudit.created_at.desc(), BomDependencyRuleAudit.id.desc())
        .limit(limit)
        .all()
    )
