"""
API endpoints for BOM dependency rules and BOM validation.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Response
from sqlalchemy.orm import Session

from ...core.db import get_db
from ...core.errors import RuleNotFoundError
from ...core.pagination import clamp_limit, clamp_page_size, set_pagination_headers
from ...models.dependency_rule import BomDependencyRule
from ...models.dependency_rule_audit import BomDependencyRuleAudit
from ...schemas.dependency_rule import RuleAuditOut, RuleCreate, RuleOut, RuleUpdate, rule_record
from ...schemas.validation import BomValidationRequest, ValidationResultOut
from ...services import dependency_rules as rule_service
from ...services.bom_validator import validate_bom
from ...services.dependency_engine import Material


router = APIRouter(prefix="/api/v1/bom-templates/dependencies", tags=["bom-dependencies"])

RULE_NOT_FOUND = "Reguła nie znaleziona"


def _to_rule_out(rule: BomDependencyRule) -> dict:
    payload = RuleOut(
        id=rule.id,
        name=rule.name,
        description=rule.description,
        conditions=list(rule.conditions or []),
        condition_operator=rule.condition_operator,
        actions=list(rule.actions or []),
        category=rule.category,
        system_type=rule.system_type,
        priority=rule.priority,
        active=rule.active,
        created_at=rule.created_at,
        updated_at=rule.updated_at,
    )
    return payload.model_dump(by_alias=True, mode="json")


def _to_audit_out(row: BomDependencyRuleAudit) -> dict:
    payload = RuleAuditOut(
        id=row.id,
        rule_id=row.rule_id,
        action=row.action,
        actor=row.actor,
        changes=row.changes or {},
        before=row.before,
        after=row.after,
        created_at=row.created_at,
    )
    return payload.model_dump(by_alias=True, mode="json")


def _not_found() -> HTTPException:
    return HTTPException(status_code=404, detail=RULE_NOT_FOUND)


@router.get("", response_model=dict)
def list_rules(
    response: Response,
    category: Optional[str] = Query(None),
    system_type: Optional[str] = Query(None, alias="systemType"),
    active: Optional[bool] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1),
    db: Session = Depends(get_db),
) -> dict:
    page_size = clamp_page_size(page_size)
    items, total = rule_service.list_rules(
        db,
        category=category,
        system_type=system_type,
        active=active,
        page=page,
        page_size=page_size,
    )
    set_pagination_headers(response, total=total, page=page, page_size=page_size)
    return {"success": True, "data": [_to_rule_out(r) for r in items]}


@router.post("/validate", response_model=dict)
def validate(payload: BomValidationRequest, db: Session = Depends(get_db)) -> dict:
    materials = [Material(category=m.category, quantity=m.quantity, ports=m.ports) for m in payload.materials]
    result = validate_bom(db, materials, category=payload.category, system_type=payload.system_type)
    data = ValidationResultOut(**result.to_dict()).model_dump()
    return {"success": True, "data": data, "valid": not result.errors}


@router.get("/{rule_id}", response_model=dict)
def get_rule(rule_id: int, db: Session = Depends(get_db)) -> dict:
    try:
        rule = rule_service.get_rule(db, rule_id)
    except RuleNotFoundError as exc:
        raise _not_found() from exc
    return {"success": True, "data": _to_rule_out(rule)}


@router.get("/{rule_id}/audit", response_model=dict)
def get_rule_audit(
    rule_id: int,
    limit: int = Query(50, ge=1),
    db: Session = Depends(get_db),
) -> dict:
    try:
        rows = rule_service.list_rule_audits(db, rule_id, limit=clamp_limit(limit))
    except RuleNotFoundError as exc:
        raise _not_found() from exc
    return {
        "success": True,
        "data": [_to_audit_out(row) for row in rows],
    }


@router.post("", response_model=dict, status_code=201)
def create_rule(
    payload: RuleCreate,
    db: Session = Depends(get_db),
    x_user_name: Optional[str] = Header(None, alias="X-User-Name"),
) -> dict:
    rule = rule_service.create_rule(db, rule_record(payload), actor=x_user_name)
    return {"success": True, "data": _to_rule_out(rule)}


@router.put("/{rule_id}", response_model=dict)
def update_rule(
    rule_id: int,
    payload: RuleUpdate,
    db: Session = Depends(get_db),
    x_user_name: Optional[str] = Header(None, alias="X-User-Name"),
) -> dict:
    try:
        rule = rule_service.update_rule(db, rule_id, rule_record(payload, exclude_unset=True), actor=x_user_name)
    except RuleNotFoundError as exc:
        raise _not_found() from exc
    return {"success": True, "data": _to_rule_out(rule)}


@router.delete("/{rule_id}", response_model=dict)
def delete_rule(
    rule_id: int,
    db: Session = Depends(get_db),
    x_user_name: Optional[str] = Header(None, alias="X-User-Name"),
) -> dict:
    try:
        rule_service.delete_rule(db, rule_id, actor=x_user_name)
    except RuleNotFoundError as exc:
        raise _not_found() from exc
    return {"success": True, "message": "Reguła usunięta"}
