"""
Evaluation core for BOM dependency rules.

A rule fires when its conditions hold for the proposed materials list; each
of its actions then checks one requirement on a target material category.
Failed actions are routed by action type: ``required`` failures are errors
and make the BOM invalid, ``suggested`` failures become suggestions and
everything else (quantity and port shortfalls) becomes a warning.

Everything in this module is pure: no database access and no shared state.
Category codes are compared by exact, case-sensitive equality.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field as dataclass_field
from typing import Any, Iterable, Mapping, Optional, Sequence, Union

from .formula import Number, evaluate_formula, format_number

_logger = logging.getLogger("bom_rules")

# Action types routed to errors / suggestions; all others become warnings.
ERROR_ACTIONS = frozenset({"required"})
SUGGESTION_ACTIONS = frozenset({"suggested"})


@dataclass(frozen=True)
class Material:
    category: str
    quantity: Number = 0
    ports: Optional[Number] = None


@dataclass(frozen=True)
class DependencyCondition:
    material_category: str
    field: str
    operator: str
    value: Any = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DependencyCondition":
        return cls(
            material_category=str(_pick(data, "materialCategory", "material_category") or ""),
            field=str(data.get("field") or ""),
            operator=str(data.get("operator") or ""),
            value=data.get("value"),
        )


@dataclass(frozen=True)
class DependencyAction:
    target_material_category: str
    field: str
    formula: str = ""
    message: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DependencyAction":
        return cls(
            target_material_category=str(_pick(data, "targetMaterialCategory", "target_material_category") or ""),
            field=str(data.get("field") or ""),
            formula=str(data.get("formula") or ""),
            message=data.get("message"),
        )


@dataclass(frozen=True)
class DependencyRuleSpec:
    """Read-only view of a rule used during one validation call."""

    id: Optional[int]
    name: str
    conditions: tuple[DependencyCondition, ...]
    actions: tuple[DependencyAction, ...]
    condition_operator: str = "AND"
    priority: int = 10


@dataclass(frozen=True)
class ActionOutcome:
    # success=True means the requirement is met and nothing is reported.
    success: bool
    message: str = ""


@dataclass
class ValidationResult:
    valid: bool = True
    errors: list[str] = dataclass_field(default_factory=list)
    warnings: list[str] = dataclass_field(default_factory=list)
    suggestions: list[str] = dataclass_field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "suggestions": list(self.suggestions),
        }


def _pick(data: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return None


def _as_number(value: Any) -> Optional[Number]:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def find_material(materials: Sequence[Material], category: str) -> Optional[Material]:
    for material in materials:
        if material.category == category:
            return material
    return None


def build_context(materials: Iterable[Material]) -> dict[str, Union[Number, bool]]:
    """
    Flatten the materials list into formula variables.

    ``CAMERA`` with quantity 4 and 8 ports yields ``camera=4``,
    ``camera_exists=True`` and ``camera_ports=8``. A later material with the
    same category overwrites an earlier one.
    """
    context: dict[str, Union[Number, bool]] = {}
    for material in materials:
        key = material.category.lower()
        context[key] = material.quantity
        context[f"{key}_exists"] = material.quantity > 0
        if material.ports:
            context[f"{key}_ports"] = material.ports
    return context


def _compare(quantity: Number, operator: str, expected: Number) -> bool:
    if operator == ">":
        return quantity > expected
    if operator == ">=":
        return quantity >= expected
    if operator == "=":
        return quantity == expected
    if operator == "<":
        return quantity < expected
    if operator == "<=":
        return quantity <= expected
    return False


def evaluate_condition(condition: DependencyCondition, materials: Sequence[Material]) -> bool:
    material = find_material(materials, condition.material_category)

    if condition.field == "exists":
        present = material is not None and material.quantity > 0
        if condition.operator == "exists":
            return present
        return material is None or material.quantity == 0

    if condition.field == "quantity" and material is not None:
        expected = _as_number(condition.value)
        if expected is None:
            return False
        return _compare(material.quantity, condition.operator, expected)

    return False


def evaluate_conditions(rule: DependencyRuleSpec, materials: Sequence[Material]) -> bool:
    results = [evaluate_condition(condition, materials) for condition in rule.conditions]
    if rule.condition_operator == "AND":
        return all(results)
    return any(results)


def _render_message(template: Optional[str], result: Number) -> Optional[str]:
    if not template:
        return None
    return template.replace("{result}", format_number(result))


def execute_action(
    action: DependencyAction,
    materials: Sequence[Material],
    context: Mapping[str, object],
) -> ActionOutcome:
    target = find_material(materials, action.target_material_category)
    result = evaluate_formula(action.formula, context)
    category = action.target_material_category
    custom = _render_message(action.message, result)

    if action.field == "required":
        if target is None or target.quantity == 0:
            return ActionOutcome(False, custom or f"{category} jest wymagany")
    elif action.field == "minQuantity":
        if target is None or target.quantity < result:
            return ActionOutcome(False, custom or f"{category} wymaga minimum {format_number(result)} sztuk")
    elif action.field == "minPorts":
        if target is None or (target.ports or 0) < result:
            return ActionOutcome(False, custom or f"{category} wymaga minimum {format_number(result)} portów")
    elif action.field == "suggested":
        if target is None or target.quantity == 0:
            return ActionOutcome(False, custom or f"Zalecane: {category}")

    return ActionOutcome(True)


def _rule_sort_key(rule: DependencyRuleSpec) -> tuple[int, int]:
    return (rule.priority, rule.id if rule.id is not None else 0)


def evaluate_rules(rules: Iterable[DependencyRuleSpec], materials: Sequence[Material]) -> ValidationResult:
    """
    Run every rule against ``materials`` and collect the failed actions.

    All matching rules are evaluated; priority (then id) only decides the
    order of messages within each list.
    """
    result = ValidationResult()
    context = build_context(materials)

    for rule in sorted(rules, key=_rule_sort_key):
        if not evaluate_conditions(rule, materials):
            continue
        for action in rule.actions:
            outcome = execute_action(action, materials, context)
            if outcome.success:
                continue
            if action.field in ERROR_ACTIONS:
                result.errors.append(outcome.message)
                result.valid = False
            elif action.field in SUGGESTION_ACTIONS:
                result.suggestions.append(outcome.message)
            else:
                result.warnings.append(outcome.message)
        _logger.debug("Rule fired id=%s name=%s", rule.id, rule.name)

    return result
