"""
Pydantic schemas for BOM dependency rules.

Field names on the wire are camelCase (``conditionOperator``,
``materialCategory``...) to match the rule administration UI; snake_case
names are accepted on input as well.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator
from pydantic.alias_generators import to_camel

from ..services.formula import FormulaError, parse_formula


# Canonical material category token, e.g. "CAMERA" or "NVR".
CategoryCode = Annotated[str, StringConstraints(pattern=r"^[A-Z0-9][A-Z0-9_]*$", max_length=50)]

ConditionField = Literal["quantity", "exists"]
ConditionOperatorSymbol = Literal[">", ">=", "=", "<", "<=", "exists"]
ActionField = Literal["minQuantity", "minPorts", "required", "suggested"]
ConditionOperator = Literal["AND", "OR"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DependencyConditionIn(CamelModel):
    material_category: CategoryCode
    field: ConditionField
    operator: ConditionOperatorSymbol
    value: Union[bool, int, float] = 0


class DependencyActionIn(CamelModel):
    target_material_category: CategoryCode
    field: ActionField
    formula: str = Field(default="1", max_length=500)
    message: Optional[str] = None

    @field_validator("formula")
    @classmethod
    def _formula_parses(cls, value: str) -> str:
        try:
            parse_formula(value)
        except FormulaError as exc:
            raise ValueError(f"invalid formula: {exc}") from exc
        return value


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


class RuleBase(CamelModel):
    name: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    conditions: List[DependencyConditionIn]
    condition_operator: ConditionOperator = "AND"
    actions: List[DependencyActionIn]
    category: Optional[str] = Field(default=None, max_length=50)
    system_type: Optional[str] = Field(default=None, max_length=50)
    priority: int = 10
    active: bool = True

    @field_validator("category", "system_type")
    @classmethod
    def _scope_blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        return _blank_to_none(value)


class RuleCreate(RuleBase):
    pass


class RuleUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    conditions: Optional[List[DependencyConditionIn]] = None
    condition_operator: Optional[ConditionOperator] = None
    actions: Optional[List[DependencyActionIn]] = None
    category: Optional[str] = Field(default=None, max_length=50)
    system_type: Optional[str] = Field(default=None, max_length=50)
    priority: Optional[int] = None
    active: Optional[bool] = None

    @field_validator("category", "system_type")
    @classmethod
    def _scope_blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        return _blank_to_none(value)


class RuleOut(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    conditions: List[dict]
    condition_operator: str
    actions: List[dict]
    category: Optional[str] = None
    system_type: Optional[str] = None
    priority: int
    active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class RuleAuditOut(CamelModel):
    id: int
    rule_id: int
    action: str
    actor: Optional[str] = None
    changes: dict
    before: Optional[dict] = None
    after: Optional[dict] = None
    created_at: Optional[datetime] = None


def rule_record(payload: Union[RuleCreate, RuleUpdate], *, exclude_unset: bool = False) -> dict:
    """
    Flatten a rule payload into column values.

    Top-level keys use the ORM attribute names; condition and action entries
    keep their camelCase wire names since they are stored as JSON documents.
    """
    data = payload.model_dump(exclude_unset=exclude_unset)
    for key in ("conditions", "actions"):
        items = getattr(payload, key)
        if key in data and items is not None:
            data[key] = [item.model_dump(by_alias=True) for item in items]
    return data
