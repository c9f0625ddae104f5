"""
Pydantic schemas for BOM validation requests and results.
"""

from __future__ import annotations

from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class MaterialIn(BaseModel):
    # Free-form; codes that are not canonical simply match no rule.
    category: str = Field(max_length=100)
    quantity: Union[int, float] = 0
    ports: Optional[Union[int, float]] = None

    # Materials usually carry catalogue fields the validator does not read.
    model_config = ConfigDict(extra="allow")


class BomValidationRequest(BaseModel):
    materials: List[MaterialIn]
    category: Optional[str] = Field(default=None, max_length=50)
    system_type: Optional[str] = Field(default=None, max_length=50)

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ValidationResultOut(BaseModel):
    valid: bool
    errors: List[str] = []
    warnings: List[str] = []
    suggestions: List[str] = []
