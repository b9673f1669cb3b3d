"""
Request and response models for the directory API (v1).

Field names are camelCase on the wire; snake_case names are accepted on
input as well.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, constr
from pydantic.alias_generators import to_camel


class _WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )


class PropertySpec(_WireModel):
    """Column definition used when creating a directory."""

    name: constr(min_length=1)
    type: constr(min_length=1) = Field(
        ..., description="Raw SQL type, e.g. 'text' or 'varchar(50)'"
    )
    default: Optional[str] = Field(
        default=None, description="Default value, emitted as an escaped string literal"
    )
    constraint: Optional[str] = Field(
        default=None,
        description="One of PRIMARY KEY, NOT NULL, UNIQUE; anything else is ignored",
    )


class CreateDirectoryRequest(_WireModel):
    directory: constr(min_length=1)
    properties: List[PropertySpec] = Field(default_factory=list)


class CreateObjectRequest(_WireModel):
    directory: constr(min_length=1)
    properties: Dict[str, str] = Field(default_factory=dict)


class UpdateObjectRequest(_WireModel):
    directory: constr(min_length=1)
    id: str
    properties: Dict[str, str] = Field(default_factory=dict)


class ObjectPage(_WireModel):
    """One page of objects from a directory."""

    objects: List[Optional[Dict[str, Any]]] = Field(default_factory=list)
    property_names: List[str] = Field(default_factory=list)
    primary_key: Optional[str] = None
    count: int = 0
