from __future__ import annotations

import copy
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from inventory_server.game.items.item_classes import ItemClass


class ItemConfigModel(BaseModel):
    """Validated catalog entry as written in the items configuration file."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    image_path: str = Field(alias="imagePath", min_length=1)
    base_class: str = Field(alias="baseClass", min_length=1)
    layer: int | str | None = None
    properties: dict[str, Any] = Field(default_factory=dict)


class ItemCatalogFileModel(BaseModel):
    """Top level of the items configuration file."""

    model_config = ConfigDict(extra="ignore")

    items: dict[str, ItemConfigModel]

    @field_validator("items")
    @classmethod
    def validate_item_names(cls, value: dict[str, ItemConfigModel]) -> dict[str, ItemConfigModel]:
        blank = [name for name in value if not name.strip()]
        if blank:
            raise ValueError("item names must be non-empty")
        return value


class ItemDefinition(BaseModel):
    """Resolved, immutable catalog entry.

    ``handler`` is the base-class instance chosen at load time. It is kept out of
    serialized output. ``properties`` is a read-only view over a private copy.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    index: int = Field(ge=0)
    image_path: str
    base_class: str
    layer: int | str | None = None
    show: bool
    exchangeable: bool
    droppable: bool
    usable: bool
    properties: Mapping[str, Any] = Field(default_factory=dict, validate_default=True)
    handler: ItemClass = Field(exclude=True, repr=False)

    @field_validator("properties")
    @classmethod
    def freeze_properties(cls, value: Mapping[str, Any]) -> Mapping[str, Any]:
        return MappingProxyType(copy.deepcopy(dict(value)))

    @field_serializer("properties")
    def serialize_properties(self, value: Mapping[str, Any]) -> dict[str, Any]:
        return copy.deepcopy(dict(value))

    def to_public_dict(self) -> dict[str, Any]:
        return self.model_dump()
