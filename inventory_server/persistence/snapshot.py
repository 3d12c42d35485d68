"""Validated shape of the persisted snapshot."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class StackModel(BaseModel):
    model_config = ConfigDict(extra="ignore")

    amount: int = Field(ge=0)


class DropCellModel(BaseModel):
    """Footprint of one dropped item on a map."""

    model_config = ConfigDict(extra="ignore")

    map_name: str = Field(min_length=1)
    x: int
    y: int
    width: int = Field(default=1, ge=1)
    height: int = Field(default=1, ge=1)


class PersistedSnapshot(BaseModel):
    """
    The single unit of durability.

    JSON turns integer drop indices into strings; validation turns them back.
    """

    model_config = ConfigDict(extra="ignore")

    items: dict[str, dict[str, StackModel]] = Field(default_factory=dict)
    dropped_item_cells: dict[int, DropCellModel] = Field(default_factory=dict)
    dropped_item_names: dict[int, str] = Field(default_factory=dict)
    next_drop_index: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def check_drop_registries(self) -> PersistedSnapshot:
        if set(self.dropped_item_cells) != set(self.dropped_item_names):
            raise ValueError("dropped item cell and name registries must share the same indices")
        if self.dropped_item_cells and max(self.dropped_item_cells) >= self.next_drop_index:
            raise ValueError("next_drop_index must be greater than every issued drop index")
        return self

    def to_payload(self) -> dict[str, Any]:
        """Plain-dict form handed to the data store."""
        return self.model_dump()
