"""
Items lying on the ground.

Two registries keyed by drop index (cell position and item name) are always
written and removed together. Drop indices come from a counter that only
grows, so an index is never handed out twice, even after the item is picked
up or the server restarts from a snapshot.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from inventory_server.exceptions import (
    DropNotFoundError,
    InvalidPositionError,
    ItemNotDroppableError,
    TooFarAwayError,
)
from inventory_server.game.items.catalog import ItemCatalog
from inventory_server.game.world_geometry import Facing, MapCoord, MapSize, landing_cell
from inventory_server.persistence.protocols import GameMapProtocol
from inventory_server.services.inventory_store import InventoryStore
from inventory_server.structured_logging.enhanced_logging_config import get_logger

logger = get_logger(__name__)

DROP_REGION_PREFIX = "droppedItem"
DROP_CELL_SIZE = 1


def drop_region_id(map_name: str) -> str:
    """Region id under which a map's dropped items are registered with the spatial index."""
    return f"{DROP_REGION_PREFIX}{map_name}"


@dataclass(frozen=True)
class DroppedItem:
    index: int
    position: MapCoord
    item_name: str

    def to_dict(self) -> dict[str, Any]:
        return {"drop_index": self.index, "position": self.position.to_dict(), "item_name": self.item_name}


class DroppedItemRegistry:
    """Drop index to (position, item name), mirrored into the world map."""

    def __init__(
        self,
        catalog: ItemCatalog,
        inventory: InventoryStore,
        game_map: GameMapProtocol,
        on_change: Callable[[], None],
    ) -> None:
        self._catalog = catalog
        self._inventory = inventory
        self._game_map = game_map
        self._on_change = on_change
        self._cells: dict[int, MapCoord] = {}
        self._item_names: dict[int, str] = {}
        self._next_index = 0

    @property
    def next_index(self) -> int:
        return self._next_index

    def __len__(self) -> int:
        return len(self._cells)

    def __contains__(self, drop_index: object) -> bool:
        return drop_index in self._cells

    def get(self, drop_index: int) -> DroppedItem | None:
        position = self._cells.get(drop_index)
        if position is None:
            return None
        return DroppedItem(drop_index, position, self._item_names[drop_index])

    def list_drops(self) -> list[DroppedItem]:
        return [DroppedItem(index, position, self._item_names[index]) for index, position in self._cells.items()]

    def cells_for_map(self, map_name: str) -> list[dict[str, int]]:
        return [
            {"x": position.x, "y": position.y, "width": DROP_CELL_SIZE, "height": DROP_CELL_SIZE}
            for position in self._cells.values()
            if position.map_name == map_name
        ]

    def drop(self, player_id: str, item_name: str, position: MapCoord, facing: Facing | str) -> int:
        """
        Move one item from the player's stack onto the cell in front of them.

        Returns:
            The new drop index.

        Raises:
            InvalidPositionError, UnknownItemError, ItemNotDroppableError,
            InsufficientQuantityError. None of them change any state.
        """
        resolved_facing = self._resolve_facing(facing)
        definition = self._catalog.require(item_name)
        if not definition.droppable:
            raise ItemNotDroppableError(f"{item_name} is not droppable", item_name=item_name)
        self._inventory.require_quantity(player_id, item_name, 1)
        map_size = self._require_inside_map(position)

        target = landing_cell(position, resolved_facing, map_size)
        self._inventory.withdraw(player_id, item_name, 1)
        drop_index = self._next_index
        self._next_index += 1
        self._cells[drop_index] = target
        self._item_names[drop_index] = item_name
        self._on_change()

        logger.info(
            "Item dropped",
            player_id=player_id,
            item_name=item_name,
            drop_index=drop_index,
            map_name=target.map_name,
            x=target.x,
            y=target.y,
        )
        self._push_region(target.map_name)
        return drop_index

    def pickup(self, player_id: str, drop_index: int, position: MapCoord) -> str:
        """
        Return a dropped item to a player standing on or next to it.

        Returns:
            The picked-up item name.

        Raises:
            DropNotFoundError, TooFarAwayError, UnknownItemError, ItemNotDroppableError.
        """
        cell = self._cells.get(drop_index)
        if cell is None:
            raise DropNotFoundError(f"No dropped item with index {drop_index}", drop_index=drop_index)
        if not cell.is_adjacent(position):
            raise TooFarAwayError(
                f"Player {player_id} at {position} is not next to drop {drop_index} at {cell}",
                details={"drop_index": drop_index, "drop_position": cell.to_dict(), "position": position.to_dict()},
            )
        item_name = self._item_names[drop_index]
        definition = self._catalog.require(item_name)
        if not definition.droppable:
            raise ItemNotDroppableError(f"{item_name} is no longer droppable", item_name=item_name)

        self._inventory.deposit(player_id, item_name, 1)
        del self._cells[drop_index]
        del self._item_names[drop_index]
        self._on_change()

        logger.info("Item picked up", player_id=player_id, item_name=item_name, drop_index=drop_index)
        self._push_region(cell.map_name)
        return item_name

    def publish_all_regions(self) -> None:
        """Register one drop region per map with the spatial index."""
        for map_name in self._game_map.map_names():
            self._game_map.set_dynamic_region(map_name, drop_region_id(map_name), self.cells_for_map(map_name))

    def _push_region(self, map_name: str) -> None:
        try:
            self._game_map.update_dynamic_region(map_name, drop_region_id(map_name), self.cells_for_map(map_name))
        except (LookupError, ValueError, RuntimeError, OSError) as e:
            # The drop state is already committed; the map catches up on the next push.
            logger.warning("Failed to update dropped item region", map_name=map_name, error=str(e))

    @staticmethod
    def _resolve_facing(facing: Facing | str) -> Facing:
        try:
            return Facing(facing)
        except ValueError as exc:
            raise InvalidPositionError(f"Unknown facing: {facing!r}", details={"facing": repr(facing)}) from exc

    def _require_inside_map(self, position: MapCoord) -> MapSize:
        map_size = self._game_map.get_map_size(position.map_name)
        if map_size is None:
            raise InvalidPositionError(f"Unknown map: {position.map_name}", details={"position": position.to_dict()})
        if not map_size.contains(position.x, position.y):
            raise InvalidPositionError(
                f"Position {position} lies outside map {position.map_name}",
                details={"position": position.to_dict(), "width": map_size.width, "height": map_size.height},
            )
        return map_size

    def snapshot(self) -> dict[str, Any]:
        return {
            "dropped_item_cells": {
                index: {
                    "map_name": position.map_name,
                    "x": position.x,
                    "y": position.y,
                    "width": DROP_CELL_SIZE,
                    "height": DROP_CELL_SIZE,
                }
                for index, position in self._cells.items()
            },
            "dropped_item_names": dict(self._item_names),
            "next_drop_index": self._next_index,
        }

    def restore(self, cells: Mapping[int, MapCoord], item_names: Mapping[int, str], next_index: int) -> None:
        if set(cells) != set(item_names):
            raise ValueError("dropped item cell and name registries must share the same indices")
        self._cells = dict(cells)
        self._item_names = dict(item_names)
        self._next_index = max([next_index, *(index + 1 for index in self._cells)])
        logger.info("Dropped items restored", drop_count=len(self._cells), next_drop_index=self._next_index)
