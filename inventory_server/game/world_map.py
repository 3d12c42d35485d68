"""In-process world map used when no external spatial index is attached."""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from inventory_server.game.world_geometry import MapSize
from inventory_server.structured_logging.enhanced_logging_config import get_logger

logger = get_logger(__name__)


class StaticWorldMap:
    """
    Fixed set of maps with dynamic cell regions kept in memory.

    Satisfies ``GameMapProtocol``. Region contents are what a rendering bridge
    would push to clients.
    """

    def __init__(self, map_sizes: Mapping[str, MapSize]):
        self._sizes = dict(map_sizes)
        self._regions: dict[tuple[str, str], list[dict[str, int]]] = {}

    def map_names(self) -> Sequence[str]:
        return list(self._sizes)

    def get_map_size(self, map_name: str) -> MapSize | None:
        return self._sizes.get(map_name)

    def set_dynamic_region(self, map_name: str, region_id: str, cells: Sequence[dict[str, int]]) -> None:
        if map_name not in self._sizes:
            raise KeyError(f"Unknown map: {map_name}")
        self._regions[(map_name, region_id)] = [dict(cell) for cell in cells]
        logger.debug("Dynamic region set", map_name=map_name, region_id=region_id, cell_count=len(cells))

    def update_dynamic_region(self, map_name: str, region_id: str, cells: Sequence[dict[str, int]]) -> None:
        if (map_name, region_id) not in self._regions:
            raise KeyError(f"Region {region_id} was never registered on map {map_name}")
        self._regions[(map_name, region_id)] = [dict(cell) for cell in cells]
        logger.debug("Dynamic region updated", map_name=map_name, region_id=region_id, cell_count=len(cells))

    def get_region(self, map_name: str, region_id: str) -> list[dict[str, int]] | None:
        cells = self._regions.get((map_name, region_id))
        return None if cells is None else [dict(cell) for cell in cells]
