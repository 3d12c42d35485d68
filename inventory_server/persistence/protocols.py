"""
Protocols for the collaborators the item service talks to.

The service depends on these shapes only; concrete implementations live in
``data_store``, ``inventory_server.game.world_map`` and
``inventory_server.realtime.notifier``.
"""

# pylint: disable=unnecessary-ellipsis  # Reason: Protocol method bodies use ... per typing.Protocol convention

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from inventory_server.game.world_geometry import MapSize


class DataStoreProtocol(Protocol):
    """Durable key/value storage for the persisted snapshot."""

    def load_data(self) -> dict[str, Any] | None:
        """Return the last stored snapshot, or None when nothing was stored."""
        ...

    def store_data(self, snapshot: dict[str, Any]) -> None:
        """Replace the stored snapshot."""
        ...


class GameMapProtocol(Protocol):
    """Spatial index that renders dropped items as map cells."""

    def map_names(self) -> Sequence[str]:
        """Names of every map in the world."""
        ...

    def get_map_size(self, map_name: str) -> MapSize | None:
        """Dimensions of a map, or None for an unknown map."""
        ...

    def set_dynamic_region(self, map_name: str, region_id: str, cells: Sequence[dict[str, int]]) -> None:
        """Register a region of dynamic cells on a map."""
        ...

    def update_dynamic_region(self, map_name: str, region_id: str, cells: Sequence[dict[str, int]]) -> None:
        """Replace the cells of a previously registered region."""
        ...


class ClientNotifierProtocol(Protocol):
    """Server-to-client notification channel."""

    async def send(self, player_id: str, event_type: str, payload: dict[str, Any]) -> None:
        """Deliver one event to one player. Raises NotificationDeliveryError when it cannot."""
        ...
