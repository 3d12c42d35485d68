"""
Item service: the remote-call surface for inventories and dropped items.

The service owns the catalog, the inventory store, the dropped item registry
and the persistence scheduler, and talks to the outside world only through the
data store, game map and notifier protocols. Every remote call returns a result
dict. Business-rule violations come back as ``{"success": False, ...}``; only
internal failures raise.

Mutations never await, so each one runs to completion before any other call
is handled. The only suspension point is the best-effort notification sent
after a mutation has been committed.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from inventory_server.error_types import create_standard_error_response
from inventory_server.exceptions import (
    InvalidPositionError,
    ItemRuleViolation,
    NotificationDeliveryError,
    PersistenceError,
)
from inventory_server.game.items.catalog import ItemCatalog
from inventory_server.game.world_geometry import Facing, MapCoord, MapSize
from inventory_server.game.world_map import StaticWorldMap
from inventory_server.persistence.data_store import create_data_store
from inventory_server.persistence.protocols import ClientNotifierProtocol, DataStoreProtocol, GameMapProtocol
from inventory_server.persistence.snapshot import PersistedSnapshot
from inventory_server.realtime.notifier import SessionNotifier
from inventory_server.services.dropped_item_registry import DroppedItemRegistry
from inventory_server.services.inventory_store import InventoryStore
from inventory_server.services.persistence_scheduler import PersistenceScheduler
from inventory_server.structured_logging.enhanced_logging_config import (
    bind_request_context,
    clear_request_context,
    get_logger,
)

if TYPE_CHECKING:
    from inventory_server.config.models import AppConfig

logger = get_logger(__name__)

RECEIVE_ITEM_EVENT = "onReceiveItem"
USE_ITEM_EVENT = "onUseItem"
DEFAULT_NOTIFICATION_TIMEOUT = 5.0


def _rule_failure(exc: ItemRuleViolation) -> dict[str, Any]:
    return create_standard_error_response(exc.error_type, exc.message, exc.user_friendly, exc.details)


def _coerce_position(position: MapCoord | dict[str, Any]) -> MapCoord:
    if isinstance(position, MapCoord):
        return position
    try:
        return MapCoord.from_dict(position)
    except (KeyError, TypeError, ValueError) as exc:
        raise InvalidPositionError(
            f"Malformed position: {position!r}",
            details={"position": repr(position)},
        ) from exc


class ItemService:
    """
    Owns all inventory and dropped item state for one game server.

    Build with ``from_config()`` (or the constructor plus ``initialize()``)
    before serving calls. There is no module-level state; tests create as many
    independent services as they need.
    """

    def __init__(
        self,
        catalog: ItemCatalog,
        data_store: DataStoreProtocol,
        game_map: GameMapProtocol,
        notifier: ClientNotifierProtocol,
        notification_timeout: float = DEFAULT_NOTIFICATION_TIMEOUT,
    ):
        self.catalog = catalog
        self.data_store = data_store
        self.game_map = game_map
        self.notifier = notifier
        self.notification_timeout = notification_timeout

        self.scheduler = PersistenceScheduler(data_store, self.pack_stored_data)
        self.inventory = InventoryStore(catalog, self.scheduler.schedule_flush)
        self.drops = DroppedItemRegistry(catalog, self.inventory, game_map, self.scheduler.schedule_flush)
        self._initialized = False

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        *,
        data_store: DataStoreProtocol | None = None,
        game_map: GameMapProtocol | None = None,
        notifier: ClientNotifierProtocol | None = None,
    ) -> ItemService:
        """
        Build and initialize a service from application configuration.

        Collaborators not passed in are built from the configuration: the
        configured data store backend, a static world map of the configured
        maps, and a session notifier.

        Raises:
            CatalogLoadError: The item catalog could not be loaded.
            PersistenceError: Stored data could not be read or is malformed.
        """
        catalog = ItemCatalog.load_from_path(config.catalog.config_path)
        if data_store is None:
            data_store = create_data_store(config.persistence.backend, config.persistence.data_path)
        if game_map is None:
            game_map = StaticWorldMap(
                {name: MapSize(dims.width, dims.height) for name, dims in config.world.maps.items()}
            )
        if notifier is None:
            notifier = SessionNotifier()

        service = cls(
            catalog,
            data_store,
            game_map,
            notifier,
            notification_timeout=config.notification.timeout_seconds,
        )
        service.initialize()
        return service

    def initialize(self) -> None:
        """Restore stored state and register the dropped item regions with the game map."""
        if self._initialized:
            return

        stored = self.data_store.load_data()
        if stored is not None:
            self._restore(stored)
        self.drops.publish_all_regions()
        self._initialized = True
        logger.info(
            "Item service initialized",
            item_count=len(self.catalog),
            drop_count=len(self.drops),
            next_drop_index=self.drops.next_index,
        )

    def _restore(self, stored: dict[str, Any]) -> None:
        try:
            snapshot = PersistedSnapshot.model_validate(stored)
        except ValidationError as exc:
            raise PersistenceError(
                "Stored item data failed validation",
                details={"errors": exc.errors(include_url=False)},
            ) from exc

        unknown = sorted(
            {name for stacks in snapshot.items.values() for name in stacks if name not in self.catalog}
            | {name for name in snapshot.dropped_item_names.values() if name not in self.catalog}
        )
        if unknown:
            logger.warning("Stored item data references items missing from the catalog", items=unknown)

        self.inventory.restore(
            {
                player_id: {item_name: stack.amount for item_name, stack in stacks.items()}
                for player_id, stacks in snapshot.items.items()
            }
        )
        self.drops.restore(
            {index: MapCoord(cell.map_name, cell.x, cell.y) for index, cell in snapshot.dropped_item_cells.items()},
            snapshot.dropped_item_names,
            snapshot.next_drop_index,
        )

    def pack_stored_data(self) -> dict[str, Any]:
        """Independent copy of all durable state, in the persisted snapshot shape."""
        drops = self.drops.snapshot()
        snapshot = PersistedSnapshot(
            items=self.inventory.snapshot(),
            dropped_item_cells=drops["dropped_item_cells"],
            dropped_item_names=drops["dropped_item_names"],
            next_drop_index=drops["next_drop_index"],
        )
        return snapshot.to_payload()

    def shutdown(self) -> None:
        """Write any pending state synchronously."""
        self.scheduler.flush_now()
        logger.info("Item service shut down", flush_count=self.scheduler.flush_count)

    async def _notify(self, player_id: str, event_type: str, payload: dict[str, Any]) -> None:
        """Best-effort delivery. Failures are logged and never reach the caller."""
        try:
            await asyncio.wait_for(
                self.notifier.send(player_id, event_type, payload),
                timeout=self.notification_timeout,
            )
        except TimeoutError:
            logger.warning(
                "Notification timed out",
                player_id=player_id,
                event_type=event_type,
                timeout=self.notification_timeout,
            )
        except NotificationDeliveryError as e:
            logger.warning("Notification not delivered", player_id=player_id, event_type=event_type, error=e.message)
        except (ConnectionError, OSError) as e:
            logger.warning("Notification transport failed", player_id=player_id, event_type=event_type, error=str(e))
        except Exception as e:  # pylint: disable=broad-exception-caught
            # The mutation is already committed; a notifier bug must not turn it into a failed call.
            logger.warning(
                "Notification failed",
                player_id=player_id,
                event_type=event_type,
                error=str(e),
                error_type=type(e).__name__,
                exc_info=True,
            )

    async def get_item_info(self) -> dict[str, Any]:
        """Every catalog definition, in catalog order."""
        bind_request_context(operation="get_item_info")
        try:
            return {
                "success": True,
                "result": [definition.to_public_dict() for _, definition in self.catalog.list_items()],
            }
        finally:
            clear_request_context()

    async def get_all_items(self, player_id: str) -> dict[str, Any]:
        """All of a player's stacks. Creates the inventory on first call."""
        bind_request_context(player_id=player_id, operation="get_all_items")
        try:
            return {"success": True, "result": self.inventory.get_all(player_id)}
        finally:
            clear_request_context()

    async def get_item(self, player_id: str, item_name: str) -> dict[str, Any]:
        bind_request_context(player_id=player_id, operation="get_item", item_name=item_name)
        try:
            amount = self.inventory.get(player_id, item_name)
            return {"success": True, "result": {"item_name": item_name, "amount": amount}}
        except ItemRuleViolation as e:
            return _rule_failure(e)
        finally:
            clear_request_context()

    async def give_item(self, player_id: str, to_player_id: str, item_name: str, amount: int) -> dict[str, Any]:
        """
        Give ``amount`` of an exchangeable item to another player.

        The recipient is told with an ``onReceiveItem`` notification once the
        transfer is committed.
        """
        bind_request_context(player_id=player_id, operation="give_item", item_name=item_name)
        try:
            try:
                sender_amount, recipient_amount = self.inventory.transfer(player_id, to_player_id, item_name, amount)
            except ItemRuleViolation as e:
                return _rule_failure(e)

            await self._notify(
                to_player_id,
                RECEIVE_ITEM_EVENT,
                {
                    "to_player_id": to_player_id,
                    "from_player_id": player_id,
                    "item_name": item_name,
                    "amount": amount,
                },
            )
            return {
                "success": True,
                "result": {
                    "item_name": item_name,
                    "amount": sender_amount,
                    "to_player_id": to_player_id,
                    "to_amount": recipient_amount,
                },
            }
        finally:
            clear_request_context()

    async def use_item(self, player_id: str, item_name: str, amount: int) -> dict[str, Any]:
        bind_request_context(player_id=player_id, operation="use_item", item_name=item_name)
        try:
            try:
                effect = self.inventory.consume(player_id, item_name, amount)
            except ItemRuleViolation as e:
                return _rule_failure(e)

            await self._notify(
                player_id,
                USE_ITEM_EVENT,
                {"player_id": player_id, "item_name": item_name, "amount": amount},
            )
            return {
                "success": True,
                "result": {
                    "item_name": item_name,
                    "amount": self.inventory.held(player_id, item_name),
                    "effect": effect,
                },
            }
        finally:
            clear_request_context()

    async def drop_item(
        self,
        player_id: str,
        position: MapCoord | dict[str, Any],
        facing: Facing | str,
        item_name: str,
    ) -> dict[str, Any]:
        bind_request_context(player_id=player_id, operation="drop_item", item_name=item_name)
        try:
            try:
                drop_index = self.drops.drop(player_id, item_name, _coerce_position(position), facing)
            except ItemRuleViolation as e:
                return _rule_failure(e)

            dropped = self.drops.get(drop_index)
            return {
                "success": True,
                "result": {
                    "drop_index": drop_index,
                    "item_name": item_name,
                    "position": dropped.position.to_dict() if dropped else None,
                    "amount": self.inventory.held(player_id, item_name),
                },
            }
        finally:
            clear_request_context()

    async def pickup_item(self, player_id: str, position: MapCoord | dict[str, Any], drop_index: int) -> dict[str, Any]:
        bind_request_context(player_id=player_id, operation="pickup_item", drop_index=drop_index)
        try:
            try:
                item_name = self.drops.pickup(player_id, drop_index, _coerce_position(position))
            except ItemRuleViolation as e:
                return _rule_failure(e)

            return {
                "success": True,
                "result": {
                    "drop_index": drop_index,
                    "item_name": item_name,
                    "amount": self.inventory.held(player_id, item_name),
                },
            }
        finally:
            clear_request_context()

    async def get_all_dropped_items(self) -> dict[str, Any]:
        bind_request_context(operation="get_all_dropped_items")
        try:
            return {"success": True, "result": [dropped.to_dict() for dropped in self.drops.list_drops()]}
        finally:
            clear_request_context()
