"""Services package: stateful item stores and the item service that owns them."""

from .dropped_item_registry import DroppedItem, DroppedItemRegistry
from .inventory_store import InventoryStore, ItemStack
from .item_service import ItemService
from .persistence_scheduler import PersistenceScheduler

__all__ = [
    "DroppedItem",
    "DroppedItemRegistry",
    "InventoryStore",
    "ItemService",
    "ItemStack",
    "PersistenceScheduler",
]
