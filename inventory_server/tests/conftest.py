"""
Test configuration and fixtures for the inventory server test suite.
"""

import os

# Set before any config model is instantiated
os.environ.setdefault("LOGGING_ENVIRONMENT", "unit_test")
os.environ.setdefault("PERSISTENCE_BACKEND", "memory")

from collections.abc import Generator

import pytest

from inventory_server.config import reset_config
from inventory_server.config.models import PACKAGE_DATA_DIR
from inventory_server.game.items.catalog import ItemCatalog
from inventory_server.game.items.item_classes import ITEM_CLASSES, ItemClass, register_item_class
from inventory_server.game.world_geometry import MapSize
from inventory_server.game.world_map import StaticWorldMap
from inventory_server.persistence.data_store import InMemoryDataStore
from inventory_server.realtime.notifier import SessionNotifier
from inventory_server.services.item_service import ItemService

TEST_MAPS = {
    "world1": MapSize(width=10, height=10),
    "corridor": MapSize(width=1, height=5),
}


@pytest.fixture(autouse=True)
def clear_config_cache() -> Generator[None, None, None]:
    reset_config()
    yield
    reset_config()


@pytest.fixture()
def catalog() -> ItemCatalog:
    return ItemCatalog.load_from_path(PACKAGE_DATA_DIR / "items.json")


@pytest.fixture()
def game_map() -> StaticWorldMap:
    return StaticWorldMap(TEST_MAPS)


@pytest.fixture()
def data_store() -> InMemoryDataStore:
    return InMemoryDataStore()


@pytest.fixture()
def notifier() -> SessionNotifier:
    return SessionNotifier()


@pytest.fixture()
def item_service(catalog, data_store, game_map, notifier) -> ItemService:
    service = ItemService(catalog, data_store, game_map, notifier, notification_timeout=0.05)
    service.initialize()
    return service


@pytest.fixture()
def flush_calls() -> list[int]:
    """Counter list handed to stores as their ``on_change`` callback."""
    return []


class Fizzler(ItemClass):
    """Usable test item whose use-effect always fails."""

    base_class = "TestFizzler"
    usable = True

    def apply(self, player_id, amount):
        raise RuntimeError(f"{self.item_name} fizzled")


@pytest.fixture()
def fizzling_catalog() -> Generator[ItemCatalog, None, None]:
    """Catalog with a usable ``grenade`` and the regular ``potion``."""
    register_item_class(Fizzler)
    try:
        yield ItemCatalog.load(
            {
                "items": {
                    "grenade": {"imagePath": "items/grenade.png", "baseClass": "TestFizzler"},
                    "potion": {"imagePath": "items/potion.png", "baseClass": "Consumable"},
                }
            }
        )
    finally:
        ITEM_CLASSES.pop(Fizzler.base_class, None)
