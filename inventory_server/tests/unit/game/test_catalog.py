import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from inventory_server.exceptions import CatalogLoadError, UnknownItemError
from inventory_server.game.items.catalog import ItemCatalog
from inventory_server.game.items.item_classes import Consumable, KeyItem


def write_catalog(directory: Path, payload: dict) -> Path:
    file_path = directory / "items.json"
    file_path.write_text(json.dumps(payload, indent=2))
    return file_path


@pytest.fixture()
def valid_payload():
    return {
        "items": {
            "potion": {"imagePath": "items/potion.png", "baseClass": "Consumable", "layer": 1},
            "sword": {"imagePath": "items/sword.png", "baseClass": "Equipment", "layer": 1},
            "gate_key": {
                "imagePath": "items/gate_key.png",
                "baseClass": "KeyItem",
                "layer": "overlay",
                "properties": {"unlocks": "north_gate"},
            },
        }
    }


def test_load_from_path_builds_definitions_in_file_order(tmp_path, valid_payload):
    catalog = ItemCatalog.load_from_path(write_catalog(tmp_path, valid_payload))

    assert [name for name, _ in catalog.list_items()] == ["potion", "sword", "gate_key"]
    assert [definition.index for _, definition in catalog.list_items()] == [0, 1, 2]
    assert len(catalog) == 3
    assert "sword" in catalog
    assert "shield" not in catalog


def test_flags_come_from_the_base_class(tmp_path, valid_payload):
    catalog = ItemCatalog.load_from_path(write_catalog(tmp_path, valid_payload))

    potion = catalog.require("potion")
    assert potion.usable is True
    assert potion.exchangeable is True
    assert isinstance(potion.handler, Consumable)

    key = catalog.require("gate_key")
    assert key.exchangeable is False
    assert key.droppable is False
    assert key.layer == "overlay"
    assert isinstance(key.handler, KeyItem)


def test_public_dict_excludes_handler(catalog):
    public = catalog.require("sword").to_public_dict()

    assert "handler" not in public
    assert public["name"] == "sword"
    assert public["base_class"] == "Equipment"
    assert public["properties"] == {"damage": 7}


def test_get_returns_none_and_require_raises_for_unknown_item(catalog):
    assert catalog.get("shield") is None
    with pytest.raises(UnknownItemError):
        catalog.require("shield")


def test_definitions_are_read_only(catalog):
    definition = catalog.require("sword")
    with pytest.raises(ValidationError):
        definition.droppable = False  # type: ignore[misc]


def test_missing_file_is_fatal(tmp_path):
    with pytest.raises(CatalogLoadError) as exc_info:
        ItemCatalog.load_from_path(tmp_path / "missing.json")

    assert exc_info.value.details["config_key"] == "catalog.config_path"


def test_malformed_json_is_fatal(tmp_path):
    path = tmp_path / "items.json"
    path.write_text("{ not json")

    with pytest.raises(CatalogLoadError):
        ItemCatalog.load_from_path(path)


def test_unknown_base_class_is_fatal(tmp_path, valid_payload):
    valid_payload["items"]["ghost"] = {"imagePath": "items/ghost.png", "baseClass": "Phantom"}

    with pytest.raises(CatalogLoadError) as exc_info:
        ItemCatalog.load_from_path(write_catalog(tmp_path, valid_payload))

    assert exc_info.value.details["base_class"] == "Phantom"


def test_entry_missing_required_field_is_fatal(valid_payload):
    del valid_payload["items"]["sword"]["imagePath"]

    with pytest.raises(CatalogLoadError):
        ItemCatalog.load(valid_payload)


def test_unexpected_entry_field_is_fatal(valid_payload):
    valid_payload["items"]["sword"]["colour"] = "red"

    with pytest.raises(CatalogLoadError):
        ItemCatalog.load(valid_payload)


def test_bundled_catalog_loads(catalog):
    assert set(catalog) == {"sword", "potion", "coin", "gate_key", "explorer_badge"}
    assert catalog.require("explorer_badge").show is False
    assert catalog.require("coin").droppable is False


def test_definition_properties_are_read_only(catalog):
    potion = catalog.require("potion")

    with pytest.raises(TypeError):
        potion.properties["power"] = 0  # type: ignore[index]

    assert catalog.require("potion").properties["power"] == 25


def test_public_dict_properties_are_a_detached_copy(catalog):
    public = catalog.require("potion").to_public_dict()
    public["properties"]["power"] = 0

    assert isinstance(public["properties"], dict)
    assert catalog.require("potion").properties["power"] == 25


def test_definition_does_not_alias_config_properties(valid_payload):
    catalog = ItemCatalog.load(valid_payload)
    valid_payload["items"]["gate_key"]["properties"]["unlocks"] = "south_gate"

    assert catalog.require("gate_key").properties["unlocks"] == "north_gate"
