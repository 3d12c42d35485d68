import pytest
from pydantic import ValidationError

from inventory_server.persistence.snapshot import PersistedSnapshot


def test_string_drop_keys_are_coerced_to_int():
    snapshot = PersistedSnapshot.model_validate(
        {
            "items": {"A": {"sword": {"amount": 0}}},
            "dropped_item_cells": {"3": {"map_name": "world1", "x": 1, "y": 2}},
            "dropped_item_names": {"3": "sword"},
            "next_drop_index": 4,
        }
    )

    assert list(snapshot.dropped_item_cells) == [3]
    assert snapshot.dropped_item_cells[3].width == 1
    assert snapshot.items["A"]["sword"].amount == 0


def test_empty_payload_is_valid():
    snapshot = PersistedSnapshot.model_validate({})

    assert snapshot.to_payload() == {
        "items": {},
        "dropped_item_cells": {},
        "dropped_item_names": {},
        "next_drop_index": 0,
    }


@pytest.mark.parametrize(
    "payload",
    [
        {"items": {"A": {"sword": {"amount": -1}}}},
        {"dropped_item_cells": {"0": {"map_name": "world1", "x": 0, "y": 0}}, "next_drop_index": 1},
        {
            "dropped_item_cells": {"5": {"map_name": "world1", "x": 0, "y": 0}},
            "dropped_item_names": {"5": "sword"},
            "next_drop_index": 5,
        },
    ],
)
def test_invalid_payloads_are_rejected(payload):
    with pytest.raises(ValidationError):
        PersistedSnapshot.model_validate(payload)
