import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from inventory_server.api.items import items_router
from inventory_server.app.factory import create_app


@pytest.fixture()
def client(item_service):
    app = create_app(item_service)
    return TestClient(app)


def test_item_info(client):
    response = client.get("/api/items/info")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["result"][0]["name"] == "sword"


def test_get_all_items_for_new_player(client):
    response = client.get("/api/items/players/alice")

    assert response.status_code == 200
    assert response.json() == {"success": True, "result": {}}


@pytest.mark.parametrize("player_id", ["info", "dropped"])
def test_players_named_like_catalog_routes_are_reachable(client, item_service, player_id):
    item_service.inventory.deposit(player_id, "sword", 2)

    response = client.get(f"/api/items/players/{player_id}")
    item_response = client.get(f"/api/items/players/{player_id}/sword")

    assert response.json() == {"success": True, "result": {"sword": 2}}
    assert item_response.json()["result"] == {"item_name": "sword", "amount": 2}
    assert isinstance(client.get("/api/items/info").json()["result"], list)
    assert client.get("/api/items/dropped").json() == {"success": True, "result": []}


def test_missing_item_is_404(client):
    response = client.get("/api/items/players/alice/sword")

    assert response.status_code == 404
    assert response.json()["detail"]["error_type"] == "item_not_found"


def test_give_item(client, item_service):
    item_service.inventory.deposit("alice", "sword", 3)

    response = client.post(
        "/api/items/players/alice/give",
        json={"to_player_id": "bob", "item_name": "sword", "amount": 2},
    )

    assert response.status_code == 200
    assert response.json()["result"]["to_amount"] == 2
    assert client.get("/api/items/players/bob/sword").json()["result"] == {"item_name": "sword", "amount": 2}


def test_rule_violation_is_reported_in_body(client, item_service):
    item_service.inventory.deposit("alice", "gate_key", 1)

    response = client.post("/api/items/players/alice/give", json={"to_player_id": "bob", "item_name": "gate_key"})

    assert response.status_code == 200
    assert response.json()["success"] is False
    assert response.json()["error_type"] == "item_not_exchangeable"


def test_use_item(client, item_service):
    item_service.inventory.deposit("alice", "potion", 1)

    response = client.post("/api/items/players/alice/use", json={"item_name": "potion"})

    assert response.json()["result"]["amount"] == 0


def test_drop_and_pickup(client, item_service):
    item_service.inventory.deposit("alice", "potion", 1)
    position = {"map_name": "world1", "x": 5, "y": 5}

    dropped = client.post(
        "/api/items/players/alice/drop",
        json={"item_name": "potion", "position": position, "facing": "D"},
    )

    assert dropped.status_code == 200
    assert dropped.json()["result"]["drop_index"] == 0
    listing = client.get("/api/items/dropped").json()["result"]
    assert listing == [{"drop_index": 0, "position": {"map_name": "world1", "x": 5, "y": 6}, "item_name": "potion"}]

    picked = client.post("/api/items/players/bob/pickup", json={"drop_index": 0, "position": position})

    assert picked.json()["result"]["item_name"] == "potion"
    assert item_service.inventory.get("bob", "potion") == 1


def test_stale_pickup_is_404(client):
    response = client.post(
        "/api/items/players/alice/pickup",
        json={"drop_index": 3, "position": {"map_name": "world1", "x": 0, "y": 0}},
    )

    assert response.status_code == 404
    assert response.json()["detail"]["error_type"] == "drop_not_found"


def test_invalid_facing_is_422(client):
    response = client.post(
        "/api/items/players/alice/drop",
        json={"item_name": "potion", "position": {"map_name": "world1", "x": 0, "y": 0}, "facing": "north"},
    )

    assert response.status_code == 422


def test_router_requires_configured_service():
    app = FastAPI()
    app.include_router(items_router)
    client = TestClient(app, raise_server_exceptions=False)

    response = client.get("/api/items/info")

    assert response.status_code == 500


def test_lifespan_flushes_on_shutdown(item_service, data_store):
    item_service.inventory.deposit("alice", "sword", 1)
    writes_before = data_store.write_count

    with TestClient(create_app(item_service)) as client:
        client.get("/api/items/players/alice")

    assert data_store.write_count > writes_before
    assert data_store.load_data()["items"]["alice"]["sword"] == {"amount": 1}
