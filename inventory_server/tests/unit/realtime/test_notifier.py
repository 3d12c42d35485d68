import pytest

from inventory_server.exceptions import NotificationDeliveryError
from inventory_server.realtime.notifier import SessionNotifier


@pytest.mark.asyncio
async def test_send_queues_event_for_connected_player():
    notifier = SessionNotifier()
    notifier.connect("A")

    await notifier.send("A", "onUseItem", {"item_name": "potion"})

    events = notifier.drain("A")
    assert len(events) == 1
    assert events[0]["event_type"] == "onUseItem"
    assert events[0]["payload"] == {"item_name": "potion"}
    assert "timestamp" in events[0]


@pytest.mark.asyncio
async def test_send_to_offline_player_raises():
    notifier = SessionNotifier()

    with pytest.raises(NotificationDeliveryError) as exc_info:
        await notifier.send("ghost", "onReceiveItem", {})

    assert exc_info.value.recipient_id == "ghost"


def test_disconnect_drops_queue():
    notifier = SessionNotifier()
    notifier.connect("A")

    notifier.disconnect("A")

    assert not notifier.is_connected("A")
    assert notifier.drain("A") == []
