"""Tests for EventBus."""

from datetime import datetime, timezone

import pytest

from showcomms.models import BusMessage, Topic


def _bus_message(topic: Topic = Topic.DELIVERY, **payload) -> BusMessage:
    return BusMessage(
        id="bus1",
        topic=topic,
        payload=payload,
        source="test",
        timestamp=datetime.now(timezone.utc),
    )


class TestEventBusSubscribe:
    """Tests for EventBus subscription."""

    @pytest.mark.asyncio
    async def test_subscribe_multiple_handlers(self, event_bus):
        """Test subscribing multiple handlers to same topic."""

        async def handler1(msg: BusMessage):
            pass

        async def handler2(msg: BusMessage):
            pass

        event_bus.subscribe(Topic.CONNECTIVITY, handler1)
        event_bus.subscribe(Topic.CONNECTIVITY, handler2)

        assert len(event_bus._subscribers[Topic.CONNECTIVITY]) == 2

    @pytest.mark.asyncio
    async def test_unsubscribe(self, event_bus):
        """Test that an unsubscribed handler no longer receives messages."""
        calls = []

        async def handler(msg: BusMessage):
            calls.append(msg)

        event_bus.subscribe(Topic.DELIVERY, handler)
        event_bus.unsubscribe(Topic.DELIVERY, handler)
        # Unknown handler is ignored
        event_bus.unsubscribe(Topic.DELIVERY, handler)

        await event_bus.publish(_bus_message())
        assert calls == []


class TestEventBusPublish:
    """Tests for EventBus publishing."""

    @pytest.mark.asyncio
    async def test_publish_to_topic_subscribers_only(self, event_bus):
        """Test that messages reach only their topic's handlers."""
        delivery, connectivity = [], []

        async def on_delivery(msg: BusMessage):
            delivery.append(msg)

        async def on_connectivity(msg: BusMessage):
            connectivity.append(msg)

        event_bus.subscribe(Topic.DELIVERY, on_delivery)
        event_bus.subscribe(Topic.CONNECTIVITY, on_connectivity)

        await event_bus.publish(_bus_message(delivery_state="sent"))

        assert len(delivery) == 1
        assert delivery[0].payload == {"delivery_state": "sent"}
        assert connectivity == []

    @pytest.mark.asyncio
    async def test_publish_no_subscribers(self, event_bus):
        """Test publishing with nobody listening."""
        await event_bus.publish(_bus_message())

    @pytest.mark.asyncio
    async def test_publish_assigns_missing_id(self, event_bus):
        """Test that an empty id is filled in."""
        received = []

        async def handler(msg: BusMessage):
            received.append(msg)

        event_bus.subscribe(Topic.DELIVERY, handler)
        message = _bus_message()
        message.id = ""
        await event_bus.publish(message)

        assert received[0].id

    @pytest.mark.asyncio
    async def test_handler_error_isolated(self, event_bus):
        """Test that one failing handler does not stop the others."""
        calls = []

        async def failing(msg: BusMessage):
            raise ValueError("boom")

        async def working(msg: BusMessage):
            calls.append(msg)

        event_bus.subscribe(Topic.DELIVERY, failing)
        event_bus.subscribe(Topic.DELIVERY, working)

        await event_bus.publish(_bus_message())

        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_publish_connectivity(self, event_bus):
        """Test the connectivity helper."""
        received = []

        async def handler(msg: BusMessage):
            received.append(msg)

        event_bus.subscribe(Topic.CONNECTIVITY, handler)
        await event_bus.publish_connectivity(True)
        await event_bus.publish_connectivity(False, source="test")

        assert [m.payload["online"] for m in received] == [True, False]
        assert received[0].source == "network"
        assert received[1].source == "test"
