"""Tests for ConversationSync."""

import asyncio

import pytest

from showcomms.models import Conversation, DeliveryState
from showcomms.sync import ConversationSync


@pytest.fixture
def sync(gateway, store, conversation_state):
    """Sync for event e1 with a short poll interval."""
    return ConversationSync("e1", gateway, store, conversation_state, interval=0.01, limit=150)


class TestRefresh:
    """Tests for a single fetch-and-merge."""

    @pytest.mark.asyncio
    async def test_refresh_merges_messages(self, sync, gateway, store):
        """Test that fetched messages land in the store as sent."""
        gateway.add_server_message("e1", "Doors in 5")
        gateway.add_server_message("e1", "House is open")
        gateway.add_server_message("e2", "Other event")

        assert await sync.refresh() is True

        assert [m.body_text for m in store.messages] == ["Doors in 5", "House is open"]
        assert all(m.delivery_state is DeliveryState.SENT for m in store.messages)
        assert sync.last_error == ""
        assert sync.loading is False

    @pytest.mark.asyncio
    async def test_refresh_twice_does_not_duplicate(self, sync, gateway, store):
        """Test that repeated polls of the same rows are idempotent."""
        gateway.add_server_message("e1", "Doors in 5")

        await sync.refresh()
        await sync.refresh()

        assert len(store) == 1

    @pytest.mark.asyncio
    async def test_refresh_applies_page_conversation(self, sync, gateway, conversation_state):
        """Test that settings in the page are adopted."""
        gateway.conversations["e1"] = Conversation(event_id="e1", mute_non_critical=True)

        await sync.refresh()

        assert conversation_state.mute_non_critical is True

    @pytest.mark.asyncio
    async def test_refresh_failure(self, sync, gateway, store):
        """Test that a failed fetch keeps the store and reports the error."""
        gateway.add_server_message("e1", "Doors in 5")
        await sync.refresh()
        gateway.fail_lists = True

        assert await sync.refresh() is False

        assert sync.last_error == "Messaging load failed: network down"
        assert len(store) == 1
        assert sync.loading is False

    @pytest.mark.asyncio
    async def test_refresh_respects_limit(self, gateway, store, conversation_state):
        """Test that the configured limit is passed on."""
        for i in range(5):
            gateway.add_server_message("e1", f"msg {i}")
        sync = ConversationSync("e1", gateway, store, conversation_state, limit=2)

        await sync.refresh()

        assert [m.body_text for m in store.messages] == ["msg 3", "msg 4"]


class TestPolling:
    """Tests for the poll timer."""

    @pytest.mark.asyncio
    async def test_poll_picks_up_new_messages(self, sync, gateway, store):
        """Test that the timer keeps fetching while running."""
        await sync.start()
        gateway.add_server_message("e1", "New from ops")

        await asyncio.sleep(0.1)
        await sync.stop()

        assert sync.running is False
        assert gateway.list_calls >= 2
        assert [m.body_text for m in store.messages] == ["New from ops"]

    @pytest.mark.asyncio
    async def test_stop_halts_polling(self, sync, gateway):
        """Test that no fetch starts after stop()."""
        await sync.start()
        await asyncio.sleep(0.05)
        await sync.stop()
        calls = gateway.list_calls

        await asyncio.sleep(0.05)

        assert gateway.list_calls == calls

    @pytest.mark.asyncio
    async def test_start_twice_is_noop(self, sync):
        """Test that a second start does not create a second timer."""
        await sync.start()
        timer = sync._timer
        await sync.start()

        assert sync._timer is timer
        await sync.stop()

    @pytest.mark.asyncio
    async def test_slow_fetch_not_cancelled_by_next_tick(self, sync, gateway, store):
        """Test that overlapping fetches both complete without duplicates."""
        gateway.add_server_message("e1", "Doors in 5")
        original_list = gateway.list_messages

        async def slow_list(event_id, limit=150):
            await asyncio.sleep(0.03)
            return await original_list(event_id, limit)

        gateway.list_messages = slow_list
        await sync.start()
        await asyncio.sleep(0.1)
        await sync.stop()
        await asyncio.sleep(0.05)

        assert gateway.list_calls >= 2
        assert len(store) == 1

    @pytest.mark.asyncio
    async def test_poll_failure_keeps_running(self, sync, gateway):
        """Test that failed polls do not stop the timer."""
        gateway.fail_lists = True
        await sync.start()
        await asyncio.sleep(0.05)

        assert sync.running is True
        assert sync.last_error.startswith("Messaging load failed")
        await sync.stop()
