"""Tests for the outgoing delivery queue."""

import pytest

from showcomms.models import Attachment, DeliveryState, OutgoingQueueEntry
from showcomms.outgoing import OutgoingQueue, upsert_entry


class TestUpsertEntry:
    """Tests for the pure upsert."""

    def test_appends_new_entry(self):
        """Test appending an unknown client_message_id."""
        entry = OutgoingQueueEntry(client_message_id="c1", delivery_state=DeliveryState.SENDING)
        assert upsert_entry([], entry) == [entry]

    def test_updates_in_place_keeping_fields(self):
        """Test that an update keeps fields it does not provide."""
        queue = [
            OutgoingQueueEntry(
                client_message_id="c1",
                body_text="Doors in 5",
                language_hint="en",
                delivery_state=DeliveryState.SENDING,
            ),
            OutgoingQueueEntry(client_message_id="c2", delivery_state=DeliveryState.SENT),
        ]
        result = upsert_entry(
            queue,
            OutgoingQueueEntry(
                client_message_id="c1",
                delivery_state=DeliveryState.FAILED,
                error_message="timeout",
            ),
        )

        assert [e.client_message_id for e in result] == ["c1", "c2"]
        assert result[0].body_text == "Doors in 5"
        assert result[0].delivery_state is DeliveryState.FAILED
        assert result[0].error_message == "timeout"
        # Input list is untouched
        assert queue[0].delivery_state is DeliveryState.SENDING

    def test_at_most_one_entry_per_id(self):
        """Test that repeated upserts never duplicate an id."""
        queue = []
        for state in (DeliveryState.SENDING, DeliveryState.FAILED, DeliveryState.SENDING):
            queue = upsert_entry(
                queue, OutgoingQueueEntry(client_message_id="c1", delivery_state=state)
            )
        assert len(queue) == 1
        assert queue[0].delivery_state is DeliveryState.SENDING

    def test_padded_id_stored_trimmed(self):
        """Test that a padded id is stored trimmed and matched by later updates."""
        queue = upsert_entry(
            [], OutgoingQueueEntry(client_message_id="  c1 ", delivery_state=DeliveryState.SENDING)
        )
        assert queue[0].client_message_id == "c1"

        queue = upsert_entry(
            queue, OutgoingQueueEntry(client_message_id="c1", delivery_state=DeliveryState.SENT)
        )
        assert len(queue) == 1
        assert queue[0].delivery_state is DeliveryState.SENT

    def test_blank_id_rejected(self):
        """Test that an entry without a usable id is refused."""
        for client_message_id in ("", "   ", None):
            with pytest.raises(ValueError):
                upsert_entry([], OutgoingQueueEntry(client_message_id=client_message_id))


class TestOutgoingQueue:
    """Tests for OutgoingQueue."""

    def test_full_lifecycle(self):
        """Test sending -> failed -> sending -> sent."""
        queue = OutgoingQueue()
        attachment = Attachment(url="https://cdn/x.png", name="x.png")

        queue.mark_sending("c1", "Mic 3 dead", [attachment], "en")
        queue.mark_failed("c1", "network down")
        failed = queue.get("c1")
        assert failed.delivery_state is DeliveryState.FAILED
        assert failed.error_message == "network down"
        assert queue.failed_entries() == [failed]

        queue.mark_sending("c1", "Mic 3 dead", [attachment], "en")
        assert queue.get("c1").error_message is None

        sent = queue.mark_sent("c1")
        assert sent.delivery_state is DeliveryState.SENT
        assert sent.body_text == "Mic 3 dead"
        assert sent.attachments == [attachment]
        assert len(queue) == 1
        assert queue.failed_entries() == []

    def test_get_unknown(self):
        """Test looking up an unknown id."""
        assert OutgoingQueue().get("nope") is None

    def test_summary_counts_every_entry(self):
        """Test per-state counts summing to the queue length."""
        queue = OutgoingQueue(
            [
                OutgoingQueueEntry(client_message_id="a", delivery_state=DeliveryState.SENT),
                OutgoingQueueEntry(client_message_id="b", delivery_state=DeliveryState.FAILED),
                OutgoingQueueEntry(client_message_id="c"),
            ]
        )
        queue.mark_sending("d", "x", [], "en")

        summary = queue.summary()
        assert summary == {
            DeliveryState.SENDING: 2,
            DeliveryState.SENT: 1,
            DeliveryState.FAILED: 1,
        }
        assert sum(summary.values()) == len(queue)

    def test_entries_returns_copy(self):
        """Test that entries cannot be mutated through the list."""
        queue = OutgoingQueue()
        queue.mark_sending("c1", "x", [], "en")
        queue.entries.clear()
        assert len(queue) == 1

    def test_blank_id_lookup(self):
        """Test that a blank id never matches an entry."""
        queue = OutgoingQueue()
        queue.mark_sending(" c1 ", "Doors in 5", [], "en")

        assert queue.get("") is None
        assert queue.get("c1").body_text == "Doors in 5"
        assert queue.get(" c1").client_message_id == "c1"
        with pytest.raises(ValueError):
            queue.mark_failed("  ", "network down")
