"""Outgoing delivery queue."""

from dataclasses import fields, replace
from typing import Iterable

from ..logging_config import get_logger, log_context
from ..models import Attachment, DeliveryState, OutgoingQueueEntry

logger = get_logger(__name__)


def _merge_entry(existing: OutgoingQueueEntry, update: OutgoingQueueEntry) -> OutgoingQueueEntry:
    changes = {
        f.name: getattr(update, f.name)
        for f in fields(update)
        if getattr(update, f.name) is not None
    }
    merged = replace(existing, **changes)
    if merged.delivery_state is not DeliveryState.FAILED:
        merged.error_message = None
    return merged


def upsert_entry(
    queue: Iterable[OutgoingQueueEntry], entry: OutgoingQueueEntry
) -> list[OutgoingQueueEntry]:
    """Return a new queue with entry written in.

    The client_message_id is trimmed and stored trimmed. An entry sharing it
    is updated in place, keeping any field the update leaves as None.
    Otherwise the entry is appended. Raises ValueError for a blank id.
    """
    client_message_id = str(entry.client_message_id or "").strip()
    if not client_message_id:
        raise ValueError("Outgoing entry needs a client_message_id")
    entry = replace(entry, client_message_id=client_message_id)
    next_queue = list(queue or ())

    for index, existing in enumerate(next_queue):
        if existing.client_message_id == client_message_id:
            next_queue[index] = _merge_entry(existing, entry)
            return next_queue

    return [*next_queue, entry]


class OutgoingQueue:
    """Delivery state of every message authored in this session.

    sending -> sent | failed, failed -> sending (retry under the same id).
    Entries are never removed automatically.
    """

    def __init__(self, entries: Iterable[OutgoingQueueEntry] = ()):
        self._entries: list[OutgoingQueueEntry] = list(entries)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> list[OutgoingQueueEntry]:
        return list(self._entries)

    def get(self, client_message_id: str) -> OutgoingQueueEntry | None:
        client_message_id = str(client_message_id or "").strip()
        if not client_message_id:
            return None
        for entry in self._entries:
            if entry.client_message_id == client_message_id:
                return entry
        return None

    def upsert(self, entry: OutgoingQueueEntry) -> OutgoingQueueEntry:
        """Write entry into the queue and return the stored version."""
        self._entries = upsert_entry(self._entries, entry)
        stored = self.get(entry.client_message_id)
        logger.debug(
            "Queue entry updated",
            extra=log_context(
                client_message_id=entry.client_message_id,
                delivery_state=stored.delivery_state if stored else None,
            ),
        )
        return stored or entry

    def mark_sending(
        self,
        client_message_id: str,
        body_text: str,
        attachments: list[Attachment],
        language_hint: str,
    ) -> OutgoingQueueEntry:
        return self.upsert(
            OutgoingQueueEntry(
                client_message_id=client_message_id,
                body_text=body_text,
                attachments=list(attachments),
                language_hint=language_hint,
                delivery_state=DeliveryState.SENDING,
            )
        )

    def mark_sent(self, client_message_id: str) -> OutgoingQueueEntry:
        return self.upsert(
            OutgoingQueueEntry(
                client_message_id=client_message_id,
                delivery_state=DeliveryState.SENT,
            )
        )

    def mark_failed(self, client_message_id: str, error_message: str) -> OutgoingQueueEntry:
        return self.upsert(
            OutgoingQueueEntry(
                client_message_id=client_message_id,
                delivery_state=DeliveryState.FAILED,
                error_message=error_message,
            )
        )

    def failed_entries(self) -> list[OutgoingQueueEntry]:
        return [e for e in self._entries if e.delivery_state is DeliveryState.FAILED]

    def summary(self) -> dict[DeliveryState, int]:
        """Count entries per delivery state; every entry lands in one bucket."""
        counts = {state: 0 for state in DeliveryState}
        for entry in self._entries:
            counts[entry.delivery_state or DeliveryState.SENDING] += 1
        return counts
