"""Local message store and the merge-by-key reconciliation."""

from dataclasses import fields, replace
from datetime import datetime, timezone
from typing import Iterable

from ..models import DeliveryState, Message, Reaction, ReactionSummary

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _sort_key(message: Message) -> datetime:
    created_at = message.created_at
    if created_at is None:
        return _EPOCH
    if created_at.tzinfo is None:
        return created_at.replace(tzinfo=timezone.utc)
    return created_at


def _find_index(messages: list[Message], row: Message) -> int:
    if row.id is not None:
        for index, item in enumerate(messages):
            if item.id == row.id:
                return index
    if row.client_message_id:
        for index, item in enumerate(messages):
            if item.client_message_id == row.client_message_id:
                return index
    return -1


def _overlay(existing: Message, row: Message) -> Message:
    changes = {
        f.name: getattr(row, f.name)
        for f in fields(row)
        if getattr(row, f.name) is not None
    }
    return replace(existing, **changes)


def _normalize(message: Message) -> Message:
    if message.id is not None:
        message.local_id = None
    if message.delivery_state is not DeliveryState.FAILED:
        message.error_message = None
    return message


def merge_messages(
    existing: Iterable[Message], incoming: Iterable[Message]
) -> list[Message]:
    """Reconcile incoming rows into the existing list.

    A row matches an existing entry by server id first, then by
    client_message_id. Matches take every non-None field of the incoming
    row; unmatched rows are appended. The result is stably sorted by
    created_at, so an optimistic placeholder is upgraded in place when the
    confirmed copy arrives, and repeated merges of the same row are no-ops.
    """
    merged = list(existing or ())
    for row in incoming or ():
        index = _find_index(merged, row)
        if index == -1:
            merged.append(_normalize(replace(row)))
        else:
            merged[index] = _normalize(_overlay(merged[index], row))
    merged.sort(key=_sort_key)
    return merged


class MessageStore:
    """In-memory ordered message list for one conversation view."""

    def __init__(self, messages: Iterable[Message] = ()):
        self._messages: list[Message] = merge_messages([], messages)

    def __len__(self) -> int:
        return len(self._messages)

    @property
    def messages(self) -> list[Message]:
        return list(self._messages)

    def merge(self, incoming: Iterable[Message]) -> list[Message]:
        """Merge rows into the store and return the new list."""
        self._messages = merge_messages(self._messages, incoming)
        return self.messages

    def get(self, key: str) -> Message | None:
        """Find a message by server id or local placeholder id."""
        for message in self._messages:
            if key in (message.id, message.local_id):
                return message
        return None

    def get_by_client_id(self, client_message_id: str) -> Message | None:
        for message in self._messages:
            if message.client_message_id == client_message_id:
                return message
        return None

    def update_reactions(
        self,
        message_id: str,
        reactions: list[Reaction],
        reaction_summary: list[ReactionSummary],
    ) -> Message | None:
        """Replace reactions on a confirmed message."""
        for index, message in enumerate(self._messages):
            if message.id == message_id:
                updated = replace(
                    message, reactions=list(reactions), reaction_summary=list(reaction_summary)
                )
                self._messages[index] = updated
                return updated
        return None

    def clear(self) -> None:
        self._messages = []
