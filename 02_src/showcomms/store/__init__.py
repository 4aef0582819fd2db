"""Store module."""

from .message_store import MessageStore, merge_messages

__all__ = ["MessageStore", "merge_messages"]
