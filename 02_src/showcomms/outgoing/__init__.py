"""Outgoing queue module."""

from .queue import OutgoingQueue, upsert_entry

__all__ = ["OutgoingQueue", "upsert_entry"]
