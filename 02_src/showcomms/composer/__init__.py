"""Composer module."""

from .composer import MessageComposer, create_client_message_id

__all__ = ["MessageComposer", "create_client_message_id"]
