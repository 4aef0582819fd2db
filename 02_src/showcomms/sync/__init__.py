"""Sync module."""

from .sync import ConversationSync, IConversationSync

__all__ = ["ConversationSync", "IConversationSync"]
