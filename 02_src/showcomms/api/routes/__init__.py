"""API routes."""

from . import control, conversation, media, messaging

__all__ = ["control", "conversation", "media", "messaging"]
