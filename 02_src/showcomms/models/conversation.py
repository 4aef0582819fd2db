"""Conversation-level settings and view filters."""

from dataclasses import dataclass


@dataclass
class Conversation:
    """Per-event conversation settings."""

    event_id: str
    show_mode_enabled: bool = False
    mute_non_critical: bool = False
    pinned_ops_commands: str = ""


@dataclass
class MessageFilters:
    """User-selected filters for the message list."""

    query: str = ""
    attachments_only: bool = False
    mentions_only: bool = False
    system_only: bool = False
