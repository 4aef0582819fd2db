"""Core data models for show messaging."""

from .conversation import Conversation, MessageFilters
from .events import BusMessage, Topic
from .messages import (
    Attachment,
    AttachmentFile,
    DeliveryState,
    Mention,
    MentionType,
    Message,
    MessageType,
    OutgoingMessage,
    Reaction,
    ReactionSummary,
    local_placeholder_id,
    sanitize_body,
)
from .outgoing import OutgoingQueueEntry
from .staff import StaffProfile
from .translation import TranslationResult

__all__ = [
    # Messages
    "Message",
    "MessageType",
    "DeliveryState",
    "Attachment",
    "AttachmentFile",
    "Mention",
    "MentionType",
    "Reaction",
    "ReactionSummary",
    "OutgoingMessage",
    "local_placeholder_id",
    "sanitize_body",
    # Queue
    "OutgoingQueueEntry",
    # Conversation
    "Conversation",
    "MessageFilters",
    # Staff
    "StaffProfile",
    # Signals
    "BusMessage",
    "Topic",
    # Translation
    "TranslationResult",
]
