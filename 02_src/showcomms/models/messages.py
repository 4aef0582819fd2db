"""Message-related data models."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class MessageType(str, Enum):
    """Kind of chat entry."""

    USER = "user"
    SYSTEM = "system"
    SYSTEM_CRITICAL = "system_critical"


class DeliveryState(str, Enum):
    """Delivery state of a locally authored message."""

    SENDING = "sending"
    SENT = "sent"
    FAILED = "failed"


class MentionType(str, Enum):
    """What a mention resolved to."""

    USER = "user"
    ROLE = "role"


@dataclass
class Attachment:
    """An uploaded file referenced by a message."""

    url: str
    name: str
    mime_type: str = ""
    size: int = 0


@dataclass
class Mention:
    """A resolved @mention inside a message body."""

    token: str
    type: MentionType
    mentioned_user_id: str | None = None
    mentioned_role_key: str | None = None


@dataclass
class Reaction:
    """A raw reaction row: one user, one emoji."""

    emoji: str
    user_id: str | None = None


@dataclass
class ReactionSummary:
    """Per-emoji reaction count for display."""

    emoji: str
    count: int
    reacted_by_current_user: bool = False


@dataclass
class Message:
    """A single chat entry, optimistic or server-confirmed.

    Fields left as None are treated as "not provided" when merging rows.
    """

    client_message_id: str
    event_id: str | None = None
    id: str | None = None
    local_id: str | None = None
    author_user_id: str | None = None
    author_name: str | None = None
    body_text: str | None = None
    message_type: MessageType | None = None
    language_hint: str | None = None
    attachments: list[Attachment] | None = None
    mentions: list[Mention] | None = None
    reactions: list[Reaction] | None = None
    reaction_summary: list[ReactionSummary] | None = None
    created_at: datetime | None = None
    delivery_state: DeliveryState | None = None
    error_message: str | None = None

    @property
    def key(self) -> str | None:
        """Server id when confirmed, otherwise the local placeholder id."""
        return self.id or self.local_id

    @property
    def has_attachments(self) -> bool:
        return bool(self.attachments)

    @property
    def is_confirmed(self) -> bool:
        return self.id is not None


def local_placeholder_id(client_message_id: str) -> str:
    """Placeholder identity for a message the server has not confirmed yet."""
    return f"local:{client_message_id}"


def sanitize_body(body: str | None) -> str:
    """Strip carriage returns and surrounding whitespace."""
    return str(body or "").replace("\r", "").strip()


@dataclass
class AttachmentFile:
    """A local file waiting to be uploaded."""

    name: str
    data: bytes
    mime_type: str = "application/octet-stream"

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass
class OutgoingMessage:
    """Payload sent to the server for a new or retried message."""

    client_message_id: str
    body_text: str
    language_hint: str
    author_name: str | None = None
    mentions: list[Mention] = field(default_factory=list)
    attachments: list[Attachment] = field(default_factory=list)
