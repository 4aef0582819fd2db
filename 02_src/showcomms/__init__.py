"""During-show team messaging core."""

from .app import Application, IApplication
from .composer import MessageComposer
from .config import ClientSettings
from .conversation import ConversationState, apply_filters
from .event_bus import EventBus, IEventBus
from .gateway import (
    AttachmentUploader,
    GatewayError,
    IAttachmentUploader,
    IMessagingGateway,
    MessagingGateway,
)
from .llm import ITranslator, Translator
from .mentions import MentionParser, parse_mentions
from .models import (
    Attachment,
    Conversation,
    DeliveryState,
    Mention,
    Message,
    MessageFilters,
    MessageType,
    OutgoingQueueEntry,
    Reaction,
    ReactionSummary,
    StaffProfile,
)
from .outgoing import OutgoingQueue, upsert_entry
from .reactions import summarize_reactions
from .session import EventMessagingSession
from .storage import IStorage, Storage
from .store import MessageStore, merge_messages
from .sync import ConversationSync

__all__ = [
    # Session
    "EventMessagingSession",
    "ClientSettings",
    # Models
    "Message",
    "MessageType",
    "DeliveryState",
    "Attachment",
    "Mention",
    "Reaction",
    "ReactionSummary",
    "OutgoingQueueEntry",
    "Conversation",
    "MessageFilters",
    "StaffProfile",
    # Core
    "MentionParser",
    "parse_mentions",
    "summarize_reactions",
    "OutgoingQueue",
    "upsert_entry",
    "MessageStore",
    "merge_messages",
    "ConversationSync",
    "ConversationState",
    "apply_filters",
    "MessageComposer",
    "IEventBus",
    "EventBus",
    # Collaborators
    "IMessagingGateway",
    "MessagingGateway",
    "IAttachmentUploader",
    "AttachmentUploader",
    "GatewayError",
    # Backend
    "Application",
    "IApplication",
    "IStorage",
    "Storage",
    "ITranslator",
    "Translator",
]
