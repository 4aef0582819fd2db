"""Gateway module: clients for the messaging backend and media storage."""

from .gateway import (
    GatewayError,
    IMessagingGateway,
    MessagePage,
    MessagingGateway,
    ReactionToggleResult,
    TranslationResponse,
    decode_message,
)
from .uploader import AttachmentUploader, IAttachmentUploader

__all__ = [
    "GatewayError",
    "IMessagingGateway",
    "MessagingGateway",
    "MessagePage",
    "ReactionToggleResult",
    "TranslationResponse",
    "decode_message",
    "IAttachmentUploader",
    "AttachmentUploader",
]
