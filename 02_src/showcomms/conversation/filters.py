"""Message list filtering and mute rules."""

from typing import Iterable

from ..config import URGENCY_KEYWORDS
from ..models import Conversation, Message, MessageFilters, MessageType


def is_critical(message: Message) -> bool:
    """Critical system message, or body text carrying an urgency keyword."""
    if message.message_type is MessageType.SYSTEM_CRITICAL:
        return True
    text = str(message.body_text or "").lower()
    return any(keyword in text for keyword in URGENCY_KEYWORDS)


def mentions_user(
    message: Message,
    user_id: str | None,
    role_keys: Iterable[str] = (),
) -> bool:
    """True when the message mentions the user directly or one of their roles."""
    roles = {str(key).lower() for key in role_keys}
    for mention in message.mentions or ():
        if user_id and mention.mentioned_user_id == user_id:
            return True
        if mention.mentioned_role_key and mention.mentioned_role_key.lower() in roles:
            return True
    return False


def matches_filters(message: Message, filters: MessageFilters) -> bool:
    if filters.attachments_only and not message.has_attachments:
        return False
    if filters.mentions_only and not message.mentions:
        return False
    if filters.system_only and message.message_type is not MessageType.SYSTEM:
        return False

    query = str(filters.query or "").strip().lower()
    if not query:
        return True
    haystack = " ".join(
        str(value or "").lower()
        for value in (message.body_text, message.author_name, message.language_hint)
    )
    return query in haystack


def apply_filters(
    messages: Iterable[Message],
    filters: MessageFilters | None = None,
    conversation: Conversation | None = None,
    current_user_id: str | None = None,
    current_user_roles: Iterable[str] = (),
) -> list[Message]:
    """Messages that pass every active filter, in their original order.

    With mute_non_critical only critical messages and messages that mention
    the current user (directly or through one of current_user_roles) remain.
    """
    filters = filters or MessageFilters()
    roles = list(current_user_roles)
    visible = [m for m in messages or () if matches_filters(m, filters)]
    if conversation is not None and conversation.mute_non_critical:
        visible = [
            m for m in visible
            if is_critical(m) or mentions_user(m, current_user_id, roles)
        ]
    return visible
