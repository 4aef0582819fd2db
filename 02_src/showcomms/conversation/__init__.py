"""Conversation module: settings and filtering."""

from .filters import apply_filters, is_critical, matches_filters, mentions_user
from .state import ConversationState

__all__ = [
    "ConversationState",
    "apply_filters",
    "is_critical",
    "matches_filters",
    "mentions_user",
]
