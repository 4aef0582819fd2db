"""Per-event conversation settings with load/save round-trip."""

from dataclasses import asdict, fields, replace
from typing import Any

from ..gateway import GatewayError, IMessagingGateway
from ..logging_config import get_logger, log_context
from ..models import Conversation

logger = get_logger(__name__)

_SETTING_FIELDS = {f.name for f in fields(Conversation)} - {"event_id"}


class ConversationState:
    """Show mode, mute and pinned command settings for one event.

    Every explicit change is saved immediately. A failed load or save keeps
    the local values and records the error in `error`.
    """

    def __init__(self, event_id: str, gateway: IMessagingGateway):
        self._event_id = event_id
        self._gateway = gateway
        self._conversation = Conversation(event_id=event_id)
        self.saving = False
        self.error: str = ""

    @property
    def event_id(self) -> str:
        return self._event_id

    @property
    def conversation(self) -> Conversation:
        return replace(self._conversation)

    @property
    def show_mode_enabled(self) -> bool:
        return self._conversation.show_mode_enabled

    @property
    def mute_non_critical(self) -> bool:
        return self._conversation.mute_non_critical

    @property
    def pinned_ops_commands(self) -> str:
        return self._conversation.pinned_ops_commands

    def apply(self, conversation: Conversation | None) -> Conversation:
        """Adopt server settings; missing state resets to defaults."""
        if conversation is None:
            self._conversation = Conversation(event_id=self._event_id)
        else:
            self._conversation = replace(conversation, event_id=self._event_id)
        return self.conversation

    async def load(self) -> Conversation:
        """Fetch stored settings, falling back to defaults."""
        try:
            stored = await self._gateway.get_conversation(self._event_id)
        except GatewayError as e:
            self.error = str(e)
            logger.warning(
                "Conversation load failed",
                extra=log_context(event_id=self._event_id, error=str(e)),
            )
            return self.conversation
        self.error = ""
        return self.apply(stored)

    def edit_pinned_commands(self, text: str) -> None:
        """Local edit of the pinned command; persisted by save()."""
        self._conversation.pinned_ops_commands = text

    async def update(self, **changes: Any) -> Conversation:
        """Apply setting changes locally, then persist them."""
        unknown = set(changes) - _SETTING_FIELDS
        if unknown:
            raise ValueError(f"Unknown conversation settings: {sorted(unknown)}")
        self._conversation = replace(self._conversation, **changes)
        return await self.save()

    async def save(self) -> Conversation:
        """Persist the current settings and adopt the stored copy."""
        patch = asdict(self._conversation)
        patch.pop("event_id")
        self.saving = True
        try:
            saved = await self._gateway.save_conversation(self._event_id, patch)
        except GatewayError as e:
            self.error = str(e)
            logger.warning(
                "Conversation save failed",
                extra=log_context(event_id=self._event_id, error=str(e)),
            )
            return self.conversation
        finally:
            self.saving = False

        self.error = ""
        logger.info(
            "Conversation settings saved",
            extra=log_context(event_id=self._event_id, **patch),
        )
        return self.apply(saved)
