"""EventMessagingSession: the lifecycle of one event's messaging view."""

from typing import Any, Iterable

from .composer import MessageComposer
from .config import DEFAULT_LANGUAGE, DEFAULT_TRANSLATION_TARGET, ClientSettings
from .conversation import ConversationState, apply_filters
from .event_bus import EventBus
from .gateway import GatewayError, IAttachmentUploader, IMessagingGateway
from .logging_config import get_logger, log_context
from .mentions import MentionParser
from .models import (
    Conversation,
    DeliveryState,
    Message,
    MessageFilters,
    StaffProfile,
    TranslationResult,
)
from .outgoing import OutgoingQueue
from .reactions import summarize_reactions
from .store import MessageStore
from .sync import ConversationSync

logger = get_logger(__name__)


class EventMessagingSession:
    """Wires store, queue, sync, settings and composer for one event.

    mount() loads the conversation and starts polling; unmount() stops the
    poll timer and the reconnect subscription. Switching events tears the
    view down and mounts it again for the new event. Message lists and outgoing
    queues are kept per event for the whole session, so switching back finds
    failed messages still waiting for a retry.
    """

    def __init__(
        self,
        event_id: str,
        current_user_id: str,
        gateway: IMessagingGateway,
        settings: ClientSettings | None = None,
        uploader: IAttachmentUploader | None = None,
        staff_roster: Iterable[StaffProfile] = (),
        role_keys: Iterable[str] | None = None,
        current_user_roles: Iterable[str] = (),
        author_name: str = "You",
        event_bus: EventBus | None = None,
    ):
        self._current_user_id = current_user_id
        self._gateway = gateway
        self._settings = settings or ClientSettings()
        self._uploader = uploader
        self._parser = MentionParser(staff_roster, list(role_keys) if role_keys else None)
        self._current_user_roles = list(current_user_roles)
        self._author_name = author_name

        self.event_bus = event_bus or EventBus()
        self._queues: dict[str, OutgoingQueue] = {}
        self._stores: dict[str, MessageStore] = {}
        self.filters = MessageFilters()
        self.translations: dict[str, TranslationResult] = {}
        self.status = ""
        self._mounted = False

        self._build(event_id)

    def _build(self, event_id: str, language_hint: str = DEFAULT_LANGUAGE) -> None:
        self.event_id = event_id
        self.queue = self._queues.setdefault(event_id, OutgoingQueue())
        self.store = self._stores.setdefault(event_id, MessageStore())
        self.state = ConversationState(event_id, self._gateway)
        self.sync = ConversationSync(
            event_id,
            self._gateway,
            self.store,
            self.state,
            interval=self._settings.poll_interval_seconds,
            limit=self._settings.message_limit,
        )
        self.composer = MessageComposer(
            event_id=event_id,
            current_user_id=self._current_user_id,
            gateway=self._gateway,
            store=self.store,
            queue=self.queue,
            event_bus=self.event_bus,
            parser=self._parser,
            uploader=self._uploader,
            author_name=self._author_name,
            language_hint=language_hint,
        )
        self.translations = {}

    @property
    def mounted(self) -> bool:
        return self._mounted

    @property
    def conversation(self) -> Conversation:
        return self.state.conversation

    async def mount(self) -> None:
        """Load messages and settings, then start polling and reconnect handling."""
        if self._mounted:
            return
        self._mounted = True
        if not await self.sync.refresh():
            self.status = self.sync.last_error
        await self.sync.start()
        await self.composer.start()
        logger.info("Messaging view mounted", extra=log_context(event_id=self.event_id))

    async def unmount(self) -> None:
        """Tear down the poll timer and the reconnect subscription."""
        if not self._mounted:
            return
        await self.sync.stop()
        await self.composer.stop()
        self._mounted = False
        logger.info("Messaging view unmounted", extra=log_context(event_id=self.event_id))

    async def switch_event(self, event_id: str) -> None:
        """Move the view to another event."""
        if event_id == self.event_id:
            return
        await self.unmount()
        self._build(event_id, self.composer.language_hint)
        await self.mount()

    async def refresh(self) -> bool:
        """Manual refresh."""
        ok = await self.sync.refresh()
        self.status = "" if ok else self.sync.last_error
        return ok

    async def set_online(self, online: bool) -> None:
        """Report a connectivity change; regaining it resends failed messages."""
        await self.event_bus.publish_connectivity(online)

    @property
    def visible_messages(self) -> list[Message]:
        """Messages after filters and the mute rule."""
        return apply_filters(
            self.store.messages,
            self.filters,
            self.state.conversation,
            self._current_user_id,
            self._current_user_roles,
        )

    @property
    def queue_summary(self) -> dict[DeliveryState, int]:
        return self.queue.summary()

    async def update_conversation(self, **changes: Any) -> Conversation:
        """Toggle show mode / mute or change the pinned command, then save."""
        conversation = await self.state.update(**changes)
        self.status = (
            f"Conversation settings failed: {self.state.error}"
            if self.state.error
            else "Conversation settings saved."
        )
        return conversation

    async def toggle_reaction(self, message: Message, emoji: str) -> Message | None:
        """Toggle the current user's reaction on a confirmed message."""
        if not message or not message.id or not emoji:
            return None
        try:
            result = await self._gateway.toggle_reaction(message.id, emoji)
        except GatewayError as e:
            self.status = f"Reaction failed: {e}"
            logger.warning(
                "Reaction toggle failed",
                extra=log_context(event_id=self.event_id, message_id=message.id, error=str(e)),
            )
            return None

        summary = result.reaction_summary
        if summary is None:
            summary = summarize_reactions(result.reactions, self._current_user_id)
        return self.store.update_reactions(message.id, result.reactions, summary)

    async def translate(
        self, message: Message, target_language: str = DEFAULT_TRANSLATION_TARGET
    ) -> TranslationResult | None:
        """Translate one message into its inline translation panel.

        Errors stay on that message's panel and never touch delivery state.
        """
        if not message or not message.id or not message.body_text:
            return None

        previous = self.translations.get(message.id)
        self.translations[message.id] = TranslationResult(
            language=target_language,
            text=previous.text if previous else "",
            loading=True,
        )
        try:
            response = await self._gateway.translate_message(message.id, target_language)
        except GatewayError as e:
            result = TranslationResult(language=target_language, error=str(e))
            logger.warning(
                "Translation failed",
                extra=log_context(message_id=message.id, language=target_language, error=str(e)),
            )
        else:
            result = TranslationResult(
                language=response.target_language or target_language,
                text=response.translation,
            )
        self.translations[message.id] = result
        return result
