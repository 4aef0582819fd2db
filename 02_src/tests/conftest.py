"""Pytest configuration and fixtures."""

import sys
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import pytest
import pytest_asyncio

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from showcomms.gateway import (  # noqa: E402
    GatewayError,
    MessagePage,
    ReactionToggleResult,
    TranslationResponse,
)
from showcomms.models import (  # noqa: E402
    Conversation,
    DeliveryState,
    Message,
    MessageType,
    OutgoingMessage,
    Reaction,
    StaffProfile,
)
from showcomms.reactions import summarize_reactions, toggle_reaction_rows  # noqa: E402


class FakeGateway:
    """In-memory messaging backend with switchable failures."""

    def __init__(self, user_id: str = "u1"):
        self.user_id = user_id
        self.messages: dict[str, list[Message]] = {}
        self.conversations: dict[str, Conversation] = {}
        self.reactions: dict[str, list[Reaction]] = {}

        self.fail_sends = False
        self.fail_lists = False
        self.fail_reactions = False
        self.fail_conversations = False
        self.fail_translations = False

        self.send_calls: list[OutgoingMessage] = []
        self.list_calls = 0
        self.saved_patches: list[dict[str, Any]] = []

        self._clock = datetime(2024, 6, 1, 20, 0, tzinfo=timezone.utc)
        self._ids = 0

    def _next_timestamp(self) -> datetime:
        self._ids += 1
        return self._clock + timedelta(seconds=self._ids)

    def _with_reactions(self, message: Message) -> Message:
        rows = list(self.reactions.get(message.id, []))
        return replace(
            message,
            reactions=rows,
            reaction_summary=summarize_reactions(rows, self.user_id),
        )

    def add_server_message(
        self,
        event_id: str,
        body_text: str,
        author_user_id: str = "u9",
        author_name: str = "Ops Bot",
        message_type: MessageType = MessageType.USER,
        **kwargs,
    ) -> Message:
        """Seed a message authored elsewhere."""
        self._ids += 1
        message = Message(
            client_message_id=kwargs.pop("client_message_id", f"server-{self._ids}"),
            event_id=event_id,
            id=f"m{self._ids}",
            author_user_id=author_user_id,
            author_name=author_name,
            body_text=body_text,
            message_type=message_type,
            language_hint=kwargs.pop("language_hint", "en"),
            attachments=kwargs.pop("attachments", []),
            mentions=kwargs.pop("mentions", []),
            reactions=[],
            reaction_summary=[],
            created_at=self._clock + timedelta(seconds=self._ids),
            delivery_state=DeliveryState.SENT,
        )
        self.messages.setdefault(event_id, []).append(message)
        return message

    async def list_messages(self, event_id: str, limit: int = 150) -> MessagePage:
        self.list_calls += 1
        if self.fail_lists:
            raise GatewayError("network down")
        rows = self.messages.get(event_id, [])[-limit:]
        return MessagePage(
            messages=[self._with_reactions(m) for m in rows],
            conversation=self.conversations.get(event_id),
        )

    async def send_message(self, event_id: str, message: OutgoingMessage) -> Message:
        self.send_calls.append(message)
        if self.fail_sends:
            raise GatewayError("network down")
        for existing in self.messages.get(event_id, []):
            if existing.client_message_id == message.client_message_id:
                return self._with_reactions(existing)

        saved = Message(
            client_message_id=message.client_message_id,
            event_id=event_id,
            id=f"m{self._ids + 1}",
            author_user_id=self.user_id,
            author_name=message.author_name,
            body_text=message.body_text,
            message_type=MessageType.USER,
            language_hint=message.language_hint,
            attachments=list(message.attachments),
            mentions=list(message.mentions),
            reactions=[],
            reaction_summary=[],
            created_at=self._next_timestamp(),
            delivery_state=DeliveryState.SENT,
        )
        self.messages.setdefault(event_id, []).append(saved)
        return replace(saved)

    async def toggle_reaction(self, message_id: str, emoji: str) -> ReactionToggleResult:
        if self.fail_reactions:
            raise GatewayError("network down")
        rows = toggle_reaction_rows(self.reactions.get(message_id, []), emoji, self.user_id)
        self.reactions[message_id] = rows
        return ReactionToggleResult(reactions=list(rows))

    async def get_conversation(self, event_id: str) -> Conversation | None:
        if self.fail_conversations:
            raise GatewayError("network down")
        stored = self.conversations.get(event_id)
        return replace(stored) if stored else None

    async def save_conversation(self, event_id: str, patch: dict[str, Any]) -> Conversation:
        if self.fail_conversations:
            raise GatewayError("network down")
        self.saved_patches.append(dict(patch))
        current = self.conversations.get(event_id) or Conversation(event_id=event_id)
        saved = replace(current, **patch)
        self.conversations[event_id] = saved
        return replace(saved)

    async def translate_message(
        self, message_id: str, target_language: str
    ) -> TranslationResponse:
        if self.fail_translations:
            raise GatewayError("translator offline")
        for rows in self.messages.values():
            for message in rows:
                if message.id == message_id:
                    return TranslationResponse(
                        target_language=target_language,
                        translation=f"[{target_language}] {message.body_text}",
                    )
        raise GatewayError("Message not found", status_code=404)


@pytest.fixture
def gateway():
    """In-memory messaging backend."""
    return FakeGateway(user_id="u1")


@pytest.fixture
def staff_roster():
    """A small crew roster."""
    return [
        StaffProfile(id="staff-1", display_name="Alex Rivera", first_name="Alex", last_name="Rivera"),
        StaffProfile(id="staff-2", first_name="Julie", last_name="Chen"),
    ]


@pytest.fixture
def event_bus():
    """Create EventBus."""
    from showcomms.event_bus import EventBus

    return EventBus()


@pytest.fixture
def store():
    """Empty local message store."""
    from showcomms.store import MessageStore

    return MessageStore()


@pytest.fixture
def queue():
    """Empty outgoing queue."""
    from showcomms.outgoing import OutgoingQueue

    return OutgoingQueue()


@pytest.fixture
def conversation_state(gateway):
    """Conversation settings for event e1."""
    from showcomms.conversation import ConversationState

    return ConversationState("e1", gateway)


@pytest_asyncio.fixture
async def composer(gateway, store, queue, event_bus, staff_roster):
    """Composer for event e1, subscribed to connectivity."""
    from showcomms.composer import MessageComposer
    from showcomms.mentions import MentionParser

    mc = MessageComposer(
        event_id="e1",
        current_user_id="u1",
        gateway=gateway,
        store=store,
        queue=queue,
        event_bus=event_bus,
        parser=MentionParser(staff_roster),
    )
    await mc.start()
    yield mc
    await mc.stop()


@pytest_asyncio.fixture
async def storage():
    """Create in-memory storage for testing."""
    from showcomms.storage import Storage

    st = Storage(":memory:")
    await st.init()
    yield st
    await st.close()


class StubTranslator:
    """Translator that tags text with the target language."""

    def __init__(self):
        self.calls: list[tuple[str, str, str | None]] = []

    async def translate(
        self, text: str, target_language: str, source_language: str | None = None
    ) -> str:
        self.calls.append((text, target_language, source_language))
        return f"[{target_language}] {text}"


@pytest.fixture
def translator():
    return StubTranslator()
