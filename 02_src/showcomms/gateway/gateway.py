"""Messaging gateway: the client's view of the authoritative message store."""

from dataclasses import dataclass, field
from typing import Any, Protocol

import httpx
from pydantic import TypeAdapter

from ..logging_config import get_logger, log_context
from ..models import (
    Conversation,
    DeliveryState,
    Message,
    OutgoingMessage,
    Reaction,
    ReactionSummary,
)

logger = get_logger(__name__)

_message_adapter = TypeAdapter(Message)
_messages_adapter = TypeAdapter(list[Message])
_conversation_adapter = TypeAdapter(Conversation)
_outgoing_adapter = TypeAdapter(OutgoingMessage)
_reactions_adapter = TypeAdapter(list[Reaction])
_summary_adapter = TypeAdapter(list[ReactionSummary])


class GatewayError(RuntimeError):
    """A call to the messaging backend failed (network, HTTP status, payload)."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class MessagePage:
    """Result of listing an event's messages."""

    messages: list[Message] = field(default_factory=list)
    conversation: Conversation | None = None


@dataclass
class ReactionToggleResult:
    """Reactions of a message after one toggle."""

    reactions: list[Reaction] = field(default_factory=list)
    reaction_summary: list[ReactionSummary] | None = None


@dataclass
class TranslationResponse:
    target_language: str
    translation: str


class IMessagingGateway(Protocol):
    """List/send/react/settings/translate contract of the message backend."""

    async def list_messages(self, event_id: str, limit: int = 150) -> MessagePage:
        """Fetch the latest messages and, when available, conversation settings."""
        ...

    async def send_message(self, event_id: str, message: OutgoingMessage) -> Message:
        """Persist a message. Repeating a client_message_id returns the same row."""
        ...

    async def toggle_reaction(self, message_id: str, emoji: str) -> ReactionToggleResult:
        """Add or remove the current user's reaction."""
        ...

    async def get_conversation(self, event_id: str) -> Conversation | None:
        """Fetch stored conversation settings, None when nothing is stored."""
        ...

    async def save_conversation(self, event_id: str, patch: dict[str, Any]) -> Conversation:
        """Persist a partial settings update and return the stored settings."""
        ...

    async def translate_message(
        self, message_id: str, target_language: str
    ) -> TranslationResponse:
        """Translate a stored message."""
        ...


def _decode_conversation(data: Any) -> Conversation:
    try:
        return _conversation_adapter.validate_python(data)
    except ValueError as e:
        raise GatewayError(f"Malformed conversation settings: {e}") from e


def decode_message(data: dict[str, Any]) -> Message:
    """Build a confirmed Message from a server row."""
    message = _message_adapter.validate_python(data)
    if message.delivery_state is None:
        message.delivery_state = DeliveryState.SENT
    return message


class MessagingGateway:
    """HTTP implementation of IMessagingGateway over httpx."""

    def __init__(
        self,
        base_url: str,
        user_id: str,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ):
        self._user_id = user_id
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def close(self) -> None:
        """Close the underlying HTTP client if this gateway created it."""
        if self._owns_client:
            await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> dict[str, Any]:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise GatewayError(f"Request to {path} failed: {e}") from e

        try:
            data = response.json()
        except ValueError:
            data = {}

        if response.is_error:
            detail = data.get("detail") if isinstance(data, dict) else None
            raise GatewayError(
                str(detail or f"{method} {path} returned {response.status_code}"),
                status_code=response.status_code,
            )
        if not isinstance(data, dict):
            raise GatewayError(f"Unexpected response body from {path}")
        return data

    async def list_messages(self, event_id: str, limit: int = 150) -> MessagePage:
        data = await self._request(
            "GET",
            f"/api/events/{event_id}/messages",
            params={"user_id": self._user_id, "limit": limit},
        )
        try:
            messages = [decode_message(row) for row in data.get("messages") or []]
            conversation = (
                _conversation_adapter.validate_python(data["conversation"])
                if data.get("conversation")
                else None
            )
        except ValueError as e:
            raise GatewayError(f"Malformed message page: {e}") from e
        return MessagePage(messages=messages, conversation=conversation)

    async def send_message(self, event_id: str, message: OutgoingMessage) -> Message:
        payload = _outgoing_adapter.dump_python(message, mode="json")
        payload["user_id"] = self._user_id
        data = await self._request("POST", f"/api/events/{event_id}/messages", json=payload)
        if not data.get("message"):
            raise GatewayError("Server did not return the saved message")
        try:
            saved = decode_message(data["message"])
        except ValueError as e:
            raise GatewayError(f"Malformed message: {e}") from e
        logger.debug(
            "Message acknowledged",
            extra=log_context(
                event_id=event_id,
                client_message_id=message.client_message_id,
                message_id=saved.id,
            ),
        )
        return saved

    async def toggle_reaction(self, message_id: str, emoji: str) -> ReactionToggleResult:
        if not emoji:
            raise GatewayError("emoji is required")
        data = await self._request(
            "POST",
            f"/api/messages/{message_id}/reactions",
            json={"user_id": self._user_id, "emoji": emoji},
        )
        try:
            reactions = _reactions_adapter.validate_python(data.get("reactions") or [])
            summary = (
                _summary_adapter.validate_python(data["reaction_summary"])
                if data.get("reaction_summary") is not None
                else None
            )
        except ValueError as e:
            raise GatewayError(f"Malformed reactions: {e}") from e
        return ReactionToggleResult(reactions=reactions, reaction_summary=summary)

    async def get_conversation(self, event_id: str) -> Conversation | None:
        data = await self._request("GET", f"/api/events/{event_id}/conversation")
        if not data.get("conversation"):
            return None
        return _decode_conversation(data["conversation"])

    async def save_conversation(self, event_id: str, patch: dict[str, Any]) -> Conversation:
        data = await self._request(
            "PUT", f"/api/events/{event_id}/conversation", json=patch
        )
        if not data.get("conversation"):
            raise GatewayError("Server did not return the saved conversation")
        return _decode_conversation(data["conversation"])

    async def translate_message(
        self, message_id: str, target_language: str
    ) -> TranslationResponse:
        data = await self._request(
            "POST",
            f"/api/messages/{message_id}/translate",
            json={"target_language": target_language},
        )
        return TranslationResponse(
            target_language=data.get("target_language") or target_language,
            translation=data.get("translation") or "",
        )
