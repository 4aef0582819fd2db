"""Messaging API routes."""

from dataclasses import asdict
from typing import Any

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, Field, TypeAdapter

from ...app import Application
from ...logging_config import get_logger, log_context
from ...models import (
    Attachment,
    Mention,
    Message,
    MessageType,
    OutgoingMessage,
    Reaction,
    ReactionSummary,
    sanitize_body,
)
from ...reactions import summarize_reactions

logger = get_logger(__name__)

_messages_adapter = TypeAdapter(list[Message])
_message_adapter = TypeAdapter(Message)
_reactions_adapter = TypeAdapter(list[Reaction])
_summary_adapter = TypeAdapter(list[ReactionSummary])


class SendMessageRequest(BaseModel):
    """Request model for sending a message."""

    user_id: str
    client_message_id: str = Field(min_length=1)
    body_text: str = ""
    language_hint: str = "en"
    author_name: str | None = None
    message_type: MessageType = MessageType.USER
    mentions: list[Mention] = Field(default_factory=list)
    attachments: list[Attachment] = Field(default_factory=list)


class ToggleReactionRequest(BaseModel):
    """Request model for toggling a reaction."""

    user_id: str
    emoji: str = Field(min_length=1)


class TranslateRequest(BaseModel):
    """Request model for translating a message."""

    target_language: str = "es"


class TranslateResponse(BaseModel):
    """Response model for a translation."""

    message_id: str
    target_language: str
    translation: str


def create_messaging_router(app: Application) -> APIRouter:
    """Create messaging router."""
    router = APIRouter(prefix="/api", tags=["messaging"])

    @router.get("/events/{event_id}/messages")
    async def list_messages(
        event_id: str,
        user_id: str | None = Query(None, description="Viewer, for reacted flags"),
        limit: int = Query(150, ge=1, le=500),
    ) -> dict[str, Any]:
        """List the latest messages of an event with its conversation settings."""
        try:
            messages = await app.storage.list_messages(event_id, limit=limit, user_id=user_id)
            conversation = await app.storage.get_conversation(event_id)
            return {
                "messages": _messages_adapter.dump_python(messages, mode="json"),
                "conversation": asdict(conversation) if conversation else None,
            }
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    @router.post("/events/{event_id}/messages")
    async def send_message(event_id: str, request: SendMessageRequest) -> dict[str, Any]:
        """Save a message; repeating a client_message_id returns the same row."""
        if not sanitize_body(request.body_text) and not request.attachments:
            raise HTTPException(
                status_code=422, detail="Message needs text or an attachment"
            )
        try:
            saved = await app.storage.save_message(
                event_id,
                request.user_id,
                OutgoingMessage(
                    client_message_id=request.client_message_id,
                    body_text=request.body_text,
                    language_hint=request.language_hint,
                    author_name=request.author_name,
                    mentions=request.mentions,
                    attachments=request.attachments,
                ),
                message_type=request.message_type,
            )
        except Exception as e:
            logger.error(
                "Message save failed",
                extra=log_context(event_id=event_id, error=str(e)),
            )
            raise HTTPException(status_code=500, detail=str(e))
        return {"message": _message_adapter.dump_python(saved, mode="json")}

    @router.post("/messages/{message_id}/reactions")
    async def toggle_reaction(
        message_id: str, request: ToggleReactionRequest
    ) -> dict[str, Any]:
        """Toggle one user's reaction and return the message's reactions."""
        try:
            reactions = await app.storage.toggle_reaction(
                message_id, request.user_id, request.emoji
            )
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        if reactions is None:
            raise HTTPException(status_code=404, detail="Message not found")
        return {
            "reactions": _reactions_adapter.dump_python(reactions, mode="json"),
            "reaction_summary": _summary_adapter.dump_python(
                summarize_reactions(reactions, request.user_id), mode="json"
            ),
        }

    @router.post("/messages/{message_id}/translate", response_model=TranslateResponse)
    async def translate_message(message_id: str, request: TranslateRequest) -> dict:
        """Translate a stored message."""
        translator = app.translator
        if translator is None:
            raise HTTPException(status_code=503, detail="Translation is not configured")

        message = await app.storage.get_message(message_id)
        if message is None:
            raise HTTPException(status_code=404, detail="Message not found")

        try:
            translation = await translator.translate(
                message.body_text or "",
                request.target_language,
                source_language=message.language_hint,
            )
        except Exception as e:
            logger.warning(
                "Translation failed",
                extra=log_context(message_id=message_id, error=str(e)),
            )
            raise HTTPException(status_code=500, detail=str(e))

        return {
            "message_id": message_id,
            "target_language": request.target_language,
            "translation": translation,
        }

    return router
