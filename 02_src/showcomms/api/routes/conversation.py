"""Conversation settings API routes."""

from dataclasses import asdict
from typing import Any

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from ...app import Application


class ConversationPatch(BaseModel):
    """Partial update of conversation settings."""

    show_mode_enabled: bool | None = None
    mute_non_critical: bool | None = None
    pinned_ops_commands: str | None = None


def create_conversation_router(app: Application) -> APIRouter:
    """Create conversation router."""
    router = APIRouter(prefix="/api/events", tags=["conversation"])

    @router.get("/{event_id}/conversation")
    async def get_conversation(event_id: str) -> dict[str, Any]:
        """Get stored settings; null when the event has none yet."""
        try:
            conversation = await app.storage.get_conversation(event_id)
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        return {"conversation": asdict(conversation) if conversation else None}

    @router.put("/{event_id}/conversation")
    async def save_conversation(event_id: str, patch: ConversationPatch) -> dict[str, Any]:
        """Merge the provided settings into the stored ones."""
        try:
            conversation = await app.storage.save_conversation(
                event_id, patch.model_dump(exclude_none=True)
            )
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        return {"conversation": asdict(conversation)}

    return router
