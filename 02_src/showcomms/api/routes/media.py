"""Attachment upload API routes."""

import base64
import binascii
import re
from typing import Any

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import FileResponse
from pydantic import BaseModel, ConfigDict, Field

from ...app import Application
from ...logging_config import get_logger, log_context

logger = get_logger(__name__)

_DATA_URL_PREFIX = re.compile(r"^data:[^;,]*;base64,")


class MediaRequest(BaseModel):
    """Upload request in the media endpoint's camelCase wire format."""

    model_config = ConfigDict(populate_by_name=True)

    action: str
    base64: str = ""
    user_id: str = Field("", alias="userId")
    event_id: str | None = Field(None, alias="eventId")
    category: str = "general"
    label: str = ""
    file_name: str | None = Field(None, alias="fileName")
    mime_type: str = Field("application/octet-stream", alias="mimeType")


def decode_data_url(value: str) -> bytes:
    """Decode base64 data, with or without a data: URL prefix."""
    try:
        return base64.b64decode(_DATA_URL_PREFIX.sub("", value.strip()), validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"Invalid base64 payload: {e}") from e


def create_media_router(app: Application) -> APIRouter:
    """Create media router."""
    router = APIRouter(prefix="/api/media", tags=["media"])

    @router.post("")
    async def media_action(request: MediaRequest, http_request: Request) -> dict[str, Any]:
        """Store an uploaded attachment and return its public URL."""
        if request.action != "upload":
            raise HTTPException(status_code=400, detail=f"Unsupported action: {request.action}")
        if not request.base64 or not request.user_id:
            raise HTTPException(status_code=400, detail="File payload and userId are required")

        try:
            data = decode_data_url(request.base64)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

        try:
            path = await app.media.save(request.user_id, request.file_name or "", data)
        except OSError as e:
            logger.error(
                "Attachment write failed",
                extra=log_context(event_id=request.event_id, error=str(e)),
            )
            raise HTTPException(status_code=500, detail=str(e))

        logger.info(
            "Attachment stored",
            extra=log_context(
                event_id=request.event_id,
                category=request.category,
                path=path,
                size=len(data),
            ),
        )
        return {
            "success": True,
            "url": str(http_request.url_for("get_media", file_path=path)),
            "path": path,
            "mime_type": request.mime_type,
            "size": len(data),
        }

    @router.get("/{file_path:path}", name="get_media")
    async def get_media(file_path: str) -> FileResponse:
        """Serve a stored attachment."""
        target = app.media.resolve(file_path)
        if target is None:
            raise HTTPException(status_code=404, detail="File not found")
        return FileResponse(target)

    return router
