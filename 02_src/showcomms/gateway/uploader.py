"""Attachment upload client."""

import base64
from typing import Protocol

import httpx

from ..logging_config import get_logger, log_context
from ..models import Attachment, AttachmentFile
from .gateway import GatewayError

logger = get_logger(__name__)


class IAttachmentUploader(Protocol):
    """Binary storage for message attachments."""

    async def upload(self, file: AttachmentFile, event_id: str) -> Attachment:
        """Store a file and return the attachment that references it."""
        ...


class AttachmentUploader:
    """Uploads files as base64 JSON to the media endpoint."""

    def __init__(
        self,
        upload_url: str,
        user_id: str,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ):
        self._upload_url = upload_url
        self._user_id = user_id
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def upload(self, file: AttachmentFile, event_id: str) -> Attachment:
        """Upload one file; raise GatewayError unless the server returns a URL."""
        encoded = base64.b64encode(file.data).decode("ascii")
        payload = {
            "action": "upload",
            "base64": f"data:{file.mime_type};base64,{encoded}",
            "userId": self._user_id,
            "eventId": event_id,
            "category": "event_message",
            "label": file.name or "Attachment",
            "fileName": file.name,
            "mimeType": file.mime_type,
        }
        try:
            response = await self._client.post(self._upload_url, json=payload)
        except httpx.HTTPError as e:
            raise GatewayError(f"Upload failed for {file.name}: {e}") from e

        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        if response.is_error or data.get("success") is False or not data.get("url"):
            raise GatewayError(
                data.get("error") or f"Upload failed for {file.name}",
                status_code=response.status_code,
            )

        logger.info(
            "Attachment uploaded",
            extra=log_context(event_id=event_id, name=file.name, size=file.size),
        )
        return Attachment(
            url=data["url"],
            name=file.name or "Attachment",
            mime_type=file.mime_type or "",
            size=file.size,
        )
