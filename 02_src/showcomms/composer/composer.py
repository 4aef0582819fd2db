"""MessageComposer: builds, sends and retries messages."""

import asyncio
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from typing import Iterable

from ..config import DEFAULT_LANGUAGE
from ..event_bus import IEventBus
from ..gateway import GatewayError, IAttachmentUploader, IMessagingGateway
from ..logging_config import get_logger, log_context
from ..mentions import MentionParser
from ..models import (
    Attachment,
    AttachmentFile,
    BusMessage,
    DeliveryState,
    Message,
    MessageType,
    OutgoingMessage,
    Topic,
    local_placeholder_id,
    sanitize_body,
)
from ..outgoing import OutgoingQueue
from ..store import MessageStore

logger = get_logger(__name__)


def create_client_message_id() -> str:
    """A fresh identifier for a newly composed message."""
    return str(uuid.uuid4())


class MessageComposer:
    """Control center for outgoing messages.

    A send inserts an optimistic message and a queue entry before the network
    call, then settles both to sent or failed. Retries, manual or triggered
    by regained connectivity, resend under the original client_message_id.
    """

    def __init__(
        self,
        event_id: str,
        current_user_id: str,
        gateway: IMessagingGateway,
        store: MessageStore,
        queue: OutgoingQueue,
        event_bus: IEventBus,
        parser: MentionParser | None = None,
        uploader: IAttachmentUploader | None = None,
        author_name: str = "You",
        language_hint: str = DEFAULT_LANGUAGE,
    ):
        self._event_id = event_id
        self._current_user_id = current_user_id
        self._gateway = gateway
        self._store = store
        self._queue = queue
        self._event_bus = event_bus
        self._parser = parser or MentionParser()
        self._uploader = uploader
        self._author_name = author_name

        # Draft state
        self.draft_text = ""
        self.pending_attachments: list[Attachment] = []
        self.language_hint = language_hint
        self.uploading = False
        self.status = ""

        self._resends: set[asyncio.Task] = set()
        self._subscribed = False

    async def start(self) -> None:
        """Subscribe to connectivity changes."""
        if not self._subscribed:
            self._event_bus.subscribe(Topic.CONNECTIVITY, self._handle_connectivity)
            self._subscribed = True

    async def stop(self) -> None:
        """Unsubscribe from connectivity changes."""
        if self._subscribed:
            self._event_bus.unsubscribe(Topic.CONNECTIVITY, self._handle_connectivity)
            self._subscribed = False

    def insert_chip(self, text: str) -> str:
        """Append a smart reply or ops shortcut to the draft."""
        self.draft_text = f"{self.draft_text}{' ' if self.draft_text else ''}{text}".strip()
        return self.draft_text

    async def upload_attachments(self, files: Iterable[AttachmentFile]) -> list[Attachment]:
        """Upload files and add them to the pending attachments.

        A failure discards the whole batch; the draft and earlier pending
        attachments are kept.
        """
        files = list(files)
        if not files:
            return []
        if self._uploader is None:
            raise RuntimeError("No attachment uploader configured")

        self.uploading = True
        uploaded: list[Attachment] = []
        try:
            for file in files:
                uploaded.append(await self._uploader.upload(file, self._event_id))
        except GatewayError as e:
            self.status = f"Attachment upload failed: {e}"
            logger.warning(
                "Attachment batch aborted",
                extra=log_context(event_id=self._event_id, files=len(files), error=str(e)),
            )
            return []
        finally:
            self.uploading = False

        self.pending_attachments.extend(uploaded)
        plural = "" if len(uploaded) == 1 else "s"
        self.status = f"{len(uploaded)} attachment{plural} uploaded."
        return uploaded

    async def send(
        self,
        body_text: str | None = None,
        attachments: list[Attachment] | None = None,
        language_hint: str | None = None,
    ) -> Message | None:
        """Send the draft (or the given text/attachments).

        Returns the message as stored locally after the attempt, or None when
        there was nothing to send.
        """
        return await self._deliver(
            client_message_id=create_client_message_id(),
            body_text=self.draft_text if body_text is None else body_text,
            attachments=self.pending_attachments if attachments is None else attachments,
            language_hint=language_hint or self.language_hint,
            is_retry=False,
        )

    async def retry(self, client_message_id: str) -> Message | None:
        """Resend a message under its original client_message_id."""
        entry = self._queue.get(client_message_id)
        message = self._store.get_by_client_id(client_message_id)
        if entry is None and message is None:
            logger.warning(
                "Retry requested for unknown message",
                extra=log_context(client_message_id=client_message_id),
            )
            return None

        source = entry or message
        return await self._deliver(
            client_message_id=client_message_id,
            body_text=source.body_text or "",
            attachments=list(source.attachments or []),
            language_hint=source.language_hint or self.language_hint,
            message_id=message.id if message else None,
            created_at=message.created_at if message and message.id else None,
            is_retry=True,
        )

    def resend_failed(self) -> list[asyncio.Task]:
        """Start a resend for every failed queue entry without waiting on them."""
        tasks = []
        for entry in self._queue.failed_entries():
            task = asyncio.create_task(self.retry(entry.client_message_id))
            self._resends.add(task)
            task.add_done_callback(self._resends.discard)
            tasks.append(task)
        if tasks:
            logger.info(
                "Resending failed messages",
                extra=log_context(event_id=self._event_id, count=len(tasks)),
            )
        return tasks

    async def _handle_connectivity(self, bus_message: BusMessage) -> None:
        if bus_message.payload.get("online"):
            self.resend_failed()

    async def _deliver(
        self,
        client_message_id: str,
        body_text: str,
        attachments: list[Attachment],
        language_hint: str,
        message_id: str | None = None,
        created_at: datetime | None = None,
        is_retry: bool = False,
    ) -> Message | None:
        body = sanitize_body(body_text)
        attachments = list(attachments or [])
        if not body and not attachments:
            return None

        mentions = self._parser.parse(body)
        optimistic = Message(
            client_message_id=client_message_id,
            event_id=self._event_id,
            id=message_id,
            local_id=None if message_id else local_placeholder_id(client_message_id),
            author_user_id=self._current_user_id,
            author_name=self._author_name,
            body_text=body,
            message_type=MessageType.USER,
            language_hint=language_hint,
            attachments=attachments,
            mentions=mentions,
            reactions=[],
            reaction_summary=[],
            created_at=created_at or datetime.now(timezone.utc),
            delivery_state=DeliveryState.SENDING,
        )

        self._store.merge([optimistic])
        self._queue.mark_sending(client_message_id, body, attachments, language_hint)

        if not is_retry:
            self.draft_text = ""
            self.pending_attachments = []

        try:
            saved = await self._gateway.send_message(
                self._event_id,
                OutgoingMessage(
                    client_message_id=client_message_id,
                    body_text=body,
                    language_hint=language_hint,
                    author_name=self._author_name,
                    mentions=mentions,
                    attachments=attachments,
                ),
            )
        except (GatewayError, asyncio.TimeoutError) as e:
            error = str(e) or e.__class__.__name__
            self._store.merge(
                [replace(optimistic, delivery_state=DeliveryState.FAILED, error_message=error)]
            )
            self._queue.mark_failed(client_message_id, error)
            self.status = f"Send failed: {error}"
            logger.warning(
                "Message delivery failed",
                extra=log_context(
                    event_id=self._event_id,
                    client_message_id=client_message_id,
                    retry=is_retry,
                    error=error,
                ),
            )
            await self._publish_delivery(client_message_id, DeliveryState.FAILED)
            return self._store.get_by_client_id(client_message_id)

        self._store.merge([replace(saved, delivery_state=DeliveryState.SENT)])
        self._queue.mark_sent(client_message_id)
        self.status = ""
        logger.info(
            "Message delivered",
            extra=log_context(
                event_id=self._event_id,
                client_message_id=client_message_id,
                message_id=saved.id,
                retry=is_retry,
            ),
        )
        await self._publish_delivery(client_message_id, DeliveryState.SENT)
        return self._store.get_by_client_id(client_message_id)

    async def _publish_delivery(self, client_message_id: str, state: DeliveryState) -> None:
        await self._event_bus.publish(
            BusMessage(
                id=str(uuid.uuid4()),
                topic=Topic.DELIVERY,
                payload={
                    "event_id": self._event_id,
                    "client_message_id": client_message_id,
                    "delivery_state": state.value,
                },
                source="composer",
                timestamp=datetime.now(timezone.utc),
            )
        )
