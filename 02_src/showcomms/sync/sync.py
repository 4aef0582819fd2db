"""ConversationSync: periodic fetch-and-merge while a conversation is open."""

import asyncio
from typing import Protocol

from ..config import DEFAULT_MESSAGE_LIMIT, DEFAULT_POLL_INTERVAL_SECONDS
from ..conversation import ConversationState
from ..gateway import GatewayError, IMessagingGateway
from ..logging_config import get_logger, log_context
from ..store import MessageStore

logger = get_logger(__name__)


class IConversationSync(Protocol):
    """Keeps a MessageStore and ConversationState fresh."""

    async def start(self) -> None:
        """Start the repeating poll timer."""
        ...

    async def stop(self) -> None:
        """Cancel the poll timer."""
        ...

    async def refresh(self) -> bool:
        """Fetch once and merge. Return False when the fetch failed."""
        ...


class ConversationSync:
    """Polls the gateway on a fixed interval and merges what comes back.

    Each tick starts its own fetch. A slow fetch is never cancelled by the
    next tick; whichever response arrives is merged by id, so overlapping
    responses cannot duplicate messages.
    """

    def __init__(
        self,
        event_id: str,
        gateway: IMessagingGateway,
        store: MessageStore,
        state: ConversationState,
        interval: float = DEFAULT_POLL_INTERVAL_SECONDS,
        limit: int = DEFAULT_MESSAGE_LIMIT,
    ):
        self._event_id = event_id
        self._gateway = gateway
        self._store = store
        self._state = state
        self._interval = interval
        self._limit = limit

        self._timer: asyncio.Task | None = None
        self._fetches: set[asyncio.Task] = set()
        self._running = False
        self.loading = False
        self.last_error: str = ""

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Start the repeating poll timer."""
        if self._running:
            return
        self._running = True
        self._timer = asyncio.create_task(self._poll_timer())
        logger.info(
            "Conversation sync started",
            extra=log_context(event_id=self._event_id, interval=self._interval),
        )

    async def stop(self) -> None:
        """Cancel the poll timer. Fetches already in flight still complete."""
        self._running = False
        if self._timer:
            self._timer.cancel()
            try:
                await self._timer
            except asyncio.CancelledError:
                pass
            self._timer = None
        logger.info("Conversation sync stopped", extra=log_context(event_id=self._event_id))

    async def refresh(self) -> bool:
        """Fetch messages and settings once and merge them into local state."""
        self.loading = True
        try:
            page = await self._gateway.list_messages(self._event_id, limit=self._limit)
        except GatewayError as e:
            self.last_error = f"Messaging load failed: {e}"
            logger.warning(
                "Message fetch failed",
                extra=log_context(event_id=self._event_id, error=str(e)),
            )
            return False
        finally:
            self.loading = False

        self._store.merge(page.messages)
        if page.conversation is not None:
            self._state.apply(page.conversation)
        else:
            await self._state.load()

        self.last_error = ""
        logger.debug(
            "Messages merged",
            extra=log_context(event_id=self._event_id, fetched=len(page.messages)),
        )
        return True

    async def _poll_timer(self) -> None:
        """Start a fetch every interval until stopped."""
        while self._running:
            try:
                await asyncio.sleep(self._interval)
                if not self._running:
                    break
                fetch = asyncio.create_task(self.refresh())
                self._fetches.add(fetch)
                fetch.add_done_callback(self._fetches.discard)
            except asyncio.CancelledError:
                break
