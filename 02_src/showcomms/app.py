"""Messaging backend bootstrap and lifecycle management."""

import os
from typing import Protocol

from .config import resolve_db_path, resolve_media_dir
from .llm import ITranslator, Translator
from .logging_config import get_logger
from .storage import IStorage, MediaStore, Storage

logger = get_logger(__name__)


class IApplication(Protocol):
    """Bootstrap and lifecycle."""

    async def start(self) -> None:
        """Initialize components in dependency order."""
        ...

    async def stop(self) -> None:
        """Shutdown in reverse order."""
        ...

    async def reset(self) -> None:
        """Reset data between test runs."""
        ...


class Application:
    """Messaging backend: storage plus optional translation."""

    def __init__(
        self,
        db_path: str | None = None,
        translator: ITranslator | None = None,
        media_dir: str | None = None,
    ):
        env_db_path = os.getenv("DATABASE_URL") if db_path is None else db_path
        self._db_path = resolve_db_path(env_db_path)
        self._media = MediaStore(resolve_media_dir(media_dir or os.getenv("MEDIA_DIR")))

        # Components (will be initialized in start())
        self._storage: IStorage | None = None
        self._translator: ITranslator | None = translator

    async def start(self) -> None:
        """Initialize components in dependency order."""
        logger.info("Starting application")

        # 1. Storage (no dependencies)
        self._storage = Storage(self._db_path)
        await self._storage.init()
        logger.info("Storage initialized")

        # 2. Translator (optional, needs an API key)
        if self._translator is None:
            try:
                self._translator = Translator()
                logger.info("Translator initialized")
            except ValueError as e:
                logger.warning("Translation disabled: %s", e)

        logger.info("All components initialized successfully")

    async def stop(self) -> None:
        """Shutdown in reverse order."""
        if self._storage:
            await self._storage.close()
            self._storage = None
            logger.info("Storage closed")

    async def reset(self) -> None:
        """Reset data between test runs."""
        if self._storage:
            await self._storage.clear()
            logger.info("Storage cleared")

    @property
    def storage(self) -> IStorage:
        """Get storage instance."""
        if not self._storage:
            raise RuntimeError("Application not started")
        return self._storage

    @property
    def media(self) -> MediaStore:
        """Get the attachment file store."""
        return self._media

    @property
    def translator(self) -> ITranslator | None:
        """Get translator instance, None when translation is disabled."""
        return self._translator
