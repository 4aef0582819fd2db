"""SQLite storage implementation of the messaging backend."""

import json
import uuid
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Protocol

import aiosqlite
from pydantic import TypeAdapter

from ..config import resolve_db_path
from ..models import (
    Attachment,
    Conversation,
    DeliveryState,
    Mention,
    Message,
    MessageType,
    OutgoingMessage,
    Reaction,
    sanitize_body,
)
from ..reactions import summarize_reactions

_attachments_adapter = TypeAdapter(list[Attachment])
_mentions_adapter = TypeAdapter(list[Mention])

_MESSAGE_COLUMNS = """
    id, event_id, client_message_id, author_user_id, author_name, body_text,
    message_type, language_hint, attachments, mentions, created_at
"""


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


class IStorage(Protocol):
    """Persistent storage for messages, reactions and conversation settings."""

    async def init(self) -> None:
        """Initialize database and create tables."""
        ...

    async def close(self) -> None:
        """Close database connection."""
        ...

    # Messages
    async def save_message(
        self,
        event_id: str,
        user_id: str,
        message: OutgoingMessage,
        message_type: MessageType = MessageType.USER,
    ) -> Message:
        """Save a message. A repeated client_message_id returns the stored row."""
        ...

    async def get_message(self, message_id: str, user_id: str | None = None) -> Message | None:
        """Get one message with its reactions."""
        ...

    async def list_messages(
        self, event_id: str, limit: int = 150, user_id: str | None = None
    ) -> list[Message]:
        """Get the latest messages of an event, oldest first."""
        ...

    # Reactions
    async def toggle_reaction(
        self, message_id: str, user_id: str, emoji: str
    ) -> list[Reaction] | None:
        """Add or remove a user's reaction. None when the message is unknown."""
        ...

    # Conversations
    async def get_conversation(self, event_id: str) -> Conversation | None:
        """Get stored conversation settings."""
        ...

    async def save_conversation(self, event_id: str, patch: dict[str, Any]) -> Conversation:
        """Merge a partial update into the stored settings."""
        ...

    # Lifecycle
    async def clear(self) -> None:
        """Clear all data."""
        ...


class Storage:
    """SQLite storage implementation."""

    def __init__(self, db_path: str | Path | None = None):
        if db_path is None:
            self._db_path = resolve_db_path()
        else:
            self._db_path = resolve_db_path(db_path)
        self._conn: aiosqlite.Connection | None = None

    async def init(self) -> None:
        """Initialize database and create tables."""
        self._conn = await aiosqlite.connect(self._db_path)

        schema_path = Path(__file__).parent / "schema.sql"
        with open(schema_path, "r", encoding="utf-8") as f:
            schema_sql = f.read()
        await self._conn.executescript(schema_sql)
        await self._conn.commit()

    async def close(self) -> None:
        """Close database connection."""
        if self._conn:
            await self._conn.close()
            self._conn = None

    def _require_conn(self) -> aiosqlite.Connection:
        if not self._conn:
            raise RuntimeError("Storage not initialized")
        return self._conn

    # Messages
    async def save_message(
        self,
        event_id: str,
        user_id: str,
        message: OutgoingMessage,
        message_type: MessageType = MessageType.USER,
    ) -> Message:
        """Save a message. A repeated client_message_id returns the stored row.

        The insert is a no-op when the (event_id, client_message_id) pair
        already exists, so concurrent resends of one message cannot collide.
        """
        conn = self._require_conn()

        await conn.execute(
            f"""
            INSERT INTO messages ({_MESSAGE_COLUMNS})
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT (event_id, client_message_id) DO NOTHING
            """,
            (
                str(uuid.uuid4()),
                event_id,
                message.client_message_id,
                user_id,
                message.author_name,
                sanitize_body(message.body_text),
                message_type.value,
                message.language_hint,
                json.dumps([asdict(a) for a in message.attachments]),
                json.dumps(_mentions_adapter.dump_python(message.mentions, mode="json")),
                _now(),
            ),
        )
        await conn.commit()

        cursor = await conn.execute(
            "SELECT id FROM messages WHERE event_id = ? AND client_message_id = ?",
            (event_id, message.client_message_id),
        )
        row = await cursor.fetchone()
        saved = await self.get_message(row[0], user_id) if row else None
        if saved is None:
            raise RuntimeError(
                f"Message {message.client_message_id} vanished after insert"
            )
        return saved

    async def get_message(self, message_id: str, user_id: str | None = None) -> Message | None:
        """Get one message with its reactions."""
        conn = self._require_conn()

        cursor = await conn.execute(
            f"SELECT {_MESSAGE_COLUMNS} FROM messages WHERE id = ?",
            (message_id,),
        )
        row = await cursor.fetchone()
        if not row:
            return None

        reactions = await self._get_reactions([message_id])
        return self._row_to_message(row, reactions.get(message_id, []), user_id)

    async def list_messages(
        self, event_id: str, limit: int = 150, user_id: str | None = None
    ) -> list[Message]:
        """Get the latest messages of an event, oldest first."""
        conn = self._require_conn()

        cursor = await conn.execute(
            f"""
            SELECT {_MESSAGE_COLUMNS}
            FROM messages
            WHERE event_id = ?
            ORDER BY created_at DESC, rowid DESC
            LIMIT ?
            """,
            (event_id, limit),
        )
        rows = list(reversed(await cursor.fetchall()))

        reactions = await self._get_reactions([row[0] for row in rows])
        return [
            self._row_to_message(row, reactions.get(row[0], []), user_id)
            for row in rows
        ]

    # Reactions
    async def toggle_reaction(
        self, message_id: str, user_id: str, emoji: str
    ) -> list[Reaction] | None:
        """Add or remove a user's reaction. None when the message is unknown."""
        conn = self._require_conn()

        cursor = await conn.execute("SELECT 1 FROM messages WHERE id = ?", (message_id,))
        if not await cursor.fetchone():
            return None

        cursor = await conn.execute(
            """
            DELETE FROM message_reactions
            WHERE message_id = ? AND emoji = ? AND user_id = ?
            """,
            (message_id, emoji, user_id),
        )
        if cursor.rowcount == 0:
            await conn.execute(
                """
                INSERT INTO message_reactions (message_id, emoji, user_id, created_at)
                VALUES (?, ?, ?, ?)
                """,
                (message_id, emoji, user_id, _now()),
            )
        await conn.commit()

        reactions = await self._get_reactions([message_id])
        return reactions.get(message_id, [])

    async def _get_reactions(self, message_ids: list[str]) -> dict[str, list[Reaction]]:
        conn = self._require_conn()
        if not message_ids:
            return {}

        placeholders = ",".join("?" * len(message_ids))
        cursor = await conn.execute(
            f"""
            SELECT message_id, emoji, user_id
            FROM message_reactions
            WHERE message_id IN ({placeholders})
            ORDER BY created_at ASC, rowid ASC
            """,
            message_ids,
        )
        by_message: dict[str, list[Reaction]] = {}
        for message_id, emoji, user_id in await cursor.fetchall():
            by_message.setdefault(message_id, []).append(Reaction(emoji=emoji, user_id=user_id))
        return by_message

    def _row_to_message(
        self, row: tuple, reactions: list[Reaction], user_id: str | None
    ) -> Message:
        return Message(
            id=row[0],
            event_id=row[1],
            client_message_id=row[2],
            author_user_id=row[3],
            author_name=row[4],
            body_text=row[5],
            message_type=MessageType(row[6]),
            language_hint=row[7],
            attachments=_attachments_adapter.validate_json(row[8]),
            mentions=_mentions_adapter.validate_json(row[9]),
            reactions=reactions,
            reaction_summary=summarize_reactions(reactions, user_id),
            created_at=datetime.fromisoformat(row[10]),
            delivery_state=DeliveryState.SENT,
        )

    # Conversations
    async def get_conversation(self, event_id: str) -> Conversation | None:
        """Get stored conversation settings."""
        conn = self._require_conn()

        cursor = await conn.execute(
            """
            SELECT event_id, show_mode_enabled, mute_non_critical, pinned_ops_commands
            FROM conversations
            WHERE event_id = ?
            """,
            (event_id,),
        )
        row = await cursor.fetchone()

        if not row:
            return None

        return Conversation(
            event_id=row[0],
            show_mode_enabled=bool(row[1]),
            mute_non_critical=bool(row[2]),
            pinned_ops_commands=row[3] or "",
        )

    async def save_conversation(self, event_id: str, patch: dict[str, Any]) -> Conversation:
        """Merge a partial update into the stored settings."""
        conn = self._require_conn()

        current = await self.get_conversation(event_id) or Conversation(event_id=event_id)
        conversation = Conversation(
            event_id=event_id,
            show_mode_enabled=bool(patch.get("show_mode_enabled", current.show_mode_enabled)),
            mute_non_critical=bool(patch.get("mute_non_critical", current.mute_non_critical)),
            pinned_ops_commands=str(
                patch.get("pinned_ops_commands", current.pinned_ops_commands) or ""
            ),
        )

        await conn.execute(
            """
            INSERT OR REPLACE INTO conversations
            (event_id, show_mode_enabled, mute_non_critical, pinned_ops_commands, updated_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (
                conversation.event_id,
                int(conversation.show_mode_enabled),
                int(conversation.mute_non_critical),
                conversation.pinned_ops_commands,
                _now(),
            ),
        )
        await conn.commit()
        return conversation

    # Lifecycle
    async def clear(self) -> None:
        """Clear all data."""
        conn = self._require_conn()

        for table in ["message_reactions", "messages", "conversations"]:
            await conn.execute(f"DELETE FROM {table}")

        await conn.commit()
