"""SQLite storage implementation."""

import asyncio
import json
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol

import aiosqlite

from ..config import STORAGE_TIMEOUT, resolve_db_path
from ..errors import DuplicateId, NotFoundOrForbidden, StorageError
from ..logging_config import get_logger
from ..models import Attachment, Message, ReplyRef

logger = get_logger(__name__)

_COLUMNS = (
    "id, author_id, display_name, body, created_at, attachments, reply_to, "
    "deleted, deleted_at, edited, edited_at"
)


class IStorage(Protocol):
    """Durable message table (SQLite)."""

    async def init(self) -> None:
        """Initialize database and create tables."""
        ...

    async def close(self) -> None:
        """Close database connection."""
        ...

    async def insert_message(self, message: Message) -> None:
        """Insert a new message. Raises DuplicateId if the id exists."""
        ...

    async def get_message(self, message_id: str) -> Message | None:
        """Get a message by id, deleted or not."""
        ...

    async def update_text(
        self,
        message_id: str,
        author_id: str,
        new_body: str | None,
        edited_at: datetime,
    ) -> Message:
        """Edit a live message owned by author_id. Raises NotFoundOrForbidden."""
        ...

    async def mark_deleted(
        self, message_id: str, author_id: str, deleted_at: datetime
    ) -> Message:
        """Soft-delete a live message owned by author_id. Raises NotFoundOrForbidden."""
        ...

    async def list_live(self, limit: int) -> list[Message]:
        """Get the `limit` newest live messages, oldest first."""
        ...

    async def count_live(self) -> int:
        """Count non-deleted messages."""
        ...

    async def evict_oldest(self, n: int) -> int:
        """Physically remove the n oldest messages. Returns rows removed."""
        ...

    async def clear(self) -> None:
        """Clear all data."""
        ...


def _dump_ts(value: datetime | None) -> str | None:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def _load_ts(value: str | None) -> datetime | None:
    if not value:
        return None
    return datetime.fromisoformat(value).replace(tzinfo=timezone.utc)


def _dump_attachments(attachments: list[Attachment]) -> str:
    return json.dumps(
        [{"name": a.name, "mediaType": a.media_type, "url": a.url} for a in attachments]
    )


def _load_attachments(raw: str | None) -> list[Attachment]:
    if not raw:
        return []
    return [
        Attachment(name=item["name"], media_type=item["mediaType"], url=item["url"])
        for item in json.loads(raw)
    ]


def _dump_reply(reply: ReplyRef | None) -> str | None:
    if reply is None:
        return None
    return json.dumps({"id": reply.id, "name": reply.name, "text": reply.text})


def _load_reply(raw: str | None) -> ReplyRef | None:
    if not raw:
        return None
    data = json.loads(raw)
    return ReplyRef(id=data["id"], name=data.get("name"), text=data.get("text"))


def _row_to_message(row) -> Message:
    return Message(
        id=row[0],
        author_id=row[1],
        display_name=row[2],
        body=row[3],
        created_at=_load_ts(row[4]),
        attachments=_load_attachments(row[5]),
        reply_to=_load_reply(row[6]),
        deleted=bool(row[7]),
        deleted_at=_load_ts(row[8]),
        edited=bool(row[9]),
        edited_at=_load_ts(row[10]),
    )


class Storage:
    """SQLite storage implementation.

    One connection, one lock: every public operation runs to completion
    (statement + commit) before the next one starts, which makes each
    ownership check and its update a single atomic step.
    """

    def __init__(
        self,
        db_path: str | Path | None = None,
        timeout: float = STORAGE_TIMEOUT,
    ):
        if db_path is None:
            self._db_path = resolve_db_path()
        else:
            self._db_path = resolve_db_path(db_path)
        self._timeout = timeout
        self._conn: aiosqlite.Connection | None = None
        self._lock = asyncio.Lock()

    async def init(self) -> None:
        """Initialize database and create tables."""
        if self._db_path != ":memory:":
            Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)

        self._conn = await aiosqlite.connect(self._db_path, timeout=self._timeout)

        schema_path = Path(__file__).parent / "schema.sql"
        with open(schema_path, "r", encoding="utf-8") as f:
            schema_sql = f.read()
        await self._conn.executescript(schema_sql)
        await self._conn.commit()
        logger.info("Storage ready at %s", self._db_path)

    async def close(self) -> None:
        """Close database connection."""
        if self._conn:
            await self._conn.close()
            self._conn = None

    def _require_conn(self) -> aiosqlite.Connection:
        if not self._conn:
            raise RuntimeError("Storage not initialized")
        return self._conn

    async def _rollback(self, conn: aiosqlite.Connection) -> None:
        try:
            await conn.rollback()
        except sqlite3.Error:
            logger.warning("Rollback failed", exc_info=True)

    async def _fetch_one(self, message_id: str) -> Message | None:
        conn = self._require_conn()
        cursor = await conn.execute(
            f"SELECT {_COLUMNS} FROM messages WHERE id = ?",
            (message_id,),
        )
        row = await cursor.fetchone()
        return _row_to_message(row) if row else None

    async def insert_message(self, message: Message) -> None:
        """Insert a new message. Raises DuplicateId if the id exists."""
        conn = self._require_conn()

        async with self._lock:
            try:
                await conn.execute(
                    f"""
                    INSERT INTO messages ({_COLUMNS})
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        message.id,
                        message.author_id,
                        message.display_name,
                        message.body,
                        _dump_ts(message.created_at),
                        _dump_attachments(message.attachments),
                        _dump_reply(message.reply_to),
                        int(message.deleted),
                        _dump_ts(message.deleted_at),
                        int(message.edited),
                        _dump_ts(message.edited_at),
                    ),
                )
                await conn.commit()
            except sqlite3.IntegrityError as e:
                await self._rollback(conn)
                raise DuplicateId(message.id) from e
            except sqlite3.Error as e:
                await self._rollback(conn)
                raise StorageError(f"insert failed for {message.id!r}: {e}") from e

    async def get_message(self, message_id: str) -> Message | None:
        """Get a message by id, deleted or not."""
        async with self._lock:
            try:
                return await self._fetch_one(message_id)
            except sqlite3.Error as e:
                raise StorageError(f"lookup failed for {message_id!r}: {e}") from e

    async def update_text(
        self,
        message_id: str,
        author_id: str,
        new_body: str | None,
        edited_at: datetime,
    ) -> Message:
        """Edit a live message owned by author_id. Raises NotFoundOrForbidden."""
        conn = self._require_conn()

        async with self._lock:
            try:
                cursor = await conn.execute(
                    """
                    UPDATE messages
                    SET body = COALESCE(?, body), edited = 1, edited_at = ?
                    WHERE id = ? AND author_id = ? AND deleted = 0
                    """,
                    (new_body, _dump_ts(edited_at), message_id, author_id),
                )
                updated = await self._fetch_one(message_id) if cursor.rowcount else None
                await conn.commit()
            except sqlite3.Error as e:
                await self._rollback(conn)
                raise StorageError(f"edit failed for {message_id!r}: {e}") from e

        if updated is None:
            raise NotFoundOrForbidden(message_id)
        return updated

    async def mark_deleted(
        self, message_id: str, author_id: str, deleted_at: datetime
    ) -> Message:
        """Soft-delete a live message owned by author_id. Raises NotFoundOrForbidden."""
        conn = self._require_conn()

        async with self._lock:
            try:
                cursor = await conn.execute(
                    """
                    UPDATE messages
                    SET deleted = 1, deleted_at = ?
                    WHERE id = ? AND author_id = ? AND deleted = 0
                    """,
                    (_dump_ts(deleted_at), message_id, author_id),
                )
                # Read back inside the transaction so a failed read rolls back
                updated = await self._fetch_one(message_id) if cursor.rowcount else None
                await conn.commit()
            except sqlite3.Error as e:
                await self._rollback(conn)
                raise StorageError(f"delete failed for {message_id!r}: {e}") from e

        if updated is None:
            raise NotFoundOrForbidden(message_id)
        return updated

    async def list_live(self, limit: int) -> list[Message]:
        """Get the `limit` newest live messages, oldest first."""
        conn = self._require_conn()

        async with self._lock:
            try:
                cursor = await conn.execute(
                    f"""
                    SELECT {_COLUMNS} FROM (
                        SELECT seq, {_COLUMNS}
                        FROM messages
                        WHERE deleted = 0
                        ORDER BY created_at DESC, seq DESC
                        LIMIT ?
                    )
                    ORDER BY created_at ASC, seq ASC
                    """,
                    (limit,),
                )
                rows = await cursor.fetchall()
            except sqlite3.Error as e:
                raise StorageError(f"history scan failed: {e}") from e

        return [_row_to_message(row) for row in rows]

    async def count_live(self) -> int:
        """Count non-deleted messages."""
        conn = self._require_conn()

        async with self._lock:
            try:
                cursor = await conn.execute(
                    "SELECT COUNT(*) FROM messages WHERE deleted = 0"
                )
                row = await cursor.fetchone()
            except sqlite3.Error as e:
                raise StorageError(f"count failed: {e}") from e

        return row[0]

    async def evict_oldest(self, n: int) -> int:
        """Physically remove the n oldest messages. Returns rows removed."""
        if n <= 0:
            return 0
        conn = self._require_conn()

        async with self._lock:
            try:
                cursor = await conn.execute(
                    """
                    DELETE FROM messages
                    WHERE seq IN (
                        SELECT seq FROM messages
                        ORDER BY created_at ASC, seq ASC
                        LIMIT ?
                    )
                    """,
                    (n,),
                )
                removed = cursor.rowcount
                await conn.commit()
            except sqlite3.Error as e:
                await self._rollback(conn)
                raise StorageError(f"eviction failed: {e}") from e

        return removed

    async def clear(self) -> None:
        """Clear all data."""
        conn = self._require_conn()

        async with self._lock:
            await conn.execute("DELETE FROM messages")
            await conn.commit()
