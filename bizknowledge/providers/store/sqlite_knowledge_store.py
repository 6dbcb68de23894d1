"""SQLite-backed knowledge store.

Persists segments, documents, knowledge chunks and chat history to a local
SQLite database at ``data/knowledge.db``.  Uses ``aiosqlite`` for async I/O.

Every public method opens its own connection with foreign keys enabled, so
chunk rows cascade with their document and chat messages with their
session.  Multi-row writes share one connection and commit once; an error
anywhere before the commit rolls the whole unit back.

Case-insensitive matching uses a ``fold()`` SQL function registered on each
connection rather than ``LIKE``, so user queries containing ``%`` or ``_``
are matched literally and non-ASCII text folds correctly.
"""

from __future__ import annotations

import json
import sqlite3
from collections.abc import AsyncIterator, Iterable, Sequence
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

import aiosqlite
import structlog

from bizknowledge.interfaces.knowledge_store import IKnowledgeStore
from bizknowledge.models.chat import ChatMessage, ChatSession, MessageRole, SourceCitation
from bizknowledge.models.knowledge import (
    Document,
    DocumentDraft,
    DocumentListing,
    KnowledgeChunk,
    SearchHit,
    Segment,
)
from bizknowledge.utils.errors import NotFoundError, StorageError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_DB_PATH = Path("data/knowledge.db")
_PROVIDER_NAME = "sqlite"

_NOW = "strftime('%Y-%m-%dT%H:%M:%fZ', 'now')"

_CREATE_TABLES_SQL = f"""\
CREATE TABLE IF NOT EXISTS segments (
    id             INTEGER PRIMARY KEY AUTOINCREMENT,
    name           TEXT    NOT NULL UNIQUE,
    description    TEXT,
    colour         TEXT    NOT NULL DEFAULT '#3B82F6',
    document_count INTEGER NOT NULL DEFAULT 0 CHECK (document_count >= 0),
    created_at     TEXT    NOT NULL DEFAULT ({_NOW}),
    updated_at     TEXT    NOT NULL DEFAULT ({_NOW})
);

CREATE TABLE IF NOT EXISTS documents (
    id               INTEGER PRIMARY KEY AUTOINCREMENT,
    title            TEXT    NOT NULL,
    filename         TEXT,
    content          TEXT    NOT NULL,
    file_type        TEXT,
    file_size        INTEGER,
    segment_id       INTEGER REFERENCES segments(id) ON DELETE SET NULL,
    upload_date      TEXT    NOT NULL DEFAULT ({_NOW}),
    processed        INTEGER NOT NULL DEFAULT 0,
    summary          TEXT,
    keywords         TEXT,
    confidence_score REAL    NOT NULL DEFAULT 0
                     CHECK (confidence_score >= 0 AND confidence_score <= 1)
);

CREATE TABLE IF NOT EXISTS knowledge_chunks (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    document_id INTEGER NOT NULL REFERENCES documents(id) ON DELETE CASCADE,
    chunk_text  TEXT    NOT NULL,
    chunk_index INTEGER NOT NULL CHECK (chunk_index >= 0),
    preview     TEXT,
    created_at  TEXT    NOT NULL DEFAULT ({_NOW}),
    UNIQUE(document_id, chunk_index)
);

CREATE TABLE IF NOT EXISTS chat_sessions (
    id            INTEGER PRIMARY KEY AUTOINCREMENT,
    session_id    TEXT    NOT NULL UNIQUE,
    created_at    TEXT    NOT NULL DEFAULT ({_NOW}),
    last_activity TEXT    NOT NULL DEFAULT ({_NOW})
);

CREATE TABLE IF NOT EXISTS chat_messages (
    id         INTEGER PRIMARY KEY AUTOINCREMENT,
    session_id TEXT    NOT NULL REFERENCES chat_sessions(session_id) ON DELETE CASCADE,
    role       TEXT    NOT NULL CHECK (role IN ('user', 'assistant')),
    content    TEXT    NOT NULL,
    sources    TEXT,
    timestamp  TEXT    NOT NULL DEFAULT ({_NOW})
);
"""

_CREATE_INDICES_SQL = [
    "CREATE INDEX IF NOT EXISTS idx_documents_segment ON documents(segment_id);",
    "CREATE INDEX IF NOT EXISTS idx_documents_processed ON documents(processed);",
    "CREATE INDEX IF NOT EXISTS idx_chunks_document ON knowledge_chunks(document_id);",
    "CREATE INDEX IF NOT EXISTS idx_messages_session ON chat_messages(session_id);",
]

_SEED_SEGMENT_SQL = """\
INSERT OR IGNORE INTO segments (name, description, colour)
VALUES (?, ?, ?);
"""

_SEGMENT_COLUMNS = "id, name, description, colour, document_count, created_at, updated_at"

_INSERT_DOCUMENT_SQL = """\
INSERT INTO documents
    (title, filename, content, file_type, file_size, segment_id,
     processed, summary, keywords, confidence_score)
VALUES (?, ?, ?, ?, ?, ?, 0, ?, ?, ?);
"""

_INSERT_CHUNK_SQL = """\
INSERT INTO knowledge_chunks (document_id, chunk_text, chunk_index, preview)
VALUES (?, ?, ?, ?);
"""

_DOCUMENT_COLUMNS = (
    "id, title, filename, content, file_type, file_size, segment_id, "
    "upload_date, processed, summary, keywords, confidence_score"
)

_LIST_DOCUMENTS_SQL = """\
SELECT d.id, d.title, d.filename, d.file_type, d.file_size, d.segment_id,
       s.name AS segment_name, s.colour AS segment_colour,
       d.upload_date, d.processed, d.summary, d.keywords, d.confidence_score
FROM documents d
LEFT JOIN segments s ON s.id = d.segment_id
{where}
ORDER BY d.upload_date DESC, d.id DESC;
"""

_RECOUNT_SEGMENT_SQL = f"""\
UPDATE segments
SET document_count = (SELECT COUNT(*) FROM documents WHERE segment_id = segments.id),
    updated_at     = {_NOW}
WHERE id = ?;
"""

_RECOUNT_ALL_SQL = f"""\
UPDATE segments
SET document_count = (SELECT COUNT(*) FROM documents WHERE segment_id = segments.id),
    updated_at     = {_NOW};
"""

_SEARCH_SQL = """\
SELECT kc.document_id, kc.chunk_index, kc.chunk_text,
       d.title   AS document_title,
       d.summary AS document_summary,
       s.name    AS segment_name
FROM knowledge_chunks kc
JOIN documents d ON d.id = kc.document_id
LEFT JOIN segments s ON s.id = d.segment_id
WHERE d.processed = 1
  AND (instr(fold(kc.chunk_text), :q) > 0
       OR instr(fold(d.title), :q) > 0
       OR instr(fold(d.summary), :q) > 0
       OR instr(fold(d.keywords), :q) > 0)
ORDER BY d.upload_date DESC, d.id DESC, kc.chunk_index ASC
LIMIT :limit;
"""

_UPSERT_SESSION_SQL = f"""\
INSERT INTO chat_sessions (session_id)
VALUES (?)
ON CONFLICT(session_id)
DO UPDATE SET last_activity = {_NOW};
"""

_INSERT_MESSAGE_SQL = """\
INSERT INTO chat_messages (session_id, role, content, sources)
VALUES (?, ?, ?, ?);
"""


def fold_case(value: str | None) -> str:
    """Case-fold text for matching; ``NULL`` columns fold to ``""``."""
    return value.casefold() if value else ""


def join_keywords(keywords: Iterable[str]) -> str:
    return ",".join(keywords)


def split_keywords(value: str | None) -> list[str]:
    return [k for k in (value or "").split(",") if k]


class SQLiteKnowledgeStore(IKnowledgeStore):
    """SQLite-backed knowledge-base persistence.

    Parameters
    ----------
    db_path:
        Path to the SQLite database file; parent directories are created
        on :meth:`initialize`.
    preview_chars:
        Length of the preview string stored with each chunk.
    """

    def __init__(self, db_path: str | Path = _DEFAULT_DB_PATH, preview_chars: int = 200) -> None:
        self._db_path = Path(db_path)
        self._preview_chars = preview_chars

    @property
    def db_path(self) -> Path:
        return self._db_path

    # ------------------------------------------------------------------
    # Connection handling
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def _connect(self) -> AsyncIterator[aiosqlite.Connection]:
        """Open a connection with foreign keys on and ``fold()`` registered.

        Uncommitted work is rolled back if the body raises; SQLite errors
        surface as :class:`StorageError`.
        """
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                db.row_factory = aiosqlite.Row
                await db.execute("PRAGMA foreign_keys = ON;")
                await db.create_function("fold", 1, fold_case, deterministic=True)
                try:
                    yield db
                except Exception:
                    await db.rollback()
                    raise
        except sqlite3.Error as exc:
            logger.error("storage_error", path=str(self._db_path), error=str(exc))
            raise StorageError(message=str(exc), provider_name=_PROVIDER_NAME) from exc

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def initialize(self, seed_segments: Iterable[dict[str, Any]] = ()) -> None:
        """Create tables and indices if they don't exist, then seed segments."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        seeds = [
            (s["name"], s.get("description"), s.get("colour") or "#3B82F6")
            for s in seed_segments
        ]
        async with self._connect() as db:
            await db.executescript(_CREATE_TABLES_SQL)
            for idx_sql in _CREATE_INDICES_SQL:
                await db.execute(idx_sql)
            if seeds:
                await db.executemany(_SEED_SEGMENT_SQL, seeds)
            await db.commit()
        logger.info(
            "knowledge_db_initialized",
            path=str(self._db_path),
            seed_segments=len(seeds),
        )

    # ------------------------------------------------------------------
    # Segments
    # ------------------------------------------------------------------

    async def list_segments(self) -> list[Segment]:
        async with self._connect() as db:
            cursor = await db.execute(
                f"SELECT {_SEGMENT_COLUMNS} FROM segments ORDER BY name;"
            )
            rows = await cursor.fetchall()
        return [Segment(**dict(r)) for r in rows]

    async def get_segment_by_name(self, name: str) -> Segment | None:
        async with self._connect() as db:
            cursor = await db.execute(
                f"SELECT {_SEGMENT_COLUMNS} FROM segments WHERE name = ?;",
                (name,),
            )
            row = await cursor.fetchone()
        return Segment(**dict(row)) if row else None

    async def recount_segment(self, segment_id: int) -> int:
        async with self._connect() as db:
            count = await self._recount(db, segment_id)
            await db.commit()
        return count

    async def recount_all_segments(self) -> dict[str, int]:
        async with self._connect() as db:
            await db.execute(_RECOUNT_ALL_SQL)
            await db.commit()
            cursor = await db.execute(
                "SELECT name, document_count FROM segments ORDER BY name;"
            )
            rows = await cursor.fetchall()
        counts = {r["name"]: r["document_count"] for r in rows}
        logger.info("segments_recounted", segments=len(counts))
        return counts

    @staticmethod
    async def _recount(db: aiosqlite.Connection, segment_id: int) -> int:
        await db.execute(_RECOUNT_SEGMENT_SQL, (segment_id,))
        cursor = await db.execute(
            "SELECT document_count FROM segments WHERE id = ?;", (segment_id,)
        )
        row = await cursor.fetchone()
        return row["document_count"] if row else 0

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    async def save_document(self, draft: DocumentDraft, chunks: Sequence[str]) -> int:
        async with self._connect() as db:
            cursor = await db.execute(
                _INSERT_DOCUMENT_SQL,
                (
                    draft.title,
                    draft.filename,
                    draft.content,
                    draft.file_type,
                    draft.file_size,
                    draft.segment_id,
                    draft.summary,
                    join_keywords(draft.keywords),
                    draft.confidence_score,
                ),
            )
            document_id = cursor.lastrowid
            await db.executemany(
                _INSERT_CHUNK_SQL,
                [
                    (document_id, text, index, text[: self._preview_chars])
                    for index, text in enumerate(chunks)
                ],
            )
            await db.execute(
                "UPDATE documents SET processed = 1 WHERE id = ?;", (document_id,)
            )
            # Recount last so the cached count reflects the committed row.
            if draft.segment_id is not None:
                await self._recount(db, draft.segment_id)
            await db.commit()

        logger.info(
            "document_saved",
            document_id=document_id,
            segment_id=draft.segment_id,
            chunks=len(chunks),
        )
        return document_id

    async def get_document(self, document_id: int) -> Document | None:
        async with self._connect() as db:
            row = await self._fetch_document(db, document_id)
        return _row_to_document(row) if row else None

    async def list_documents(self, segment_id: int | None = None) -> list[DocumentListing]:
        async with self._connect() as db:
            if segment_id is None:
                cursor = await db.execute(_LIST_DOCUMENTS_SQL.format(where=""))
            else:
                cursor = await db.execute(
                    _LIST_DOCUMENTS_SQL.format(where="WHERE d.segment_id = ?"),
                    (segment_id,),
                )
            rows = await cursor.fetchall()

        listings = []
        for row in rows:
            data = dict(row)
            data["keywords"] = split_keywords(data["keywords"])
            listings.append(DocumentListing(**data))
        return listings

    async def list_chunks(self, document_id: int) -> list[KnowledgeChunk]:
        async with self._connect() as db:
            cursor = await db.execute(
                "SELECT id, document_id, chunk_text, chunk_index, preview, created_at "
                "FROM knowledge_chunks WHERE document_id = ? ORDER BY chunk_index;",
                (document_id,),
            )
            rows = await cursor.fetchall()
        return [
            KnowledgeChunk(**{**dict(r), "preview": r["preview"] or ""}) for r in rows
        ]

    async def delete_document(self, document_id: int) -> Document:
        async with self._connect() as db:
            row = await self._fetch_document(db, document_id)
            if row is None:
                raise NotFoundError(
                    message=f"Document {document_id} not found",
                    resource="document",
                    identifier=document_id,
                    provider_name=_PROVIDER_NAME,
                )
            document = _row_to_document(row)
            await db.execute(
                "DELETE FROM knowledge_chunks WHERE document_id = ?;", (document_id,)
            )
            await db.execute("DELETE FROM documents WHERE id = ?;", (document_id,))
            if document.segment_id is not None:
                await self._recount(db, document.segment_id)
            await db.commit()

        logger.info(
            "document_deleted",
            document_id=document_id,
            segment_id=document.segment_id,
        )
        return document

    @staticmethod
    async def _fetch_document(db: aiosqlite.Connection, document_id: int) -> aiosqlite.Row | None:
        cursor = await db.execute(
            f"SELECT {_DOCUMENT_COLUMNS} FROM documents WHERE id = ?;", (document_id,)
        )
        return await cursor.fetchone()

    # ------------------------------------------------------------------
    # Retrieval
    # ------------------------------------------------------------------

    async def find_matching_chunks(self, query: str, limit: int) -> list[SearchHit]:
        async with self._connect() as db:
            cursor = await db.execute(
                _SEARCH_SQL, {"q": fold_case(query), "limit": limit}
            )
            rows = await cursor.fetchall()
        return [SearchHit(**dict(r)) for r in rows]

    # ------------------------------------------------------------------
    # Chat
    # ------------------------------------------------------------------

    async def upsert_session(self, session_id: str) -> ChatSession:
        async with self._connect() as db:
            await db.execute(_UPSERT_SESSION_SQL, (session_id,))
            await db.commit()
            session = await self._fetch_session(db, session_id)
        if session is None:
            raise StorageError(
                message=f"Chat session {session_id!r} vanished after upsert",
                provider_name=_PROVIDER_NAME,
            )
        return session

    async def get_session(self, session_id: str) -> ChatSession | None:
        async with self._connect() as db:
            return await self._fetch_session(db, session_id)

    @staticmethod
    async def _fetch_session(db: aiosqlite.Connection, session_id: str) -> ChatSession | None:
        cursor = await db.execute(
            "SELECT session_id, created_at, last_activity "
            "FROM chat_sessions WHERE session_id = ?;",
            (session_id,),
        )
        row = await cursor.fetchone()
        return ChatSession(**dict(row)) if row else None

    async def append_exchange(
        self,
        session_id: str,
        user_message: str,
        assistant_message: str,
        sources: Sequence[SourceCitation],
    ) -> None:
        sources_json = json.dumps([s.model_dump() for s in sources])
        async with self._connect() as db:
            await db.execute(
                _INSERT_MESSAGE_SQL,
                (session_id, MessageRole.USER.value, user_message, None),
            )
            await db.execute(
                _INSERT_MESSAGE_SQL,
                (session_id, MessageRole.ASSISTANT.value, assistant_message, sources_json),
            )
            await db.commit()

    async def list_messages(self, session_id: str) -> list[ChatMessage]:
        async with self._connect() as db:
            cursor = await db.execute(
                "SELECT id, session_id, role, content, sources, timestamp "
                "FROM chat_messages WHERE session_id = ? ORDER BY timestamp, id;",
                (session_id,),
            )
            rows = await cursor.fetchall()

        messages = []
        for row in rows:
            data = dict(row)
            raw_sources = data.pop("sources")
            data["sources"] = (
                [SourceCitation(**s) for s in json.loads(raw_sources)]
                if raw_sources is not None
                else None
            )
            messages.append(ChatMessage(**data))
        return messages

    def get_provider_name(self) -> str:
        return "sqlite_knowledge"


def _row_to_document(row: aiosqlite.Row) -> Document:
    data = dict(row)
    data["keywords"] = split_keywords(data["keywords"])
    return Document(**data)
