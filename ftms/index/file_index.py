"""SQLite-backed file index with an FTS5 shadow table for full-text search."""

from __future__ import annotations

import logging
import sqlite3
import threading
from pathlib import Path
from typing import List, Optional

from ftms.core.config import Settings, settings as default_settings
from ftms.core.exceptions import DuplicateRecordError, FileIndexError, SearchQueryError
from ftms.index.filters import build_where
from ftms.models.file import FileListResponse, FileRecord, FileSearchResult, ListFilter

logger = logging.getLogger(__name__)

PRAGMAS_SQL = """
PRAGMA journal_mode = WAL;
PRAGMA synchronous  = NORMAL;
PRAGMA cache_size   = -2000;
PRAGMA temp_store   = MEMORY;
"""

# ftms_fts is an external-content table: it stores only the indexed text and
# points back at ftms_files by rowid. The triggers are the only writers.
SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS ftms_files (
  id              TEXT PRIMARY KEY,
  filename        TEXT NOT NULL,
  mime_type       TEXT NOT NULL,
  file_path       TEXT NOT NULL,
  file_size       INTEGER NOT NULL,
  extracted_text  TEXT,
  ai_description  TEXT,
  session_id      TEXT,
  channel         TEXT,
  uploaded_at     TEXT NOT NULL,
  tags            TEXT
);

CREATE INDEX IF NOT EXISTS idx_ftms_session ON ftms_files(session_id);
CREATE INDEX IF NOT EXISTS idx_ftms_uploaded ON ftms_files(uploaded_at);
CREATE INDEX IF NOT EXISTS idx_ftms_mime ON ftms_files(mime_type);

CREATE VIRTUAL TABLE IF NOT EXISTS ftms_fts USING fts5(
  filename, extracted_text, ai_description, tags,
  content='ftms_files', content_rowid='rowid'
);

CREATE TRIGGER IF NOT EXISTS ftms_ai AFTER INSERT ON ftms_files BEGIN
  INSERT INTO ftms_fts(rowid, filename, extracted_text, ai_description, tags)
  VALUES (new.rowid, new.filename, new.extracted_text, new.ai_description, new.tags);
END;

CREATE TRIGGER IF NOT EXISTS ftms_ad AFTER DELETE ON ftms_files BEGIN
  INSERT INTO ftms_fts(ftms_fts, rowid, filename, extracted_text, ai_description, tags)
  VALUES ('delete', old.rowid, old.filename, old.extracted_text, old.ai_description, old.tags);
END;

CREATE TRIGGER IF NOT EXISTS ftms_au AFTER UPDATE ON ftms_files BEGIN
  INSERT INTO ftms_fts(ftms_fts, rowid, filename, extracted_text, ai_description, tags)
  VALUES ('delete', old.rowid, old.filename, old.extracted_text, old.ai_description, old.tags);
  INSERT INTO ftms_fts(rowid, filename, extracted_text, ai_description, tags)
  VALUES (new.rowid, new.filename, new.extracted_text, new.ai_description, new.tags);
END;
"""

RECORD_COLUMNS = (
    "id",
    "filename",
    "mime_type",
    "file_path",
    "file_size",
    "extracted_text",
    "ai_description",
    "session_id",
    "channel",
    "uploaded_at",
    "tags",
)
_SELECT_COLUMNS = ", ".join(RECORD_COLUMNS)
_SELECT_COLUMNS_F = ", ".join(f"f.{column}" for column in RECORD_COLUMNS)

# OperationalError messages that FTS5 raises for a bad MATCH expression
QUERY_ERROR_MARKERS = ("syntax error", "unterminated string", "no such column", "unknown special query")


def _is_query_error(exc: sqlite3.OperationalError) -> bool:
    message = str(exc).lower()
    return message.startswith("fts5:") or any(marker in message for marker in QUERY_ERROR_MARKERS)


class FileIndex:
    """Relational table of file records plus a synchronized FTS5 index.

    Every call takes the same lock around the single connection, so readers
    never observe a half-applied insert or update.
    """

    def __init__(self, db_path: str | Path) -> None:
        self.db_path = Path(db_path).expanduser()
        self._lock = threading.Lock()
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            self._conn.executescript(PRAGMAS_SQL)
            self._conn.executescript(SCHEMA_SQL)
        except (OSError, sqlite3.Error) as exc:
            raise FileIndexError(
                "index_init_failed", "Failed to init FTMS schema", {"path": str(self.db_path), "reason": str(exc)}
            ) from exc
        logger.info("Opened file index at %s", self.db_path)

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "FileIndex":
        return cls((settings or default_settings).index_path)

    def insert(self, record: FileRecord) -> None:
        values = [getattr(record, column) for column in RECORD_COLUMNS]
        placeholders = ", ".join("?" for _ in RECORD_COLUMNS)
        with self._lock:
            try:
                with self._conn:
                    self._conn.execute(
                        f"INSERT INTO ftms_files ({_SELECT_COLUMNS}) VALUES ({placeholders})",
                        values,
                    )
            except sqlite3.IntegrityError as exc:
                raise DuplicateRecordError(
                    "duplicate_record", "File record already exists", {"id": record.id}
                ) from exc
            except sqlite3.Error as exc:
                raise FileIndexError(
                    "index_insert_failed", "Failed to insert file record", {"id": record.id, "reason": str(exc)}
                ) from exc

    def update_content(self, file_id: str, text: Optional[str], description: Optional[str]) -> bool:
        """Rewrite the derived content of a record; returns False when no row matched."""

        with self._lock:
            try:
                with self._conn:
                    cursor = self._conn.execute(
                        "UPDATE ftms_files SET extracted_text = ?, ai_description = ? WHERE id = ?",
                        (text, description, file_id),
                    )
            except sqlite3.Error as exc:
                raise FileIndexError(
                    "index_update_failed", "Failed to update file content", {"id": file_id, "reason": str(exc)}
                ) from exc
        return cursor.rowcount > 0

    def update_description(self, file_id: str, description: Optional[str]) -> bool:
        with self._lock:
            try:
                with self._conn:
                    cursor = self._conn.execute(
                        "UPDATE ftms_files SET ai_description = ? WHERE id = ?",
                        (description, file_id),
                    )
            except sqlite3.Error as exc:
                raise FileIndexError(
                    "index_update_failed", "Failed to update file description", {"id": file_id, "reason": str(exc)}
                ) from exc
        return cursor.rowcount > 0

    def get(self, file_id: str) -> Optional[FileRecord]:
        with self._lock:
            row = self._fetchone(f"SELECT {_SELECT_COLUMNS} FROM ftms_files WHERE id = ?", (file_id,))
        return self._row_to_record(row) if row is not None else None

    def delete(self, file_id: str) -> Optional[FileRecord]:
        """Remove a record and its shadow entry; returns the removed record."""

        with self._lock:
            row = self._fetchone(f"SELECT {_SELECT_COLUMNS} FROM ftms_files WHERE id = ?", (file_id,))
            if row is None:
                return None
            try:
                with self._conn:
                    self._conn.execute("DELETE FROM ftms_files WHERE id = ?", (file_id,))
            except sqlite3.Error as exc:
                raise FileIndexError(
                    "index_delete_failed", "Failed to delete file record", {"id": file_id, "reason": str(exc)}
                ) from exc
        return self._row_to_record(row)

    def list(self, offset: int, limit: int, list_filter: Optional[ListFilter] = None) -> FileListResponse:
        """Page through records, newest first, optionally filtered."""

        if offset < 0 or limit < 0:
            raise ValueError("offset and limit must be non-negative")

        where_sql, params = build_where(list_filter)
        with self._lock:
            try:
                total = self._conn.execute(f"SELECT COUNT(*) FROM ftms_files {where_sql}", params).fetchone()[0]
                rows = self._conn.execute(
                    f"SELECT {_SELECT_COLUMNS} FROM ftms_files {where_sql} "
                    "ORDER BY uploaded_at DESC, rowid DESC LIMIT ? OFFSET ?",
                    [*params, limit, offset],
                ).fetchall()
            except sqlite3.Error as exc:
                raise FileIndexError("index_query_failed", "Failed to list files", {"reason": str(exc)}) from exc

        return FileListResponse(
            files=[self._row_to_record(row) for row in rows],
            total=total,
            offset=offset,
            limit=limit,
        )

    def search(self, query: str, limit: int) -> List[FileSearchResult]:
        """Run an FTS5 MATCH query; best match first (lowest bm25 rank)."""

        if limit < 0:
            raise ValueError("limit must be non-negative")

        with self._lock:
            try:
                rows = self._conn.execute(
                    f"SELECT {_SELECT_COLUMNS_F}, ftms_fts.rank AS rank "
                    "FROM ftms_fts JOIN ftms_files f ON f.rowid = ftms_fts.rowid "
                    "WHERE ftms_fts MATCH ? ORDER BY rank LIMIT ?",
                    (query, limit),
                ).fetchall()
            except sqlite3.OperationalError as exc:
                if _is_query_error(exc):
                    raise SearchQueryError(
                        "invalid_search_query", "Full-text query rejected", {"query": query, "reason": str(exc)}
                    ) from exc
                raise FileIndexError(
                    "index_query_failed", "Failed to search files", {"query": query, "reason": str(exc)}
                ) from exc
            except sqlite3.Error as exc:
                raise FileIndexError(
                    "index_query_failed", "Failed to search files", {"query": query, "reason": str(exc)}
                ) from exc

        return [FileSearchResult(file=self._row_to_record(row), rank=row["rank"]) for row in rows]

    def count(self) -> int:
        with self._lock:
            return self._conn.execute("SELECT COUNT(*) FROM ftms_files").fetchone()[0]

    def check_integrity(self) -> bool:
        """Ask FTS5 whether the shadow index matches the base table."""

        with self._lock:
            try:
                with self._conn:
                    self._conn.execute("INSERT INTO ftms_fts(ftms_fts, rank) VALUES ('integrity-check', 1)")
            except sqlite3.DatabaseError as exc:
                logger.error("FTS integrity check failed: %s", exc)
                return False
        return True

    def rebuild(self) -> None:
        """Regenerate the shadow index from the base table."""

        with self._lock:
            with self._conn:
                self._conn.execute("INSERT INTO ftms_fts(ftms_fts) VALUES ('rebuild')")
        logger.info("Rebuilt full-text index at %s", self.db_path)

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    def _fetchone(self, sql: str, params) -> Optional[sqlite3.Row]:
        try:
            return self._conn.execute(sql, params).fetchone()
        except sqlite3.Error as exc:
            raise FileIndexError("index_query_failed", "Failed to read file record", {"reason": str(exc)}) from exc

    @staticmethod
    def _row_to_record(row: sqlite3.Row) -> FileRecord:
        return FileRecord(**{column: row[column] for column in RECORD_COLUMNS})
