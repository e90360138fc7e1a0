"""
Search index for regulation full text.

SQLite FTS5 index keyed by (index name, document number). Writes are pure
overwrites: re-indexing a document replaces its entry.
"""

import json
import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Generator, Iterable, List, Optional, Tuple

from .config import config

logger = logging.getLogger(__name__)

IndexItem = Tuple[str, str, Dict[str, Any]]


class SearchIndex:
    """Full-text search index over regulation text and basic fields."""

    def __init__(self, db_path: Optional[Path] = None) -> None:
        """
        Initialize the search index.

        Args:
            db_path: Optional path to the database file. Uses config default if not provided.
        """
        self.db_path = db_path or config.database_path
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    @contextmanager
    def connection(self) -> Generator[sqlite3.Connection, None, None]:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_schema(self) -> None:
        with self.connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS search_documents (
                    index_name TEXT NOT NULL,
                    doc_id TEXT NOT NULL,
                    fields TEXT NOT NULL,
                    indexed_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
                    PRIMARY KEY (index_name, doc_id)
                )
            """)
            conn.execute("""
                CREATE VIRTUAL TABLE IF NOT EXISTS search_fts USING fts5(
                    index_name UNINDEXED,
                    doc_id UNINDEXED,
                    title,
                    abstract,
                    text,
                    tokenize='porter unicode61'
                )
            """)

    def _write(self, conn: sqlite3.Connection, index_name: str, doc_id: str, fields: Dict[str, Any]) -> None:
        conn.execute("DELETE FROM search_documents WHERE index_name = ? AND doc_id = ?", (index_name, doc_id))
        conn.execute("DELETE FROM search_fts WHERE index_name = ? AND doc_id = ?", (index_name, doc_id))
        conn.execute(
            "INSERT INTO search_documents (index_name, doc_id, fields) VALUES (?, ?, ?)",
            (index_name, doc_id, json.dumps(fields, default=str)),
        )
        conn.execute(
            "INSERT INTO search_fts (index_name, doc_id, title, abstract, text) VALUES (?, ?, ?, ?, ?)",
            (index_name, doc_id, fields.get("title") or "", fields.get("abstract") or "", fields.get("text") or ""),
        )

    def bulk_upsert(self, items: Iterable[IndexItem]) -> Tuple[int, List[Dict[str, Any]]]:
        """
        Write a batch of (index_name, doc_id, fields) entries.

        Each entry is written in its own transaction so one bad entry does not
        lose the rest of the batch.

        Returns:
            Tuple of (success_count, errors) where each error names the doc_id.
        """
        success = 0
        errors: List[Dict[str, Any]] = []
        for index_name, doc_id, fields in items:
            try:
                with self.connection() as conn:
                    self._write(conn, index_name, doc_id, fields)
                success += 1
            except (sqlite3.Error, TypeError, ValueError) as e:
                logger.error(f"Failed to index {doc_id} into {index_name}: {e}")
                errors.append({"index_name": index_name, "doc_id": doc_id, "error": str(e)})
        return success, errors

    def get(self, index_name: str, doc_id: str) -> Optional[Dict[str, Any]]:
        with self.connection() as conn:
            row = conn.execute(
                "SELECT fields FROM search_documents WHERE index_name = ? AND doc_id = ?",
                (index_name, doc_id),
            ).fetchone()
            return json.loads(row["fields"]) if row else None

    def count(self, index_name: str) -> int:
        with self.connection() as conn:
            return conn.execute(
                "SELECT COUNT(*) FROM search_documents WHERE index_name = ?", (index_name,)
            ).fetchone()[0]

    def search(self, index_name: str, query: str, limit: int = 10) -> List[Dict[str, Any]]:
        """
        Search an index using full-text search.

        Args:
            index_name: Index to search.
            query: FTS5 query string.
            limit: Maximum number of results.

        Returns:
            Matching entries (stored fields without text) with relevance and a snippet.
        """
        with self.connection() as conn:
            cursor = conn.execute(
                """
                SELECT d.doc_id, d.fields, bm25(search_fts) AS relevance,
                       snippet(search_fts, 4, '[', ']', '...', 16) AS excerpt
                FROM search_fts
                JOIN search_documents d
                  ON d.index_name = search_fts.index_name AND d.doc_id = search_fts.doc_id
                WHERE search_fts MATCH ? AND search_fts.index_name = ?
                ORDER BY relevance
                LIMIT ?
                """,
                (query, index_name, limit),
            )
            results = []
            for row in cursor.fetchall():
                fields = json.loads(row["fields"])
                fields.pop("text", None)
                fields["relevance"] = row["relevance"]
                fields["excerpt"] = row["excerpt"]
                results.append(fields)
            return results
