"""
Database management for RegulationsSync.

Stores one canonical regulation record per document number in SQLite.
"""

import json
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Generator, List, Optional

from .config import config
from .models import Regulation

_COLUMNS = [
    "document_number", "document_type", "article_type", "stage", "title", "abstract",
    "agency_names", "agency_ids", "publication_date", "posted_at", "effective_on",
    "comments_close_on", "docket_ids", "rins", "url", "pdf_url", "citation_ids",
]


class Database:
    """Database manager for regulation records."""

    def __init__(self, db_path: Optional[Path] = None) -> None:
        """
        Initialize the database manager.

        Args:
            db_path: Optional path to the database file. Uses config default if not provided.
        """
        self.db_path = db_path or config.database_path
        self._ensure_directory()
        self._init_schema()

    def _ensure_directory(self) -> None:
        """Ensure the database directory exists."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    @contextmanager
    def connection(self) -> Generator[sqlite3.Connection, None, None]:
        """
        Context manager for database connections.

        Yields:
            SQLite connection with row factory set to sqlite3.Row.
        """
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
        """Initialize the database schema."""
        with self.connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS regulations (
                    document_number TEXT PRIMARY KEY,
                    document_type TEXT NOT NULL,
                    article_type TEXT NOT NULL,
                    stage TEXT,
                    title TEXT,
                    abstract TEXT,
                    agency_names TEXT,
                    agency_ids TEXT,
                    publication_date TEXT,
                    posted_at TEXT,
                    effective_on TEXT,
                    comments_close_on TEXT,
                    docket_ids TEXT,
                    rins TEXT,
                    url TEXT,
                    pdf_url TEXT,
                    citation_ids TEXT,
                    created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
                    updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
                )
            """)

            conn.execute("CREATE INDEX IF NOT EXISTS idx_regulations_type ON regulations(document_type)")
            conn.execute("CREATE INDEX IF NOT EXISTS idx_regulations_article_type ON regulations(article_type)")
            conn.execute("CREATE INDEX IF NOT EXISTS idx_regulations_posted_at ON regulations(posted_at)")

    def get_regulation(self, document_number: str) -> Optional[Regulation]:
        """
        Get a regulation by document number.

        Returns:
            The stored regulation or None if not found.
        """
        with self.connection() as conn:
            row = conn.execute(
                "SELECT * FROM regulations WHERE document_number = ?", (document_number,)
            ).fetchone()
            return Regulation.from_row(dict(row)) if row else None

    def save_regulation(self, regulation: Regulation) -> None:
        """
        Insert or fully overwrite a regulation.

        Every column is written, so fields the new value does not carry are cleared.
        """
        row = regulation.to_row()
        columns = ", ".join(_COLUMNS)
        placeholders = ", ".join("?" for _ in _COLUMNS)
        updates = ", ".join(f"{column} = excluded.{column}" for column in _COLUMNS[1:])

        with self.connection() as conn:
            conn.execute(
                f"""
                INSERT INTO regulations ({columns}, updated_at)
                VALUES ({placeholders}, ?)
                ON CONFLICT(document_number) DO UPDATE SET {updates}, updated_at = excluded.updated_at
                """,
                [row[column] for column in _COLUMNS] + [datetime.now().isoformat()],
            )

    def update_citations(self, document_number: str, citation_ids: List[str]) -> bool:
        """
        Store extracted citation IDs on an existing regulation.

        Returns:
            True if the regulation exists and was updated.
        """
        with self.connection() as conn:
            cursor = conn.execute(
                "UPDATE regulations SET citation_ids = ?, updated_at = ? WHERE document_number = ?",
                (json.dumps(citation_ids), datetime.now().isoformat(), document_number),
            )
            return cursor.rowcount > 0

    def list_regulations(
        self,
        document_type: Optional[str] = None,
        article_type: Optional[str] = None,
        stage: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[Regulation]:
        """
        List regulations with optional filtering, newest first.

        Args:
            document_type: Filter by document type (article, public_inspection).
            article_type: Filter by article type (regulation, notice, ...).
            stage: Filter by stage (proposed, final).
            limit: Maximum number of results.
            offset: Offset for pagination.
        """
        conditions = []
        params: List[Any] = []

        if document_type:
            conditions.append("document_type = ?")
            params.append(document_type)

        if article_type:
            conditions.append("article_type = ?")
            params.append(article_type)

        if stage:
            conditions.append("stage = ?")
            params.append(stage)

        where_clause = " AND ".join(conditions) if conditions else "1=1"
        params.extend([limit, offset])

        with self.connection() as conn:
            cursor = conn.execute(
                f"""
                SELECT * FROM regulations
                WHERE {where_clause}
                ORDER BY posted_at DESC, document_number
                LIMIT ? OFFSET ?
                """,
                params,
            )
            return [Regulation.from_row(dict(row)) for row in cursor.fetchall()]

    def get_statistics(self) -> Dict[str, Any]:
        """
        Get database statistics.

        Returns:
            Dictionary containing various statistics.
        """
        with self.connection() as conn:
            stats: Dict[str, Any] = {}

            cursor = conn.execute("SELECT COUNT(*) FROM regulations")
            stats["total_regulations"] = cursor.fetchone()[0]

            cursor = conn.execute(
                "SELECT document_type, COUNT(*) as count FROM regulations GROUP BY document_type"
            )
            stats["by_document_type"] = {row["document_type"]: row["count"] for row in cursor.fetchall()}

            cursor = conn.execute(
                "SELECT article_type, COUNT(*) as count FROM regulations GROUP BY article_type"
            )
            stats["by_article_type"] = {row["article_type"]: row["count"] for row in cursor.fetchall()}

            cursor = conn.execute(
                "SELECT stage, COUNT(*) as count FROM regulations WHERE stage IS NOT NULL GROUP BY stage"
            )
            stats["by_stage"] = {row["stage"]: row["count"] for row in cursor.fetchall()}

            cursor = conn.execute("SELECT COUNT(*) FROM regulations WHERE citation_ids IS NOT NULL")
            stats["with_citations"] = cursor.fetchone()[0]

            return stats

    def backup(self) -> Path:
        """
        Create a backup of the database.

        Returns:
            Path to the backup file.
        """
        backup_dir = config.backups_dir
        backup_dir.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        backup_path = backup_dir / f"regulations_backup_{timestamp}.db"

        with self.connection() as conn:
            backup_conn = sqlite3.connect(backup_path)
            conn.backup(backup_conn)
            backup_conn.close()

        return backup_path
