"""
DocumentStore - JSON document collections in a SQLite database.

Stands in for a hosted document database:
- Collections of JSON documents keyed by opaque generated ids
- Partial updates that replace only the given top-level fields
- Equality queries on top-level fields
"""

import json
import sqlite3
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterator, Optional

from .errors import DocumentNotFoundError, StoreError


class DocumentStore:
    """
    Store JSON documents in SQLite.

    Each method opens its own connection, so one store can be shared
    across Streamlit reruns.
    """

    def __init__(self, db_path: str | Path):
        """
        Initialize the store.

        Args:
            db_path: Path to the SQLite file (created if missing)
        """
        self.db_path = Path(db_path)
        self._ensure_database()

    def _ensure_database(self):
        """Create database and tables if they don't exist."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        with self._connection() as conn:
            conn.executescript("""
                CREATE TABLE IF NOT EXISTS documents (
                    collection TEXT NOT NULL,
                    id TEXT NOT NULL,
                    data TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    PRIMARY KEY (collection, id)
                );

                CREATE INDEX IF NOT EXISTS idx_documents_collection
                ON documents(collection);
            """)
            conn.commit()

    def _get_connection(self) -> sqlite3.Connection:
        """Get a new database connection."""
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        """
        Open a connection for one operation and close it afterwards.

        Raises:
            StoreError: If SQLite fails to connect, read or write
        """
        try:
            conn = self._get_connection()
        except sqlite3.Error as e:
            raise StoreError(f"Cannot open document store {self.db_path}: {e}") from e
        try:
            yield conn
        except sqlite3.Error as e:
            raise StoreError(f"Document store {self.db_path} failed: {e}") from e
        finally:
            conn.close()

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get(self, collection: str, doc_id: str) -> Optional[dict[str, Any]]:
        """Get one document by id, or None."""
        with self._connection() as conn:
            cursor = conn.execute(
                "SELECT data FROM documents WHERE collection = ? AND id = ?",
                (collection, doc_id)
            )
            row = cursor.fetchone()
            return json.loads(row["data"]) if row else None

    def query(self, collection: str, **filters: Any) -> list[tuple[str, dict[str, Any]]]:
        """
        Find documents whose top-level fields equal the given values.

        Returns:
            List of (id, document) pairs in insertion order
        """
        sql = "SELECT id, data FROM documents WHERE collection = ?"
        params: list[Any] = [collection]
        for key, value in filters.items():
            sql += " AND json_extract(data, ?) = ?"
            params.extend([f"$.{key}", value])
        sql += " ORDER BY created_at, rowid"

        with self._connection() as conn:
            cursor = conn.execute(sql, params)
            return [(row["id"], json.loads(row["data"])) for row in cursor.fetchall()]

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def add(self, collection: str, data: dict[str, Any]) -> str:
        """Insert a document under a generated id and return the id."""
        doc_id = uuid.uuid4().hex
        self.set(collection, doc_id, data)
        return doc_id

    def set(self, collection: str, doc_id: str, data: dict[str, Any]):
        """Create or fully replace a document."""
        with self._connection() as conn:
            now = datetime.now(timezone.utc).isoformat()
            conn.execute(
                """INSERT INTO documents (collection, id, data, created_at, updated_at)
                   VALUES (?, ?, ?, ?, ?)
                   ON CONFLICT(collection, id) DO UPDATE SET
                     data = excluded.data,
                     updated_at = excluded.updated_at""",
                (collection, doc_id, json.dumps(data), now, now)
            )
            conn.commit()

    def update(self, collection: str, doc_id: str, fields: dict[str, Any]):
        """
        Replace the given top-level fields of an existing document.

        Raises:
            DocumentNotFoundError: If the document does not exist
        """
        with self._connection() as conn:
            cursor = conn.execute(
                "SELECT data FROM documents WHERE collection = ? AND id = ?",
                (collection, doc_id)
            )
            row = cursor.fetchone()
            if not row:
                raise DocumentNotFoundError(collection, doc_id)

            data = json.loads(row["data"])
            data.update(fields)
            conn.execute(
                """UPDATE documents SET data = ?, updated_at = ?
                   WHERE collection = ? AND id = ?""",
                (json.dumps(data), datetime.now(timezone.utc).isoformat(), collection, doc_id)
            )
            conn.commit()

    def delete(self, collection: str, doc_id: str) -> bool:
        """Delete a document. Returns False if it did not exist."""
        with self._connection() as conn:
            cursor = conn.execute(
                "DELETE FROM documents WHERE collection = ? AND id = ?",
                (collection, doc_id)
            )
            conn.commit()
            return cursor.rowcount > 0
