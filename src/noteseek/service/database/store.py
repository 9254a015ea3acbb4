"""Transactional dual store: document metadata table plus sqlite-vec index.

Every document lives in two places that share one integer key:

- ``documents``: ``(doc_id, note_id, start_offset, content)``
- ``document_embeddings``: a ``vec0`` virtual table keyed by ``doc_id``

All writes that touch both go through :meth:`DualStore.transaction`, so a
reader never sees a document without its embedding or the reverse.
"""

import logging
import sqlite3
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from pathlib import Path

import sqlite_vec

from noteseek.errors import DimensionMismatchError, StoreError, ValidationError
from noteseek.service.database.models import DocumentRecord, SearchHit

logger = logging.getLogger(__name__)

DIMENSIONS_KEY = "embedding_dimensions"


class DualStore:
    """Single source of truth for document records and their embeddings.

    The connection is opened on first use and released by :meth:`close`.
    Distances are cosine distances (``1 - cosine similarity``).
    """

    def __init__(self, database_path: Path | str, dimensions: int) -> None:
        """Initialize the store handle without opening the database.

        Args:
            database_path: sqlite database file (":memory:" is accepted)
            dimensions: Length of every stored embedding vector
        """
        if dimensions < 1:
            raise ValidationError(f"Embedding dimension must be positive, got {dimensions}")
        self.database_path = database_path
        self.dimensions = dimensions
        self._conn: sqlite3.Connection | None = None
        self._schema_ready = False

    def __enter__(self) -> "DualStore":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Connection lifecycle
    # ------------------------------------------------------------------

    def _open(self) -> sqlite3.Connection:
        if self._conn is not None:
            return self._conn

        if str(self.database_path) != ":memory:":
            Path(self.database_path).parent.mkdir(parents=True, exist_ok=True)

        try:
            # Autocommit mode: transactions are issued explicitly
            conn = sqlite3.connect(str(self.database_path), isolation_level=None)
            conn.enable_load_extension(True)
            sqlite_vec.load(conn)
            conn.enable_load_extension(False)
        except (sqlite3.Error, AttributeError) as e:
            raise StoreError(f"Failed to open database {self.database_path}: {e}") from e

        logger.info(f"📂 Opened document store at {self.database_path}")
        self._conn = conn
        return conn

    @property
    def connection(self) -> sqlite3.Connection:
        """The open connection, with the schema created and validated."""
        return self._ensure_schema()

    def _ensure_schema(self) -> sqlite3.Connection:
        conn = self._open()
        if not self._schema_ready:
            with self.transaction():
                self._create_schema(conn)
            self._schema_ready = True
        return conn

    def close(self) -> None:
        """Close the connection. The handle reopens lazily on next use."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            self._schema_ready = False
            logger.debug(f"Closed document store at {self.database_path}")

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Run a block inside one write transaction.

        Commits when the block exits normally and rolls back on every other
        exit path. sqlite errors are re-raised as StoreError.
        """
        conn = self._open()
        if conn.in_transaction:
            raise StoreError("Nested transactions are not supported")

        try:
            conn.execute("BEGIN IMMEDIATE")
        except sqlite3.Error as e:
            raise StoreError(f"Failed to begin transaction: {e}") from e

        try:
            yield conn
        except sqlite3.Error as e:
            conn.rollback()
            raise StoreError(f"Transaction rolled back: {e}") from e
        except BaseException:
            conn.rollback()
            raise

        try:
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise StoreError(f"Commit failed: {e}") from e

    def _create_schema(self, conn: sqlite3.Connection) -> None:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS store_meta (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL
            )
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS documents (
                doc_id INTEGER PRIMARY KEY AUTOINCREMENT,
                note_id TEXT NOT NULL,
                start_offset INTEGER NOT NULL,
                content TEXT NOT NULL
            )
            """
        )
        conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_documents_note_id ON documents(note_id)"
        )
        conn.execute(
            f"""
            CREATE VIRTUAL TABLE IF NOT EXISTS document_embeddings USING vec0(
                doc_id INTEGER PRIMARY KEY,
                embedding float[{self.dimensions}] distance_metric=cosine
            )
            """
        )

        row = conn.execute(
            "SELECT value FROM store_meta WHERE key = ?", (DIMENSIONS_KEY,)
        ).fetchone()
        if row is None:
            conn.execute(
                "INSERT INTO store_meta (key, value) VALUES (?, ?)",
                (DIMENSIONS_KEY, str(self.dimensions)),
            )
        elif int(row[0]) != self.dimensions:
            raise StoreError(
                f"Database {self.database_path} holds {row[0]}-dimensional embeddings "
                f"but {self.dimensions} are configured; reset and rebuild the index "
                "to change the embedding dimension"
            )

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def clear_note(self, note_id: str) -> int:
        """Delete every document of a note and its embeddings.

        Idempotent: clearing a note with no documents is a no-op.

        Args:
            note_id: Identifier of the note to clear

        Returns:
            int: Number of documents removed
        """
        self._ensure_schema()
        with self.transaction() as conn:
            doc_ids = [
                row[0]
                for row in conn.execute(
                    "SELECT doc_id FROM documents WHERE note_id = ?", (note_id,)
                )
            ]
            conn.executemany(
                "DELETE FROM document_embeddings WHERE doc_id = ?",
                [(doc_id,) for doc_id in doc_ids],
            )
            conn.execute("DELETE FROM documents WHERE note_id = ?", (note_id,))

        if doc_ids:
            logger.debug(f"Cleared {len(doc_ids)} documents for note '{note_id}'")
        return len(doc_ids)

    def insert_document(
        self, note_id: str, start_offset: int, text: str, vector: Sequence[float]
    ) -> int:
        """Store one document and its embedding as a single unit.

        Args:
            note_id: Identifier of the owning note
            start_offset: Character offset of the chunk within the note
            text: The chunk's literal content
            vector: Embedding of exactly `dimensions` floats

        Returns:
            int: The new document's doc_id

        Raises:
            DimensionMismatchError: If the vector has the wrong length
            ValidationError: If the vector is all zeros
            StoreError: If the transaction fails (nothing is written)
        """
        self._check_vector(vector)
        payload = sqlite_vec.serialize_float32(list(vector))

        self._ensure_schema()
        with self.transaction() as conn:
            cursor = conn.execute(
                "INSERT INTO documents (note_id, start_offset, content) VALUES (?, ?, ?)",
                (note_id, start_offset, text),
            )
            doc_id = cursor.lastrowid
            conn.execute(
                "INSERT INTO document_embeddings (doc_id, embedding) VALUES (?, ?)",
                (doc_id, payload),
            )

        return doc_id

    def reset(self) -> None:
        """Drop every document and embedding, then recreate the empty schema.

        Also discards the recorded embedding dimension, so this is how a
        database is moved to a new dimension.
        """
        conn = self._open()
        self._schema_ready = False
        with self.transaction():
            conn.execute("DROP TABLE IF EXISTS document_embeddings")
            conn.execute("DROP TABLE IF EXISTS documents")
            conn.execute("DROP TABLE IF EXISTS store_meta")
            self._create_schema(conn)
        self._schema_ready = True
        logger.info(f"✅ Document store reset ({self.dimensions} dimensions)")

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def top_k_similar(self, query_vector: Sequence[float], k: int) -> list[SearchHit]:
        """Find the k documents whose embeddings are closest to a query vector.

        Args:
            query_vector: Query embedding of exactly `dimensions` floats
            k: Maximum number of results

        Returns:
            list[SearchHit]: Hits ordered by ascending distance, ties by doc_id

        Raises:
            ValidationError: If k is less than 1 or the query vector is all zeros
            DimensionMismatchError: If the query vector has the wrong length
        """
        if k < 1:
            raise ValidationError(f"k must be at least 1, got {k}")
        self._check_vector(query_vector)

        # Exact scan so ties at the k-th distance keep the lowest doc_ids
        payload = sqlite_vec.serialize_float32(list(query_vector))
        try:
            rows = self.connection.execute(
                """
                SELECT d.doc_id, d.note_id, d.start_offset, d.content,
                       vec_distance_cosine(e.embedding, ?) AS distance
                FROM document_embeddings AS e
                JOIN documents AS d ON d.doc_id = e.doc_id
                ORDER BY distance, d.doc_id
                LIMIT ?
                """,
                (payload, k),
            ).fetchall()
        except sqlite3.Error as e:
            raise StoreError(f"Similarity search failed: {e}") from e

        return [
            SearchHit(
                doc_id=row[0],
                note_id=row[1],
                start_offset=row[2],
                text=row[3],
                distance=float(row[4]),
            )
            for row in rows
        ]

    def documents_for_note(self, note_id: str) -> list[DocumentRecord]:
        """Return a note's documents ordered by offset."""
        rows = self.connection.execute(
            """
            SELECT doc_id, note_id, start_offset, content FROM documents
            WHERE note_id = ? ORDER BY start_offset, doc_id
            """,
            (note_id,),
        ).fetchall()
        return [DocumentRecord(*row) for row in rows]

    def count_documents(self) -> int:
        return self.connection.execute("SELECT COUNT(*) FROM documents").fetchone()[0]

    def count_notes(self) -> int:
        return self.connection.execute(
            "SELECT COUNT(DISTINCT note_id) FROM documents"
        ).fetchone()[0]

    def list_note_ids(self) -> list[str]:
        rows = self.connection.execute(
            "SELECT DISTINCT note_id FROM documents ORDER BY note_id"
        ).fetchall()
        return [row[0] for row in rows]

    def find_orphans(self) -> tuple[list[int], list[int]]:
        """Report keys present in only one of the two structures.

        Returns:
            tuple: (doc_ids without an embedding, embedding keys without a document)
        """
        conn = self.connection
        missing = [
            row[0]
            for row in conn.execute(
                """
                SELECT doc_id FROM documents
                WHERE doc_id NOT IN (SELECT doc_id FROM document_embeddings)
                ORDER BY doc_id
                """
            )
        ]
        dangling = [
            row[0]
            for row in conn.execute(
                """
                SELECT doc_id FROM document_embeddings
                WHERE doc_id NOT IN (SELECT doc_id FROM documents)
                ORDER BY doc_id
                """
            )
        ]
        return missing, dangling

    def _check_vector(self, vector: Sequence[float]) -> None:
        if len(vector) != self.dimensions:
            raise DimensionMismatchError(self.dimensions, len(vector))
        # Cosine distance is undefined for a zero vector
        if not any(vector):
            raise ValidationError("Embedding vector has zero norm")
