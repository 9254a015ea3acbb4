"""Index manager: rebuilds the documents and embeddings of notes."""

import asyncio
import logging
from collections import Counter
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any

from noteseek.chunking import Chunk, Chunker, get_chunker
from noteseek.constants import get_chunk_policy, get_embed_concurrency
from noteseek.errors import EmbeddingError, StoreError, ValidationError
from noteseek.llm.base import EmbeddingClient
from noteseek.service.database import DualStore
from noteseek.service.notes import NoteDirectory

logger = logging.getLogger(__name__)


@dataclass
class DocumentFailure:
    """A chunk that could not be embedded or stored.

    Attributes:
        start_offset: Offset of the failed chunk within the note
        error: The EmbeddingError or StoreError raised for it
    """

    start_offset: int
    error: EmbeddingError | StoreError


@dataclass
class ReindexReport:
    """Outcome of reindexing one note.

    Attributes:
        note_id: The reindexed note
        chunk_count: Number of chunks the note was split into
        inserted: doc_ids of the documents stored, in chunk order
        failures: Chunks that were skipped, with the reason
    """

    note_id: str
    chunk_count: int = 0
    inserted: list[int] = field(default_factory=list)
    failures: list[DocumentFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    def to_dict(self) -> dict[str, Any]:
        return {
            "note_id": self.note_id,
            "chunk_count": self.chunk_count,
            "documents_stored": len(self.inserted),
            "failures": [
                {"start_offset": f.start_offset, "error": str(f.error)} for f in self.failures
            ],
        }


class IndexManager:
    """Orchestrates chunking, embedding and storage of notes.

    Reindexing a note replaces all of its documents. Each document insert is
    atomic on its own; a failure on one chunk is reported and does not undo
    the chunks already stored for the same note.
    """

    def __init__(
        self,
        store: DualStore,
        embedder: EmbeddingClient,
        chunker: str | Chunker | None = None,
        max_concurrency: int | None = None,
    ) -> None:
        """Initialize the index manager.

        Args:
            store: The document store to write to
            embedder: Client used to embed each chunk
            chunker: Chunking policy name or callable (default: CHUNK_POLICY env)
            max_concurrency: Outstanding embedding requests per note
                             (default: EMBED_CONCURRENCY env)
        """
        self.store = store
        self.embedder = embedder
        self.chunker = get_chunker(chunker or get_chunk_policy())
        self.max_concurrency = max_concurrency or get_embed_concurrency()
        self._semaphore = asyncio.Semaphore(self.max_concurrency)
        self._note_locks: dict[str, asyncio.Lock] = {}
        self._lock_users: Counter[str] = Counter()

    async def reindex_note(self, note_id: str, raw_text: str) -> ReindexReport:
        """Replace a note's documents with freshly embedded chunks of its text.

        The note is cleared before any embedding request is issued. Chunks
        are embedded concurrently and each is stored as soon as its embedding
        arrives, so stores may happen out of chunk order.

        Args:
            note_id: The note's identifier
            raw_text: The note's current text

        Returns:
            ReindexReport: Stored doc_ids and per-chunk failures
        """
        lock = self._note_locks.setdefault(note_id, asyncio.Lock())
        self._lock_users[note_id] += 1
        try:
            async with lock:
                report = await self._replace_documents(note_id, raw_text)
        finally:
            # Forget the lock once no reindex of this note holds or awaits it
            self._lock_users[note_id] -= 1
            if not self._lock_users[note_id]:
                del self._lock_users[note_id]
                del self._note_locks[note_id]

        if report.ok:
            logger.info(f"✅ Indexed '{note_id}': {len(report.inserted)} documents")
        else:
            logger.warning(
                f"⚠️ Indexed '{note_id}' with failures: {len(report.inserted)} stored, "
                f"{len(report.failures)} failed"
            )
        return report

    async def _replace_documents(self, note_id: str, raw_text: str) -> ReindexReport:
        chunks = self.chunker(raw_text)
        removed = self.store.clear_note(note_id)
        report = ReindexReport(note_id=note_id, chunk_count=len(chunks))
        logger.debug(
            f"Reindexing '{note_id}': removed {removed} documents, "
            f"embedding {len(chunks)} chunks"
        )

        results = await asyncio.gather(
            *(self._index_chunk(note_id, chunk) for chunk in chunks)
        )
        for chunk, result in zip(chunks, results):
            if isinstance(result, int):
                report.inserted.append(result)
            else:
                report.failures.append(DocumentFailure(chunk.start_offset, result))
        return report

    async def _index_chunk(self, note_id: str, chunk: Chunk) -> int | EmbeddingError | StoreError:
        async with self._semaphore:
            try:
                vector = await self.embedder.embed(chunk.text)
            except EmbeddingError as e:
                logger.error(
                    f"❌ Embedding failed for '{note_id}' at offset {chunk.start_offset}: {e}"
                )
                return e

        try:
            return self.store.insert_document(note_id, chunk.start_offset, chunk.text, vector)
        except StoreError as e:
            logger.error(f"❌ Store failed for '{note_id}' at offset {chunk.start_offset}: {e}")
            return e

    async def reindex_all(self, notes: Iterable[tuple[str, str]]) -> list[ReindexReport]:
        """Reindex notes one after another.

        Args:
            notes: (note_id, raw_text) pairs

        Returns:
            list[ReindexReport]: One report per note, in input order
        """
        reports = []
        for note_id, raw_text in notes:
            reports.append(await self.reindex_note(note_id, raw_text))

        stored = sum(len(r.inserted) for r in reports)
        failed = sum(len(r.failures) for r in reports)
        logger.info(
            f"✅ Reindexed {len(reports)} notes: {stored} documents stored, {failed} failed"
        )
        return reports

    async def reindex_directory(
        self, notes: NoteDirectory, prune: bool = True
    ) -> list[ReindexReport]:
        """Reindex every note of a directory.

        Args:
            notes: The note directory to enumerate
            prune: Also clear indexed notes whose files no longer exist

        Returns:
            list[ReindexReport]: One report per readable note
        """
        reports = await self.reindex_all(self._read_notes(notes))

        if prune:
            current = {report.note_id for report in reports}
            for note_id in self.store.list_note_ids():
                if note_id not in current and not notes.path_for_id(note_id).exists():
                    self.store.clear_note(note_id)
                    logger.info(f"🗑️  Removed missing note '{note_id}' from the index")

        return reports

    def _read_notes(self, notes: NoteDirectory) -> Iterator[tuple[str, str]]:
        for path in notes.list_notes():
            note_id = notes.id_for_path(path)
            try:
                yield note_id, notes.read_note(path)
            except (OSError, UnicodeDecodeError) as e:
                logger.warning(f"⚠️ Skipping unreadable note {path}: {e}")

    def reset_database(self, confirm: bool = False, force: bool = False) -> None:
        """Drop and recreate the whole index.

        Args:
            confirm: The caller obtained explicit confirmation
            force: Skip the confirmation requirement

        Raises:
            ValidationError: If neither confirm nor force is set
        """
        if not (confirm or force):
            raise ValidationError("Refusing to reset the index without confirmation")

        self.store.reset()
        logger.info("✅ Index reset complete")
