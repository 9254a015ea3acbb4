"""Query engine: embeds a query and returns located, ranked documents."""

import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Protocol

from noteseek.constants import DEFAULT_TOP_K
from noteseek.errors import ValidationError
from noteseek.llm.base import EmbeddingClient
from noteseek.service.database import DualStore, SearchHit
from noteseek.service.notes import NoteLocation

logger = logging.getLogger(__name__)


class NoteLocator(Protocol):
    """Maps a (note id, offset) pair to a displayable location."""

    def locate(self, note_id: str, offset: int) -> NoteLocation: ...


@dataclass(frozen=True)
class LocatedResult:
    """A search hit with its position in the note file, when resolvable.

    Attributes:
        doc_id: Key of the matched document
        note_id: Identifier of the owning note
        start_offset: Character offset of the chunk within the note's text
        text: The chunk's content, for display
        distance: Cosine distance to the query
        path: Note file, or None if the locator could not resolve it
        line: 1-based line of start_offset, or None
        column: 1-based column of start_offset, or None
    """

    doc_id: int
    note_id: str
    start_offset: int
    text: str
    distance: float
    path: Path | None = None
    line: int | None = None
    column: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "note_id": self.note_id,
            "start_offset": self.start_offset,
            "text": self.text,
            "distance": self.distance,
            "path": str(self.path) if self.path else None,
            "line": self.line,
            "column": self.column,
        }


class QueryEngine:
    """Answers "find notes similar to this query" requests."""

    def __init__(
        self,
        store: DualStore,
        embedder: EmbeddingClient,
        locator: NoteLocator | None = None,
    ) -> None:
        self.store = store
        self.embedder = embedder
        self.locator = locator

    async def search(self, query_text: str, k: int = DEFAULT_TOP_K) -> list[LocatedResult]:
        """Search for the documents most similar to a query.

        Args:
            query_text: The text to search for
            k: Maximum number of results (default: 20)

        Returns:
            list[LocatedResult]: Results ordered closest first

        Raises:
            ValidationError: If the query is blank or k is less than 1
            EmbeddingError: If the query could not be embedded; the store is
                not queried in that case
        """
        if not query_text or not query_text.strip():
            raise ValidationError("Search query must not be empty")
        if k < 1:
            raise ValidationError(f"k must be at least 1, got {k}")

        logger.info(f"🔍 Searching for: '{query_text[:100]}' (top {k})")
        vector = await self.embedder.embed(query_text)
        hits = self.store.top_k_similar(vector, k)
        logger.info(f"✅ Found {len(hits)} results")
        return [self._locate(hit) for hit in hits]

    def _locate(self, hit: SearchHit) -> LocatedResult:
        result = LocatedResult(
            doc_id=hit.doc_id,
            note_id=hit.note_id,
            start_offset=hit.start_offset,
            text=hit.text,
            distance=hit.distance,
        )
        if self.locator is None:
            return result

        try:
            location = self.locator.locate(hit.note_id, hit.start_offset)
        except (OSError, ValueError) as e:
            logger.warning(f"⚠️ Could not locate note '{hit.note_id}': {e}")
            return result

        return replace(result, path=location.path, line=location.line, column=location.column)
