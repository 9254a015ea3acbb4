"""Data models for the document store."""

from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True)
class DocumentRecord:
    """A persisted chunk of a note.

    Attributes:
        doc_id: Store-assigned key, also the key of the document's embedding
        note_id: Identifier of the owning note
        start_offset: Character offset of the chunk within the note's text
        text: The chunk's literal content
    """

    doc_id: int
    note_id: str
    start_offset: int
    text: str


@dataclass(frozen=True)
class SearchHit:
    """A document returned by a similarity search.

    Attributes:
        doc_id: Key of the matched document
        note_id: Identifier of the owning note
        start_offset: Character offset of the chunk within the note's text
        text: The chunk's literal content
        distance: Cosine distance to the query (0 = identical direction)
    """

    doc_id: int
    note_id: str
    start_offset: int
    text: str
    distance: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
