"""Chunking policies that split a note's text into addressable documents."""

import re
from collections.abc import Callable
from functools import partial
from typing import NamedTuple

from noteseek.constants import WINDOW_CHUNK_SIZE, WINDOW_OVERLAP
from noteseek.errors import ValidationError

# Two or more consecutive newlines, CRLF counted as one newline
PARAGRAPH_BREAK = re.compile(r"(?:\r?\n){2,}")
WORD = re.compile(r"\S+")


class Chunk(NamedTuple):
    """A contiguous span of a note's text.

    Attributes:
        start_offset: Character position of the span's first character
        text: The literal span content
    """

    start_offset: int
    text: str


Chunker = Callable[[str], list[Chunk]]


def chunk_whole(text: str) -> list[Chunk]:
    """Return the entire text as a single document (none for empty text)."""
    if not text:
        return []
    return [Chunk(0, text)]


def chunk_paragraphs(text: str) -> list[Chunk]:
    """Split text on blank-line paragraph breaks.

    Each paragraph keeps its literal text and the offset of its first
    character; whitespace-only spans (including an empty trailing span)
    are dropped.

    Args:
        text: The note's raw text

    Returns:
        list[Chunk]: Paragraph documents in source order
    """
    chunks = []
    start = 0
    for match in PARAGRAPH_BREAK.finditer(text):
        span = text[start : match.start()]
        if span.strip():
            chunks.append(Chunk(start, span))
        start = match.end()

    tail = text[start:]
    if tail.strip():
        chunks.append(Chunk(start, tail))
    return chunks


def chunk_text(
    text: str, chunk_size: int = WINDOW_CHUNK_SIZE, overlap: int = WINDOW_OVERLAP
) -> list[Chunk]:
    """Split text into overlapping chunks based on word count.

    Args:
        text: The text to chunk
        chunk_size: Target number of words per chunk (default: 500)
        overlap: Number of words to overlap between chunks (default: 50)

    Returns:
        list[Chunk]: Windows whose text runs from the first word's start to
            the last word's end in the original text

    Raises:
        ValidationError: If the window settings would never advance
    """
    if chunk_size < 1 or not 0 <= overlap < chunk_size:
        raise ValidationError(
            f"Invalid window settings: chunk_size={chunk_size}, overlap={overlap}"
        )

    words = list(WORD.finditer(text))
    if not words:
        return []

    chunks = []
    start = 0
    while start < len(words):
        window = words[start : start + chunk_size]
        begin, end = window[0].start(), window[-1].end()
        chunks.append(Chunk(begin, text[begin:end]))

        if start + chunk_size >= len(words):
            break
        # Move start position, accounting for overlap
        start += chunk_size - overlap

    return chunks


CHUNK_POLICIES: dict[str, Chunker] = {
    "whole": chunk_whole,
    "paragraph": chunk_paragraphs,
    "window": chunk_text,
}


def get_chunker(policy: str | Chunker, **options) -> Chunker:
    """Resolve a chunking policy name (or custom callable) to a chunker.

    Args:
        policy: "whole", "paragraph", "window", or any callable taking the
                note text and returning a list of Chunk
        **options: Keyword arguments bound to the named policy function
                   (e.g. chunk_size/overlap for "window")

    Returns:
        Chunker: A function from text to chunks

    Raises:
        ValidationError: If the policy name is not recognized
    """
    if callable(policy):
        return policy

    try:
        chunker = CHUNK_POLICIES[policy]
    except KeyError:
        known = ", ".join(sorted(CHUNK_POLICIES))
        raise ValidationError(
            f"Unknown chunking policy '{policy}' (expected one of: {known})"
        ) from None

    return partial(chunker, **options) if options else chunker
