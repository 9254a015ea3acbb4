"""Filesystem note collaborator: enumerates notes and maps ids to paths."""

import logging
from dataclasses import dataclass
from pathlib import Path

from noteseek.constants import NOTE_EXTENSIONS
from noteseek.errors import ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NoteLocation:
    """Where a character offset falls inside a note file.

    Attributes:
        path: The note file
        line: 1-based line number
        column: 1-based column within the line
    """

    path: Path
    line: int
    column: int


class NoteDirectory:
    """A directory tree of text notes.

    A note's id is its POSIX path relative to the root, so ids stay stable
    across machines as long as the tree layout does.
    """

    def __init__(self, root: Path | str, extensions: tuple[str, ...] = NOTE_EXTENSIONS) -> None:
        self.root = Path(root).expanduser().resolve()
        self.extensions = tuple(ext.lower() for ext in extensions)

    def list_notes(self) -> list[Path]:
        """Return every note file under the root, sorted, skipping hidden entries."""
        notes = []
        for path in self.root.rglob("*"):
            relative = path.relative_to(self.root)
            if any(part.startswith(".") for part in relative.parts):
                continue
            if self.is_note(path):
                notes.append(path)
        return sorted(notes)

    def is_note(self, path: Path | str) -> bool:
        """Check whether a path is a note file inside this directory."""
        path = Path(path).expanduser().resolve()
        if not path.is_file() or path.suffix.lower() not in self.extensions:
            return False
        return path.is_relative_to(self.root)

    def id_for_path(self, path: Path | str) -> str:
        """Map a note file to its id.

        Raises:
            ValidationError: If the path is not a note in this directory
        """
        resolved = Path(path).expanduser().resolve()
        if not self.is_note(resolved):
            raise ValidationError(f"Not a note in {self.root}: {path}")
        return resolved.relative_to(self.root).as_posix()

    def path_for_id(self, note_id: str) -> Path:
        return self.root / Path(note_id)

    def read_note(self, path: Path | str) -> str:
        return Path(path).read_text(encoding="utf-8")

    def locate(self, note_id: str, offset: int) -> NoteLocation:
        """Resolve a character offset in a note to a line and column.

        Args:
            note_id: The note's id
            offset: Character offset into the note's text

        Returns:
            NoteLocation: Path with 1-based line and column
        """
        path = self.path_for_id(note_id)
        prefix = self.read_note(path)[:offset]
        line = prefix.count("\n") + 1
        column = offset - (prefix.rfind("\n") + 1) + 1
        return NoteLocation(path=path, line=line, column=column)
