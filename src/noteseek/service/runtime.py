"""Builds the store, embedding client, index manager and query engine from config."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from noteseek.chunking import Chunker
from noteseek.llm import get_embedding_client
from noteseek.service.database import DualStore, StoreConfig
from noteseek.service.indexer import IndexManager
from noteseek.service.notes import NoteDirectory
from noteseek.service.search import QueryEngine

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


def get_notes_dir() -> Path:
    """Get the default notes directory from NOTES_DIR (default: current directory)."""
    return Path(os.getenv("NOTES_DIR", ".")).expanduser()


@dataclass
class Runtime:
    """The wired components sharing one store handle."""

    store: DualStore
    indexer: IndexManager
    engine: QueryEngine
    notes: NoteDirectory

    def close(self) -> None:
        self.store.close()

    def __enter__(self) -> "Runtime":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def create_runtime(
    notes_dir: Path | str | None = None,
    database_path: Path | str | None = None,
    embedding_config: dict | None = None,
    chunker: str | Chunker | None = None,
) -> Runtime:
    """Create the components from explicit arguments or environment defaults.

    Args:
        notes_dir: Notes root (default: NOTES_DIR env or the current directory)
        database_path: Database file (default: NOTESEEK_DB_PATH env)
        embedding_config: Passed to get_embedding_client (service, model, host)
        chunker: Chunking policy name or callable (default: CHUNK_POLICY env)

    Returns:
        Runtime: Components sharing one lazily opened store
    """
    embedding_config = dict(embedding_config or {})
    dimensions = embedding_config.setdefault("dimensions", StoreConfig.get_dimensions())

    store = DualStore(database_path or StoreConfig.get_database_path(), dimensions)
    embedder = get_embedding_client(embedding_config)
    notes = NoteDirectory(notes_dir if notes_dir is not None else get_notes_dir())

    logger.debug(f"Runtime created: db={store.database_path}, notes={notes.root}")
    return Runtime(
        store=store,
        indexer=IndexManager(store, embedder, chunker=chunker),
        engine=QueryEngine(store, embedder, locator=notes),
        notes=notes,
    )
