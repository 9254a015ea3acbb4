"""Helper functions for CLI commands."""

import logging
import os
from pathlib import Path

import click

from noteseek.constants import CONTENT_PREVIEW_LENGTH
from noteseek.errors import StoreError
from noteseek.service.database import DualStore, StoreConfig
from noteseek.service.indexer import ReindexReport
from noteseek.service.search import LocatedResult

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    """Configure root logging from the LOG_LEVEL environment variable."""
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def ensure_database_exists(database_path: Path | None = None) -> Path:
    """Check that the index database file exists.

    Args:
        database_path: Database file (default: from StoreConfig)

    Returns:
        Path: The existing database file

    Raises:
        click.Abort: If the database has not been created yet
    """
    path = database_path or StoreConfig.get_database_path()
    if path.exists():
        return path

    click.echo(f"✗ Error: Index database does not exist at {path}!", err=True)
    click.echo("\nPlease build the index first using:", err=True)
    click.echo("  noteseek-index <directory>", err=True)
    raise click.Abort()


def format_search_result(
    index: int, result: LocatedResult, max_length: int = CONTENT_PREVIEW_LENGTH
) -> str:
    """Format a search result for display.

    Args:
        index: Result number (1-based)
        result: Located search result
        max_length: Maximum content length before truncation

    Returns:
        Formatted string for display
    """
    if result.path is not None:
        location = f"{result.path}:{result.line}:{result.column}"
    else:
        location = f"{result.note_id} @ {result.start_offset}"

    content = " ".join(result.text.split())
    display_content = (
        content[:max_length] + "..." if len(content) > max_length else content
    )

    lines = [
        f"{index}. [{location}] (distance: {result.distance:.4f})",
        f"   {display_content}",
        "",
    ]
    return "\n".join(lines)


def format_report(report: ReindexReport) -> str:
    """Format a one-line summary of a note's reindex, plus its failures."""
    if report.ok:
        return f"  ✓ {report.note_id}: {len(report.inserted)} document(s)"

    lines = [
        f"  ✗ {report.note_id}: {len(report.inserted)}/{report.chunk_count} document(s), "
        f"{len(report.failures)} failed"
    ]
    for failure in report.failures:
        lines.append(f"      offset {failure.start_offset}: {failure.error}")
    return "\n".join(lines)


def get_database_info(store: DualStore) -> tuple[str, int | None, int | None]:
    """Get database location and document/note counts.

    Returns:
        Tuple of (database path, document count, note count); counts are None
        if the database could not be read
    """
    try:
        return str(store.database_path), store.count_documents(), store.count_notes()
    except StoreError as e:
        logger.warning(f"⚠️ Could not read index statistics: {e}")
        return str(store.database_path), None, None
