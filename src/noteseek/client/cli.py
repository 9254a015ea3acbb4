"""Command-line interface for noteseek using Click."""

import asyncio
from pathlib import Path

import click
from dotenv import load_dotenv

from noteseek.chunking import CHUNK_POLICIES
from noteseek.client.cli_helpers import (
    configure_logging,
    ensure_database_exists,
    format_report,
    format_search_result,
    get_database_info,
)
from noteseek.constants import DEFAULT_TOP_K, get_chunk_policy, get_embedding_model
from noteseek.errors import EmbeddingError, NoteseekError, StoreError, ValidationError
from noteseek.service.database import StoreConfig
from noteseek.service.runtime import create_runtime

# Load environment variables
load_dotenv()


@click.command()
@click.argument(
    "directory",
    type=click.Path(exists=True, file_okay=False, dir_okay=True, path_type=Path),
)
@click.option(
    "--policy",
    type=click.Choice(sorted(CHUNK_POLICIES)),
    default=None,
    help="Chunking policy (default: from CHUNK_POLICY env or 'paragraph')",
)
@click.option(
    "--embedding-model",
    type=str,
    default=None,
    help="Embedding model to use (default: from EMBEDDING_MODEL env or the service default)",
)
@click.option(
    "--no-prune",
    is_flag=True,
    default=False,
    help="Keep indexed notes whose files no longer exist",
)
def index(directory: Path, policy: str | None, embedding_model: str | None, no_prune: bool) -> None:
    """Index every note in DIRECTORY into the noteseek database.

    Example:
        noteseek-index notes/
        noteseek-index notes/ --policy whole
    """
    configure_logging()
    embedding_config = {"model": embedding_model} if embedding_model else {}

    with create_runtime(
        notes_dir=directory, embedding_config=embedding_config, chunker=policy
    ) as runtime:
        note_paths = runtime.notes.list_notes()
        if not note_paths:
            click.echo(f"No notes found in '{directory}'")
            return

        click.echo(f"Found {len(note_paths)} note(s)")
        click.echo(f"Using embedding model: {embedding_model or get_embedding_model()}")
        click.echo(f"Chunking policy: {policy or get_chunk_policy()}\n")

        try:
            reports = asyncio.run(
                runtime.indexer.reindex_directory(runtime.notes, prune=not no_prune)
            )
        except NoteseekError as e:
            click.echo(f"\n✗ Error indexing notes: {e}", err=True)
            raise click.Abort()

        for report in reports:
            click.echo(format_report(report))

        stored = sum(len(report.inserted) for report in reports)
        failed = sum(len(report.failures) for report in reports)
        click.echo(f"\n✓ Indexing complete! Stored {stored} documents from {len(reports)} notes.")
        if failed:
            click.echo(f"⚠️  {failed} document(s) could not be indexed.", err=True)


@click.command()
@click.argument(
    "note",
    type=click.Path(exists=True, file_okay=True, dir_okay=False, path_type=Path),
)
@click.option(
    "--notes-dir",
    type=click.Path(exists=True, file_okay=False, dir_okay=True, path_type=Path),
    default=None,
    help="Notes root used to derive the note id (default: from NOTES_DIR env or '.')",
)
def reindex(note: Path, notes_dir: Path | None) -> None:
    """Reindex a single NOTE file.

    Example:
        noteseek-reindex notes/journal/today.md --notes-dir notes/
    """
    configure_logging()

    with create_runtime(notes_dir=notes_dir) as runtime:
        try:
            note_id = runtime.notes.id_for_path(note)
        except ValidationError as e:
            click.echo(f"✗ Error: {e}", err=True)
            raise click.Abort()

        try:
            report = asyncio.run(
                runtime.indexer.reindex_note(note_id, runtime.notes.read_note(note))
            )
        except (OSError, UnicodeDecodeError) as e:
            click.echo(f"✗ Error reading {note}: {e}", err=True)
            raise click.Abort()
        except NoteseekError as e:
            click.echo(f"✗ Error indexing {note_id}: {e}", err=True)
            raise click.Abort()

        click.echo(format_report(report))
        if report.ok:
            click.echo(f"✓ Reindexed '{note_id}'")


@click.command()
@click.argument("query", type=str)
@click.option(
    "--top-k",
    type=int,
    default=DEFAULT_TOP_K,
    help=f"Number of results to return (default: {DEFAULT_TOP_K})",
)
@click.option(
    "--notes-dir",
    type=click.Path(exists=True, file_okay=False, dir_okay=True, path_type=Path),
    default=None,
    help="Notes root used to locate results (default: from NOTES_DIR env or '.')",
)
def search(query: str, top_k: int, notes_dir: Path | None) -> None:
    """Search for notes similar to QUERY.

    Example:
        noteseek-search "quantum mechanics"
        noteseek-search "machine learning" --top-k 3
    """
    configure_logging()
    ensure_database_exists()

    click.echo(f"🔍 Searching for: '{query}'")
    click.echo(f"   Returning top {top_k} results...\n")

    with create_runtime(notes_dir=notes_dir) as runtime:
        try:
            results = asyncio.run(runtime.engine.search(query, k=top_k))
        except EmbeddingError as e:
            click.echo(f"✗ Embedding error: {e}", err=True)
            click.echo("\nPlease ensure the embedding service is running.", err=True)
            raise click.Abort()
        except ValidationError as e:
            click.echo(f"✗ Error: {e}", err=True)
            raise click.Abort()
        except StoreError as e:
            click.echo(f"✗ Database error: {e}", err=True)
            raise click.Abort()

    if not results:
        click.echo("No results found.")
        return

    click.echo(f"✅ Found {len(results)} result(s):\n")
    for i, result in enumerate(results, 1):
        click.echo(format_search_result(i, result))


@click.command()
def count() -> None:
    """Show the number of indexed documents and notes.

    Example:
        noteseek-count
    """
    ensure_database_exists()

    with create_runtime() as runtime:
        _, doc_count, note_count = get_database_info(runtime.store)
        if doc_count is None:
            click.echo("✗ Error counting documents", err=True)
            raise click.Abort()

        click.echo(f"📊 Index contains {doc_count} document(s) from {note_count} note(s)")

        missing, dangling = runtime.store.find_orphans()
        if missing or dangling:
            click.echo(
                f"⚠️  Inconsistent index: {len(missing)} document(s) without embeddings, "
                f"{len(dangling)} embedding(s) without documents",
                err=True,
            )


@click.command()
@click.option("--yes", "-y", is_flag=True, default=False, help="Skip confirmation prompt")
def reset_db(yes: bool) -> None:
    """Delete every indexed document and embedding and recreate an empty index.

    WARNING: This is irreversible.

    Example:
        noteseek-reset-db          # Will prompt for confirmation
        noteseek-reset-db --yes    # Skip confirmation
    """
    configure_logging()
    database_path = StoreConfig.get_database_path()

    if not database_path.exists():
        click.echo(f"✓ Index database does not exist at {database_path}")
        return

    with create_runtime() as runtime:
        confirmed = False
        if not yes:
            _, doc_count, note_count = get_database_info(runtime.store)
            click.echo("⚠️  WARNING: You are about to reset the noteseek index")
            click.echo(f"   Location: {database_path}\n")
            click.echo("This will permanently delete:")
            click.echo("  • All indexed documents")
            click.echo("  • All embeddings\n")

            if doc_count is not None:
                click.echo(
                    f"📊 Current index contains: {doc_count} document(s) "
                    f"from {note_count} note(s)\n"
                )

            if not click.confirm("Are you sure you want to proceed?", default=False):
                click.echo("Reset cancelled.")
                return
            confirmed = True

        click.echo("🗑️  Resetting index...")
        try:
            runtime.indexer.reset_database(confirm=confirmed, force=yes)
        except NoteseekError as e:
            click.echo(f"✗ Error resetting index: {e}", err=True)
            raise click.Abort()

    click.echo("✓ Index successfully reset!")
    click.echo("\nTo rebuild it, run:")
    click.echo("  noteseek-index <directory>")


if __name__ == "__main__":
    index()
