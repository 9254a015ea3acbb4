"""FastMCP server exposing note search and reindexing as tools."""

import logging
import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from fastmcp import FastMCP

from noteseek.constants import DEFAULT_MCP_HOST, DEFAULT_MCP_PORT, DEFAULT_TOP_K
from noteseek.errors import NoteseekError
from noteseek.service.runtime import Runtime, create_runtime

# Configure logging
log_level = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Load environment variables
load_dotenv()
logger.debug("Environment variables loaded for MCP server")

# Create FastMCP instance
mcp = FastMCP("noteseek Note Search")

_runtime: Runtime | None = None


def get_runtime() -> Runtime:
    """Return the server's runtime, creating it on first use."""
    global _runtime
    if _runtime is None:
        _runtime = create_runtime()
    return _runtime


def close_runtime() -> None:
    """Close the server's store handle, if one was opened."""
    global _runtime
    if _runtime is not None:
        _runtime.close()
        _runtime = None


async def search_notes_impl(query: str, top_k: int = DEFAULT_TOP_K) -> list[dict[str, Any]]:
    logger.debug(f"MCP Tool: Parameters - query='{query[:100]}...', top_k={top_k}")

    try:
        results = await get_runtime().engine.search(query, k=top_k)
    except NoteseekError as e:
        error_msg = f"{type(e).__name__}: {e}"
        logger.error(f"❌ MCP Tool: {error_msg}")
        raise ValueError(error_msg) from e

    logger.info(f"✅ MCP Tool: Returning {len(results)} results to MCP client")
    return [result.to_dict() for result in results]


async def reindex_note_impl(path: str) -> dict[str, Any]:
    runtime = get_runtime()
    logger.info(f"📥 MCP Tool reindex_note: {path}")

    try:
        note_id = runtime.notes.id_for_path(Path(path))
        text = runtime.notes.read_note(Path(path))
        report = await runtime.indexer.reindex_note(note_id, text)
    except (NoteseekError, OSError, UnicodeDecodeError) as e:
        error_msg = f"{type(e).__name__}: {e}"
        logger.error(f"❌ MCP Tool: {error_msg}")
        return {"success": False, "note_id": None, "message": error_msg}

    return {
        "success": report.ok,
        **report.to_dict(),
        "message": (
            f"Stored {len(report.inserted)} of {report.chunk_count} documents"
        ),
    }


async def index_stats_impl() -> dict[str, Any]:
    store = get_runtime().store
    try:
        missing, dangling = store.find_orphans()
        return {
            "success": True,
            "database": str(store.database_path),
            "dimensions": store.dimensions,
            "documents": store.count_documents(),
            "notes": store.count_notes(),
            "consistent": not (missing or dangling),
        }
    except NoteseekError as e:
        error_msg = f"Error reading index statistics: {type(e).__name__}: {e}"
        logger.error(f"❌ MCP Tool: {error_msg}")
        return {"success": False, "message": error_msg}


@mcp.tool()
async def search_notes(query: str, top_k: int = DEFAULT_TOP_K) -> list[dict[str, Any]]:
    """
    Searches the note index for passages that are semantically similar to
    the query. Returns up to top_k results, closest first, each with the
    note id, character offset, text, cosine distance, and file location.

    Args:
        query: The search query text
        top_k: Number of top results to return (default: 20)
    """
    return await search_notes_impl(query, top_k)


@mcp.tool()
async def reindex_note(path: str) -> dict[str, Any]:
    """
    Re-embeds one note file and replaces its documents in the index.

    Args:
        path: Path of the note file, inside the configured notes directory

    Returns:
        dict with success, note_id, chunk_count, documents_stored, failures
        and a descriptive message
    """
    return await reindex_note_impl(path)


@mcp.tool()
async def index_stats() -> dict[str, Any]:
    """
    Reports how many documents and notes are indexed and whether the
    metadata table and vector index agree.
    """
    return await index_stats_impl()


def main() -> None:
    """Entry point for the MCP server command-line interface."""
    logger.info("🚀 Starting noteseek MCP Server...")
    host = os.getenv("MCP_HOST", DEFAULT_MCP_HOST)
    port = int(os.getenv("MCP_PORT", str(DEFAULT_MCP_PORT)))
    try:
        mcp.run(transport="sse", host=host, port=port)
    finally:
        close_runtime()


if __name__ == "__main__":
    main()
