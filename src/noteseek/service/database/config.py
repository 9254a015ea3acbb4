"""Configuration for the sqlite document store."""

import os
from pathlib import Path

from dotenv import load_dotenv

from noteseek.constants import DEFAULT_DATABASE_PATH, DEFAULT_EMBEDDING_DIMENSIONS

# Load environment variables
load_dotenv()


class StoreConfig:
    """Configuration class for the document store location and vector shape."""

    @staticmethod
    def get_database_path() -> Path:
        """Get the database file path from environment variables.

        Returns:
            Path: Database file (default: ~/.noteseek/index.db)
        """
        return Path(os.getenv("NOTESEEK_DB_PATH", str(DEFAULT_DATABASE_PATH))).expanduser()

    @staticmethod
    def get_dimensions() -> int:
        """Get the embedding vector dimension from environment variables.

        Changing this value invalidates every stored embedding; the database
        must then be reset and rebuilt.

        Returns:
            int: Embedding dimension (default: 768)
        """
        return int(os.getenv("EMBEDDING_DIMENSIONS", str(DEFAULT_EMBEDDING_DIMENSIONS)))
