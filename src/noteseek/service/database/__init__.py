"""Document store for noteseek: sqlite metadata table plus sqlite-vec index.

This package provides:
- Configuration management (StoreConfig)
- The transactional DualStore (clear, insert, reset, top-k search)
- Record and search-hit models

Usage:
    from noteseek.service.database import DualStore, StoreConfig

    store = DualStore(StoreConfig.get_database_path(), StoreConfig.get_dimensions())
"""

# Re-export public API
from noteseek.service.database.config import StoreConfig
from noteseek.service.database.models import DocumentRecord, SearchHit
from noteseek.service.database.store import DualStore

__all__ = [
    # Config
    "StoreConfig",
    # Models
    "DocumentRecord",
    "SearchHit",
    # Store
    "DualStore",
]
