"""Store layer - provides persistence for the application.

This module re-exports the public persistence functions for easy importing.
"""

from masarify.store.gateway import (
    delete_category,
    export_csv,
    export_snapshot,
    import_snapshot,
    load_state,
    set_currency,
)
from masarify.store.schema import STATE_KEY, database_exists, get_db_path, init_database
from masarify.store.session import StateSession

__all__ = [
    # Schema
    "STATE_KEY",
    "database_exists",
    "get_db_path",
    "init_database",
    # Gateway
    "delete_category",
    "export_csv",
    "export_snapshot",
    "import_snapshot",
    "load_state",
    "set_currency",
    # Session
    "StateSession",
]
