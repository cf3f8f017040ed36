"""Durable state session.

Holds the link between the in-memory AppState and its stored copy. Saving
before the first load would overwrite stored data with in-memory defaults,
so save() refuses until load() has run.
"""

import logging
from pathlib import Path

from masarify.domain.models import AppState
from masarify.errors import StateNotLoadedError
from masarify.store.gateway import export_snapshot, load_state
from masarify.store.queries import read_value, write_value
from masarify.store.schema import STATE_KEY, get_db_path, init_database

logger = logging.getLogger(__name__)


class StateSession:
    """Load and save the application state under a single storage key."""

    def __init__(self, db_path: Path | None = None, key: str = STATE_KEY) -> None:
        self.db_path = db_path or get_db_path()
        self.key = key
        self.loaded = False

    def load(self) -> AppState:
        """Read the stored state, or the default state if nothing is stored.

        Raises:
            sqlite3.Error: If the database cannot be read.
        """
        init_database(self.db_path)
        raw = read_value(self.key, self.db_path)
        state = load_state(raw)
        self.loaded = True
        logger.debug("Loaded state from %s (%d transactions)", self.db_path, len(state.transactions))
        return state

    def save(self, state: AppState) -> None:
        """Write the full state.

        Raises:
            StateNotLoadedError: If load() has not completed yet.
            sqlite3.Error: If the database cannot be written.
        """
        if not self.loaded:
            raise StateNotLoadedError("Refusing to save before the stored state has been loaded")
        write_value(self.key, export_snapshot(state), self.db_path)
        logger.debug("Saved state to %s", self.db_path)
