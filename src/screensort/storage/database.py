"""
Database connection utilities for ScreenSort settings storage.
"""

import os
import sqlite3
from pathlib import Path

from ..core.logging import get_logger

logger = get_logger(__name__)

ENV_HOME = "SCREENSORT_HOME"
ENV_DB_PATH = "SCREENSORT_DB_PATH"


def get_home_dir() -> Path:
    """
    Get the ScreenSort state directory.

    Returns:
        Path: ``$SCREENSORT_HOME`` when set, otherwise ``~/.screensort``
    """
    home = os.environ.get(ENV_HOME)
    if home:
        return Path(home).expanduser()
    return Path.home() / ".screensort"


def get_db_path() -> str:
    """
    Get the settings database file path.

    Returns:
        str: Path to the database file
    """
    explicit = os.environ.get(ENV_DB_PATH)
    if explicit:
        return str(Path(explicit).expanduser())
    return str(get_home_dir() / "settings.db")


def get_db_connection() -> sqlite3.Connection:
    """
    Get a SQLite database connection with the settings table in place.

    Returns:
        sqlite3.Connection: Database connection object
    """
    db_path = get_db_path()
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS settings (
            key TEXT PRIMARY KEY,
            value TEXT,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
        """
    )
    logger.debug(f"Opened settings database at {db_path}")
    return conn
