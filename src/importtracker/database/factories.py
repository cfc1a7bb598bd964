"""Store factory functions."""

import os
from pathlib import Path
from typing import Optional

from importtracker.database.json_store import JSONFileProjectStore
from importtracker.database.sqlalchemy_store import SQLAlchemyProjectStore

DB_PATH_ENV = "IMPORTTRACKER_DB_PATH"
JSON_PATH_ENV = "IMPORTTRACKER_JSON_PATH"
LEGACY_JSON_PATH = Path(".local") / "projects.json"


def create_sqlite_store(database_path: Optional[str] = None) -> SQLAlchemyProjectStore:
    """Create a SQLite-backed project store.

    Args:
        database_path: Path to SQLite database file. If None, checks
            IMPORTTRACKER_DB_PATH environment variable, then defaults to
            ~/.importtracker/projects.db

    Returns:
        SQLAlchemyProjectStore instance configured for SQLite
    """
    if database_path is None:
        database_path = os.environ.get(DB_PATH_ENV)

    if database_path is None:
        db_dir = Path.home() / ".importtracker"
        db_dir.mkdir(exist_ok=True)
        database_path = str(db_dir / "projects.db")

    return SQLAlchemyProjectStore(f"sqlite:///{database_path}")


def create_json_store(json_path: Optional[str] = None) -> JSONFileProjectStore:
    """Create a JSON-file project store.

    Args:
        json_path: Path to the JSON file. If None, checks IMPORTTRACKER_JSON_PATH,
            then defaults to .local/projects.json in the working directory

    Returns:
        JSONFileProjectStore instance
    """
    if json_path is None:
        json_path = os.environ.get(JSON_PATH_ENV)
    return JSONFileProjectStore(json_path or LEGACY_JSON_PATH)
