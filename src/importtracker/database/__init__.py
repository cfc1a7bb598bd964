"""Persistence layer for importtracker."""

from importtracker.database.base import ProjectStore
from importtracker.database.factories import create_json_store, create_sqlite_store

__all__ = ["ProjectStore", "create_sqlite_store", "create_json_store"]
