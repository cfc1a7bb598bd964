#!/usr/bin/env python3
"""Migration script to import a legacy JSON projects file into SQLite.

Earlier versions of the tracker kept every project in one JSON array at
.local/projects.json. This script reads that file, repairs each record
(legacy statuses, absolute IOF/duty amounts, missing fields) and writes
the result into the SQLite store.

The import refuses to overwrite a store that already holds projects
unless --replace is given.

Usage:
    python migrations/import_legacy_json.py [--json-path PATH] [--db-path PATH] [--replace]
"""

import sys
from pathlib import Path

# Add src to path so we can import importtracker modules
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from importtracker.database.factories import create_json_store, create_sqlite_store
from importtracker.domain.gateway import StoreGateway
from importtracker.events.bus import NotificationBus


def migrate_projects(
    json_path: str | None = None,
    database_path: str | None = None,
    replace: bool = False,
) -> int:
    """Copy projects from a legacy JSON file into the SQLite store.

    Args:
        json_path: Legacy file. If None, uses IMPORTTRACKER_JSON_PATH or .local/projects.json
        database_path: Path to database file. If None, uses default location.
        replace: Overwrite projects already in the database

    Returns:
        Number of projects imported

    Raises:
        Exception: If migration fails
    """
    bus = NotificationBus()
    source = StoreGateway(create_json_store(json_path), bus)
    target_store = create_sqlite_store(database_path=database_path)
    target_store.connect()
    target = StoreGateway(target_store, bus)

    try:
        projects = source.fetch()
        if not projects:
            print("Nothing to import: legacy file holds no projects")
            return 0

        existing = target.fetch()
        if existing and not replace:
            raise Exception(
                f"Database already holds {len(existing)} project(s). Use --replace to overwrite them."
            )

        print(f"Importing {len(projects)} project(s)...")
        for project in projects:
            print(f"  {project.id}: {project.name} ({len(project.entries)} entries)")
        target.save(projects)
        print("Migration completed successfully!")
        return len(projects)

    except Exception as e:
        print(f"Migration failed: {e}")
        raise
    finally:
        target_store.disconnect()


def main():
    """Main entry point for migration script."""
    import argparse

    parser = argparse.ArgumentParser(
        description="Import a legacy JSON projects file into the SQLite store"
    )
    parser.add_argument(
        "--json-path",
        type=str,
        help="Legacy JSON file (overrides IMPORTTRACKER_JSON_PATH environment variable)",
    )
    parser.add_argument(
        "--db-path",
        type=str,
        help="Path to database file (overrides IMPORTTRACKER_DB_PATH environment variable)",
    )
    parser.add_argument(
        "--replace",
        action="store_true",
        help="Overwrite projects already stored in the database",
    )
    args = parser.parse_args()

    try:
        migrate_projects(json_path=args.json_path, database_path=args.db_path, replace=args.replace)
        return 0
    except Exception as e:
        print(f"\nMigration failed: {e}", file=sys.stderr)
        import traceback
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
