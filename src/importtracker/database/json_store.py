"""JSON-file implementation of the project store."""

import json
import os
from pathlib import Path

from importtracker.database.base import ProjectStore
from importtracker.domain.errors import StoreUnavailableError


class JSONFileProjectStore(ProjectStore):
    """Stores the collection as one JSON array in a file.

    Writes go to a temporary sibling file that then replaces the target, so
    readers see either the old or the new collection, never a partial one.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    @property
    def location(self) -> str:
        return str(self.path)

    def connect(self) -> None:
        pass

    def disconnect(self) -> None:
        pass

    def initialize_schema(self) -> None:
        """Create the parent directory and an empty collection if needed."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            if not self.path.exists():
                self.path.write_text("[]", encoding="utf-8")
        except OSError as e:
            raise StoreUnavailableError(f"Could not prepare {self.path}: {e}") from e

    def read_records(self) -> list:
        if not self.path.exists():
            return []
        try:
            raw = self.path.read_text(encoding="utf-8")
            data = json.loads(raw or "[]")
        except (OSError, json.JSONDecodeError) as e:
            raise StoreUnavailableError(f"Could not read {self.path}: {e}") from e
        if not isinstance(data, list):
            return []
        return data

    def replace_records(self, records: list[dict]) -> None:
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(records, indent=2, ensure_ascii=False), encoding="utf-8")
            os.replace(tmp, self.path)
        except (OSError, TypeError, ValueError) as e:
            tmp.unlink(missing_ok=True)
            raise StoreUnavailableError(f"Could not save {self.path}: {e}") from e
