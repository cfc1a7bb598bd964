"""Abstract project store interface."""

from abc import ABC, abstractmethod


class ProjectStore(ABC):
    """Opaque keyed collection of project records.

    Records are plain dicts in the wire shape (see
    ``importtracker.domain.records``). The store only ever reads or replaces
    the whole collection; removing a project means writing the collection
    without it.
    """

    @property
    @abstractmethod
    def location(self) -> str:
        """Human-readable description of where records are kept."""
        pass

    @abstractmethod
    def connect(self) -> None:
        """Open resources needed to reach the store."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Release resources held by the store."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Create whatever the store needs before first use."""
        pass

    @abstractmethod
    def read_records(self) -> list:
        """Return every stored record in stored order, [] when none exist.

        Raises:
            StoreUnavailableError: If the store cannot be read
        """
        pass

    @abstractmethod
    def replace_records(self, records: list[dict]) -> None:
        """Replace the whole collection.

        Either every record is written or the previous collection stays
        intact.

        Raises:
            StoreUnavailableError: If the store cannot be written
        """
        pass
