"""Store gateway: the only path between sessions and the project store."""

import logging
import time
from typing import Callable, Optional

from importtracker.database.base import ProjectStore
from importtracker.database.mappers import project_from_record, project_to_record
from importtracker.domain.entities import Project, default_project
from importtracker.domain.errors import MalformedRecordError, StoreUnavailableError
from importtracker.events.bus import ChangeEvent, EventKind, NotificationBus

logger = logging.getLogger("importtracker.gateway")


def _epoch_ms() -> str:
    return str(int(time.time() * 1000))


class StoreGateway:
    """Serializes project lists to and from the store.

    A successful ``save`` publishes a ``projects-updated`` event on the
    bus. Reads and writes always cover the whole collection.
    """

    def __init__(
        self,
        store: ProjectStore,
        bus: NotificationBus,
        stamp: Callable[[], str] = _epoch_ms,
    ):
        """Initialize the gateway.

        Args:
            store: Backing project store
            bus: Bus that receives a signal after every successful write
            stamp: Produces the informative payload of update events
        """
        self.store = store
        self.bus = bus
        self.stamp = stamp

    def fetch(self) -> list[Project]:
        """Read and normalize every stored project.

        Records that are not objects at all are skipped and logged; every
        other record is repaired.

        Raises:
            StoreUnavailableError: If the store cannot be read
        """
        return self._decode(self.store.read_records())

    def _decode(self, records: list) -> list[Project]:
        projects = []
        for index, record in enumerate(records):
            try:
                projects.append(project_from_record(record))
            except MalformedRecordError as e:
                logger.warning(f"Skipping stored record {index}: {e}")
        logger.debug(f"Loaded {len(projects)} project(s)")
        return projects

    def load(self) -> list[Project]:
        """Read every stored project, degrading to [] if the store fails."""
        try:
            return self.fetch()
        except StoreUnavailableError:
            logger.error("Could not load projects", exc_info=True)
            return []

    def save(self, projects: list[Project]) -> None:
        """Replace the stored collection and notify subscribers.

        Raises:
            StoreUnavailableError: If the store cannot be written; nothing is
                published in that case
        """
        records = [project_to_record(project) for project in projects]
        try:
            self.store.replace_records(records)
        except StoreUnavailableError:
            logger.error(f"Could not save {len(records)} project(s)", exc_info=True)
            raise
        logger.info(f"Saved {len(records)} project(s)")
        self.broadcast()

    def broadcast(self) -> int:
        """Tell every subscribed session that the collection changed."""
        return self.bus.publish(ChangeEvent(EventKind.PROJECTS_UPDATED, self.stamp()))

    def bootstrap(self, seed: Optional[Project] = None) -> list[Project]:
        """Load projects, creating and saving a default one on first run.

        Args:
            seed: Project to create when the store is empty

        Returns:
            The stored projects (exactly one on first run)

        Raises:
            StoreUnavailableError: If the store cannot be read or the default
                project cannot be written
            MalformedRecordError: If the store holds records but none is a project
        """
        records = self.store.read_records()
        projects = self._decode(records)
        if projects:
            return projects
        if records:
            logger.error(f"Store holds {len(records)} unreadable record(s); not seeding a default project")
            raise MalformedRecordError(
                f"Stored projects could not be read ({len(records)} record(s)); refusing to replace them"
            )
        seed = seed or default_project()
        logger.info(f"Empty store; creating default project {seed.id}")
        self.save([seed])
        return [seed]
