"""Per-session reconciliation between local edits and the shared store.

A session owns the project list it last loaded, an editor for the active
project and an autosave scheduler. When another session saves, the bus
delivers a ``projects-updated`` signal:

- with no local changes (not dirty, not saving) the session reloads;
- otherwise local state is kept and ``has_remote_update`` is raised so the
  user can decide, via ``reload``, whether to discard their edits.

Concurrent saves from different sessions are last-writer-wins at whole
collection granularity; no merge is attempted.
"""

import logging
from dataclasses import replace
from enum import Enum
from typing import Callable, Iterable, Optional

from importtracker.domain.autosave import AutosaveScheduler, Clock, MonotonicClock, AUTOSAVE_DELAY
from importtracker.domain.drafts import with_config
from importtracker.domain.editor import ProjectEditor
from importtracker.domain.entities import Project, new_project_id
from importtracker.domain.errors import (
    MalformedRecordError,
    NotFoundError,
    StoreUnavailableError,
    StreamInterruptedError,
    ValidationError,
    project_not_found,
)
from importtracker.domain.gateway import StoreGateway
from importtracker.events.bus import ChangeEvent, EventKind, NotificationBus, Subscription

logger = logging.getLogger("importtracker.session")


class SessionStatus(str, Enum):
    """What the user is told about their data."""

    SAVED = "saved"
    SAVING = "saving"
    UNSAVED = "unsaved"
    REMOTE_UPDATE = "remote-update"


class Session:
    """One client's editing session."""

    def __init__(
        self,
        gateway: StoreGateway,
        bus: Optional[NotificationBus] = None,
        clock: Optional[Clock] = None,
        autosave_delay: float = AUTOSAVE_DELAY,
    ):
        """Initialize a session.

        Args:
            gateway: Store gateway shared by every session
            bus: Bus to listen on; None for a session that never hears
                about other sessions' saves
            clock: Time source for autosave and timestamps
            autosave_delay: Quiet period before an automatic save
        """
        self.gateway = gateway
        self.bus = bus
        self.clock = clock or MonotonicClock()
        self.scheduler = AutosaveScheduler(self._persist, clock=self.clock, delay=autosave_delay)
        self.subscription: Optional[Subscription] = None
        self.projects: list[Project] = []
        self.editor: Optional[ProjectEditor] = None
        self.has_remote_update = False
        # Project list changes (create/remove) not yet written
        self.collection_dirty = False
        self.last_saved_at: Optional[float] = None
        self.last_error: Optional[str] = None
        self.live = False

    # State
    @property
    def project(self) -> Project:
        if self.editor is None:
            raise NotFoundError("No project is open")
        return self.editor.project

    @property
    def dirty(self) -> bool:
        return self.collection_dirty or (self.editor is not None and self.editor.dirty)

    @property
    def saving(self) -> bool:
        return self.scheduler.saving

    @property
    def status(self) -> SessionStatus:
        if self.saving:
            return SessionStatus.SAVING
        if self.has_remote_update:
            return SessionStatus.REMOTE_UPDATE
        if self.dirty:
            return SessionStatus.UNSAVED
        return SessionStatus.SAVED

    # Lifecycle
    def open(self, project_id: Optional[str] = None) -> Project:
        """Subscribe to changes and perform the first load.

        On an empty store the default project is created and saved before
        anything is shown.

        Raises:
            StoreUnavailableError: If the store cannot be read
        """
        if self.bus is not None and self.subscription is None:
            self.subscription = self.bus.subscribe()
            self.live = True
        try:
            projects = self.gateway.bootstrap()
        except StoreUnavailableError as e:
            self.last_error = f"Could not load projects: {e}"
            raise
        self._apply(projects, project_id)
        self.last_saved_at = self.clock.now()
        return self.project

    def close(self) -> None:
        """Stop listening. Unsaved edits are not flushed."""
        if self.subscription is not None:
            self.subscription.close()
            self.subscription = None
        self.live = False

    def _apply(
        self, projects: list[Project], project_id: Optional[str], keep_draft: bool = False
    ) -> None:
        previous = self.editor
        if project_id is None and previous is not None:
            project_id = previous.project.id
        selected = None
        for project in projects:
            if project.id == project_id:
                selected = project
                break
        if selected is None:
            if project_id is not None and self.editor is None:
                raise NotFoundError(project_not_found(project_id))
            selected = projects[0] if projects else None
        self.projects = list(projects)
        if selected is None:
            self.editor = None
        else:
            self.editor = ProjectEditor(selected, on_change=self.scheduler.edit)
            if keep_draft and previous is not None and previous.project.id == selected.id:
                # An open form is not part of the project; carry it over
                self.editor.draft = with_config(
                    previous.draft, previous.project.config, selected.config
                )
                if previous.editing_id and selected.find_entry(previous.editing_id):
                    self.editor.editing_id = previous.editing_id
        self.scheduler.cancel()
        self.has_remote_update = False
        self.collection_dirty = False

    # Loading
    def reload(self, project_id: Optional[str] = None, keep_draft: bool = False) -> Project:
        """Replace local state with the stored collection.

        Unsaved local edits are discarded.

        Args:
            project_id: Project to show; defaults to the current one
            keep_draft: Keep the open entry form when the project stays the same

        Raises:
            StoreUnavailableError: If the store cannot be read; local state is
                left as it was
        """
        try:
            projects = self.gateway.fetch()
        except StoreUnavailableError as e:
            self.last_error = f"Could not load projects: {e}"
            raise
        if not projects:
            projects = self.gateway.bootstrap()
        self._apply(projects, project_id, keep_draft=keep_draft)
        self.last_error = None
        self.last_saved_at = self.clock.now()
        return self.project

    def select_project(self, project_id: str) -> Project:
        """Switch to another project with a full reload.

        Raises:
            NotFoundError: If no stored project has that id
        """
        projects = self.gateway.fetch()
        if not any(project.id == project_id for project in projects):
            raise NotFoundError(project_not_found(project_id))
        self._apply(projects, project_id)
        self.last_saved_at = self.clock.now()
        return self.project

    def find_project(self, project_id: str) -> Optional[Project]:
        for project in self.projects:
            if project.id == project_id:
                return project
        return None

    # Reconciliation
    def handle_event(self, event: ChangeEvent) -> None:
        """React to one change-stream event."""
        if event.kind != EventKind.PROJECTS_UPDATED:
            return
        if self.dirty or self.saving:
            logger.debug("Remote update while local changes are pending; keeping local state")
            self.has_remote_update = True
            return
        try:
            self.reload(keep_draft=True)
        except (StoreUnavailableError, MalformedRecordError):
            logger.warning("Remote update seen but reload failed", exc_info=True)
            self.has_remote_update = True

    def process_notifications(self) -> int:
        """Handle every event queued on the subscription.

        Returns:
            Number of events handled
        """
        if self.subscription is None:
            return 0
        events = self.subscription.drain()
        for event in events:
            self.handle_event(event)
        return len(events)

    def follow(self, events: Iterable[ChangeEvent]) -> None:
        """Consume a remote change stream until it ends.

        An interrupted stream only stops live updates; local state is
        untouched.
        """
        self.live = True
        try:
            for event in events:
                self.handle_event(event)
        except StreamInterruptedError as e:
            logger.info(f"Change stream interrupted: {e}")
        finally:
            self.live = False

    def poll(self) -> bool:
        """Drain notifications and fire the autosave if it is due.

        Returns:
            True if an autosave ran and succeeded
        """
        self.process_notifications()
        try:
            return self.scheduler.poll()
        except StoreUnavailableError:
            return False

    # Saving
    def _collection(self) -> list[Project]:
        if self.editor is None:
            return list(self.projects)
        current = self.editor.project
        merged = [current if project.id == current.id else project for project in self.projects]
        if not any(project.id == current.id for project in merged):
            merged.insert(0, current)
        return merged

    def _persist(self) -> None:
        collection = self._collection()
        snapshot = self.editor.project if self.editor is not None else None
        try:
            self.gateway.save(collection)
        except StoreUnavailableError as e:
            self.last_error = f"Could not save projects: {e}"
            raise
        self.projects = collection
        # Edits made while the write was in flight stay dirty
        if self.editor is not None and self.editor.project is snapshot:
            self.editor.mark_clean()
        self.collection_dirty = False
        self.has_remote_update = False
        self.last_error = None
        self.last_saved_at = self.clock.now()

    def save(self) -> None:
        """Save immediately, cancelling any pending autosave.

        Raises:
            StoreUnavailableError: If the write fails; the session stays dirty
        """
        self.scheduler.save_now()

    # Projects
    def create_project(self, name: str = "") -> Project:
        """Create a project, make it current and save right away.

        The new project starts with a copy of the current project's config.
        """
        name = name.strip() or f"Project {len(self.projects) + 1}"
        project = Project(id=new_project_id(), name=name)
        if self.editor is not None:
            project = replace(project, config=self.editor.project.config)
        self.projects = [project] + self._collection()
        self.editor = ProjectEditor(project, on_change=self.scheduler.edit)
        self.collection_dirty = True
        self.save()
        return project

    def remove_project(self, project_id: str, confirm: Callable[[Project], bool]) -> bool:
        """Drop a project from the collection and save.

        The last remaining project cannot be removed.

        Returns:
            True if the project was removed
        """
        collection = self._collection()
        target = next((project for project in collection if project.id == project_id), None)
        if target is None:
            raise NotFoundError(project_not_found(project_id))
        if len(collection) == 1:
            raise ValidationError("Cannot remove the only project")
        if not confirm(target):
            return False
        remaining = [project for project in collection if project.id != project_id]
        self.projects = remaining
        if self.editor is not None and self.editor.project.id == project_id:
            self.editor = ProjectEditor(remaining[0], on_change=self.scheduler.edit)
        self.collection_dirty = True
        self.save()
        return True
