"""In-memory editing surface for the active project."""

from dataclasses import replace
from typing import Callable, Optional

from importtracker.domain.derivation import EntryFigures
from importtracker.domain.drafts import ConfigDraft, EntryDraft, with_config
from importtracker.domain.entities import (
    EntryStatus,
    Filters,
    ImportEntry,
    Project,
    new_entry_id,
)
from importtracker.domain.errors import NotFoundError, ValidationError, entry_not_found


class ProjectEditor:
    """Mutation surface for one project.

    Every mutation replaces ``project`` with an updated copy and marks the
    editor dirty. Nothing here touches the store; the owner decides when to
    persist and calls ``mark_clean`` after a successful save.
    """

    def __init__(
        self,
        project: Project,
        on_change: Optional[Callable[[], None]] = None,
        id_factory: Callable[[], str] = new_entry_id,
    ):
        """Initialize the editor.

        Args:
            project: Project to edit
            on_change: Called after every mutation (e.g. to schedule an autosave)
            id_factory: Generates ids for new entries
        """
        self.project = project
        self.on_change = on_change
        self.id_factory = id_factory
        self.dirty = False
        self.draft = EntryDraft.blank(project.config)
        self.editing_id: Optional[str] = None

    @property
    def config(self):
        return self.project.config

    def _touch(self, project: Project) -> None:
        self.project = project
        self.dirty = True
        if self.on_change is not None:
            self.on_change()

    def mark_clean(self) -> None:
        self.dirty = False

    def _require_entry(self, entry_id: str) -> ImportEntry:
        entry = self.project.find_entry(entry_id)
        if entry is None:
            raise NotFoundError(entry_not_found(entry_id))
        return entry

    def _replace_entry(self, updated: ImportEntry) -> None:
        entries = tuple(
            updated if entry.id == updated.id else entry for entry in self.project.entries
        )
        self._touch(replace(self.project, entries=entries))

    # Drafts
    def new_draft(self) -> EntryDraft:
        """Reset the form to a blank draft."""
        self.draft = EntryDraft.blank(self.config)
        self.editing_id = None
        return self.draft

    def begin_edit(self, entry_id: str) -> EntryDraft:
        """Load an entry into the form for editing.

        Raises:
            NotFoundError: If the entry doesn't exist
        """
        entry = self._require_entry(entry_id)
        self.draft = EntryDraft.from_entry(entry, self.config)
        self.editing_id = entry_id
        return self.draft

    def cancel_edit(self) -> None:
        self.new_draft()

    def preview(self, draft: Optional[EntryDraft] = None) -> EntryFigures:
        """Derived figures for a draft (the current form by default)."""
        return (draft or self.draft).preview(self.config)

    def submit(self) -> ImportEntry:
        """Commit the current form as a new entry or as the edit in progress."""
        if self.editing_id is not None:
            return self.update_entry(self.editing_id)
        return self.add_entry()

    # Entries
    def add_entry(self, draft: Optional[EntryDraft] = None) -> ImportEntry:
        """Validate a draft and prepend it as a new entry.

        Args:
            draft: Draft to commit; defaults to the current form

        Returns:
            The committed entry

        Raises:
            ValidationError: If description or base price is missing
        """
        entry = (draft or self.draft).to_entry(self.id_factory(), self.config)
        self._touch(replace(self.project, entries=(entry,) + self.project.entries))
        if draft is None:
            self.new_draft()
        return entry

    def update_entry(self, entry_id: str, draft: Optional[EntryDraft] = None) -> ImportEntry:
        """Validate a draft and replace an existing entry in place.

        Raises:
            NotFoundError: If the entry doesn't exist
            ValidationError: If description or base price is missing
        """
        self._require_entry(entry_id)
        entry = (draft or self.draft).to_entry(entry_id, self.config)
        self._replace_entry(entry)
        if draft is None or self.editing_id == entry_id:
            self.new_draft()
        return entry

    def delete_entry(self, entry_id: str, confirm: Callable[[ImportEntry], bool]) -> bool:
        """Remove an entry once the caller confirms.

        Args:
            entry_id: Entry to delete
            confirm: Asked with the entry; returning False cancels the delete

        Returns:
            True if the entry was removed

        Raises:
            NotFoundError: If the entry doesn't exist
        """
        entry = self._require_entry(entry_id)
        if not confirm(entry):
            return False
        entries = tuple(item for item in self.project.entries if item.id != entry_id)
        self._touch(replace(self.project, entries=entries))
        if self.editing_id == entry_id:
            self.new_draft()
        return True

    def toggle_paid(self, entry_id: str) -> ImportEntry:
        entry = self._require_entry(entry_id)
        updated = replace(entry, paid=not entry.paid)
        self._replace_entry(updated)
        return updated

    def set_status(self, entry_id: str, status: EntryStatus) -> ImportEntry:
        """Move an entry to any status; no transition is blocked."""
        entry = self._require_entry(entry_id)
        try:
            status = EntryStatus(status)
        except ValueError:
            raise ValidationError(f"Unknown status '{status}'")
        updated = replace(entry, status=status)
        self._replace_entry(updated)
        return updated

    # Project-level fields
    def update_config(self, config_draft: ConfigDraft, reseed: bool = True) -> None:
        """Apply a config draft.

        The open entry draft is re-expressed in the new currency settings so
        its numbers stay financially equivalent. Committed entries are stored
        in canonical currency and are left untouched.

        Args:
            config_draft: Edited config form
            reseed: Refresh untouched draft fields from the new defaults

        Raises:
            ValidationError: If the config draft does not validate
        """
        old = self.config
        new = config_draft.to_config()
        self.draft = with_config(self.draft, old, new, reseed=reseed)
        self._touch(replace(self.project, config=new))

    def set_filters(self, filters: Filters) -> None:
        self._touch(replace(self.project, filters=filters))

    def reset_filters(self) -> None:
        self.set_filters(Filters())

    def set_notes(self, notes: str) -> None:
        self._touch(replace(self.project, notes=notes))

    def rename(self, name: str) -> None:
        name = name.strip()
        if not name:
            raise ValidationError("Project name cannot be empty")
        self._touch(replace(self.project, name=name))
