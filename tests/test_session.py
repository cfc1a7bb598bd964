"""Tests for session reconciliation, autosave and project management."""

import pytest

from importtracker.domain.autosave import AUTOSAVE_DELAY
from importtracker.domain.entities import DEFAULT_PROJECT_ID, Project
from importtracker.domain.errors import (
    NotFoundError,
    StoreUnavailableError,
    ValidationError,
)
from importtracker.domain.session import Session, SessionStatus
from importtracker.events.bus import ChangeEvent, EventKind
from importtracker.events.stream import read_events


def _open(gateway, bus, clock, project_id=None):
    session = Session(gateway, bus=bus, clock=clock)
    session.open(project_id)
    return session


def _add(session, description="Drone", base="1000"):
    draft = session.editor.new_draft()
    draft.description = description
    draft.set_base_price(base, session.editor.config)
    return session.editor.add_entry()


@pytest.fixture
def session(gateway, bus, clock):
    opened = _open(gateway, bus, clock)
    opened.process_notifications()
    yield opened
    opened.close()


def _break_writes(gateway, monkeypatch):
    def refuse(records):
        raise StoreUnavailableError("disk full")

    monkeypatch.setattr(gateway.store, "replace_records", refuse)


def test_open_on_empty_store_creates_default(session, temp_store):
    assert session.project.id == DEFAULT_PROJECT_ID
    assert [project.id for project in session.projects] == [DEFAULT_PROJECT_ID]
    assert len(temp_store.read_records()) == 1
    assert session.status == SessionStatus.SAVED
    assert session.live


def test_open_unknown_project(gateway, bus, clock):
    gateway.bootstrap()
    with pytest.raises(NotFoundError):
        Session(gateway, bus=bus, clock=clock).open("PRJ-MISSING")


def test_edit_marks_unsaved_and_autosaves(session, gateway, clock):
    entry = _add(session)
    assert session.status == SessionStatus.UNSAVED

    clock.advance(AUTOSAVE_DELAY)
    assert session.poll() is True

    assert session.status == SessionStatus.SAVED
    assert gateway.fetch()[0].entries == (entry,)


def test_manual_save(session, gateway):
    _add(session)
    session.save()

    assert not session.dirty
    assert session.last_saved_at is not None
    assert len(gateway.fetch()[0].entries) == 1


def test_own_save_echo_keeps_open_form(session):
    session.save()
    session.editor.draft.description = "half typed"

    session.process_notifications()

    assert session.editor.draft.description == "half typed"
    assert session.status == SessionStatus.SAVED


def test_two_sessions_reconcile(gateway, bus, clock):
    """A clean session follows remote saves; a dirty one keeps its edits."""
    first = _open(gateway, bus, clock)
    second = _open(gateway, bus, clock)
    first.process_notifications()
    second.process_notifications()

    entry = _add(first)
    first.save()
    second.process_notifications()

    assert second.project.entries == (entry,)
    assert not second.has_remote_update

    second.editor.set_notes("my local notes")
    first.editor.rename("Renamed elsewhere")
    first.save()
    second.process_notifications()

    assert second.has_remote_update
    assert second.status == SessionStatus.REMOTE_UPDATE
    assert second.project.notes == "my local notes"
    assert second.project.name != "Renamed elsewhere"

    second.reload()

    assert second.project.name == "Renamed elsewhere"
    assert second.project.notes == ""
    assert not second.dirty
    assert not second.has_remote_update
    first.close()
    second.close()


def test_remote_update_during_save_is_flagged(session, gateway, monkeypatch):
    seen = []
    real_save = gateway.save

    def save_with_update(projects):
        session.handle_event(ChangeEvent(EventKind.PROJECTS_UPDATED, "1"))
        seen.append((session.saving, session.has_remote_update))
        real_save(projects)

    monkeypatch.setattr(gateway, "save", save_with_update)
    session.editor.set_notes("mine")
    session.save()

    assert seen == [(True, True)]
    assert session.project.notes == "mine"
    assert not session.dirty


def test_save_after_remote_update_overwrites(gateway, bus, clock):
    """Whole-collection saves: the last writer wins."""
    first = _open(gateway, bus, clock)
    second = _open(gateway, bus, clock)
    second.process_notifications()

    first.editor.set_notes("first")
    first.save()
    second.editor.set_notes("second")
    second.process_notifications()
    second.save()

    assert gateway.fetch()[0].notes == "second"
    first.close()
    second.close()


def test_failed_save_keeps_changes_dirty(session, gateway, clock, monkeypatch):
    _add(session)
    _break_writes(gateway, monkeypatch)

    with pytest.raises(StoreUnavailableError):
        session.save()

    assert session.dirty
    assert session.status == SessionStatus.UNSAVED
    assert "disk full" in session.last_error

    clock.advance(AUTOSAVE_DELAY)
    assert session.poll() is False
    monkeypatch.undo()
    clock.advance(AUTOSAVE_DELAY)
    assert session.poll() is True
    assert not session.dirty
    assert session.last_error is None


def test_edit_during_save_stays_dirty(session, gateway, monkeypatch):
    real_save = gateway.save

    def save_and_edit(projects):
        real_save(projects)
        session.editor.set_notes("typed while saving")

    monkeypatch.setattr(gateway, "save", save_and_edit)
    _add(session)
    session.save()

    assert session.dirty
    assert session.scheduler.deadline is not None


def test_failed_reload_keeps_local_state(session, gateway, monkeypatch):
    _add(session)
    session.save()
    before = session.project

    def refuse():
        raise StoreUnavailableError("gone")

    monkeypatch.setattr(gateway, "fetch", refuse)
    with pytest.raises(StoreUnavailableError):
        session.reload()

    assert session.project is before
    assert "gone" in session.last_error


def test_follow_handles_events_until_interrupted(session, gateway):
    other = Project(id="PRJ-OTHER", name="Other")
    gateway.store.replace_records(
        gateway.store.read_records() + [{"id": other.id, "name": other.name}]
    )
    chunks = ["event: connected\ndata: ok\n\n", ": ping\n\n", "event: projects-updated\ndata: 1\n\n"]

    session.follow(read_events(chunks))

    assert not session.live
    assert session.find_project("PRJ-OTHER") == other


def test_select_project(session, gateway):
    project = session.create_project("Second")
    session.select_project(DEFAULT_PROJECT_ID)
    assert session.project.id == DEFAULT_PROJECT_ID

    session.select_project(project.id)
    assert session.project.name == "Second"

    with pytest.raises(NotFoundError):
        session.select_project("PRJ-MISSING")


def test_create_project_copies_config_and_saves(session, gateway):
    config_before = session.project.config
    project = session.create_project("  ")

    assert project.name == "Project 2"
    assert project.config == config_before
    assert session.project.id == project.id
    assert [stored.id for stored in gateway.fetch()] == [project.id, DEFAULT_PROJECT_ID]


def test_create_project_keeps_unsaved_edits_of_current(session, gateway):
    session.editor.set_notes("unsaved")
    session.create_project("New")

    stored = {project.id: project for project in gateway.fetch()}
    assert stored[DEFAULT_PROJECT_ID].notes == "unsaved"


def test_remove_project(session, gateway):
    project = session.create_project("Temp")

    assert session.remove_project(project.id, lambda target: False) is False
    assert len(gateway.fetch()) == 2

    assert session.remove_project(project.id, lambda target: True) is True
    assert [stored.id for stored in gateway.fetch()] == [DEFAULT_PROJECT_ID]
    assert session.project.id == DEFAULT_PROJECT_ID


def test_cannot_remove_only_project(session):
    with pytest.raises(ValidationError):
        session.remove_project(DEFAULT_PROJECT_ID, lambda target: True)


def test_remove_unknown_project(session):
    with pytest.raises(NotFoundError):
        session.remove_project("PRJ-MISSING", lambda target: True)


def test_session_without_bus(gateway, clock):
    session = Session(gateway, clock=clock)
    session.open()

    assert session.subscription is None
    assert session.process_notifications() == 0
    assert not session.live


def test_failed_create_project_stays_dirty(session, gateway, clock, monkeypatch):
    """A project created while the store refuses writes survives a remote update."""
    _break_writes(gateway, monkeypatch)

    with pytest.raises(StoreUnavailableError):
        session.create_project("New one")

    assert session.dirty
    assert session.status == SessionStatus.UNSAVED

    session.handle_event(ChangeEvent(EventKind.PROJECTS_UPDATED, "1"))
    assert session.has_remote_update
    assert [project.name for project in session.projects] == ["New one", "Initial project"]

    monkeypatch.undo()
    clock.advance(AUTOSAVE_DELAY)
    assert session.poll() is True
    assert [project.name for project in gateway.fetch()] == ["New one", "Initial project"]
    assert not session.dirty


def test_failed_remove_project_stays_dirty(session, gateway, clock, monkeypatch):
    project = session.create_project("Temp")
    _break_writes(gateway, monkeypatch)

    with pytest.raises(StoreUnavailableError):
        session.remove_project(project.id, lambda target: True)

    assert session.status == SessionStatus.UNSAVED
    session.handle_event(ChangeEvent(EventKind.PROJECTS_UPDATED, "1"))
    assert session.find_project(project.id) is None

    monkeypatch.undo()
    clock.advance(AUTOSAVE_DELAY)
    assert session.poll() is True
    assert [stored.id for stored in gateway.fetch()] == [DEFAULT_PROJECT_ID]


def test_reload_discards_unsaved_project_list(session, gateway, monkeypatch):
    _break_writes(gateway, monkeypatch)
    with pytest.raises(StoreUnavailableError):
        session.create_project("Lost on purpose")
    monkeypatch.undo()

    session.reload()

    assert not session.dirty
    assert [project.id for project in session.projects] == [DEFAULT_PROJECT_ID]
