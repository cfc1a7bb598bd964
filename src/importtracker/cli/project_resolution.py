"""CLI helpers for opening a session on the requested project."""

from __future__ import annotations

import click
from importtracker.cli.error_handling import handle_domain_error
from importtracker.domain.errors import DomainError
from importtracker.domain.session import Session
from importtracker.utils.project_resolver import resolve_project


def open_session_or_exit(ctx: click.Context, project: str | None) -> Session:
    """Open a session and select a project by name or ID, or exit with a CLI error.

    Without ``project`` the first stored project is selected; an empty store
    gets its default project first.
    """
    session = Session(ctx.obj["gateway"])
    try:
        session.open()
        if project is not None:
            project_id = resolve_project(session.projects, project)
            if project_id != session.project.id:
                session.select_project(project_id)
    except DomainError as exc:
        handle_domain_error(ctx, exc)
    return session
