"""Utility for resolving project names to IDs."""

from typing import Sequence

from importtracker.domain.entities import Project
from importtracker.domain.errors import NotFoundError, project_not_found


def resolve_project(projects: Sequence[Project], project: str) -> str:
    """Resolve a project name or ID to a project ID.

    IDs match exactly; names match case-insensitively.

    Args:
        projects: Known projects
        project: Project ID or name

    Returns:
        Project ID

    Raises:
        NotFoundError: If no project matches, or a name matches several projects
    """
    for candidate in projects:
        if candidate.id == project:
            return candidate.id

    wanted = project.strip().casefold()
    matches = [candidate for candidate in projects if candidate.name.casefold() == wanted]
    if len(matches) == 1:
        return matches[0].id
    if len(matches) > 1:
        ids = ", ".join(candidate.id for candidate in matches)
        raise NotFoundError(f"Project name '{project}' is ambiguous ({ids}); use the ID")
    raise NotFoundError(project_not_found(project))
