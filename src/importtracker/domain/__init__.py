"""Domain layer for importtracker application."""

from importtracker.domain.editor import ProjectEditor
from importtracker.domain.drafts import ConfigDraft, EntryDraft

__all__ = [
    "ProjectEditor",
    "EntryDraft",
    "ConfigDraft",
]
