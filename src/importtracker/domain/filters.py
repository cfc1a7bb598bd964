"""Entry filtering for the project view."""

from typing import Iterable

from importtracker.domain.entities import (
    STATUS_FILTER_ANY,
    Filters,
    ImportEntry,
    PaidFilter,
)


def matches(entry: ImportEntry, filters: Filters) -> bool:
    """Check one entry against search text, status and paid filters."""
    search = filters.search.strip().lower()
    if search:
        haystack = " ".join(
            (entry.description, entry.recipient, entry.supplier, entry.invoice)
        ).lower()
        if search not in haystack:
            return False

    if filters.status != STATUS_FILTER_ANY and entry.status != filters.status:
        return False

    if filters.paid == PaidFilter.PAID and not entry.paid:
        return False
    if filters.paid == PaidFilter.PENDING and entry.paid:
        return False
    return True


def filter_entries(entries: Iterable[ImportEntry], filters: Filters) -> list[ImportEntry]:
    """Return entries matching ``filters``, keeping their order."""
    return [entry for entry in entries if matches(entry, filters)]
