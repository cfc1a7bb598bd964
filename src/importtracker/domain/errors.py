"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested project or entry does not exist."""


class MalformedRecordError(DomainError):
    """A stored record cannot be interpreted as a project at all."""


class StoreUnavailableError(DomainError):
    """The persistent store could not be read or written."""


class StreamInterruptedError(DomainError):
    """The change stream dropped before the client closed it."""


def project_not_found(project_id: str) -> str:
    """Return message for missing project."""
    return f"Project '{project_id}' not found"


def entry_not_found(entry_id: str) -> str:
    """Return message for missing entry."""
    return f"Entry '{entry_id}' not found"


def missing_field(field: str) -> str:
    """Return message for a required draft field left empty."""
    return f"Field '{field}' is required"


def invalid_number(field: str, value: str) -> str:
    """Return message for a draft field that is not a number."""
    return f"Field '{field}' must be a number, got '{value}'"


def shipping_tier_out_of_range(index: int, tier_count: int) -> str:
    """Return message for a shipping tier index outside the configured tiers."""
    return f"Shipping tier {index} does not exist (choose 0-{tier_count - 1})"
