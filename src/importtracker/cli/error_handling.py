"""CLI error handling helpers."""

import click

from importtracker.domain.errors import DomainError, StoreUnavailableError


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure.

    Store failures also name the store, since the usual fix is a wrong
    --db-path or a locked file.
    """
    click.echo(f"Error: {error}", err=True)
    if isinstance(error, StoreUnavailableError):
        store = (ctx.obj or {}).get("store")
        if store is not None:
            click.echo(f"Store: {store.location}", err=True)
    ctx.exit(1)
