"""Main CLI entry point."""

import logging

import click
from importtracker.database.factories import create_sqlite_store
from importtracker.domain.gateway import StoreGateway
from importtracker.events.bus import NotificationBus

# Import and register all commands at module level
from importtracker.cli.commands import (
    project,
    entry,
    config,
    view,
    export,
)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides IMPORTTRACKER_DB_PATH environment variable)",
    envvar="IMPORTTRACKER_DB_PATH",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Logging verbosity",
)
@click.pass_context
def cli(ctx, db_path: str | None, log_level: str):
    """Importtracker - Import cost and profit tracking.

    Keep projects of imported items with their price, IOF, import tax and
    shipping, and see cost, profit and margin per item and per project.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    # Initialize the store only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        store = create_sqlite_store(database_path=db_path)
        store.connect()
        store.initialize_schema()
        ctx.call_on_close(store.disconnect)
        bus = NotificationBus()
        ctx.obj["store"] = store
        ctx.obj["bus"] = bus
        ctx.obj["gateway"] = StoreGateway(store, bus)


# Register all commands
project.register_commands(cli)
entry.register_commands(cli)
config.register_commands(cli)
view.register_commands(cli)
export.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
