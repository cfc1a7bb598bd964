"""Project config commands."""

import click
from importtracker.cli.error_handling import handle_domain_error
from importtracker.cli.project_resolution import open_session_or_exit
from importtracker.domain.derivation import to_display
from importtracker.domain.drafts import ConfigDraft
from importtracker.domain.entities import CurrencyMode
from importtracker.domain.errors import DomainError
from importtracker.utils.formatting import format_money


@click.group()
def config_group():
    """Show or change a project's config."""
    pass


@config_group.command("show")
@click.option("--project", help="Project name or ID (defaults to the first project)")
@click.pass_context
def show_config(ctx, project: str | None):
    """Show the project's defaults and currency settings."""
    session = open_session_or_exit(ctx, project)
    config = session.project.config
    mode = config.currency_mode
    tiers = ", ".join(format_money(to_display(tier, config), mode) for tier in config.shipping_tiers)

    click.echo(f"\nConfig for '{session.project.name}':")
    click.echo("-" * 60)
    click.echo(f"Default IOF:      {config.default_iof_percent}%")
    click.echo(f"Default tax:      {config.default_tax_percent}%")
    click.echo(f"Shipping tiers:   {tiers}")
    click.echo(f"Conversion rate:  1 USD = {format_money(config.conversion_rate, CurrencyMode.BRL)}")
    click.echo(f"Currency mode:    {mode.value}")


@config_group.command("set")
@click.option("--project", help="Project name or ID (defaults to the first project)")
@click.option("--iof", help="Default IOF percent for new entries")
@click.option("--tax", help="Default import tax percent for new entries")
@click.option("--tier", "tiers", nargs=2, multiple=True, metavar="INDEX AMOUNT",
              help="Set shipping tier INDEX (0-2) to AMOUNT, in the resulting currency mode")
@click.option("--rate", help="BRL per 1 USD")
@click.option("--currency", type=click.Choice([mode.value for mode in CurrencyMode]),
              help="Currency for input and display")
@click.pass_context
def set_config(ctx, project: str | None, iof, tax, tiers, rate, currency):
    """Change a project's config.

    Changing the currency or the rate never changes stored entries; only how
    amounts are typed and shown.

    Examples:
        importtracker config set --iof 3.5 --tax 8
        importtracker config set --currency USD --rate 5.25
        importtracker config set --tier 0 40 --tier 2 200
    """
    session = open_session_or_exit(ctx, project)
    draft = ConfigDraft.from_config(session.project.config)
    try:
        if iof is not None:
            draft.default_iof_percent = iof
        if tax is not None:
            draft.default_tax_percent = tax
        if rate is not None:
            draft.set_conversion_rate(rate)
        if currency is not None:
            draft.set_currency_mode(CurrencyMode(currency))
        for index, amount in tiers:
            try:
                position = int(index)
            except ValueError:
                raise click.BadParameter(f"tier index must be 0, 1 or 2, got '{index}'")
            draft.set_tier(position, amount)
        session.editor.update_config(draft)
        session.save()
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo("Config saved.")


def register_commands(cli):
    """Register config commands with main CLI."""
    cli.add_command(config_group, name="config")
