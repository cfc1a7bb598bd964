"""Entry viewing commands."""

import click
from importtracker.cli.error_handling import handle_domain_error
from importtracker.cli.project_resolution import open_session_or_exit
from importtracker.domain.derivation import entry_figures, to_display
from importtracker.domain.entities import (
    STATUS_FILTER_ANY,
    EntryStatus,
    Filters,
    PaidFilter,
)
from importtracker.domain.errors import DomainError
from importtracker.domain.filters import filter_entries
from importtracker.domain.summary import summarize
from importtracker.utils.formatting import format_money, format_percent

STATUS_FILTER_CHOICES = [STATUS_FILTER_ANY] + [status.value for status in EntryStatus]
PAID_FILTER_CHOICES = [option.value for option in PaidFilter]


@click.command("view")
@click.option("--project", help="Project name or ID (defaults to the first project)")
@click.option("--search", help="Match description, recipient, supplier or invoice")
@click.option("--status", type=click.Choice(STATUS_FILTER_CHOICES), help="Only entries with this status")
@click.option("--paid", type=click.Choice(PAID_FILTER_CHOICES), help="Only paid or pending entries")
@click.option("--remember", is_flag=True, help="Save these filters as the project's view")
@click.option("--verbose", "-v", is_flag=True, help="Show IOF, tax, shipping and notes per entry")
@click.pass_context
def view_entries(ctx, project, search, status, paid, remember, verbose):
    """View a project's entries with cost, profit and margin.

    Filters not given on the command line come from the project's saved view.
    """
    session = open_session_or_exit(ctx, project)
    current = session.project
    saved = current.filters
    filters = Filters(
        search=saved.search if search is None else search,
        status=saved.status if status is None else (
            STATUS_FILTER_ANY if status == STATUS_FILTER_ANY else EntryStatus(status)
        ),
        paid=saved.paid if paid is None else PaidFilter(paid),
    )

    if remember and filters != saved:
        try:
            session.editor.set_filters(filters)
            session.save()
        except DomainError as e:
            handle_domain_error(ctx, e)

    config = current.config
    mode = config.currency_mode
    entries = filter_entries(current.entries, filters)

    click.echo(f"\n{current.name} ({current.id})")
    if not entries:
        click.echo("No entries found with the current filters.")
        return

    click.echo("=" * 110)
    click.echo(
        f"{'ID':16s} {'Item':28s} {'Status':11s} {'Paid':5s} "
        f"{'Sale':>14s} {'Cost':>14s} {'Profit':>14s} {'Margin':>7s}"
    )
    click.echo("-" * 110)
    for entry in entries:
        figures = entry_figures(entry, config)
        click.echo(
            f"{entry.id:16s} {entry.description[:28]:28s} {entry.status.label:11s} "
            f"{'yes' if entry.paid else 'no':5s} "
            f"{format_money(figures.sale_price, mode):>14s} "
            f"{format_money(figures.cost, mode):>14s} "
            f"{format_money(figures.profit, mode):>14s} "
            f"{format_percent(figures.margin):>7s}"
        )
        if verbose:
            click.echo(
                f"    Price {format_money(figures.base_price, mode)} · "
                f"IOF {format_money(figures.iof, mode)} · "
                f"Tax {format_money(figures.tax, mode)} · "
                f"Shipping {format_money(figures.shipping, mode)}"
                + (" · tax-free" if entry.tax_free else "")
            )
            details = [
                ("Recipient", entry.recipient),
                ("Supplier", entry.supplier),
                ("Invoice", entry.invoice),
                ("ETA", entry.eta),
                ("Note", entry.note),
            ]
            for label, value in details:
                if value:
                    click.echo(f"    {label}: {value}")
    click.echo("-" * 110)

    shown = summarize(entries)
    total = summarize(current.entries)
    click.echo(
        f"Rows: {shown.entry_count} | "
        f"Cost: {format_money(to_display(shown.invested, config), mode)} | "
        f"Profit: {format_money(to_display(shown.profit, config), mode)}"
    )
    click.echo(
        f"Project: invested {format_money(to_display(total.invested, config), mode)}, "
        f"revenue {format_money(to_display(total.revenue, config), mode)}, "
        f"profit {format_money(to_display(total.profit, config), mode)} "
        f"({format_percent(total.average_margin)}), "
        f"taxes {format_money(to_display(total.taxes, config), mode)}"
    )
    click.echo(
        f"Paid: {total.paid_count} ({format_money(to_display(total.paid_amount, config), mode)}), "
        f"open: {total.open_count}"
    )


def register_commands(cli):
    """Register view command with main CLI."""
    cli.add_command(view_entries)
