"""Entry management commands."""

import click
from importtracker.cli.error_handling import handle_domain_error
from importtracker.cli.project_resolution import open_session_or_exit
from importtracker.domain.drafts import EntryDraft
from importtracker.domain.entities import Config, EntryStatus, ImportEntry
from importtracker.domain.errors import DomainError
from importtracker.utils.date_parser import parse_eta
from importtracker.utils.formatting import format_money, format_percent
from importtracker.domain.derivation import entry_figures

STATUS_CHOICES = [status.value for status in EntryStatus]


def _entry_options(func):
    """Options shared by add and edit."""
    options = [
        click.option("--description", help="Item description"),
        click.option("--base-price", help="Product price, in the project's currency mode"),
        click.option("--iof", "iof_percent", help="IOF percent (defaults to the project's IOF)"),
        click.option("--tax", "tax_percent", help="Import tax percent"),
        click.option("--shipping", help="Custom shipping amount, in the project's currency mode"),
        click.option("--tier", type=click.IntRange(0, 2), help="Use shipping tier 0, 1 or 2"),
        click.option("--tax-free/--no-tax-free", default=None, help="Apply the 10% tax-free discount to cost"),
        click.option("--recipient", help="Who the item is for"),
        click.option("--supplier", help="Supplier"),
        click.option("--invoice", help="Invoice number"),
        click.option("--eta", help="Expected arrival (e.g. 2024-03-01, 'next friday', 'in 10 days')"),
        click.option("--note", help="Free-text note"),
        click.option("--status", type=click.Choice(STATUS_CHOICES), help="Logistics status"),
        click.option("--paid/--unpaid", default=None, help="Whether the client has paid"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _fill_draft(draft: EntryDraft, config: Config, values: dict) -> None:
    for name in ("description", "recipient", "supplier", "invoice", "note"):
        if values[name] is not None:
            setattr(draft, name, values[name])
    if values["eta"] is not None:
        draft.eta = parse_eta(values["eta"])
    if values["base_price"] is not None:
        draft.set_base_price(values["base_price"], config)
    if values["iof_percent"] is not None:
        draft.set_iof_percent(values["iof_percent"])
    if values["tax_percent"] is not None:
        draft.set_tax_percent(values["tax_percent"])
    if values["tier"] is not None:
        draft.choose_shipping_tier(values["tier"], config)
    if values["shipping"] is not None:
        draft.set_shipping(values["shipping"])
    if values["tax_free"] is not None:
        draft.tax_free = values["tax_free"]
    if values["status"] is not None:
        draft.status = EntryStatus(values["status"])
    if values["paid"] is not None:
        draft.paid = values["paid"]


def _echo_entry(entry: ImportEntry, config: Config) -> None:
    figures = entry_figures(entry, config)
    mode = config.currency_mode
    click.echo(f"  Sale price: {format_money(figures.sale_price, mode)}")
    click.echo(f"  Cost:       {format_money(figures.cost, mode)}")
    click.echo(f"  Profit:     {format_money(figures.profit, mode)} ({format_percent(figures.margin)})")


@click.group()
def entry_group():
    """Manage entries of a project."""
    pass


@entry_group.command("add")
@click.option("--project", help="Project name or ID (defaults to the first project)")
@_entry_options
@click.pass_context
def add_entry(ctx, project: str | None, **values):
    """Add an entry.

    Amounts are read in the project's current currency mode and stored in
    BRL. The IOF percent defaults to the project's default, the tax percent
    to the project's default tax, and shipping to tier 0.

    Examples:
        importtracker entry add --description "Headphones" --base-price 1800 --tax 8
        importtracker entry add --description "Sneakers" --base-price 190 --tier 2 --tax-free
    """
    session = open_session_or_exit(ctx, project)
    editor = session.editor
    draft = editor.new_draft()
    try:
        _fill_draft(draft, editor.config, values)
        entry = editor.add_entry()
        session.save()
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created entry {entry.id}: {entry.description}")
    _echo_entry(entry, session.project.config)


@entry_group.command("edit")
@click.argument("entry_id")
@click.option("--project", help="Project name or ID (defaults to the first project)")
@_entry_options
@click.pass_context
def edit_entry(ctx, entry_id: str, project: str | None, **values):
    """Edit an entry. Only the given fields change; the sale price is recomputed."""
    session = open_session_or_exit(ctx, project)
    editor = session.editor
    try:
        draft = editor.begin_edit(entry_id)
        _fill_draft(draft, editor.config, values)
        entry = editor.submit()
        session.save()
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated entry {entry.id}: {entry.description}")
    _echo_entry(entry, session.project.config)


@entry_group.command("delete")
@click.argument("entry_id")
@click.option("--project", help="Project name or ID (defaults to the first project)")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_entry(ctx, entry_id: str, project: str | None, yes: bool):
    """Delete an entry."""
    session = open_session_or_exit(ctx, project)

    def confirm(entry: ImportEntry) -> bool:
        if yes:
            return True
        return click.confirm(f"Delete entry {entry.id} ({entry.description})?", default=False)

    try:
        deleted = session.editor.delete_entry(entry_id, confirm)
        if deleted:
            session.save()
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted entry {entry_id}" if deleted else "Cancelled.")


@entry_group.command("toggle-paid")
@click.argument("entry_id")
@click.option("--project", help="Project name or ID (defaults to the first project)")
@click.pass_context
def toggle_paid(ctx, entry_id: str, project: str | None):
    """Flip an entry between paid and pending."""
    session = open_session_or_exit(ctx, project)
    try:
        entry = session.editor.toggle_paid(entry_id)
        session.save()
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Entry {entry.id} is now {'paid' if entry.paid else 'pending'}")


@entry_group.command("status")
@click.argument("entry_id")
@click.argument("status", type=click.Choice(STATUS_CHOICES))
@click.option("--project", help="Project name or ID (defaults to the first project)")
@click.pass_context
def set_status(ctx, entry_id: str, status: str, project: str | None):
    """Set an entry's logistics status. Any status may follow any other."""
    session = open_session_or_exit(ctx, project)
    try:
        entry = session.editor.set_status(entry_id, EntryStatus(status))
        session.save()
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Entry {entry.id} is now {entry.status.label}")


def register_commands(cli):
    """Register entry commands with main CLI."""
    cli.add_command(entry_group, name="entry")
