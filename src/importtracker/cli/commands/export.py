"""CSV export command."""

import csv
import io

import click
from importtracker.cli.project_resolution import open_session_or_exit
from importtracker.domain import derivation
from importtracker.domain.filters import filter_entries

HEADER = [
    "ID",
    "Item",
    "Recipient",
    "Supplier",
    "Base price",
    "IOF %",
    "Tax %",
    "Shipping",
    "Tax-free",
    "Sale price",
    "Cost",
    "Profit",
    "Margin",
    "Status",
    "Paid",
    "ETA",
    "Invoice",
    "Note",
]


@click.command("export")
@click.option("--project", help="Project name or ID (defaults to the first project)")
@click.option("--output", "-o", type=click.Path(dir_okay=False, writable=True),
              help="File to write (defaults to standard output)")
@click.option("--filtered", is_flag=True, help="Only export entries matching the saved view")
@click.pass_context
def export_entries(ctx, project, output, filtered):
    """Export a project's entries as CSV, amounts in BRL."""
    session = open_session_or_exit(ctx, project)
    current = session.project
    entries = current.entries
    if filtered:
        entries = filter_entries(entries, current.filters)

    rows = [
        [
            entry.id,
            entry.description,
            entry.recipient,
            entry.supplier,
            f"{entry.base_price:.2f}",
            f"{entry.iof_percent}",
            f"{entry.tax_percent}",
            f"{entry.shipping:.2f}",
            "yes" if entry.tax_free else "no",
            f"{entry.sale_price:.2f}",
            f"{derivation.cost(entry):.2f}",
            f"{derivation.profit(entry):.2f}",
            f"{derivation.margin(entry) * 100:.1f}%",
            entry.status.value,
            "yes" if entry.paid else "no",
            entry.eta,
            entry.invoice,
            entry.note,
        ]
        for entry in entries
    ]

    if output:
        with open(output, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f, quoting=csv.QUOTE_ALL)
            writer.writerow(HEADER)
            writer.writerows(rows)
        click.echo(f"Exported {len(rows)} entries to {output}")
    else:
        buffer = io.StringIO()
        writer = csv.writer(buffer, quoting=csv.QUOTE_ALL)
        writer.writerow(HEADER)
        writer.writerows(rows)
        click.echo(buffer.getvalue(), nl=False)


def register_commands(cli):
    """Register export command with main CLI."""
    cli.add_command(export_entries)
