"""Tests for the command line interface."""

import csv
import io
import re

import pytest

from importtracker.cli.main import cli
from importtracker.database.sqlalchemy_store import SQLAlchemyProjectStore
from importtracker.domain.errors import StoreUnavailableError


@pytest.fixture
def invoke(cli_runner, db_path):
    """Run the CLI against the temporary database."""

    def run(*args, input=None):
        return cli_runner.invoke(cli, ["--db-path", db_path, *args], input=input)

    return run


def _entry_id(output):
    match = re.search(r"Created entry (\S+):", output)
    assert match is not None, output
    return match.group(1)


def _add_headphones(invoke, *extra):
    result = invoke(
        "entry", "add",
        "--description", "Headphones",
        "--base-price", "1000",
        "--iof", "5",
        "--tax", "8",
        "--shipping", "100",
        *extra,
    )
    assert result.exit_code == 0, result.output
    return _entry_id(result.output)


def test_help_does_not_touch_store(cli_runner, tmp_path):
    db = tmp_path / "never.db"
    result = cli_runner.invoke(cli, ["--db-path", str(db), "--help"])

    assert result.exit_code == 0
    assert "project" in result.output
    assert not db.exists()


class TestProjectCommands:
    """Tests for project commands."""

    def test_first_run_lists_default_project(self, invoke):
        result = invoke("project", "list")

        assert result.exit_code == 0
        assert "PRJ-0001" in result.output
        assert "Initial project" in result.output

    def test_create_rename_and_remove(self, invoke):
        result = invoke("project", "create", "March batch")
        assert result.exit_code == 0
        assert "Created project 'March batch'" in result.output

        result = invoke("project", "rename", "march batch", "April batch")
        assert result.exit_code == 0
        assert "Renamed project to 'April batch'" in result.output

        result = invoke("project", "remove", "April batch", "--yes")
        assert result.exit_code == 0
        assert "Removed project" in result.output
        assert "April batch" not in invoke("project", "list").output

    def test_remove_asks_for_confirmation(self, invoke):
        invoke("project", "create", "Temp")
        result = invoke("project", "remove", "Temp", input="n\n")

        assert result.exit_code == 0
        assert "Cancelled." in result.output
        assert "Temp" in invoke("project", "list").output

    def test_cannot_remove_only_project(self, invoke):
        result = invoke("project", "remove", "PRJ-0001", "--yes")

        assert result.exit_code == 1
        assert "Error: Cannot remove the only project" in result.output

    def test_unknown_project(self, invoke):
        result = invoke("view", "--project", "Nope")

        assert result.exit_code == 1
        assert "Error: Project 'Nope' not found" in result.output

    def test_notes(self, invoke):
        assert "(no notes)" in invoke("project", "notes", "PRJ-0001").output
        assert invoke("project", "notes", "PRJ-0001", "Ship together").exit_code == 0
        assert "Ship together" in invoke("project", "notes", "PRJ-0001").output

    def test_store_failure_names_the_store(self, invoke, monkeypatch):
        assert invoke("project", "list").exit_code == 0

        def refuse(self, records):
            raise StoreUnavailableError("database is locked")

        monkeypatch.setattr(SQLAlchemyProjectStore, "replace_records", refuse)
        result = invoke("project", "notes", "PRJ-0001", "Ship together")

        assert result.exit_code == 1
        assert "Error: database is locked" in result.output
        assert "Store: sqlite:///" in result.output


class TestEntryCommands:
    """Tests for entry commands."""

    def test_add_entry_shows_figures(self, invoke):
        result = invoke(
            "entry", "add",
            "--description", "Headphones",
            "--base-price", "1000",
            "--iof", "5",
            "--tax", "8",
            "--shipping", "100",
        )

        assert result.exit_code == 0
        assert "Sale price: R$ 1,230.00" in result.output
        assert "Cost:       R$ 1,000.00" in result.output
        assert "R$ 230.00 (18.7%)" in result.output

    def test_add_tax_free_entry(self, invoke):
        result = invoke(
            "entry", "add",
            "--description", "Headphones",
            "--base-price", "1000",
            "--iof", "5",
            "--tax", "8",
            "--shipping", "100",
            "--tax-free",
        )

        assert result.exit_code == 0
        assert "Cost:       R$ 900.00" in result.output
        assert "R$ 330.00 (26.8%)" in result.output

    def test_add_requires_description(self, invoke):
        result = invoke("entry", "add", "--base-price", "10")

        assert result.exit_code == 1
        assert "Error: Field 'description' is required" in result.output

    def test_add_rejects_bad_number(self, invoke):
        result = invoke("entry", "add", "--description", "x", "--base-price", "ten")

        assert result.exit_code == 1
        assert "basePrice" in result.output

    def test_edit_recomputes_sale_price(self, invoke):
        entry_id = _add_headphones(invoke)
        result = invoke("entry", "edit", entry_id, "--tax", "10")

        assert result.exit_code == 0
        assert f"Updated entry {entry_id}: Headphones" in result.output
        assert "Sale price: R$ 1,250.00" in result.output

    def test_edit_unknown_entry(self, invoke):
        result = invoke("entry", "edit", "IMP-NOPE", "--tax", "10")

        assert result.exit_code == 1
        assert "Entry 'IMP-NOPE' not found" in result.output

    def test_toggle_paid_and_status(self, invoke):
        entry_id = _add_headphones(invoke)

        result = invoke("entry", "toggle-paid", entry_id)
        assert f"Entry {entry_id} is now paid" in result.output

        result = invoke("entry", "status", entry_id, "delivered")
        assert f"Entry {entry_id} is now delivered" in result.output

        result = invoke("entry", "status", entry_id, "ordered")
        assert f"Entry {entry_id} is now ordered" in result.output

    def test_delete_entry(self, invoke):
        entry_id = _add_headphones(invoke)

        assert "Cancelled." in invoke("entry", "delete", entry_id, input="n\n").output
        result = invoke("entry", "delete", entry_id, "--yes")
        assert f"Deleted entry {entry_id}" in result.output
        assert "No entries found" in invoke("view").output

    def test_shipping_tier(self, invoke):
        result = invoke("entry", "add", "--description", "Cable", "--base-price", "100", "--tier", "2")

        assert result.exit_code == 0
        # 100 + 3.5% IOF + tier 2 (150)
        assert "Sale price: R$ 253.50" in result.output


class TestConfigCommands:
    """Tests for config commands."""

    def test_show_defaults(self, invoke):
        result = invoke("config", "show")

        assert result.exit_code == 0
        assert "Default IOF:      3.5%" in result.output
        assert "R$ 50.00, R$ 100.00, R$ 150.00" in result.output
        assert "1 USD = R$ 5.00" in result.output

    def test_switch_currency_keeps_stored_amounts(self, invoke):
        _add_headphones(invoke)
        result = invoke("config", "set", "--currency", "USD", "--rate", "5")
        assert result.exit_code == 0
        assert "Config saved." in result.output

        view = invoke("view").output
        assert "US$ 246.00" in view

        invoke("config", "set", "--currency", "BRL")
        assert "R$ 1,230.00" in invoke("view").output

    def test_tiers_in_foreign_currency(self, invoke):
        invoke("config", "set", "--currency", "USD", "--rate", "4", "--tier", "0", "20")
        invoke("config", "set", "--currency", "BRL")

        assert "R$ 80.00, R$ 100.00, R$ 150.00" in invoke("config", "show").output

    def test_invalid_rate(self, invoke):
        result = invoke("config", "set", "--rate", "0")

        assert result.exit_code == 1
        assert "conversionRate" in result.output

    def test_invalid_tier_index(self, invoke):
        result = invoke("config", "set", "--tier", "x", "10")
        assert result.exit_code != 0


class TestViewAndExport:
    """Tests for view and export."""

    def test_view_totals(self, invoke):
        _add_headphones(invoke)
        _add_headphones(invoke, "--tax-free", "--paid")

        result = invoke("view")

        assert result.exit_code == 0
        assert "Headphones" in result.output
        assert "Rows: 2" in result.output
        assert "invested R$ 1,900.00" in result.output
        assert "Paid: 1 (R$ 900.00), open: 1" in result.output

    def test_view_filters(self, invoke):
        _add_headphones(invoke)
        result = invoke("view", "--status", "delivered")
        assert "No entries found with the current filters." in result.output

        result = invoke("view", "--paid", "pending", "--search", "HEAD")
        assert "Rows: 1" in result.output

    def test_remembered_filters(self, invoke):
        _add_headphones(invoke)
        invoke("view", "--paid", "paid", "--remember")

        assert "No entries found" in invoke("view").output
        assert "Rows: 1" in invoke("view", "--paid", "any").output

    def test_export_csv(self, invoke):
        entry_id = _add_headphones(invoke, "--recipient", "Ana")
        result = invoke("export")

        assert result.exit_code == 0
        rows = list(csv.reader(io.StringIO(result.output)))
        assert rows[0][:3] == ["ID", "Item", "Recipient"]
        assert rows[1][0] == entry_id
        assert rows[1][2] == "Ana"
        assert rows[1][9] == "1230.00"
        assert rows[1][12] == "18.7%"

    def test_export_to_file(self, invoke, tmp_path):
        _add_headphones(invoke)
        target = tmp_path / "entries.csv"

        result = invoke("export", "-o", str(target))

        assert result.exit_code == 0
        assert "Exported 1 entries" in result.output
        assert target.read_text(encoding="utf-8").startswith('"ID","Item"')
