"""Shared pytest fixtures for importtracker tests."""

import tempfile
import os
from decimal import Decimal
from pathlib import Path
import pytest

from importtracker.database.factories import create_json_store, create_sqlite_store
from importtracker.domain.autosave import ManualClock
from importtracker.domain.entities import Config, EntryStatus, ImportEntry, Project
from importtracker.domain.gateway import StoreGateway
from importtracker.events.bus import NotificationBus


@pytest.fixture
def db_path():
    """Path of a temporary database file, removed afterwards."""
    fd, path = tempfile.mkstemp(suffix=".db")
    os.close(fd)
    yield path
    if os.path.exists(path):
        os.unlink(path)


@pytest.fixture
def temp_store(db_path):
    """Create a temporary SQLite store for testing."""
    store = create_sqlite_store(database_path=db_path)
    store.connect()
    store.initialize_schema()

    yield store

    store.disconnect()


@pytest.fixture
def json_store(tmp_path):
    """JSON-file store in a temporary directory."""
    return create_json_store(str(tmp_path / ".local" / "projects.json"))


@pytest.fixture
def bus():
    return NotificationBus()


@pytest.fixture
def gateway(temp_store, bus):
    """Gateway over the temporary store, stamping events with a fixed value."""
    return StoreGateway(temp_store, bus, stamp=lambda: "1700000000000")


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def config():
    """Default config: IOF 3.5%, no tax, tiers 50/100/150, 5 BRL per USD."""
    return Config()


@pytest.fixture
def sample_entry():
    """Entry with base 1000, IOF 5%, tax 8%, shipping 100."""
    return ImportEntry(
        id="IMP-SAMPLE0001",
        description="Headphones",
        recipient="Ana",
        supplier="Shop",
        invoice="INV-1",
        base_price=Decimal("1000"),
        iof_percent=Decimal("5"),
        tax_percent=Decimal("8"),
        shipping=Decimal("100"),
        sale_price=Decimal("1230"),
        status=EntryStatus.ORDERED,
    )


@pytest.fixture
def sample_project(sample_entry):
    return Project(id="PRJ-SAMPLE", name="March batch", entries=(sample_entry,))


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def fixtures_dir():
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"
