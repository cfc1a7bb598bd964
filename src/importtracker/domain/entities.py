"""Domain model entities for importtracker.

These are pure data classes representing business concepts, independent of
how the store lays records out. All monetary fields hold canonical-currency
(BRL) amounts; conversion to the display currency only happens on read.
"""

import uuid
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Optional


class EntryStatus(str, Enum):
    """Logistics stage of an entry.

    Members are ordered from first to last stage, but any value may follow
    any other.
    """

    ORDERED = "ordered"
    IN_TRANSIT = "in_transit"
    DELIVERED = "delivered"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ")


class CurrencyMode(str, Enum):
    """Currency the editor accepts input in and displays."""

    BRL = "BRL"
    USD = "USD"


CANONICAL_CURRENCY = CurrencyMode.BRL
DISPLAY_CURRENCY = CurrencyMode.USD


class PaidFilter(str, Enum):
    """Paid/pending view filter."""

    ANY = "any"
    PAID = "paid"
    PENDING = "pending"


STATUS_FILTER_ANY = "any"

SHIPPING_TIER_COUNT = 3


@dataclass(frozen=True)
class ImportEntry:
    """One priced line item.

    ``sale_price`` is derived from the other financial fields at commit time
    and stored; it is never edited directly.
    """

    id: str
    description: str
    base_price: Decimal
    sale_price: Decimal
    iof_percent: Decimal = Decimal("0")
    tax_percent: Decimal = Decimal("0")
    shipping: Decimal = Decimal("0")
    tax_free: bool = False
    recipient: str = ""
    supplier: str = ""
    invoice: str = ""
    eta: str = ""
    note: str = ""
    status: EntryStatus = EntryStatus.ORDERED
    paid: bool = False


def _default_tiers() -> tuple[Decimal, Decimal, Decimal]:
    return (Decimal("50"), Decimal("100"), Decimal("150"))


@dataclass(frozen=True)
class Config:
    """Per-project defaults and currency parameters."""

    default_iof_percent: Decimal = Decimal("3.5")
    default_tax_percent: Decimal = Decimal("0")
    shipping_tiers: tuple[Decimal, Decimal, Decimal] = field(default_factory=_default_tiers)
    # Canonical units per one display-currency unit
    conversion_rate: Decimal = Decimal("5.0")
    currency_mode: CurrencyMode = CurrencyMode.BRL

    @property
    def displays_foreign(self) -> bool:
        """True when amounts are shown in the display currency."""
        return self.currency_mode == DISPLAY_CURRENCY


@dataclass(frozen=True)
class Filters:
    """Last-used view filters.

    ``status`` is either ``STATUS_FILTER_ANY`` or an EntryStatus.
    """

    search: str = ""
    status: EntryStatus | str = STATUS_FILTER_ANY
    paid: PaidFilter = PaidFilter.ANY


@dataclass(frozen=True)
class Project:
    """Unit of persistence and sharing.

    Entries are kept newest first.
    """

    id: str
    name: str
    entries: tuple[ImportEntry, ...] = ()
    config: Config = field(default_factory=Config)
    notes: str = ""
    filters: Filters = field(default_factory=Filters)

    def find_entry(self, entry_id: str) -> Optional[ImportEntry]:
        for entry in self.entries:
            if entry.id == entry_id:
                return entry
        return None


DEFAULT_PROJECT_ID = "PRJ-0001"
DEFAULT_PROJECT_NAME = "Initial project"


def new_project_id() -> str:
    """Return a fresh project identifier."""
    return f"PRJ-{uuid.uuid4().hex[:12].upper()}"


def new_entry_id() -> str:
    """Return a fresh entry identifier."""
    return f"IMP-{uuid.uuid4().hex[:10].upper()}"


def default_project() -> Project:
    """Project created by the first-run bootstrap."""
    return Project(id=DEFAULT_PROJECT_ID, name=DEFAULT_PROJECT_NAME)
