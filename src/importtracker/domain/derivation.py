"""Financial derivations for import entries.

Every figure shown for an entry is derived here from its stored fields and
the owning project's config. Nothing here mutates its inputs or caches
results; callers re-run these on every render or preview.
"""

from dataclasses import dataclass
from decimal import Decimal

from importtracker.domain.entities import Config, ImportEntry

HUNDRED = Decimal("100")
TAX_FREE_FACTOR = Decimal("0.9")


def percent_of(percent: Decimal, amount: Decimal) -> Decimal:
    """Return ``percent`` percent of ``amount``."""
    return percent / HUNDRED * amount


def sale_price(
    base_price: Decimal,
    iof_percent: Decimal,
    tax_percent: Decimal,
    shipping: Decimal,
) -> Decimal:
    """Compute the client-facing price from the undiscounted base price.

    Args:
        base_price: Product price in canonical currency
        iof_percent: IOF as a percentage of the base price
        tax_percent: Import tax as a percentage of the base price
        shipping: Flat shipping amount in canonical currency

    Returns:
        base + IOF + tax + shipping
    """
    return (
        base_price
        + percent_of(iof_percent, base_price)
        + percent_of(tax_percent, base_price)
        + shipping
    )


def cost(entry: ImportEntry) -> Decimal:
    """What the operator actually pays.

    The tax-free flag is a flat 10% reduction of the operator's outlay only.
    """
    if entry.tax_free:
        return entry.base_price * TAX_FREE_FACTOR
    return entry.base_price


def tax_amount(entry: ImportEntry) -> Decimal:
    return percent_of(entry.tax_percent, entry.base_price)


def iof_amount(entry: ImportEntry) -> Decimal:
    return percent_of(entry.iof_percent, entry.base_price)


def profit(entry: ImportEntry) -> Decimal:
    """Sale price minus cost.

    Because the sale price is built on the undiscounted base price, this
    includes IOF, tax and shipping charged to the client plus the tax-free
    discount.
    """
    return entry.sale_price - cost(entry)


def margin(entry: ImportEntry) -> Decimal:
    """Profit as a fraction of the sale price (a zero sale price counts as 1)."""
    return profit(entry) / (entry.sale_price or Decimal("1"))


def to_display(amount: Decimal, config: Config) -> Decimal:
    """Project a canonical amount into the config's current currency mode."""
    if config.displays_foreign:
        return amount / config.conversion_rate
    return amount


def from_display(amount: Decimal, config: Config) -> Decimal:
    """Convert an amount typed in the config's currency mode to canonical."""
    if config.displays_foreign:
        return amount * config.conversion_rate
    return amount


@dataclass(frozen=True)
class EntryFigures:
    """Derived figures for one entry, already in display currency."""

    base_price: Decimal
    iof: Decimal
    tax: Decimal
    shipping: Decimal
    sale_price: Decimal
    cost: Decimal
    profit: Decimal
    margin: Decimal


def entry_figures(entry: ImportEntry, config: Config) -> EntryFigures:
    """Bundle every derived figure of an entry for rendering."""
    return EntryFigures(
        base_price=to_display(entry.base_price, config),
        iof=to_display(iof_amount(entry), config),
        tax=to_display(tax_amount(entry), config),
        shipping=to_display(entry.shipping, config),
        sale_price=to_display(entry.sale_price, config),
        cost=to_display(cost(entry), config),
        profit=to_display(profit(entry), config),
        margin=margin(entry),
    )
