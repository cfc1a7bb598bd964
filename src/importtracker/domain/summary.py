"""Project totals shown above the entry list."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from importtracker.domain import derivation
from importtracker.domain.entities import ImportEntry

ZERO = Decimal("0")


@dataclass(frozen=True)
class ProjectSummary:
    """Aggregates over a set of entries, in canonical currency."""

    entry_count: int
    invested: Decimal
    revenue: Decimal
    profit: Decimal
    taxes: Decimal
    paid_amount: Decimal
    paid_count: int

    @property
    def open_count(self) -> int:
        return self.entry_count - self.paid_count

    @property
    def average_margin(self) -> Decimal:
        """Overall profit over revenue, 0 when there is no revenue."""
        if not self.revenue:
            return ZERO
        return self.profit / self.revenue


def summarize(entries: Iterable[ImportEntry]) -> ProjectSummary:
    """Aggregate entries into a ProjectSummary.

    Args:
        entries: Entries to aggregate (usually all of a project, or the
            filtered view)

    Returns:
        ProjectSummary with invested (sum of cost), revenue, profit, taxes
        (IOF plus import tax) and what has been paid so far
    """
    count = paid_count = 0
    invested = revenue = profit = taxes = paid_amount = ZERO
    for entry in entries:
        entry_cost = derivation.cost(entry)
        count += 1
        invested += entry_cost
        revenue += entry.sale_price
        profit += derivation.profit(entry)
        taxes += derivation.iof_amount(entry) + derivation.tax_amount(entry)
        if entry.paid:
            paid_count += 1
            paid_amount += entry_cost
    return ProjectSummary(
        entry_count=count,
        invested=invested,
        revenue=revenue,
        profit=profit,
        taxes=taxes,
        paid_amount=paid_amount,
        paid_count=paid_count,
    )
