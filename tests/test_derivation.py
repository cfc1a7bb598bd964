"""Tests for financial derivations."""

from dataclasses import replace
from decimal import Decimal

from importtracker.domain import derivation
from importtracker.domain.entities import Config, CurrencyMode


def test_sale_price_adds_percentages_and_shipping():
    """Sale price is base + IOF + tax + shipping."""
    result = derivation.sale_price(Decimal("1000"), Decimal("5"), Decimal("8"), Decimal("100"))
    assert result == Decimal("1230")


def test_sale_price_with_zero_everything():
    assert derivation.sale_price(Decimal("0"), Decimal("0"), Decimal("0"), Decimal("0")) == 0


def test_new_entry_figures(sample_entry):
    """A plain entry: cost is the base price, profit is everything charged on top."""
    assert derivation.cost(sample_entry) == Decimal("1000")
    assert derivation.profit(sample_entry) == Decimal("230")
    assert round(float(derivation.margin(sample_entry)), 3) == 0.187


def test_tax_free_discount_only_affects_cost(sample_entry):
    """Tax-free lowers the operator's cost by 10% but not the sale price."""
    entry = replace(sample_entry, tax_free=True)

    assert entry.sale_price == Decimal("1230")
    assert derivation.cost(entry) == Decimal("900")
    assert derivation.profit(entry) == Decimal("330")
    assert round(float(derivation.margin(entry)), 3) == 0.268


def test_margin_with_zero_sale_price(sample_entry):
    """A zero sale price divides by one instead of failing."""
    entry = replace(sample_entry, base_price=Decimal("0"), sale_price=Decimal("0"))
    assert derivation.margin(entry) == Decimal("0")


def test_tax_and_iof_amounts(sample_entry):
    assert derivation.iof_amount(sample_entry) == Decimal("50")
    assert derivation.tax_amount(sample_entry) == Decimal("80")


def test_to_display_in_canonical_mode_is_identity():
    config = Config(conversion_rate=Decimal("5"))
    assert derivation.to_display(Decimal("1230"), config) == Decimal("1230")
    assert derivation.from_display(Decimal("1230"), config) == Decimal("1230")


def test_display_conversion_in_foreign_mode():
    """In USD mode amounts are divided by the rate for display and multiplied back on input."""
    config = Config(conversion_rate=Decimal("5"), currency_mode=CurrencyMode.USD)

    assert derivation.to_display(Decimal("1230"), config) == Decimal("246")
    assert derivation.from_display(Decimal("246"), config) == Decimal("1230")


def test_entry_figures_in_foreign_mode(sample_entry):
    config = Config(conversion_rate=Decimal("5"), currency_mode=CurrencyMode.USD)
    figures = derivation.entry_figures(sample_entry, config)

    assert figures.base_price == Decimal("200")
    assert figures.iof == Decimal("10")
    assert figures.tax == Decimal("16")
    assert figures.shipping == Decimal("20")
    assert figures.sale_price == Decimal("246")
    assert figures.cost == Decimal("200")
    assert figures.profit == Decimal("46")
    # Margin is a ratio and does not depend on the currency
    assert figures.margin == derivation.margin(sample_entry)


def test_derivation_does_not_mutate_entry(sample_entry, config):
    before = replace(sample_entry)
    derivation.entry_figures(sample_entry, config)
    derivation.profit(sample_entry)
    assert sample_entry == before
