"""Display formatting for amounts and percentages."""

from decimal import Decimal, ROUND_HALF_UP

from importtracker.domain.entities import CurrencyMode

CENT = Decimal("0.01")

SYMBOLS = {
    CurrencyMode.BRL: "R$",
    CurrencyMode.USD: "US$",
}


def format_money(amount: Decimal, mode: CurrencyMode) -> str:
    """Format an amount already expressed in ``mode``."""
    rounded = amount.quantize(CENT, rounding=ROUND_HALF_UP)
    return f"{SYMBOLS[mode]} {rounded:,.2f}"


def format_percent(fraction: Decimal, places: int = 1) -> str:
    """Format a ratio (0.187) as a percentage ("18.7%")."""
    return f"{fraction * 100:.{places}f}%"
