"""Draft (not yet validated) state for entry and config forms.

Drafts hold exactly what the user typed, as strings, in the project's
current currency mode. ``parse_decimal`` is the single place where that
text becomes a number; every conversion to canonical amounts goes through
it.

Monetary draft fields remember the canonical amount they were last seeded
from ("anchors"). While the text is unchanged the anchor is used instead
of re-parsing the rounded display text, so switching the currency mode
back and forth, or opening an entry and committing it untouched, never
drifts the canonical value.
"""

from dataclasses import dataclass, field, replace
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from importtracker.domain.derivation import (
    EntryFigures,
    entry_figures,
    from_display,
    sale_price,
    to_display,
)
from importtracker.domain.entities import (
    Config,
    CurrencyMode,
    EntryStatus,
    ImportEntry,
    SHIPPING_TIER_COUNT,
)
from importtracker.domain.errors import (
    ValidationError,
    invalid_number,
    missing_field,
    shipping_tier_out_of_range,
)
from importtracker.utils.amount_parser import parse_amount

CENT = Decimal("0.01")
ZERO = Decimal("0")

MONEY_FIELDS = ("base_price", "shipping")


def parse_decimal(text: Optional[str], field_name: str) -> Optional[Decimal]:
    """Parse user input into a Decimal.

    Args:
        text: Raw input
        field_name: Field name used in error messages

    Returns:
        Parsed value, or None when the input is empty

    Raises:
        ValidationError: If the input is not a number
    """
    if text is None or not str(text).strip():
        return None
    try:
        return parse_amount(str(text))
    except ValueError:
        raise ValidationError(invalid_number(field_name, str(text)))


def money_text(amount: Decimal) -> str:
    """Render an amount for a form field, rounded to cents."""
    return f"{amount.quantize(CENT, rounding=ROUND_HALF_UP):f}"


def plain_text(value: Decimal) -> str:
    """Render a non-monetary number without trailing zeros or exponent."""
    if value == value.to_integral_value():
        return f"{value.quantize(Decimal('1')):f}"
    return f"{value.normalize():f}"


def _lenient(text: str) -> Decimal:
    try:
        return parse_decimal(text, "value") or ZERO
    except ValidationError:
        return ZERO


@dataclass
class EntryDraft:
    """Form state for a new or edited entry."""

    description: str = ""
    recipient: str = ""
    supplier: str = ""
    invoice: str = ""
    eta: str = ""
    note: str = ""
    base_price: str = ""
    iof_percent: str = ""
    tax_percent: str = ""
    shipping: str = ""
    tax_free: bool = False
    status: EntryStatus = EntryStatus.ORDERED
    paid: bool = False
    iof_touched: bool = False
    tax_touched: bool = False
    # Shipping keeps its amount instead of following the selected tier
    shipping_touched: bool = False
    # Index into config.shipping_tiers, None for a custom amount
    shipping_tier: Optional[int] = 0
    anchors: dict[str, tuple[str, Decimal]] = field(
        default_factory=dict, repr=False, compare=False
    )

    @classmethod
    def blank(cls, config: Config) -> "EntryDraft":
        """Empty draft seeded from the project defaults."""
        draft = cls()
        draft.reseed(config)
        return draft

    @classmethod
    def from_entry(cls, entry: ImportEntry, config: Config) -> "EntryDraft":
        """Draft pre-filled with a committed entry, for editing."""
        draft = cls(
            description=entry.description,
            recipient=entry.recipient,
            supplier=entry.supplier,
            invoice=entry.invoice,
            eta=entry.eta,
            note=entry.note,
            iof_percent=plain_text(entry.iof_percent),
            tax_percent=plain_text(entry.tax_percent),
            tax_free=entry.tax_free,
            status=entry.status,
            paid=entry.paid,
            iof_touched=True,
            tax_touched=True,
            shipping_touched=True,
            shipping_tier=None,
        )
        draft._anchor("base_price", entry.base_price, config)
        draft._anchor("shipping", entry.shipping, config)
        for index, tier in enumerate(config.shipping_tiers):
            if tier == entry.shipping:
                draft.shipping_tier = index
                break
        return draft

    def _anchor(self, field_name: str, canonical: Decimal, config: Config) -> None:
        text = money_text(to_display(canonical, config))
        setattr(self, field_name, text)
        self.anchors[field_name] = (text, canonical)

    def canonical(self, field_name: str, config: Config) -> Optional[Decimal]:
        """Canonical value of a monetary field, or None when empty."""
        text = getattr(self, field_name)
        anchored = self.anchors.get(field_name)
        if anchored is not None and anchored[0] == text:
            return anchored[1]
        value = parse_decimal(text, field_name)
        if value is None:
            return None
        return from_display(value, config)

    def suggested_iof(self, config: Config) -> str:
        """IOF suggestion for the current base price ("" while there is none)."""
        base = _lenient(self.base_price)
        if not base:
            return ""
        return plain_text(config.default_iof_percent)

    def set_base_price(self, value: str, config: Config) -> None:
        self.base_price = value
        if not self.iof_touched:
            self.iof_percent = self.suggested_iof(config)

    def set_iof_percent(self, value: str) -> None:
        self.iof_percent = value
        self.iof_touched = True

    def set_tax_percent(self, value: str) -> None:
        self.tax_percent = value
        self.tax_touched = True

    def set_shipping(self, value: str) -> None:
        """Type a custom shipping amount."""
        self.shipping = value
        self.shipping_tier = None

    def choose_shipping_tier(self, index: int, config: Config) -> None:
        if not 0 <= index < SHIPPING_TIER_COUNT:
            raise ValidationError(shipping_tier_out_of_range(index, SHIPPING_TIER_COUNT))
        self.shipping_tier = index
        self.shipping_touched = False
        self._anchor("shipping", config.shipping_tiers[index], config)

    def rescale(self, old: Config, new: Config) -> None:
        """Re-express monetary fields after a currency mode or rate change.

        The canonical value behind each field is kept; only the text the user
        sees changes. Fields that do not parse are left alone.
        """
        for field_name in MONEY_FIELDS:
            try:
                canonical = self.canonical(field_name, old)
            except ValidationError:
                continue
            if canonical is not None:
                self._anchor(field_name, canonical, new)

    def reseed(self, config: Config) -> None:
        """Refresh fields the user has not touched from the config defaults."""
        if not self.tax_touched:
            self.tax_percent = plain_text(config.default_tax_percent)
        if not self.iof_touched:
            self.iof_percent = self.suggested_iof(config)
        if self.shipping_tier is not None and not self.shipping_touched:
            self._anchor("shipping", config.shipping_tiers[self.shipping_tier], config)

    def to_entry(self, entry_id: str, config: Config) -> ImportEntry:
        """Validate the draft and build a committed entry.

        Raises:
            ValidationError: If description or base price is missing, or a
                numeric field does not parse
        """
        description = self.description.strip()
        if not description:
            raise ValidationError(missing_field("description"))
        base_price = self.canonical("base_price", config)
        if base_price is None:
            raise ValidationError(missing_field("basePrice"))
        iof_percent = parse_decimal(self.iof_percent, "iofPercent") or ZERO
        tax_percent = parse_decimal(self.tax_percent, "taxPercent") or ZERO
        shipping = self.canonical("shipping", config) or ZERO

        return ImportEntry(
            id=entry_id,
            description=description,
            recipient=self.recipient.strip(),
            supplier=self.supplier.strip(),
            invoice=self.invoice.strip(),
            eta=self.eta.strip(),
            note=self.note.strip(),
            base_price=base_price,
            iof_percent=iof_percent,
            tax_percent=tax_percent,
            shipping=shipping,
            tax_free=self.tax_free,
            sale_price=sale_price(base_price, iof_percent, tax_percent, shipping),
            status=self.status,
            paid=self.paid,
        )

    def preview(self, config: Config) -> EntryFigures:
        """Figures the draft would have if committed now.

        Unparseable numbers count as zero so a half-typed form still
        previews.
        """
        try:
            base_price = self.canonical("base_price", config) or ZERO
        except ValidationError:
            base_price = ZERO
        try:
            shipping = self.canonical("shipping", config) or ZERO
        except ValidationError:
            shipping = ZERO
        iof_percent = _lenient(self.iof_percent)
        tax_percent = _lenient(self.tax_percent)
        transient = ImportEntry(
            id="",
            description=self.description,
            base_price=base_price,
            iof_percent=iof_percent,
            tax_percent=tax_percent,
            shipping=shipping,
            tax_free=self.tax_free,
            sale_price=sale_price(base_price, iof_percent, tax_percent, shipping),
        )
        return entry_figures(transient, config)


@dataclass
class ConfigDraft:
    """Form state for a project's config.

    Tier texts are always expressed in ``currency_mode`` at ``rate_basis``,
    the last conversion rate that parsed.
    """

    default_iof_percent: str
    default_tax_percent: str
    shipping_tiers: list[str]
    conversion_rate: str
    currency_mode: CurrencyMode
    rate_basis: Decimal
    anchors: dict[int, tuple[str, Decimal]] = field(
        default_factory=dict, repr=False, compare=False
    )

    @classmethod
    def from_config(cls, config: Config) -> "ConfigDraft":
        draft = cls(
            default_iof_percent=plain_text(config.default_iof_percent),
            default_tax_percent=plain_text(config.default_tax_percent),
            shipping_tiers=["", "", ""],
            conversion_rate=plain_text(config.conversion_rate),
            currency_mode=config.currency_mode,
            rate_basis=config.conversion_rate,
        )
        for index, tier in enumerate(config.shipping_tiers):
            draft._anchor(index, tier, config)
        return draft

    def _basis(self) -> Config:
        return Config(conversion_rate=self.rate_basis, currency_mode=self.currency_mode)

    def _anchor(self, index: int, canonical: Decimal, config: Config) -> None:
        text = money_text(to_display(canonical, config))
        self.shipping_tiers[index] = text
        self.anchors[index] = (text, canonical)

    def tier_canonical(self, index: int) -> Decimal:
        text = self.shipping_tiers[index]
        anchored = self.anchors.get(index)
        if anchored is not None and anchored[0] == text:
            return anchored[1]
        value = parse_decimal(text, f"shippingTiers[{index}]") or ZERO
        return from_display(value, self._basis())

    def _rescale_tiers(self, old: Config, new: Config) -> None:
        for index in range(SHIPPING_TIER_COUNT):
            try:
                canonical = self.tier_canonical(index)
            except ValidationError:
                continue
            self._anchor(index, canonical, new)

    def set_tier(self, index: int, value: str) -> None:
        if not 0 <= index < SHIPPING_TIER_COUNT:
            raise ValidationError(shipping_tier_out_of_range(index, SHIPPING_TIER_COUNT))
        self.shipping_tiers[index] = value

    def set_currency_mode(self, mode: CurrencyMode) -> None:
        old = self._basis()
        self.currency_mode = CurrencyMode(mode)
        self._rescale_tiers(old, self._basis())

    def set_conversion_rate(self, value: str) -> None:
        """Store the typed rate; tiers follow once it parses as positive."""
        self.conversion_rate = value
        try:
            rate = parse_decimal(value, "conversionRate")
        except ValidationError:
            return
        if rate is None or rate <= 0:
            return
        old = self._basis()
        self.rate_basis = rate
        self._rescale_tiers(old, self._basis())

    def to_config(self) -> Config:
        """Validate the draft and build a Config.

        Raises:
            ValidationError: If a field does not parse or the rate is not positive
        """
        rate = parse_decimal(self.conversion_rate, "conversionRate")
        if rate is None or rate <= 0:
            raise ValidationError("Field 'conversionRate' must be greater than zero")
        if rate != self.rate_basis:
            self.set_conversion_rate(self.conversion_rate)
        tiers = tuple(self.tier_canonical(index) for index in range(SHIPPING_TIER_COUNT))
        return Config(
            default_iof_percent=parse_decimal(self.default_iof_percent, "defaultIOFPercent") or ZERO,
            default_tax_percent=parse_decimal(self.default_tax_percent, "defaultTaxPercent") or ZERO,
            shipping_tiers=tiers,
            conversion_rate=rate,
            currency_mode=self.currency_mode,
        )


def with_config(draft: EntryDraft, old: Config, new: Config, reseed: bool = True) -> EntryDraft:
    """Copy of ``draft`` re-expressed for a new config."""
    updated = replace(draft, anchors=dict(draft.anchors))
    updated.rescale(old, new)
    if reseed:
        updated.reseed(new)
    return updated
