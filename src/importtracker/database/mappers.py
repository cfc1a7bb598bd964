"""Mapper functions between domain entities and stored wire records.

Records are normalized before they are mapped, so the functions reading
records can rely on every field being present and well typed. Amounts
travel as JSON numbers and become Decimals in the domain.
"""

from decimal import Decimal

from importtracker.domain.entities import (
    STATUS_FILTER_ANY,
    Config,
    CurrencyMode,
    EntryStatus,
    Filters,
    ImportEntry,
    PaidFilter,
    Project,
)
from importtracker.domain.records import normalize_project_record


def _decimal(value: float) -> Decimal:
    return Decimal(repr(float(value)))


def _number(value: Decimal) -> float | int:
    if value == value.to_integral_value():
        return int(value)
    return float(value)


def entry_to_record(entry: ImportEntry) -> dict:
    """Convert an ImportEntry to its wire record."""
    return {
        "id": entry.id,
        "description": entry.description,
        "recipient": entry.recipient,
        "supplier": entry.supplier,
        "basePrice": _number(entry.base_price),
        "taxFree": entry.tax_free,
        "iofPercent": _number(entry.iof_percent),
        "taxPercent": _number(entry.tax_percent),
        "shipping": _number(entry.shipping),
        "salePrice": _number(entry.sale_price),
        "paid": entry.paid,
        "status": EntryStatus(entry.status).value,
        "eta": entry.eta,
        "invoice": entry.invoice,
        "note": entry.note,
    }


def config_to_record(config: Config) -> dict:
    """Convert a Config to its wire record."""
    return {
        "defaultIOFPercent": _number(config.default_iof_percent),
        "defaultTaxPercent": _number(config.default_tax_percent),
        "shippingTiers": [_number(tier) for tier in config.shipping_tiers],
        "conversionRate": _number(config.conversion_rate),
        "currencyMode": CurrencyMode(config.currency_mode).value,
    }


def filters_to_record(filters: Filters) -> dict:
    """Convert Filters to its wire record."""
    status = filters.status
    if status != STATUS_FILTER_ANY:
        status = EntryStatus(status).value
    return {
        "search": filters.search,
        "status": status,
        "paid": PaidFilter(filters.paid).value,
    }


def project_to_record(project: Project) -> dict:
    """Convert a Project to its wire record."""
    return {
        "id": project.id,
        "name": project.name,
        "entries": [entry_to_record(entry) for entry in project.entries],
        "config": config_to_record(project.config),
        "notes": project.notes,
        "filters": filters_to_record(project.filters),
    }


def entry_from_record(record: dict) -> ImportEntry:
    """Convert a normalized entry record to an ImportEntry."""
    return ImportEntry(
        id=record["id"],
        description=record["description"],
        recipient=record["recipient"],
        supplier=record["supplier"],
        base_price=_decimal(record["basePrice"]),
        tax_free=record["taxFree"],
        iof_percent=_decimal(record["iofPercent"]),
        tax_percent=_decimal(record["taxPercent"]),
        shipping=_decimal(record["shipping"]),
        sale_price=_decimal(record["salePrice"]),
        paid=record["paid"],
        status=EntryStatus(record["status"]),
        eta=record["eta"],
        invoice=record["invoice"],
        note=record["note"],
    )


def config_from_record(record: dict) -> Config:
    """Convert a normalized config record to a Config."""
    tiers = record["shippingTiers"]
    return Config(
        default_iof_percent=_decimal(record["defaultIOFPercent"]),
        default_tax_percent=_decimal(record["defaultTaxPercent"]),
        shipping_tiers=(_decimal(tiers[0]), _decimal(tiers[1]), _decimal(tiers[2])),
        conversion_rate=_decimal(record["conversionRate"]),
        currency_mode=CurrencyMode(record["currencyMode"]),
    )


def filters_from_record(record: dict) -> Filters:
    """Convert a normalized filters record to Filters."""
    status = record["status"]
    return Filters(
        search=record["search"],
        status=STATUS_FILTER_ANY if status == STATUS_FILTER_ANY else EntryStatus(status),
        paid=PaidFilter(record["paid"]),
    )


def project_from_record(record: dict) -> Project:
    """Normalize a stored record and convert it to a Project.

    Raises:
        MalformedRecordError: If the record is not an object
    """
    normalized = normalize_project_record(record)
    return Project(
        id=normalized["id"],
        name=normalized["name"],
        entries=tuple(entry_from_record(entry) for entry in normalized["entries"]),
        config=config_from_record(normalized["config"]),
        notes=normalized["notes"],
        filters=filters_from_record(normalized["filters"]),
    )
