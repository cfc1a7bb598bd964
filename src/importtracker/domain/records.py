"""Normalization of stored project records.

Stored records are plain dicts in the wire shape::

    Project     {id, name, entries[], config, notes, filters}
    ImportEntry {id, description, recipient, supplier, basePrice, taxFree,
                 iofPercent, taxPercent, shipping, salePrice, paid, status,
                 eta, invoice, note}
    Config      {defaultIOFPercent, defaultTaxPercent, shippingTiers[3],
                 conversionRate, currencyMode}
    Filters     {search, status, paid}

A record missing or mistyping fields is repaired with defaults rather than
rejected: missing numbers become 0, missing strings become "", missing or
unknown enum values fall back to their first member, and values written by
older versions of the tracker are migrated. Normalizing an already
normalized record returns an equal record.
"""

import uuid
from decimal import Decimal, InvalidOperation
from typing import Any

from importtracker.domain.derivation import HUNDRED, sale_price
from importtracker.domain.entities import (
    CurrencyMode,
    EntryStatus,
    PaidFilter,
    SHIPPING_TIER_COUNT,
    STATUS_FILTER_ANY,
    Config,
)
from importtracker.domain.errors import MalformedRecordError

DEFAULT_CONFIG = Config()

UNTITLED_PROJECT = "Untitled project"
UNNAMED_ITEM = "Unnamed item"

LEGACY_STATUSES = {
    "pedido": EntryStatus.ORDERED,
    "em trânsito": EntryStatus.IN_TRANSIT,
    "em transito": EntryStatus.IN_TRANSIT,
    "entregue": EntryStatus.DELIVERED,
    "in transit": EntryStatus.IN_TRANSIT,
}

LEGACY_PAID_FILTERS = {
    "todos": PaidFilter.ANY,
    "pagos": PaidFilter.PAID,
    "pendentes": PaidFilter.PENDING,
    "all": PaidFilter.ANY,
}

LEGACY_ANY_STATUS = {STATUS_FILTER_ANY, "todas", "todos", "all", ""}


def _number(value: Any, default: float = 0.0) -> float:
    if isinstance(value, bool) or value is None:
        return default
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(Decimal(value.strip().replace(",", ".")))
        except (InvalidOperation, ValueError):
            return default
    else:
        return default
    if number != number or number in (float("inf"), float("-inf")):
        return default
    return number


def _text(value: Any, default: str = "") -> str:
    if value is None:
        return default
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return default


def _flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "sim")
    return bool(value)


def normalize_status(value: Any) -> str:
    """Map a stored status (current or legacy) onto an EntryStatus value."""
    text = _text(value).strip()
    try:
        return EntryStatus(text).value
    except ValueError:
        pass
    legacy = LEGACY_STATUSES.get(text.lower())
    if legacy is not None:
        return legacy.value
    return EntryStatus.ORDERED.value


def normalize_currency_mode(value: Any) -> str:
    text = _text(value).strip().upper()
    try:
        return CurrencyMode(text).value
    except ValueError:
        return DEFAULT_CONFIG.currency_mode.value


def _legacy_percent(amount: Any, base: float) -> float:
    if not base:
        return 0.0
    return _number(amount) / base * float(HUNDRED)


def normalize_entry_record(record: Any) -> dict:
    """Repair one entry record.

    Raises:
        MalformedRecordError: If the record is not an object
    """
    if not isinstance(record, dict):
        raise MalformedRecordError(f"Entry record must be an object, got {type(record).__name__}")

    base = _number(record.get("basePrice"))
    if "iofPercent" in record:
        iof_percent = _number(record.get("iofPercent"))
    else:
        iof_percent = _legacy_percent(record.get("iof"), base)
    if "taxPercent" in record:
        tax_percent = _number(record.get("taxPercent"))
    else:
        tax_percent = _legacy_percent(record.get("duties"), base)
    shipping = _number(record.get("shipping"))
    if "otherFees" in record:
        shipping += _number(record.get("otherFees"))

    if "salePrice" in record and _number(record.get("salePrice"), default=-1.0) >= 0:
        stored_sale = _number(record.get("salePrice"))
    else:
        stored_sale = float(
            sale_price(
                Decimal(repr(base)),
                Decimal(repr(iof_percent)),
                Decimal(repr(tax_percent)),
                Decimal(repr(shipping)),
            )
        )

    entry_id = _text(record.get("id")).strip() or f"IMP-{uuid.uuid4().hex[:10].upper()}"
    return {
        "id": entry_id,
        "description": _text(record.get("description")) or UNNAMED_ITEM,
        "recipient": _text(record.get("recipient")),
        "supplier": _text(record.get("supplier")),
        "basePrice": base,
        "taxFree": _flag(record.get("taxFree", False)),
        "iofPercent": iof_percent,
        "taxPercent": tax_percent,
        "shipping": shipping,
        "salePrice": stored_sale,
        "paid": _flag(record.get("paid", False)),
        "status": normalize_status(record.get("status")),
        "eta": _text(record.get("eta")),
        "invoice": _text(record.get("invoice")),
        "note": _text(record.get("note")),
    }


def normalize_config_record(record: Any) -> dict:
    """Repair a config record, filling gaps from the default config."""
    if not isinstance(record, dict):
        record = {}
    default_tiers = [float(tier) for tier in DEFAULT_CONFIG.shipping_tiers]
    raw_tiers = record.get("shippingTiers")
    if not isinstance(raw_tiers, list):
        raw_tiers = []
    tiers = [
        _number(raw_tiers[index], default_tiers[index]) if index < len(raw_tiers) else default_tiers[index]
        for index in range(SHIPPING_TIER_COUNT)
    ]
    rate = _number(record.get("conversionRate"), float(DEFAULT_CONFIG.conversion_rate))
    if rate <= 0:
        rate = float(DEFAULT_CONFIG.conversion_rate)
    return {
        "defaultIOFPercent": _number(
            record.get("defaultIOFPercent"), float(DEFAULT_CONFIG.default_iof_percent)
        ),
        "defaultTaxPercent": _number(
            record.get("defaultTaxPercent"), float(DEFAULT_CONFIG.default_tax_percent)
        ),
        "shippingTiers": tiers,
        "conversionRate": rate,
        "currencyMode": normalize_currency_mode(record.get("currencyMode")),
    }


def normalize_filters_record(record: Any) -> dict:
    if not isinstance(record, dict):
        record = {}
    raw_status = _text(record.get("status")).strip()
    if raw_status.lower() in LEGACY_ANY_STATUS:
        status = STATUS_FILTER_ANY
    else:
        status = normalize_status(raw_status)

    raw_paid = _text(record.get("paid")).strip().lower()
    try:
        paid = PaidFilter(raw_paid).value
    except ValueError:
        paid = LEGACY_PAID_FILTERS.get(raw_paid, PaidFilter.ANY).value

    return {"search": _text(record.get("search")), "status": status, "paid": paid}


def normalize_project_record(record: Any) -> dict:
    """Repair a stored project record.

    Args:
        record: Decoded record as read from the store

    Returns:
        Record in the current wire shape with every field present

    Raises:
        MalformedRecordError: If the record is not an object
    """
    if not isinstance(record, dict):
        raise MalformedRecordError(f"Project record must be an object, got {type(record).__name__}")

    raw_entries = record.get("entries")
    if not isinstance(raw_entries, list):
        raw_entries = []
    entries = [normalize_entry_record(entry) for entry in raw_entries if isinstance(entry, dict)]

    project_id = _text(record.get("id")).strip() or f"PRJ-{uuid.uuid4().hex[:12].upper()}"
    return {
        "id": project_id,
        "name": _text(record.get("name")).strip() or UNTITLED_PROJECT,
        "entries": entries,
        "config": normalize_config_record(record.get("config")),
        "notes": _text(record.get("notes")),
        "filters": normalize_filters_record(record.get("filters")),
    }
