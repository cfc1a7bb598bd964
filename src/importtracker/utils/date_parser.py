"""ETA parsing utilities."""

from datetime import date, timedelta
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]


def parse_eta(eta_str: str, today: date | None = None) -> str:
    """Normalize an ETA typed by the user.

    Relative expressions ("today", "tomorrow", "next week", "next friday",
    "in 10 days") and absolute dates ("2024-01-15", "Jan 15 2024") become
    ISO dates. Anything else is kept as free text, since an ETA is often a
    loose note like "mid January".

    Args:
        eta_str: ETA text
        today: Reference date for relative expressions (defaults to today)

    Returns:
        ISO date string, the stripped original text, or "" when empty
    """
    text = (eta_str or "").strip()
    if not text:
        return ""
    lowered = text.lower()
    today = today or date.today()

    relative_dates = {
        "today": today,
        "tomorrow": today + timedelta(days=1),
    }
    if lowered in relative_dates:
        return relative_dates[lowered].isoformat()

    if lowered.startswith("next "):
        period = lowered[5:]
        if period == "week":
            return (today + timedelta(days=(7 - today.weekday()))).isoformat()
        if period == "month":
            return (today + relativedelta(months=1)).replace(day=1).isoformat()
        if period in WEEKDAYS:
            days_ahead = (WEEKDAYS.index(period) - today.weekday()) % 7
            if days_ahead == 0:
                days_ahead = 7
            return (today + timedelta(days=days_ahead)).isoformat()

    if lowered.startswith("in ") and lowered.endswith((" day", " days")):
        count = lowered[3:].split(" ", 1)[0]
        if count.isdigit():
            return (today + timedelta(days=int(count))).isoformat()

    try:
        return date_parser.parse(text, dayfirst=False).date().isoformat()
    except (ValueError, OverflowError):
        return text
