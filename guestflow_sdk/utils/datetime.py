"""Datetime helpers shared by the domain and orchestration layers."""
from datetime import datetime, timezone
from typing import Optional

_INPUT_FORMATS = (
    "%Y-%m-%d",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d %H:%M:%S",
    "%m/%d/%Y",
    "%m/%d/%Y %H:%M:%S",
    "%d/%m/%Y",
    "%B %d, %Y",
    "%b %d, %Y",
)


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def parse_datetime(value: str) -> Optional[datetime]:
    """
    Parse a loosely formatted date/timestamp cell.

    Accepts ISO-8601 (with or without a trailing ``Z``) and the common
    spreadsheet formats. Returns None when nothing matches.
    """
    text = (value or "").strip()
    if not text:
        return None

    iso_text = text[:-1] + "+00:00" if text.endswith("Z") else text
    try:
        parsed = datetime.fromisoformat(iso_text)
    except ValueError:
        parsed = None
        for fmt in _INPUT_FORMATS:
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue
    if parsed is None:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_portal_date(value: str) -> str:
    """Normalize a date to YYYY-MM-DD; unparseable input is returned unchanged."""
    parsed = parse_datetime(value)
    if parsed is None:
        return value or ""
    return parsed.strftime("%Y-%m-%d")


def timestamp_slug(moment: datetime) -> str:
    """Filesystem-safe ISO timestamp, e.g. ``2024-05-01T10-15-00-123456Z``."""
    text = moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")
    return text.replace(":", "-").replace(".", "-") + "Z"
