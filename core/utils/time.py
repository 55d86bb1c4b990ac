"""
Time Utilities

Providers report dates in different shapes:
- Stripe: seconds since epoch (e.g., 1718150400)
- Plaid, GoCardless, Teller: ISO-8601 dates (e.g., "2024-06-12")
- Some payloads: full ISO-8601 timestamps with offsets

Canonical transactions carry either a plain date ("YYYY-MM-DD") or a UTC
timestamp ("YYYY-MM-DDTHH:MM:SSZ"). The helpers here produce both.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Union

from dateutil import parser as date_parser


ISO_UTC_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def to_utc_datetime(timestamp: Union[int, float]) -> datetime:
    """
    Convert a timestamp (seconds or milliseconds) to UTC datetime.

    Detection Logic:
        - If timestamp > 1e12: Assumed to be milliseconds
        - Otherwise: Assumed to be seconds

    Raises:
        ValueError: If timestamp is negative or invalid

    Examples:
        >>> to_utc_datetime(1704110400)
        datetime.datetime(2024, 1, 1, 12, 0, tzinfo=datetime.timezone.utc)
        >>> to_utc_datetime(1704110400000)
        datetime.datetime(2024, 1, 1, 12, 0, tzinfo=datetime.timezone.utc)
    """
    if timestamp < 0:
        raise ValueError(f"Timestamp cannot be negative: {timestamp}")

    if timestamp > 1e12:
        timestamp = timestamp / 1000.0

    try:
        return datetime.fromtimestamp(timestamp, tz=timezone.utc)
    except (OSError, OverflowError, ValueError) as e:
        raise ValueError(f"Invalid timestamp: {timestamp}. Error: {e}")


def epoch_to_iso(timestamp: Union[int, float]) -> str:
    """
    Convert an epoch timestamp to an ISO-8601 UTC string.

    Example:
        >>> epoch_to_iso(1704110400)
        '2024-01-01T12:00:00Z'
    """
    return to_utc_datetime(timestamp).strftime(ISO_UTC_FORMAT)


def normalize_date(value: Union[str, date, datetime]) -> str:
    """
    Normalize a provider date into canonical form.

    Plain dates stay plain dates; timestamps are converted to UTC.
    Naive timestamps are assumed to already be UTC.

    Raises:
        ValueError: If the value cannot be parsed

    Examples:
        >>> normalize_date("2024-06-12")
        '2024-06-12'
        >>> normalize_date("2024-06-12T10:00:00+02:00")
        '2024-06-12T08:00:00Z'
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        return value.isoformat()
    else:
        text = value.strip()
        # A bare date never carries a time component
        if len(text) == 10:
            return date_parser.isoparse(text).date().isoformat()
        parsed = date_parser.isoparse(text)

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc).strftime(ISO_UTC_FORMAT)


def days_ago(days: int, today: date = None) -> str:
    """
    Date `days` before today (UTC) as YYYY-MM-DD.

    Example:
        >>> days_ago(5, today=date(2024, 6, 12))
        '2024-06-07'
    """
    today = today or datetime.now(timezone.utc).date()
    return (today - timedelta(days=days)).isoformat()
