"""Date utilities for masarify.

Pure functions for calendar windowing and formatting. Month and year
boundaries follow the reference date's timezone. A naive reference is
local time, so aware timestamps (such as the UTC "Z" timestamps in web
backups) are converted to local time before comparing. Naive timestamps
are compared as given.
"""

from datetime import datetime

from masarify.domain.models import Month


def parse_timestamp(value: object) -> datetime | None:
    """Parse an ISO timestamp.

    Args:
        value: Stored timestamp, normally an ISO-8601 string.

    Returns:
        Parsed datetime, or None if the value is not a valid timestamp.
    """
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return datetime.fromisoformat(value.strip())
    except ValueError:
        return None


def align_to_reference(timestamp: datetime, reference: datetime) -> datetime:
    """Express timestamp in the reference's timezone.

    An aware timestamp is converted to the reference's zone, or to local
    time when the reference is naive. A naive timestamp is returned as is.
    """
    if timestamp.tzinfo is None:
        return timestamp
    try:
        if reference.tzinfo is not None:
            return timestamp.astimezone(reference.tzinfo)
        return timestamp.astimezone().replace(tzinfo=None)
    except (OverflowError, ValueError, OSError):
        # Out of range near datetime.min/max; keep the stored calendar fields
        return timestamp


def in_same_month(timestamp: datetime, reference: datetime) -> bool:
    aligned = align_to_reference(timestamp, reference)
    return aligned.year == reference.year and aligned.month == reference.month


def in_same_year(timestamp: datetime, reference: datetime) -> bool:
    return align_to_reference(timestamp, reference).year == reference.year


def month_reference(month: Month) -> datetime:
    """Get a reference date for a month.

    Args:
        month: Month in YYYY-MM format.

    Returns:
        Datetime for the first day of the month.

    Raises:
        ValueError: If month is not a valid YYYY-MM string.
    """
    return datetime.strptime(month, "%Y-%m")


def month_label(reference: datetime) -> str:
    """Human-readable month (e.g., "January 2025")."""
    return reference.strftime("%B %Y")


def date_part(value: str) -> str:
    """Date portion (YYYY-MM-DD) of an ISO timestamp string."""
    return value.split("T")[0]
