"""Time helpers: the injectable clock and UTC normalisation."""

from datetime import UTC, datetime
from typing import Annotated

from pydantic import AfterValidator


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime; naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def to_iso(value: datetime) -> str:
    """Format as ISO 8601 UTC with milliseconds, e.g. ``2024-01-01T00:00:00.000Z``."""
    value = as_utc(value)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


# Incoming datetimes are stored as UTC; an offset such as -08:00 is applied, not dropped
UTCDateTime = Annotated[datetime, AfterValidator(as_utc)]
