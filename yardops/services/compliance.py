"""Reading cadence rules: expected intervals and compliance classification.

Every place that decides whether a meter is up to date goes through
``classify_meter``. The dashboard statistics count a never-read meter as
overdue; the missed-reading sweep passes ``treat_missing_as_overdue=False``
and skips it instead.
"""

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from yardops.core.clock import as_utc, utc_now
from yardops.models.enums import ReadingFrequency

# Past ``interval * GRACE_MULTIPLIER`` days a meter is overdue rather than pending
GRACE_MULTIPLIER = 1.5

_INTERVAL_DAYS: dict[ReadingFrequency, int | None] = {
    ReadingFrequency.DAILY: 1,
    ReadingFrequency.WEEKLY: 7,
    ReadingFrequency.MONTHLY: 30,
    ReadingFrequency.AD_HOC: None,
}


class UnsupportedFrequency(ValueError):
    """Raised when a value is not a known reading frequency."""


class ComplianceStatus(str, Enum):
    """Whether a meter's reading cadence is being met."""

    CURRENT = "CURRENT"
    PENDING = "PENDING"
    OVERDUE = "OVERDUE"
    EXEMPT = "EXEMPT"


def coerce_frequency(frequency: ReadingFrequency | str) -> ReadingFrequency:
    """Convert a frequency value to the enum, failing fast on unknown values."""
    try:
        return ReadingFrequency(frequency)
    except ValueError:
        raise UnsupportedFrequency(f"Unsupported reading frequency: {frequency!r}") from None


def expected_interval_days(frequency: ReadingFrequency | str) -> int | None:
    """
    Get the number of days expected between two readings.

    Args:
        frequency: Meter reading frequency

    Returns:
        Interval in days, or None for ad-hoc meters which are never due

    Raises:
        UnsupportedFrequency: If the value is not a known frequency

    """
    freq = coerce_frequency(frequency)
    if freq not in _INTERVAL_DAYS:
        raise UnsupportedFrequency(f"No interval defined for frequency {freq.value}")
    return _INTERVAL_DAYS[freq]


def days_since(last_reading_date: datetime, now: datetime | None = None) -> int:
    """Whole days elapsed since ``last_reading_date`` (floored)."""
    now = as_utc(now) if now is not None else utc_now()
    return math.floor((now - as_utc(last_reading_date)) / timedelta(days=1))


def next_due_date(
    frequency: ReadingFrequency | str,
    last_reading_date: datetime | None,
) -> datetime | None:
    """Date the next reading is expected, or None if there is no cadence or no reading."""
    interval = expected_interval_days(frequency)
    if interval is None or last_reading_date is None:
        return None
    return as_utc(last_reading_date) + timedelta(days=interval)


def classify_meter(
    frequency: ReadingFrequency | str,
    last_reading_date: datetime | None,
    now: datetime | None = None,
    treat_missing_as_overdue: bool = True,
) -> ComplianceStatus | None:
    """
    Classify a meter's reading status at ``now``.

    Args:
        frequency: Meter reading frequency
        last_reading_date: Date of the most recent reading, if any
        now: Evaluation instant, defaults to the current time
        treat_missing_as_overdue: Whether a never-read meter is OVERDUE;
            when False such a meter is not classified and None is returned

    Returns:
        Compliance status, or None for an unclassifiable never-read meter

    Raises:
        UnsupportedFrequency: If the frequency is not known

    """
    interval = expected_interval_days(frequency)
    if interval is None:
        return ComplianceStatus.EXEMPT

    if last_reading_date is None:
        return ComplianceStatus.OVERDUE if treat_missing_as_overdue else None

    elapsed = days_since(last_reading_date, now)
    if elapsed < interval:
        return ComplianceStatus.CURRENT
    if elapsed > interval * GRACE_MULTIPLIER:
        return ComplianceStatus.OVERDUE
    return ComplianceStatus.PENDING


@dataclass(frozen=True)
class MeterSnapshot:
    """A meter as the compliance rules see it: cadence, assignees and last reading."""

    meter_id: int
    meter_number: str
    frequency: ReadingFrequency
    assignee_ids: tuple[int, ...] = ()
    last_reading_date: datetime | None = None

    @property
    def assignment_count(self) -> int:
        return len(self.assignee_ids)
