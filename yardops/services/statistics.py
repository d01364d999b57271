"""Fleet-wide reading statistics for the dashboard."""

from collections.abc import Iterable
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from yardops.core.clock import utc_now
from yardops.models.enums import ReadingFrequency
from yardops.schemas.reading import FrequencyBreakdown, ReadingStats
from yardops.services.compliance import (
    ComplianceStatus,
    MeterSnapshot,
    classify_meter,
    coerce_frequency,
)
from yardops.services.meter import list_meter_snapshots
from yardops.services.reading import count_readings

RECENT_WINDOW = timedelta(days=7)

_FREQUENCY_FIELDS = {
    ReadingFrequency.DAILY: "daily",
    ReadingFrequency.WEEKLY: "weekly",
    ReadingFrequency.MONTHLY: "monthly",
    ReadingFrequency.AD_HOC: "ad_hoc",
}


def summarize_fleet(
    snapshots: Iterable[MeterSnapshot],
    total_readings: int,
    recent_readings: int,
    now: datetime | None = None,
) -> ReadingStats:
    """Reduce meter snapshots to the compliance summary.

    Every meter counts toward ``total_meters`` and ``by_frequency``. Only
    meters with at least one assignee can be pending or missed; a never-read
    meter counts as missed.
    """
    now = now or utc_now()
    by_frequency = dict.fromkeys(_FREQUENCY_FIELDS.values(), 0)
    total_meters = 0
    pending = 0
    missed = 0

    for snapshot in snapshots:
        total_meters += 1
        by_frequency[_FREQUENCY_FIELDS[coerce_frequency(snapshot.frequency)]] += 1

        if snapshot.assignment_count == 0:
            continue

        status = classify_meter(snapshot.frequency, snapshot.last_reading_date, now)
        if status == ComplianceStatus.PENDING:
            pending += 1
        elif status == ComplianceStatus.OVERDUE:
            missed += 1

    return ReadingStats(
        total_readings=total_readings,
        total_meters=total_meters,
        pending_readings=pending,
        missed_readings=missed,
        recent_readings=recent_readings,
        by_frequency=FrequencyBreakdown(**by_frequency),
    )


def get_reading_stats(db: Session, now: datetime | None = None) -> ReadingStats:
    """Compute the compliance summary from the database."""
    now = now or utc_now()
    return summarize_fleet(
        list_meter_snapshots(db),
        total_readings=count_readings(db),
        recent_readings=count_readings(db, start=now - RECENT_WINDOW),
        now=now,
    )
