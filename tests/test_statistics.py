"""Tests for the fleet compliance summary."""

from datetime import timedelta

from sqlalchemy.orm import Session

from tests.conftest import NOW, add_reading, assign, make_meter, make_user
from yardops.models.enums import ReadingFrequency
from yardops.schemas.reading import FrequencyBreakdown
from yardops.services.compliance import MeterSnapshot
from yardops.services.statistics import get_reading_stats, summarize_fleet


def _three_meter_fleet() -> list[MeterSnapshot]:
    return [
        MeterSnapshot(1, "D-1", ReadingFrequency.DAILY, (10,), NOW - timedelta(days=2)),
        MeterSnapshot(2, "A-1", ReadingFrequency.AD_HOC, (10,), None),
        MeterSnapshot(3, "W-1", ReadingFrequency.WEEKLY, (), None),
    ]


class TestSummarizeFleet:
    def test_three_meter_fleet(self) -> None:
        stats = summarize_fleet(_three_meter_fleet(), total_readings=5, recent_readings=2, now=NOW)

        assert stats.missed_readings == 1
        assert stats.pending_readings == 0
        assert stats.total_meters == 3
        assert stats.total_readings == 5
        assert stats.recent_readings == 2
        assert stats.by_frequency == FrequencyBreakdown(daily=1, weekly=1, monthly=0, ad_hoc=1)

    def test_order_does_not_matter(self) -> None:
        snapshots = _three_meter_fleet()
        forward = summarize_fleet(snapshots, 0, 0, now=NOW)
        backward = summarize_fleet(list(reversed(snapshots)), 0, 0, now=NOW)
        assert forward == backward

    def test_pending_meter(self) -> None:
        snapshots = [
            MeterSnapshot(1, "W-1", ReadingFrequency.WEEKLY, (10,), NOW - timedelta(days=9)),
            MeterSnapshot(2, "M-1", ReadingFrequency.MONTHLY, (10,), NOW - timedelta(days=2)),
        ]
        stats = summarize_fleet(snapshots, 0, 0, now=NOW)
        assert stats.pending_readings == 1
        assert stats.missed_readings == 0

    def test_empty_fleet(self) -> None:
        stats = summarize_fleet([], 0, 0, now=NOW)
        assert stats.total_meters == 0
        assert stats.by_frequency == FrequencyBreakdown()


def test_reading_stats_from_database(db: Session) -> None:
    reader = make_user(db)
    daily = make_meter(db, "D-1", ReadingFrequency.DAILY)
    weekly = make_meter(db, "W-1", ReadingFrequency.WEEKLY)
    make_meter(db, "M-1", ReadingFrequency.MONTHLY)
    assign(db, daily, reader)
    assign(db, weekly, reader)

    add_reading(db, daily, reader, NOW - timedelta(days=2))
    add_reading(db, daily, reader, NOW - timedelta(days=20))
    add_reading(db, weekly, reader, NOW - timedelta(days=8))

    stats = get_reading_stats(db, now=NOW)

    assert stats.total_readings == 3
    assert stats.recent_readings == 1
    assert stats.total_meters == 3
    assert stats.missed_readings == 1
    assert stats.pending_readings == 1
    assert stats.by_frequency.monthly == 1
