"""Tests for the yardops command line."""

from datetime import timedelta
from pathlib import Path

import pytest
from sqlalchemy import event, inspect

from tests.conftest import add_reading, assign, make_meter, make_user
from yardops import cli
from yardops.core.clock import utc_now
from yardops.core.database import build_engine, build_session_factory
from yardops.models.enums import NotificationType, ReadingFrequency
from yardops.models.notification import Notification


@pytest.fixture
def database_url(tmp_path: Path) -> str:
    return f"sqlite:///{tmp_path / 'yardops.db'}"


@pytest.fixture
def seeded_url(database_url: str) -> str:
    """An initialised database with one overdue weekly meter."""
    assert cli.main(["--database-url", database_url, "init-db"]) == 0

    engine = build_engine(database_url)
    with build_session_factory(engine)() as db:
        reader = make_user(db)
        meter = make_meter(db, "WTR-001", ReadingFrequency.WEEKLY)
        assign(db, meter, reader)
        add_reading(db, meter, reader, utc_now() - timedelta(days=12), "42.500")
    engine.dispose()
    return database_url


def _notification_count(database_url: str, notification_type: NotificationType) -> int:
    engine = build_engine(database_url)
    try:
        with build_session_factory(engine)() as db:
            return (
                db.query(Notification).filter(Notification.type == notification_type).count()
            )
    finally:
        engine.dispose()


class TestInitDb:
    def test_creates_tables(self, database_url: str) -> None:
        assert cli.main(["--database-url", database_url, "init-db"]) == 0

        engine = build_engine(database_url)
        tables = set(inspect(engine).get_table_names())
        engine.dispose()
        assert {
            "locations",
            "meter_types",
            "users",
            "meters",
            "readings",
            "meter_assignments",
            "scheduled_readings",
            "notifications",
        } <= tables

    def test_is_repeatable(self, database_url: str) -> None:
        assert cli.main(["--database-url", database_url, "init-db"]) == 0
        assert cli.main(["--database-url", database_url, "init-db"]) == 0


class TestSweep:
    def test_missed_sweep_creates_once(self, seeded_url: str) -> None:
        assert cli.main(["--database-url", seeded_url, "sweep", "missed"]) == 0
        assert _notification_count(seeded_url, NotificationType.READING_MISSED) == 1

        assert cli.main(["--database-url", seeded_url, "sweep", "missed"]) == 0
        assert _notification_count(seeded_url, NotificationType.READING_MISSED) == 1

    def test_due_sweep_without_schedules(self, seeded_url: str) -> None:
        assert cli.main(["--database-url", seeded_url, "sweep", "due"]) == 0
        assert _notification_count(seeded_url, NotificationType.READING_DUE) == 0

    def test_unknown_kind_is_rejected(self, seeded_url: str) -> None:
        with pytest.raises(SystemExit):
            cli.main(["--database-url", seeded_url, "sweep", "weekly"])


class TestReport:
    def test_csv_to_file(self, seeded_url: str, tmp_path: Path) -> None:
        output = tmp_path / "report.csv"
        argv = ["--database-url", seeded_url, "report", "--format", "csv", "--output", str(output)]

        assert cli.main(argv) == 0

        lines = output.read_text(encoding="utf-8").split("\n")
        assert lines[0] == "Meter Number,Meter Type,Location,Reader,Value,Reading Date,Comment"
        assert lines[1].startswith("WTR-001,WATER,Dock A,Jane Doe,42.5,")
        assert len(lines) == 2

    def test_filters_apply(self, seeded_url: str, tmp_path: Path) -> None:
        output = tmp_path / "report.csv"
        argv = [
            "--database-url",
            seeded_url,
            "report",
            "--meter-type",
            "GAS",
            "--output",
            str(output),
        ]

        assert cli.main(argv) == 0
        assert output.read_text(encoding="utf-8") == (
            "Meter Number,Meter Type,Location,Reader,Value,Reading Date,Comment"
        )

    def test_text_to_stdout(self, seeded_url: str, capsys: pytest.CaptureFixture[str]) -> None:
        assert cli.main(
            ["--log-level", "WARNING", "--database-url", seeded_url, "report", "--format", "pdf"]
        ) == 0

        out = capsys.readouterr().out
        assert out.startswith("YardOps Meter Reading Report\n")
        assert "- Total Readings: 1" in out


def test_engines_are_disposed(seeded_url: str, monkeypatch: pytest.MonkeyPatch) -> None:
    disposed = []
    engines = []

    def tracking_engine(database_url: str):
        engine = build_engine(database_url)
        event.listen(engine, "engine_disposed", disposed.append)
        engines.append(engine)
        return engine

    monkeypatch.setattr(cli, "build_engine", tracking_engine)

    cli.main(["--database-url", seeded_url, "sweep", "missed"])
    cli.main(["--database-url", seeded_url, "report"])
    cli.main(["--database-url", seeded_url, "init-db"])

    assert len(engines) == 3
    assert len(disposed) == 3
