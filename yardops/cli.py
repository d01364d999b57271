"""CLI entrypoint for YardOps batch jobs and the API server."""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime

from yardops.core.config import Settings
from yardops.core.database import build_engine, build_session_factory, init_db
from yardops.core.logging import configure_logging
from yardops.models.enums import ReadingFrequency
from yardops.schemas.report import ExportFormat, ReportFilter
from yardops.services import notification as notification_service
from yardops.services import report as report_service
from yardops.services.email import EmailSender

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="yardops")
    parser.add_argument("--log-level", default=None, help="Logging level.")
    parser.add_argument("--json-logs", action="store_true", help="Emit logs in JSON format.")
    parser.add_argument("--database-url", help="Override DATABASE_URL.")

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("init-db", help="Create database tables")

    sweep = subparsers.add_parser("sweep", help="Run a notification sweep")
    sweep.add_argument("kind", choices=["due", "missed"], help="Which sweep to run.")

    report = subparsers.add_parser("report", help="Export a reading report")
    report.add_argument(
        "--format",
        dest="export_format",
        choices=[f.value for f in ExportFormat],
        default=ExportFormat.CSV.value,
    )
    report.add_argument("--location-id", type=int)
    report.add_argument("--reader-id", type=int)
    report.add_argument("--meter-type", help="Meter type id or name.")
    report.add_argument("--frequency", choices=[f.value for f in ReadingFrequency])
    report.add_argument("--start-date", type=datetime.fromisoformat)
    report.add_argument("--end-date", type=datetime.fromisoformat)
    report.add_argument("--output", help="Write to this file instead of stdout.")

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", help="Bind address.")
    serve.add_argument("--port", type=int, help="Bind port.")

    return parser


def _load_settings(args: argparse.Namespace) -> Settings:
    overrides = {}
    if args.database_url:
        overrides["DATABASE_URL"] = args.database_url
    if args.log_level:
        overrides["LOG_LEVEL"] = args.log_level
    if args.json_logs:
        overrides["LOG_JSON"] = True
    return Settings(**overrides)


def _run_sweep(settings: Settings, kind: str) -> int:
    engine = build_engine(settings.DATABASE_URL)
    session_factory = build_session_factory(engine)
    email_sender = EmailSender(settings)
    sweep = (
        notification_service.notify_due_readings
        if kind == "due"
        else notification_service.notify_missed_readings
    )
    try:
        with session_factory() as db:
            created = sweep(db, email_sender=email_sender)
    finally:
        engine.dispose()
    logger.info("Sweep %s finished: %d notifications created", kind, len(created))
    return 0


def _run_report(settings: Settings, args: argparse.Namespace) -> int:
    filters = ReportFilter(
        location_id=args.location_id,
        reader_id=args.reader_id,
        meter_type=args.meter_type,
        frequency=args.frequency,
        start_date=args.start_date,
        end_date=args.end_date,
    )
    engine = build_engine(settings.DATABASE_URL)
    session_factory = build_session_factory(engine)
    try:
        with session_factory() as db:
            report = report_service.generate_report(db, filters)
    finally:
        engine.dispose()
    content, _, filename = report_service.export_report(report, ExportFormat(args.export_format))

    if args.output:
        with open(args.output, "w", encoding="utf-8") as fh:
            fh.write(content)
        logger.info("Report written to %s (suggested name %s)", args.output, filename)
    else:
        sys.stdout.write(content)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = _load_settings(args)
    configure_logging(level=settings.LOG_LEVEL, json_format=settings.LOG_JSON)

    if args.command == "init-db":
        engine = build_engine(settings.DATABASE_URL)
        try:
            init_db(engine)
        finally:
            engine.dispose()
        logger.info("Database initialised at %s", settings.DATABASE_URL)
        return 0

    if args.command == "sweep":
        return _run_sweep(settings, args.kind)

    if args.command == "report":
        return _run_report(settings, args)

    if args.command == "serve":
        import uvicorn

        from yardops.main import create_app

        uvicorn.run(
            create_app(settings),
            host=args.host or settings.HOST,
            port=args.port or settings.PORT,
        )
        return 0

    parser.error(f"Unknown command: {args.command}")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
