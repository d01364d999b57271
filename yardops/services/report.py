"""Report service: filtered reading reports and their CSV / plain-text exports.

Exports do not quote or escape fields, so a comma inside a value shifts the
CSV columns. Consumers that need RFC 4180 output must post-process.
"""

import logging
from datetime import datetime
from decimal import Decimal

from sqlalchemy.orm import Session, joinedload

from yardops.core.clock import as_utc, to_iso, utc_now
from yardops.models.meter import Meter
from yardops.models.meter_type import MeterType
from yardops.models.reading import Reading
from yardops.schemas.report import (
    DateRange,
    ExportFormat,
    ReportData,
    ReportFilter,
    ReportReading,
    ReportSummary,
)
from yardops.services.reading import meter_type_condition

logger = logging.getLogger(__name__)

CSV_HEADERS = [
    "Meter Number",
    "Meter Type",
    "Location",
    "Reader",
    "Value",
    "Reading Date",
    "Comment",
]

REPORT_TITLE = "YardOps Meter Reading Report"


def generate_report(db: Session, filters: ReportFilter) -> ReportData:
    """Collect the readings matching ``filters`` and summarise them."""
    query = (
        db.query(Reading)
        .join(Meter, Reading.meter_id == Meter.id)
        .options(
            joinedload(Reading.meter).joinedload(Meter.location),
            joinedload(Reading.meter).joinedload(Meter.meter_type),
            joinedload(Reading.user),
        )
    )

    if filters.start_date is not None:
        query = query.filter(Reading.reading_date >= as_utc(filters.start_date))
    if filters.end_date is not None:
        query = query.filter(Reading.reading_date <= as_utc(filters.end_date))
    if filters.location_id is not None:
        query = query.filter(Meter.location_id == filters.location_id)
    if filters.reader_id is not None:
        query = query.filter(Reading.user_id == filters.reader_id)
    if filters.frequency is not None:
        query = query.filter(Meter.frequency == filters.frequency)
    if filters.meter_type:
        query = query.join(MeterType, Meter.meter_type_id == MeterType.id).filter(
            meter_type_condition(filters.meter_type)
        )

    readings = query.order_by(Reading.reading_date.desc(), Reading.id.desc()).all()

    report = ReportData(
        readings=[
            ReportReading(
                id=r.id,
                meter_number=r.meter.meter_number,
                meter_type=r.meter.meter_type.name if r.meter.meter_type else "Unknown",
                location=r.meter.location.name,
                reader=r.user.full_name,
                value=r.value,
                reading_date=to_iso(r.reading_date),
                comment=r.comment or None,
            )
            for r in readings
        ],
        summary=ReportSummary(
            total_readings=len(readings),
            total_meters=len({r.meter_id for r in readings}),
            total_locations=len({r.meter.location_id for r in readings}),
            date_range=DateRange(
                start=to_iso(filters.start_date) if filters.start_date else "N/A",
                end=to_iso(filters.end_date) if filters.end_date else "N/A",
            ),
        ),
    )

    logger.info(
        "Report generated: %d reading(s), filters=%s",
        report.summary.total_readings,
        filters.model_dump(exclude_none=True, mode="json"),
    )
    return report


def format_value(value: Decimal | float | int) -> str:
    """Render a reading value without trailing zeros, e.g. ``42.500`` -> ``42.5``."""
    if isinstance(value, Decimal):
        if value == value.to_integral_value():
            return str(value.quantize(Decimal(1)))
        return format(value.normalize(), "f")
    return str(value)


def _row(reading: ReportReading) -> list[str]:
    return [
        reading.meter_number,
        reading.meter_type,
        reading.location,
        reading.reader,
        format_value(reading.value),
        reading.reading_date,
        reading.comment or "",
    ]


def render_csv(report: ReportData) -> str:
    """Render the report as comma-separated lines, header first."""
    lines = [",".join(CSV_HEADERS)]
    lines.extend(",".join(_row(reading)) for reading in report.readings)
    return "\n".join(lines)


def render_text(report: ReportData, generated_at: datetime | None = None) -> str:
    """Render the report as a plain-text block with a summary section."""
    summary = report.summary
    lines = [
        REPORT_TITLE,
        f"Generated: {to_iso(generated_at or utc_now())}",
        "",
        "Summary:",
        f"- Total Readings: {summary.total_readings}",
        f"- Total Meters: {summary.total_meters}",
        f"- Total Locations: {summary.total_locations}",
        f"- Date Range: {summary.date_range.start} to {summary.date_range.end}",
        "",
        "Readings:",
        "Meter Number | Type | Location | Reader | Value | Date | Comment",
        "-" * 80,
    ]
    lines.extend(" | ".join(_row(reading)) for reading in report.readings)
    return "\n".join(lines) + "\n"


def export_report(
    report: ReportData,
    export_format: ExportFormat,
    generated_at: datetime | None = None,
) -> tuple[str, str, str]:
    """
    Render a report for download.

    Returns:
        (content, media type, file name)

    """
    stamp = (generated_at or utc_now()).strftime("%Y%m%d-%H%M%S")
    if export_format == ExportFormat.CSV:
        return render_csv(report), "text/csv", f"yardops-report-{stamp}.csv"
    return render_text(report, generated_at), "text/plain", f"yardops-report-{stamp}.txt"
