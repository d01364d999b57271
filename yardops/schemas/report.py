"""Report Pydantic schemas."""

from decimal import Decimal
from enum import Enum

from pydantic import BaseModel

from yardops.core.clock import UTCDateTime
from yardops.models.enums import ReadingFrequency


class ExportFormat(str, Enum):
    """Supported report export formats."""

    CSV = "csv"
    PDF = "pdf"  # plain-text block, no real PDF rendering


class ReportFilter(BaseModel):
    """Filters applied to the readings included in a report.

    ``meter_type`` matches either a meter type id or its name.
    """

    location_id: int | None = None
    reader_id: int | None = None
    meter_type: str | None = None
    frequency: ReadingFrequency | None = None
    start_date: UTCDateTime | None = None
    end_date: UTCDateTime | None = None


class ReportReading(BaseModel):
    """One flattened reading row of a report."""

    id: int
    meter_number: str
    meter_type: str
    location: str
    reader: str
    value: Decimal
    reading_date: str
    comment: str | None = None


class DateRange(BaseModel):
    start: str
    end: str


class ReportSummary(BaseModel):
    """Counts over the filtered reading set."""

    total_readings: int
    total_meters: int
    total_locations: int
    date_range: DateRange


class ReportData(BaseModel):
    """Report rows plus summary."""

    readings: list[ReportReading]
    summary: ReportSummary
