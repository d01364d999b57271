"""Database models."""

from yardops.models.location import Location
from yardops.models.meter import Meter
from yardops.models.meter_assignment import MeterAssignment
from yardops.models.meter_type import MeterType
from yardops.models.notification import Notification
from yardops.models.reading import Reading
from yardops.models.scheduled_reading import ScheduledReading
from yardops.models.user import User

__all__ = [
    "Location",
    "Meter",
    "MeterAssignment",
    "MeterType",
    "Notification",
    "Reading",
    "ScheduledReading",
    "User",
]
