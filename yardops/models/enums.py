"""Enum definitions shared by models and schemas."""

from enum import Enum


class ReadingFrequency(str, Enum):
    """How often a meter is expected to be read."""

    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    AD_HOC = "AD_HOC"


class UserRole(str, Enum):
    """Role of a user account."""

    ADMIN = "ADMIN"
    READER = "READER"


class NotificationType(str, Enum):
    """Kind of event a notification reports."""

    NEW_ASSIGNMENT = "NEW_ASSIGNMENT"
    READING_DUE = "READING_DUE"
    READING_MISSED = "READING_MISSED"


class NotificationStatus(str, Enum):
    """Read state of a notification."""

    UNREAD = "UNREAD"
    READ = "READ"
