"""Enumerations used across the meetings domain."""

from enum import Enum


class AttendeeRole(str, Enum):
    HOST = "host"
    ATTENDEE = "attendee"


class AttendeeStatus(str, Enum):
    ACTIVE = "active"
    REMOVED = "removed"  # Removed by a host or organizer
    SUPERSEDED = "superseded"  # Member declined after signing up


class WaitlistStatus(str, Enum):
    ACTIVE = "active"
    SIGNED_OFF = "signed_off"
    PROMOTED = "promoted"  # Moved to attendees after a decline


class LogFormat(str, Enum):
    JSON = "json"
    CONSOLE = "console"
