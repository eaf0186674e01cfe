"""Application layer: use cases that load, change and save meetings."""

from .service import MeetingService

__all__ = ["MeetingService"]
