"""In-memory collaborators for tests and local development."""

from .event_store import InMemoryEventStore
from .membership import InMemoryGroupDirectory
from .repository import InMemoryMeetingRepository

__all__ = ["InMemoryEventStore", "InMemoryGroupDirectory", "InMemoryMeetingRepository"]
