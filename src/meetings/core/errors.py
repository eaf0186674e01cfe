"""Custom exception hierarchy for the meetings domain."""

from __future__ import annotations

from typing import Any


class MeetingsError(Exception):
    """Base exception for all meetings errors."""


# --- Configuration ---
class ConfigError(MeetingsError):
    """Invalid or missing configuration."""


# --- Business rules ---
class RuleViolation(MeetingsError):
    """A business rule was broken; the operation was aborted untouched.

    Carries the broken rule object so callers can map it to a
    user-facing validation error.
    """

    def __init__(self, rule: Any) -> None:
        self.rule = rule
        self.rule_name = type(rule).__name__
        self.message = rule.message
        super().__init__(f"[{self.rule_name}] {self.message}")


# --- Persistence ---
class MeetingNotFoundError(MeetingsError):
    """No meeting stored under the requested id."""

    def __init__(self, meeting_id: str) -> None:
        self.meeting_id = meeting_id
        super().__init__(f"Meeting {meeting_id} not found")
