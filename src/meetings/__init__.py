"""Meeting aggregate: attendance, waitlists and host roles for group events."""

__version__ = "0.1.0"
