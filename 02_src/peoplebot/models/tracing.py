"""Tracing and observability data models."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class TraceEvent:
    """A dialog step recorded for the observability API."""

    id: str
    event_type: str  # e.g. "question_sent", "profile_delivered"
    actor: str  # component that recorded it
    data: dict
    timestamp: datetime
