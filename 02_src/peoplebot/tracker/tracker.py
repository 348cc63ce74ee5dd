"""Tracker implementation for recording TraceEvents in memory."""

import uuid
from collections import deque
from datetime import datetime, timezone
from typing import Protocol

from ..models import TraceEvent

DEFAULT_CAPACITY = 1000


class ITracker(Protocol):
    """Recording TraceEvents for the observability API."""

    async def track(self, event_type: str, actor: str, data: dict) -> None:
        """Create a TraceEvent."""
        ...

    async def get_trace_events(
        self,
        after: datetime | None = None,
        event_types: list[str] | None = None,
        actor: str | None = None,
        limit: int = 100,
    ) -> list[TraceEvent]:
        """Get trace events with optional filters (newest first)."""
        ...

    async def clear(self) -> None:
        """Forget all events."""
        ...


class Tracker:
    """Keeps the most recent TraceEvents in a bounded deque."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        self._events: deque[TraceEvent] = deque(maxlen=capacity)

    async def track(self, event_type: str, actor: str, data: dict) -> None:
        """Create TraceEvent and keep it."""
        self._events.append(
            TraceEvent(
                id=str(uuid.uuid4()),
                event_type=event_type,
                actor=actor,
                data=data,
                timestamp=datetime.now(timezone.utc),
            )
        )

    async def get_trace_events(
        self,
        after: datetime | None = None,
        event_types: list[str] | None = None,
        actor: str | None = None,
        limit: int = 100,
    ) -> list[TraceEvent]:
        """Get trace events with optional filters (newest first)."""
        result = []
        for event in reversed(self._events):
            if after and event.timestamp <= after:
                continue
            if event_types and event.event_type not in event_types:
                continue
            if actor and event.actor != actor:
                continue
            result.append(event)
            if len(result) >= limit:
                break
        return result

    async def clear(self) -> None:
        self._events.clear()
