"""Observability API routes."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel
from fastapi import APIRouter, HTTPException, Query

from ...app import Application
from ...dialog import ProfilePaginator


class TraceEventResponse(BaseModel):
    """Response model for trace event."""

    id: str
    event_type: str
    actor: str
    data: dict[str, Any]
    timestamp: datetime


class SessionResponse(BaseModel):
    """Snapshot of one user's dialog."""

    user_id: str
    answers: dict[int, int]
    next_question: int | None
    profile_state: str
    profile_cursor: int
    profile_count: int
    greeting_sent: bool
    last_activity_at: datetime


def create_observability_router(app: Application) -> APIRouter:
    """Create observability router."""
    router = APIRouter(prefix="/api", tags=["observability"])

    @router.get("/trace-events", response_model=list[TraceEventResponse])
    async def get_trace_events(
        after: str | None = Query(None, description="ISO timestamp filter"),
        limit: int = Query(100, ge=1, le=1000),
        event_type: str | None = Query(None, description="Filter by event type"),
        actor: str | None = Query(None, description="Filter by actor"),
    ) -> list[dict]:
        """Get trace events with optional filters."""
        after_dt = None
        if after:
            try:
                after_dt = datetime.fromisoformat(after)
            except ValueError:
                raise HTTPException(
                    status_code=400, detail="Invalid after timestamp format"
                )

        events = await app.tracker.get_trace_events(
            after=after_dt,
            event_types=[event_type] if event_type else None,
            actor=actor,
            limit=limit,
        )

        return [
            {
                "id": e.id,
                "event_type": e.event_type,
                "actor": e.actor,
                "data": e.data,
                "timestamp": e.timestamp,
            }
            for e in events
        ]

    @router.get("/sessions/{user_id}", response_model=SessionResponse)
    async def get_session(user_id: str) -> dict:
        """Get the current dialog of a user."""
        session = app.session_store.get(user_id)
        if session is None:
            raise HTTPException(status_code=404, detail="No dialog for this user")

        sequencer = app.dialog_agent.sequencer
        return {
            "user_id": session.user_id,
            "answers": dict(session.answers),
            "next_question": sequencer.next_unanswered(session),
            "profile_state": ProfilePaginator.state(session).value,
            "profile_cursor": session.current_profile_cursor,
            "profile_count": len(session.found_profiles),
            "greeting_sent": session.greeting_sent,
            "last_activity_at": session.last_activity_at,
        }

    return router
