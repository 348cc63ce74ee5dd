"""Tests for Tracker."""

import asyncio
from datetime import datetime, timezone

import pytest

from peoplebot.tracker import Tracker


class TestTrackerTrack:
    """Tests for Tracker.track() method."""

    @pytest.mark.asyncio
    async def test_track_creates_event(self, tracker):
        """Test that track() creates a TraceEvent."""
        await tracker.track(
            event_type="question_sent",
            actor="dialog_agent",
            data={"user_id": "u1", "question_index": 0},
        )

        events = await tracker.get_trace_events()
        assert len(events) == 1
        assert events[0].event_type == "question_sent"
        assert events[0].actor == "dialog_agent"
        assert events[0].data == {"user_id": "u1", "question_index": 0}
        assert events[0].id

    @pytest.mark.asyncio
    async def test_track_generates_timestamp(self, tracker):
        """Test that track() stamps events with the current time."""
        before = datetime.now(timezone.utc)
        await tracker.track(event_type="test_event", actor="test_actor", data={})
        after = datetime.now(timezone.utc)

        events = await tracker.get_trace_events()
        assert before <= events[0].timestamp <= after

    @pytest.mark.asyncio
    async def test_capacity(self):
        """Test that only the most recent events are kept."""
        tracker = Tracker(capacity=2)
        for i in range(3):
            await tracker.track(event_type=f"event{i}", actor="a", data={})

        events = await tracker.get_trace_events()
        assert [e.event_type for e in events] == ["event2", "event1"]


class TestTrackerQuery:
    """Tests for Tracker.get_trace_events() filters."""

    @pytest.mark.asyncio
    async def test_newest_first_and_limit(self, tracker):
        for i in range(5):
            await tracker.track(event_type=f"event{i}", actor="a", data={})

        events = await tracker.get_trace_events(limit=2)
        assert [e.event_type for e in events] == ["event4", "event3"]

    @pytest.mark.asyncio
    async def test_filters(self, tracker):
        await tracker.track(event_type="question_sent", actor="dialog_agent", data={})
        await tracker.track(event_type="no_results", actor="dialog_agent", data={})
        await tracker.track(event_type="question_sent", actor="other", data={})

        by_type = await tracker.get_trace_events(event_types=["question_sent"])
        assert len(by_type) == 2

        by_both = await tracker.get_trace_events(
            event_types=["question_sent"], actor="dialog_agent"
        )
        assert len(by_both) == 1

    @pytest.mark.asyncio
    async def test_after(self, tracker):
        await tracker.track(event_type="old", actor="a", data={})
        cutoff = (await tracker.get_trace_events())[0].timestamp
        await asyncio.sleep(0.01)
        await tracker.track(event_type="new", actor="a", data={})

        events = await tracker.get_trace_events(after=cutoff)
        assert [e.event_type for e in events] == ["new"]

    @pytest.mark.asyncio
    async def test_clear(self, tracker):
        await tracker.track(event_type="event", actor="a", data={})
        await tracker.clear()
        assert await tracker.get_trace_events() == []
