"""Core data models for the people-search bot."""

from .dialog import DialogSession, Question, QuestionKind
from .events import (
    AnswerSubmission,
    EventKind,
    InboundEvent,
    Postback,
    Sentinel,
    SentinelName,
)
from .profiles import Profile, SearchCriteria
from .tracing import TraceEvent

__all__ = [
    # Dialog
    "DialogSession",
    "Question",
    "QuestionKind",
    # Events
    "AnswerSubmission",
    "EventKind",
    "InboundEvent",
    "Postback",
    "Sentinel",
    "SentinelName",
    # Profiles
    "Profile",
    "SearchCriteria",
    # Tracing
    "TraceEvent",
]
