"""Messenger bot that asks a few questions and pages through matching people."""

from .app import Application, IApplication
from .config import ExhaustedPolicy, Settings, load_settings
from .dialog import (
    CriteriaBuilder,
    DialogAgent,
    IDialogAgent,
    ProfilePaginator,
    QuestionCatalog,
    QuestionSequencer,
    SessionStore,
)
from .messenger import IMessageSender, MessageBuilder, SendAPIClient
from .models import DialogSession, InboundEvent, Profile, Question
from .search import HttpPeopleSearch, IPeopleSearch
from .tracker import ITracker, Tracker

__all__ = [
    # Application
    "Application",
    "IApplication",
    # Configuration
    "ExhaustedPolicy",
    "Settings",
    "load_settings",
    # Models
    "DialogSession",
    "InboundEvent",
    "Profile",
    "Question",
    # Dialog
    "CriteriaBuilder",
    "DialogAgent",
    "IDialogAgent",
    "ProfilePaginator",
    "QuestionCatalog",
    "QuestionSequencer",
    "SessionStore",
    # Collaborators
    "IMessageSender",
    "MessageBuilder",
    "SendAPIClient",
    "HttpPeopleSearch",
    "IPeopleSearch",
    "ITracker",
    "Tracker",
]
