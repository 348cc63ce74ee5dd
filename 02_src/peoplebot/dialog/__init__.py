"""Dialog module: question flow and profile paging."""

from .agent import DialogAgent, IDialogAgent
from .catalog import QuestionCatalog
from .criteria import CriteriaBuilder
from .paginator import (
    Delivered,
    Exhausted,
    NoResults,
    PaginatorState,
    ProfileOutcome,
    ProfilePaginator,
)
from .sequencer import QuestionSequencer
from .store import SessionStore

__all__ = [
    "DialogAgent",
    "IDialogAgent",
    "QuestionCatalog",
    "CriteriaBuilder",
    "Delivered",
    "Exhausted",
    "NoResults",
    "PaginatorState",
    "ProfileOutcome",
    "ProfilePaginator",
    "QuestionSequencer",
    "SessionStore",
]
