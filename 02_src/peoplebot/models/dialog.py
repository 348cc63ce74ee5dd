"""Dialog-related data models."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from .profiles import Profile


class QuestionKind(str, Enum):
    """How a question is rendered in Messenger."""

    BUTTON = "button"
    QUICK_REPLY = "quickReply"


@dataclass(frozen=True)
class Question:
    """A catalog question; position in the catalog is its index."""

    index: int
    kind: QuestionKind
    prompt: str
    answer_labels: tuple[str, ...]
    search_params: dict[int, dict[str, Any]] = field(default_factory=dict)
    persistent: bool = False

    def has_answer(self, code: int) -> bool:
        """Check that code addresses one of the answer labels."""
        if isinstance(code, bool) or not isinstance(code, int):
            return False
        return 0 <= code < len(self.answer_labels)


@dataclass
class DialogSession:
    """Conversation state of one Messenger user."""

    user_id: str
    answers: dict[int, int] = field(default_factory=dict)  # question index -> answer code
    found_profiles: list[Profile] = field(default_factory=list)
    current_profile_cursor: int = 0
    last_activity_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    greeting_sent: bool = False
    searching: bool = False

    def touch(self, now: datetime | None = None) -> None:
        """Record inbound activity."""
        self.last_activity_at = now or datetime.now(timezone.utc)

    def reset_profiles(self) -> None:
        """Forget found profiles so the next advance searches again."""
        self.found_profiles = []
        self.current_profile_cursor = 0
