"""SessionStore: owner of every in-memory DialogSession."""

import asyncio
from datetime import datetime, timedelta, timezone

from ..logging_config import get_logger
from ..models import DialogSession
from .catalog import QuestionCatalog

logger = get_logger(__name__)


class SessionStore:
    """Maps Messenger user ids to their dialog sessions.

    Sessions live only in process memory. Expired sessions are removed in
    batches by ``sweep_expired``, which runs at most once per lifetime.
    """

    def __init__(
        self,
        catalog: QuestionCatalog,
        lifetime: timedelta,
        now: datetime | None = None,
    ):
        self._catalog = catalog
        self._lifetime = lifetime
        self._sessions: dict[str, DialogSession] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        # Sessions idle since at least this moment are removed by the next sweep.
        self._checkpoint = (now or datetime.now(timezone.utc)) + lifetime

    @property
    def lifetime(self) -> timedelta:
        return self._lifetime

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, user_id: str) -> bool:
        return user_id in self._sessions

    def get(self, user_id: str) -> DialogSession | None:
        """Existing session, without creating one."""
        return self._sessions.get(user_id)

    def resolve(self, user_id: str) -> DialogSession:
        """Existing session or a fresh one."""
        session = self._sessions.get(user_id)
        if session is None:
            session = DialogSession(user_id=user_id)
            self._sessions[user_id] = session
            logger.debug("Dialog created", extra={"user_id": user_id})
        return session

    def renew(self, user_id: str) -> DialogSession:
        """Replace the session with a fresh one ("Get Started")."""
        session = DialogSession(user_id=user_id)
        self._sessions[user_id] = session
        return session

    def restart(self, user_id: str) -> DialogSession:
        """Start the questions over, keeping persistent answers only."""
        previous = self._sessions.get(user_id)
        answers = {}
        if previous is not None:
            answers = {
                index: code
                for index, code in previous.answers.items()
                if self._catalog.is_persistent(index)
            }

        session = DialogSession(user_id=user_id, answers=answers, greeting_sent=True)
        if previous is not None:
            session.last_activity_at = previous.last_activity_at
        self._sessions[user_id] = session

        logger.info(
            "Dialog restarted, kept answers %s",
            sorted(answers),
            extra={"user_id": user_id},
        )
        return session

    def lock_for(self, user_id: str) -> asyncio.Lock:
        """Per-user lock serializing event handling for that user."""
        lock = self._locks.get(user_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[user_id] = lock
        return lock

    def sweep_expired(
        self,
        now: datetime | None = None,
        lifetime: timedelta | None = None,
    ) -> int:
        """Remove sessions idle since the last checkpoint.

        Does nothing until a full lifetime has passed since the checkpoint.
        Returns the number of removed sessions.
        """
        now = now or datetime.now(timezone.utc)
        lifetime = lifetime if lifetime is not None else self._lifetime

        if now - self._checkpoint < lifetime:
            return 0

        expired = [
            user_id
            for user_id, session in self._sessions.items()
            if session.last_activity_at <= self._checkpoint
        ]
        for user_id in expired:
            del self._sessions[user_id]
            lock = self._locks.get(user_id)
            if lock is not None and not lock.locked():
                del self._locks[user_id]

        self._checkpoint = now + lifetime

        if expired:
            logger.info("Removed %d expired dialogs", len(expired))
        return len(expired)

    def clear(self) -> None:
        """Drop every session."""
        self._sessions.clear()
        self._locks = {
            user_id: lock for user_id, lock in self._locks.items() if lock.locked()
        }
