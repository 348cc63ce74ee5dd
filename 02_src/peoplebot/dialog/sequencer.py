"""QuestionSequencer: which question to ask next."""

from ..errors import InvalidAnswer
from ..models import DialogSession
from .catalog import QuestionCatalog


class QuestionSequencer:
    """Walks the catalog in index order."""

    def __init__(self, catalog: QuestionCatalog):
        self._catalog = catalog

    @property
    def catalog(self) -> QuestionCatalog:
        return self._catalog

    def next_unanswered(self, session: DialogSession) -> int | None:
        """Lowest question index without an answer; None once all are answered."""
        for question in self._catalog:
            if question.index not in session.answers:
                return question.index
        return None

    def record_answer(self, session: DialogSession, index: int, code: int) -> None:
        """Store an answer; raises InvalidAnswer without touching the session."""
        question = self._catalog.get(index)
        if question is None or not question.has_answer(code):
            raise InvalidAnswer(index, code)

        previous = session.answers.get(index)
        session.answers[index] = code

        # A changed answer makes the cached search results stale.
        if previous is not None and previous != code:
            session.reset_profiles()
