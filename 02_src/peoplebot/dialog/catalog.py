"""QuestionCatalog: the ordered, read-only list of dialog questions."""

from collections.abc import Iterator, Sequence

from ..config import QuestionConfig
from ..logging_config import get_logger
from ..models import Question, QuestionKind

logger = get_logger(__name__)


class QuestionCatalog:
    """Questions in the order they are asked."""

    def __init__(self, questions: Sequence[Question]):
        for position, question in enumerate(questions):
            if question.index != position:
                raise ValueError(
                    f"Question at position {position} has index {question.index}"
                )
        self._questions = tuple(questions)

    @classmethod
    def from_config(cls, questions: Sequence[QuestionConfig]) -> "QuestionCatalog":
        """Build the catalog from the "dialog.questions" config section."""
        catalog = []
        for index, item in enumerate(questions):
            try:
                kind = QuestionKind(item.type)
            except ValueError:
                raise ValueError(
                    f"Question {index} has unknown type {item.type!r}"
                ) from None

            unknown_codes = [c for c in item.search_params if not 0 <= c < len(item.answers)]
            if unknown_codes:
                logger.warning(
                    "Question %s has searchParams for missing answers %s",
                    index,
                    unknown_codes,
                )

            catalog.append(
                Question(
                    index=index,
                    kind=kind,
                    prompt=item.question,
                    answer_labels=tuple(item.answers),
                    search_params=dict(item.search_params),
                    persistent=item.persistent,
                )
            )
        return cls(catalog)

    def __len__(self) -> int:
        return len(self._questions)

    def __iter__(self) -> Iterator[Question]:
        return iter(self._questions)

    def __getitem__(self, index: int) -> Question:
        return self._questions[index]

    def get(self, index: int) -> Question | None:
        """Question by index, or None when the index is not in the catalog."""
        if isinstance(index, int) and 0 <= index < len(self._questions):
            return self._questions[index]
        return None

    def is_persistent(self, index: int) -> bool:
        question = self.get(index)
        return bool(question and question.persistent)
