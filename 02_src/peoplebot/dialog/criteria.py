"""CriteriaBuilder: answers to people-search criteria."""

from ..models import DialogSession, SearchCriteria
from .catalog import QuestionCatalog


class CriteriaBuilder:
    """Merges the searchParams of every chosen answer."""

    def __init__(self, catalog: QuestionCatalog):
        self._catalog = catalog

    def build(self, session: DialogSession) -> SearchCriteria:
        criteria: SearchCriteria = {}
        # Ascending index: later questions win on key collisions.
        for index in sorted(session.answers):
            question = self._catalog.get(index)
            if question is None:
                continue
            params = question.search_params.get(session.answers[index])
            if params:
                criteria.update(params)
        return criteria
