"""ProfilePaginator: search once, then hand out profiles one by one."""

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Union

from ..config import ExhaustedPolicy
from ..errors import SearchEmpty, SearchFailed
from ..logging_config import get_logger
from ..models import DialogSession, Profile
from ..search import IPeopleSearch
from .criteria import CriteriaBuilder

logger = get_logger(__name__)


class PaginatorState(str, Enum):
    """Where a session is in the profile flow."""

    EMPTY = "empty"
    SEARCHING = "searching"
    PAGING = "paging"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class Delivered:
    """A profile to show; is_last means no "next" button."""

    profile: Profile
    is_last: bool


@dataclass(frozen=True)
class NoResults:
    """Search failed or found nobody."""

    reason: str  # "empty" or "failed"


@dataclass(frozen=True)
class Exhausted:
    """Every profile was shown and the policy forbids searching again."""


ProfileOutcome = Union[Delivered, NoResults, Exhausted]

SearchHook = Callable[[], Awaitable[None]]


class ProfilePaginator:
    """Drives EMPTY -> SEARCHING -> PAGING -> EXHAUSTED for a session."""

    def __init__(
        self,
        search: IPeopleSearch,
        criteria_builder: CriteriaBuilder,
        search_timeout: float = 10.0,
        exhausted_policy: ExhaustedPolicy = ExhaustedPolicy.REQUIRE_RESTART,
    ):
        self._search = search
        self._criteria = criteria_builder
        self._search_timeout = search_timeout
        self._exhausted_policy = exhausted_policy

    @staticmethod
    def state(session: DialogSession) -> PaginatorState:
        if session.searching:
            return PaginatorState.SEARCHING
        if not session.found_profiles:
            return PaginatorState.EMPTY
        if session.current_profile_cursor < len(session.found_profiles):
            return PaginatorState.PAGING
        return PaginatorState.EXHAUSTED

    async def advance(
        self,
        session: DialogSession,
        on_search: SearchHook | None = None,
    ) -> ProfileOutcome:
        """Deliver the next profile, searching first when nothing is cached."""
        state = self.state(session)

        if state is PaginatorState.EXHAUSTED:
            if self._exhausted_policy is ExhaustedPolicy.REQUIRE_RESTART:
                return Exhausted()
            logger.info(
                "Profiles exhausted, searching again",
                extra={"user_id": session.user_id},
            )
            state = PaginatorState.EMPTY

        if state is PaginatorState.EMPTY:
            try:
                profiles = await self._run_search(session, on_search)
            except SearchEmpty:
                return NoResults(reason="empty")
            except SearchFailed as e:
                logger.warning(
                    "People search failed: %s", e, extra={"user_id": session.user_id}
                )
                return NoResults(reason="failed")

            session.found_profiles = profiles
            session.current_profile_cursor = 0

        profile = session.found_profiles[session.current_profile_cursor]
        session.current_profile_cursor += 1
        is_last = session.current_profile_cursor == len(session.found_profiles)
        return Delivered(profile=profile, is_last=is_last)

    async def _run_search(
        self,
        session: DialogSession,
        on_search: SearchHook | None,
    ) -> list[Profile]:
        criteria = self._criteria.build(session)
        session.searching = True
        try:
            if on_search is not None:
                await on_search()
            try:
                profiles = await asyncio.wait_for(
                    self._search.search(criteria), timeout=self._search_timeout
                )
            except asyncio.TimeoutError as e:
                raise SearchFailed(
                    f"People search timed out after {self._search_timeout}s"
                ) from e
        finally:
            session.searching = False

        if not profiles:
            raise SearchEmpty(f"No profiles for {criteria}")

        logger.info(
            "Found %d profiles for %s",
            len(profiles),
            criteria,
            extra={"user_id": session.user_id},
        )
        return list(profiles)
