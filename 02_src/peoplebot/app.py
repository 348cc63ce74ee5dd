"""Application bootstrap and lifecycle management."""

import asyncio
from datetime import timedelta
from typing import Iterable, Protocol

from .config import Settings, load_settings
from .dialog import (
    CriteriaBuilder,
    DialogAgent,
    ProfilePaginator,
    QuestionCatalog,
    QuestionSequencer,
    SessionStore,
)
from .logging_config import get_logger
from .messenger import IMessageSender, MessageBuilder, SendAPIClient
from .models import InboundEvent
from .search import HttpPeopleSearch, IPeopleSearch
from .tracker import ITracker, Tracker

logger = get_logger(__name__)


class IApplication(Protocol):
    """Bootstrap and lifecycle."""

    async def start(self) -> None:
        """Initialize components in dependency order."""
        ...

    async def stop(self) -> None:
        """Shutdown in reverse order."""
        ...

    async def reset(self) -> None:
        """Drop all dialogs and trace events."""
        ...


class Application:
    """Main application bootstrap."""

    def __init__(
        self,
        settings: Settings | None = None,
        sender: IMessageSender | None = None,
        people_search: IPeopleSearch | None = None,
    ):
        self._settings = settings if settings is not None else load_settings()

        # Collaborators may be injected; otherwise created in start()
        self._sender: IMessageSender | None = sender
        self._people_search: IPeopleSearch | None = people_search

        # Components (will be initialized in start())
        self._catalog: QuestionCatalog | None = None
        self._session_store: SessionStore | None = None
        self._tracker: ITracker | None = None
        self._dialog_agent: DialogAgent | None = None
        self._sweep_task: asyncio.Task | None = None
        self._event_tasks: dict[str, asyncio.Task] = {}  # user_id -> latest event task
        self._pending_events: set[asyncio.Task] = set()

    async def start(self) -> None:
        """Initialize components in dependency order."""
        logger.info("Starting application")
        settings = self._settings
        dialog = settings.dialog

        # 1. Catalog and sessions (no dependencies)
        self._catalog = QuestionCatalog.from_config(dialog.questions)
        self._session_store = SessionStore(
            self._catalog, lifetime=timedelta(seconds=settings.dialog_lifetime)
        )
        logger.info("Question catalog loaded with %d questions", len(self._catalog))

        # 2. Tracker
        self._tracker = Tracker()

        # 3. External collaborators
        if self._sender is None:
            self._sender = SendAPIClient(
                settings.facebook_graph_url,
                settings.page_access_token,
                timeout=settings.send_timeout,
            )
        if self._people_search is None:
            self._people_search = HttpPeopleSearch(
                settings.search_url, timeout=settings.search_timeout
            )

        # 4. DialogAgent (depends on everything above)
        criteria = CriteriaBuilder(self._catalog)
        self._dialog_agent = DialogAgent(
            store=self._session_store,
            sequencer=QuestionSequencer(self._catalog),
            paginator=ProfilePaginator(
                self._people_search,
                criteria,
                search_timeout=settings.search_timeout,
                exhausted_policy=dialog.exhausted_policy,
            ),
            builder=MessageBuilder(dialog.texts, dialog.project_landing, settings.afid),
            sender=self._sender,
            tracker=self._tracker,
            dialog_config=dialog,
        )
        await self._dialog_agent.start()

        # 5. Expiry sweep timer
        self._sweep_task = asyncio.create_task(self._sweep_timer())
        logger.info("All components initialized successfully")

    async def stop(self) -> None:
        """Shutdown in reverse order."""
        if self._sweep_task:
            self._sweep_task.cancel()
            try:
                await self._sweep_task
            except asyncio.CancelledError:
                pass
            self._sweep_task = None

        # Cancel events still in flight
        pending = list(self._pending_events)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.wait(pending)
        self._event_tasks.clear()

        if self._dialog_agent:
            await self._dialog_agent.stop()
        if self._people_search:
            await self._people_search.close()
        if self._sender:
            await self._sender.close()
        logger.info("Application stopped")

    async def reset(self) -> None:
        """Drop all dialogs and trace events."""
        if self._session_store is not None:
            self._session_store.clear()
        if self._tracker is not None:
            await self._tracker.clear()
        logger.info("Reset complete")

    def dispatch(self, events: Iterable[InboundEvent]) -> list[asyncio.Task]:
        """Schedule a webhook batch without waiting for it.

        Events are grouped by user. Each user's events run in arrival order in
        one task, chained after that user's previous task; different users run
        concurrently.
        """
        by_user: dict[str, list[InboundEvent]] = {}
        for event in events:
            by_user.setdefault(event.user_id, []).append(event)

        tasks = []
        for user_id, user_events in by_user.items():
            previous = self._event_tasks.get(user_id)
            task = asyncio.create_task(self._run_user_events(user_events, previous))
            self._event_tasks[user_id] = task
            self._pending_events.add(task)
            task.add_done_callback(self._pending_events.discard)
            task.add_done_callback(
                lambda t, user_id=user_id: self._forget_event_task(user_id, t)
            )
            tasks.append(task)
        return tasks

    async def wait_idle(self) -> None:
        """Wait until every dispatched event has been handled."""
        while self._pending_events:
            await asyncio.wait(list(self._pending_events))

    async def _run_user_events(
        self, events: list[InboundEvent], previous: asyncio.Task | None
    ) -> None:
        if previous is not None:
            await asyncio.wait([previous])

        for event in events:
            try:
                await self.dialog_agent.handle_event(event)
            except Exception as e:
                logger.error(
                    "Failed to handle %s event: %s",
                    event.kind.value,
                    e,
                    exc_info=True,
                    extra={"user_id": event.user_id},
                )

    def _forget_event_task(self, user_id: str, task: asyncio.Task) -> None:
        if self._event_tasks.get(user_id) is task:
            del self._event_tasks[user_id]

    def sweep_expired(self) -> int:
        """Run the rate-limited expiry sweep now."""
        removed = self.session_store.sweep_expired()
        if removed:
            logger.info("Expired %d dialogs, %d remain", removed, len(self.session_store))
        return removed

    async def _sweep_timer(self) -> None:
        """Background sweep so idle dialogs expire without webhook traffic."""
        interval = max(self._settings.dialog_lifetime, 1.0)
        while True:
            try:
                await asyncio.sleep(interval)
                self.sweep_expired()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error("Sweep timer error: %s", e, exc_info=True)

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def session_store(self) -> SessionStore:
        """Get session store instance."""
        if self._session_store is None:
            raise RuntimeError("Application not started")
        return self._session_store

    @property
    def tracker(self) -> ITracker:
        """Get tracker instance."""
        if self._tracker is None:
            raise RuntimeError("Application not started")
        return self._tracker

    @property
    def dialog_agent(self) -> DialogAgent:
        """Get dialog agent instance."""
        if self._dialog_agent is None:
            raise RuntimeError("Application not started")
        return self._dialog_agent
