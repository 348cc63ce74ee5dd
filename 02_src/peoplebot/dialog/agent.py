"""DialogAgent implementation."""

import asyncio
from datetime import datetime, timezone
from typing import Protocol

from ..config import DialogConfig
from ..errors import InvalidAnswer
from ..logging_config import get_logger
from ..messenger import IMessageSender, MessageBuilder
from ..models import AnswerSubmission, EventKind, InboundEvent, Sentinel, SentinelName
from ..tracker import ITracker
from .paginator import Delivered, Exhausted, NoResults, ProfilePaginator
from .sequencer import QuestionSequencer
from .store import SessionStore

logger = get_logger(__name__)

CRLF = "\r\n"


class IDialogAgent(Protocol):
    """Turns inbound Messenger events into dialog steps."""

    async def handle_event(self, event: InboundEvent, now: datetime | None = None) -> None:
        """Apply one event to its user's session and send the replies."""
        ...

    async def start(self) -> None:
        """Start accepting events."""
        ...

    async def stop(self) -> None:
        """Stop accepting events."""
        ...


class DialogAgent:
    """Runs the question dialog and profile paging for every user."""

    def __init__(
        self,
        store: SessionStore,
        sequencer: QuestionSequencer,
        paginator: ProfilePaginator,
        builder: MessageBuilder,
        sender: IMessageSender,
        tracker: ITracker,
        dialog_config: DialogConfig,
    ):
        self._store = store
        self._sequencer = sequencer
        self._paginator = paginator
        self._builder = builder
        self._sender = sender
        self._tracker = tracker
        self._config = dialog_config
        self._running = False

    @property
    def sequencer(self) -> QuestionSequencer:
        return self._sequencer

    async def start(self) -> None:
        logger.info("Starting DialogAgent")
        self._running = True

    async def stop(self) -> None:
        logger.info("Stopping DialogAgent")
        self._running = False

    async def handle_event(self, event: InboundEvent, now: datetime | None = None) -> None:
        """Apply one event under the user's lock."""
        if not self._running:
            raise RuntimeError("DialogAgent not started")

        user_id = event.user_id
        async with self._store.lock_for(user_id):
            session = self._store.resolve(user_id)
            session.touch(now or datetime.now(timezone.utc))

            await self._tracker.track(
                event_type="event_received",
                actor="dialog_agent",
                data={"user_id": user_id, "kind": event.kind.value},
            )

            if event.kind in (EventKind.POSTBACK, EventKind.QUICK_REPLY):
                await self._handle_postback(event)
            elif event.kind is EventKind.MESSAGE:
                await self._handle_text(user_id)
            elif event.kind is EventKind.OPTIN:
                await self._handle_optin(event)
            else:
                self._log_receipt(event)

    async def _handle_optin(self, event: InboundEvent) -> None:
        ref = (event.raw.get("optin") or {}).get("ref")
        logger.info(
            "Received authentication with pass through param %r",
            ref,
            extra={"user_id": event.user_id},
        )
        text = self._config.texts.authentication_successful
        await self._send(self._builder.text(event.user_id, text))

    @staticmethod
    def _log_receipt(event: InboundEvent) -> None:
        """Delivery, read and account link events are only logged."""
        extra = {"user_id": event.user_id}
        if event.kind is EventKind.DELIVERY:
            delivery = event.raw.get("delivery") or {}
            for mid in delivery.get("mids") or []:
                logger.debug(
                    "Received delivery confirmation for message ID: %s", mid, extra=extra
                )
            logger.debug(
                "All message before %s were delivered", delivery.get("watermark"), extra=extra
            )
        elif event.kind is EventKind.READ:
            read = event.raw.get("read") or {}
            logger.debug(
                "Received message read event for watermark %s and sequence number %s",
                read.get("watermark"),
                read.get("seq"),
                extra=extra,
            )
        elif event.kind is EventKind.ACCOUNT_LINK:
            link = event.raw.get("account_linking") or {}
            logger.info(
                "Received account link event with status %s", link.get("status"), extra=extra
            )

    async def _handle_postback(self, event: InboundEvent) -> None:
        user_id = event.user_id
        postback = event.postback

        if isinstance(postback, AnswerSubmission):
            session = self._store.resolve(user_id)
            try:
                self._sequencer.record_answer(
                    session, postback.question_index, postback.answer_code
                )
            except InvalidAnswer as e:
                logger.warning("Rejected answer: %s", e, extra={"user_id": user_id})
            else:
                await self._tracker.track(
                    event_type="answer_recorded",
                    actor="dialog_agent",
                    data={
                        "user_id": user_id,
                        "question_index": postback.question_index,
                        "answer_code": postback.answer_code,
                    },
                )
            await self._send_question(user_id)
            return

        if not isinstance(postback, Sentinel):
            logger.warning("Postback without payload", extra={"user_id": user_id})
            return

        if postback.name is SentinelName.NEED_HELP:
            await self._send(self._builder.text(user_id, self._config.texts.support))

        elif postback.name is SentinelName.NEW_THREAD:
            greeted = self._store.resolve(user_id).greeting_sent
            self._store.renew(user_id)
            await self._delay_first_question(greeted)
            await self._send_question(user_id)

        elif postback.name is SentinelName.RESTART:
            self._store.restart(user_id)
            await self._tracker.track(
                event_type="dialog_restarted",
                actor="dialog_agent",
                data={"user_id": user_id},
            )
            await self._send_question(user_id)

        elif postback.name is SentinelName.NEXT:
            await self._send_profile(user_id)

    async def _handle_text(self, user_id: str) -> None:
        """Free text: begin, start over, or show the menu."""
        session = self._store.resolve(user_id)

        if not session.answers:
            await self._delay_first_question(session.greeting_sent)
            await self._send_question(user_id)
        elif self._sequencer.next_unanswered(session) is None:
            self._store.restart(user_id)
            await self._tracker.track(
                event_type="dialog_restarted",
                actor="dialog_agent",
                data={"user_id": user_id, "reason": "free_text"},
            )
            await self._send_question(user_id)
        else:
            await self._send(self._builder.default_menu(user_id))

    async def _send_question(self, user_id: str) -> None:
        """Ask the next unanswered question, or move on to profiles."""
        session = self._store.resolve(user_id)
        index = self._sequencer.next_unanswered(session)
        if index is None:
            await self._send_profile(user_id)
            return

        question = self._sequencer.catalog[index]
        text = question.prompt
        if not session.greeting_sent:
            greeting = self._greeting_text()
            if index == 0 and greeting:
                text = greeting + CRLF + CRLF + text
            session.greeting_sent = True

        await self._send(self._builder.question(user_id, question, text))
        await self._tracker.track(
            event_type="question_sent",
            actor="dialog_agent",
            data={"user_id": user_id, "question_index": index},
        )

    async def _send_profile(self, user_id: str) -> None:
        """Deliver the next found profile, searching first if needed."""
        session = self._store.resolve(user_id)

        async def typing_on() -> None:
            await self._send(self._builder.typing_on(user_id))

        outcome = await self._paginator.advance(session, on_search=typing_on)

        if isinstance(outcome, Delivered):
            card = self._builder.profile_card(user_id, outcome.profile, outcome.is_last)
            await self._send(card)
            await self._tracker.track(
                event_type="profile_delivered",
                actor="dialog_agent",
                data={
                    "user_id": user_id,
                    "cursor": session.current_profile_cursor,
                    "total": len(session.found_profiles),
                    "is_last": outcome.is_last,
                },
            )
        elif isinstance(outcome, NoResults):
            await self._send(self._builder.no_profiles_menu(user_id))
            await self._tracker.track(
                event_type="no_results",
                actor="dialog_agent",
                data={"user_id": user_id, "reason": outcome.reason},
            )
        elif isinstance(outcome, Exhausted):
            await self._send(self._builder.exhausted_menu(user_id))

    async def _send(self, message: dict) -> bool:
        return await self._sender.send(message)

    async def _delay_first_question(self, greeted: bool) -> None:
        # Lets the platform's own greeting reach the user first.
        if not greeted and self._config.first_question_delay > 0:
            await asyncio.sleep(self._config.first_question_delay)

    def _greeting_text(self) -> str | None:
        if not self._config.greeting_enabled:
            return None
        return self._config.texts.greeting_dialog_message
