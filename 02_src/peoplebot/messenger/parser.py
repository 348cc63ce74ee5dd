"""Decoding of Messenger webhook bodies into InboundEvents."""

import json
from typing import Any, Iterator

from ..errors import InvalidPayload, UnknownEventKind
from ..logging_config import get_logger
from ..models import (
    AnswerSubmission,
    EventKind,
    InboundEvent,
    Postback,
    Sentinel,
    SentinelName,
)

logger = get_logger(__name__)

# Checked in this order; a messaging event carries exactly one of them.
_KIND_KEYS = (
    ("optin", EventKind.OPTIN),
    ("delivery", EventKind.DELIVERY),
    ("read", EventKind.READ),
    ("account_linking", EventKind.ACCOUNT_LINK),
    ("postback", EventKind.POSTBACK),
    ("message", EventKind.MESSAGE),
)


def decode_postback(payload: str | None) -> Postback:
    """Decode a button or quick reply payload."""
    if not payload:
        raise InvalidPayload("Empty payload")

    try:
        return Sentinel(SentinelName(payload))
    except ValueError:
        pass

    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        raise InvalidPayload(f"Payload is not JSON: {payload!r}") from e

    if not isinstance(data, dict):
        raise InvalidPayload(f"Payload is not an object: {payload!r}")

    try:
        return AnswerSubmission(
            question_index=_as_int(data["id"]),
            answer_code=_as_int(data["answer"]),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise InvalidPayload(f"Malformed answer payload: {payload!r}") from e


def _as_int(value: Any) -> int:
    if isinstance(value, bool):
        raise TypeError("bool is not an index")
    return int(value)


def parse_messaging_event(messaging: dict[str, Any]) -> InboundEvent:
    """Decode one entry of "messaging"."""
    sender_id = (messaging.get("sender") or {}).get("id")
    user_id = str(sender_id) if sender_id else ""
    if not user_id:
        raise InvalidPayload("Messaging event without sender id")

    timestamp = messaging.get("timestamp")

    for key, kind in _KIND_KEYS:
        if key not in messaging:
            continue
        body = messaging[key] or {}

        if kind is EventKind.POSTBACK:
            return InboundEvent(
                user_id=user_id,
                kind=kind,
                timestamp=timestamp,
                postback=decode_postback(body.get("payload")),
                raw=messaging,
            )

        if kind is EventKind.MESSAGE:
            quick_reply = body.get("quick_reply")
            if quick_reply:
                return InboundEvent(
                    user_id=user_id,
                    kind=EventKind.QUICK_REPLY,
                    timestamp=timestamp,
                    text=body.get("text"),
                    postback=decode_postback(quick_reply.get("payload")),
                    raw=messaging,
                )
            return InboundEvent(
                user_id=user_id,
                kind=kind,
                timestamp=timestamp,
                text=body.get("text"),
                raw=messaging,
            )

        return InboundEvent(user_id=user_id, kind=kind, timestamp=timestamp, raw=messaging)

    raise UnknownEventKind(f"Unknown messaging event with keys {sorted(messaging)}")


def parse_webhook(data: dict[str, Any]) -> Iterator[InboundEvent]:
    """Yield events of a "page" webhook body in delivery order.

    Undecodable events are logged and skipped. Echoes of the page's own
    messages are skipped too.
    """
    for entry in data.get("entry") or []:
        for messaging in (entry or {}).get("messaging") or []:
            if not isinstance(messaging, dict):
                logger.warning("Webhook received malformed messaging entry: %r", messaging)
                continue
            message = messaging.get("message") or {}
            if message.get("is_echo"):
                logger.debug("Skipping echo message %s", message.get("mid"))
                continue
            try:
                yield parse_messaging_event(messaging)
            except UnknownEventKind as e:
                logger.warning("Webhook received unknown messaging event: %s", e)
            except InvalidPayload as e:
                logger.warning("Webhook received undecodable event: %s", e)
