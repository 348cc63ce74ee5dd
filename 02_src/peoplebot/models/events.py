"""Inbound webhook event models."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union


class EventKind(str, Enum):
    """Messaging event kinds the webhook handles."""

    MESSAGE = "message"
    POSTBACK = "postback"
    QUICK_REPLY = "quickReply"
    OPTIN = "optin"
    DELIVERY = "delivery"
    READ = "read"
    ACCOUNT_LINK = "accountLink"


class SentinelName(str, Enum):
    """Fixed postback payloads."""

    NEED_HELP = "need-help"
    NEW_THREAD = "NEW_THREAD"
    RESTART = "restart"
    NEXT = "next"


@dataclass(frozen=True)
class Sentinel:
    """Postback carrying one of the fixed payloads."""

    name: SentinelName


@dataclass(frozen=True)
class AnswerSubmission:
    """Postback or quick reply answering a catalog question."""

    question_index: int
    answer_code: int


Postback = Union[Sentinel, AnswerSubmission]


@dataclass
class InboundEvent:
    """A single decoded messaging event."""

    user_id: str
    kind: EventKind
    timestamp: int | None = None  # platform milliseconds
    text: str | None = None
    postback: Postback | None = None
    raw: dict[str, Any] = field(default_factory=dict)
