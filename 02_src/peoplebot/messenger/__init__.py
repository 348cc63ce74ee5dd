"""Messenger platform glue."""

from .client import IMessageSender, SendAPIClient
from .parser import decode_postback, parse_messaging_event, parse_webhook
from .signature import verify_request_signature
from .templates import MessageBuilder, add_afid, answer_payload
from .thread_settings import ThreadSettingsConfigurator

__all__ = [
    "IMessageSender",
    "SendAPIClient",
    "decode_postback",
    "parse_messaging_event",
    "parse_webhook",
    "verify_request_signature",
    "MessageBuilder",
    "add_afid",
    "answer_payload",
    "ThreadSettingsConfigurator",
]
