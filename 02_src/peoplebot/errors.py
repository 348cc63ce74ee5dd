"""Exceptions raised by the dialog core and its collaborators."""


class BotError(Exception):
    """Base class for all bot errors."""


class InvalidAnswer(BotError, ValueError):
    """Answer refers to an unknown question or an answer code out of range."""

    def __init__(self, question_index: int, answer_code: int):
        super().__init__(
            f"Invalid answer {answer_code!r} for question {question_index!r}"
        )
        self.question_index = question_index
        self.answer_code = answer_code


class InvalidPayload(BotError, ValueError):
    """Postback or quick reply payload that cannot be decoded."""


class UnknownEventKind(BotError):
    """Messaging event of a kind the webhook does not handle."""


class SignatureError(BotError):
    """Webhook request signature does not match the app secret."""


class SearchFailed(BotError):
    """People-search request failed or timed out."""


class SearchEmpty(BotError):
    """People-search returned no profiles."""


class DeliveryFailed(BotError):
    """Send API rejected or did not receive an outbound message."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
