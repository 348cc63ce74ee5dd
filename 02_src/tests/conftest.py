"""Pytest configuration and fixtures."""

import hashlib
import hmac
import json
import sys
from datetime import timedelta
from pathlib import Path
from unittest.mock import AsyncMock, Mock

import pytest
import pytest_asyncio

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))


QUESTIONS = [
    {
        "type": "button",
        "question": "Who are you?",
        "answers": ["A man", "A woman"],
        "searchParams": [{"gender": "m"}, {"gender": "f"}],
        "persistent": True,
    },
    {
        "type": "quickReply",
        "question": "How old?",
        "answers": ["18-25", "26-35", "36+"],
        "searchParams": {"0": {"ageFrom": 18, "ageTo": 25}, "2": {"ageFrom": 36}},
    },
    {
        "type": "button",
        "question": "Where?",
        "answers": ["Anywhere", "My city"],
        "searchParams": {"1": {"gender": "any", "city": "local"}},
    },
]


@pytest.fixture
def settings():
    """Settings with credentials and a three-question catalog."""
    from peoplebot.config import Settings

    return Settings.model_validate(
        {
            "appSecret": "secret",
            "validationToken": "verify-me",
            "pageAccessToken": "page-token",
            "serverURL": "https://bot.example.com:8443/",
            "dialogLifetime": 600,
            "afid": "42",
            "searchURL": "http://search.test/search",
            "dialog": {
                "projectLanding": "https://example.com/landing",
                "firstQuestionDelay": 0,
                "questions": QUESTIONS,
                "texts": {
                    "greetingDialogMessage": "Hello!",
                    "noPeopleFound": "Nobody found",
                    "support": "Support text",
                },
            },
        }
    )


@pytest.fixture
def catalog(settings):
    """Question catalog built from the settings."""
    from peoplebot.dialog import QuestionCatalog

    return QuestionCatalog.from_config(settings.dialog.questions)


@pytest.fixture
def store(catalog):
    """Session store with a 600 second lifetime."""
    from peoplebot.dialog import SessionStore

    return SessionStore(catalog, lifetime=timedelta(seconds=600))


@pytest.fixture
def sequencer(catalog):
    from peoplebot.dialog import QuestionSequencer

    return QuestionSequencer(catalog)


@pytest.fixture
def criteria_builder(catalog):
    from peoplebot.dialog import CriteriaBuilder

    return CriteriaBuilder(catalog)


@pytest.fixture
def profiles():
    """Two found people."""
    from peoplebot.models import Profile

    return [
        Profile(
            title="Anna, 24",
            profile_url="https://example.com/p/1",
            image_url="https://example.com/i/1.jpg",
            details="Moscow",
        ),
        Profile(title="Maria, 25", profile_url="https://example.com/p/2"),
    ]


@pytest.fixture
def mock_search(profiles):
    """People-search collaborator returning the two profiles."""
    search = Mock()
    search.search = AsyncMock(return_value=profiles)
    search.close = AsyncMock()
    return search


@pytest.fixture
def mock_sender():
    """Send API collaborator that always succeeds."""
    sender = Mock()
    sender.send = AsyncMock(return_value=True)
    sender.close = AsyncMock()
    return sender


@pytest.fixture
def tracker():
    from peoplebot.tracker import Tracker

    return Tracker()


@pytest.fixture
def paginator(mock_search, criteria_builder):
    from peoplebot.dialog import ProfilePaginator

    return ProfilePaginator(mock_search, criteria_builder, search_timeout=1.0)


@pytest.fixture
def builder(settings):
    from peoplebot.messenger import MessageBuilder

    return MessageBuilder(
        settings.dialog.texts, settings.dialog.project_landing, settings.afid
    )


@pytest_asyncio.fixture
async def dialog_agent(
    store, sequencer, paginator, builder, mock_sender, tracker, settings
):
    """Started DialogAgent wired to the mocks."""
    from peoplebot.dialog import DialogAgent

    agent = DialogAgent(
        store=store,
        sequencer=sequencer,
        paginator=paginator,
        builder=builder,
        sender=mock_sender,
        tracker=tracker,
        dialog_config=settings.dialog,
    )
    await agent.start()
    yield agent
    await agent.stop()


@pytest.fixture
def sent(mock_sender):
    """Callable returning the bodies passed to sender.send, in order."""

    def _sent() -> list[dict]:
        return [c.args[0] for c in mock_sender.send.await_args_list]

    return _sent


def messaging(user_id="user1", **body):
    """One entry of a webhook "messaging" list."""
    return {
        "sender": {"id": user_id},
        "recipient": {"id": "page"},
        "timestamp": 1500000000000,
        **body,
    }


def signed_body(data: dict, secret: str = "secret") -> tuple[bytes, str]:
    """Raw JSON body and its X-Hub-Signature header value."""
    body = json.dumps(data).encode("utf-8")
    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha1).hexdigest()
    return body, f"sha1={digest}"


@pytest.fixture
def client(settings, mock_sender, mock_search):
    """TestClient over a started Application with mocked collaborators."""
    from fastapi.testclient import TestClient

    from peoplebot.api import create_fastapi_app
    from peoplebot.app import Application

    application = Application(settings, sender=mock_sender, people_search=mock_search)
    with TestClient(create_fastapi_app(application)) as test_client:
        yield test_client


@pytest.fixture
def settle(client):
    """Callable blocking until the app has handled every dispatched event."""
    application = client.app.state.application

    def _settle():
        client.portal.call(application.wait_idle)

    return _settle


@pytest.fixture
def post_events(client, settle):
    """Callable posting signed "page" webhook batches; waits for them by default."""

    def _post(*events, secret="secret", wait=True):
        data = {"object": "page", "entry": [{"id": "page", "time": 1, "messaging": list(events)}]}
        body, signature = signed_body(data, secret)
        response = client.post(
            "/",
            content=body,
            headers={"X-Hub-Signature": signature, "Content-Type": "application/json"},
        )
        if wait:
            settle()
        return response

    return _post
