"""Tests for the HTTP API."""

import asyncio
import hashlib
import hmac
import json
import time

from conftest import messaging, signed_body


class TestWebhookVerification:
    """Tests for GET / subscription challenge."""

    def test_valid_token(self, client):
        response = client.get(
            "/",
            params={
                "hub.mode": "subscribe",
                "hub.verify_token": "verify-me",
                "hub.challenge": "1234",
            },
        )
        assert response.status_code == 200
        assert response.text == "1234"

    def test_wrong_token(self, client):
        response = client.get(
            "/",
            params={"hub.mode": "subscribe", "hub.verify_token": "nope", "hub.challenge": "1"},
        )
        assert response.status_code == 403

    def test_wrong_mode(self, client):
        response = client.get(
            "/",
            params={"hub.mode": "unsubscribe", "hub.verify_token": "verify-me"},
        )
        assert response.status_code == 403


class TestWebhookReceive:
    """Tests for POST / event batches."""

    def test_message_is_answered(self, post_events, sent):
        response = post_events(messaging(message={"text": "hi"}))

        assert response.status_code == 200
        assert len(sent()) == 1
        assert sent()[0]["recipient"] == {"id": "user1"}

    def test_bad_signature(self, post_events, sent):
        response = post_events(messaging(message={"text": "hi"}), secret="wrong")

        assert response.status_code == 403
        assert sent() == []

    def test_sha256_signature(self, client, settle, sent):
        body = json.dumps(
            {"object": "page", "entry": [{"messaging": [messaging(message={"text": "hi"})]}]}
        ).encode()
        digest = hmac.new(b"secret", body, hashlib.sha256).hexdigest()

        response = client.post(
            "/", content=body, headers={"X-Hub-Signature-256": f"sha256={digest}"}
        )
        settle()

        assert response.status_code == 200
        assert len(sent()) == 1

    def test_unsigned_request_accepted(self, client, settle, sent):
        """Test that a request without signature header is processed."""
        body = json.dumps(
            {"object": "page", "entry": [{"messaging": [messaging(message={"text": "hi"})]}]}
        )
        response = client.post("/", content=body)
        settle()

        assert response.status_code == 200
        assert len(sent()) == 1

    def test_invalid_json(self, client):
        body = b"{not json"
        signature = "sha1=" + hmac.new(b"secret", body, hashlib.sha1).hexdigest()
        response = client.post("/", content=body, headers={"X-Hub-Signature": signature})
        assert response.status_code == 400

    def test_not_a_page(self, client, sent):
        body, signature = signed_body({"object": "user", "entry": []})
        response = client.post("/", content=body, headers={"X-Hub-Signature": signature})

        assert response.status_code == 404
        assert sent() == []

    def test_handler_error_does_not_fail_batch(self, post_events, mock_sender, client):
        """Test that one failing event does not stop the rest of the batch."""
        mock_sender.send.side_effect = [Exception("boom"), True]

        response = post_events(
            messaging(user_id="a", message={"text": "hi"}),
            messaging(user_id="b", message={"text": "hi"}),
        )

        assert response.status_code == 200
        assert mock_sender.send.await_count == 2
        for user_id in ("a", "b"):
            assert client.get(f"/api/sessions/{user_id}").json()["greeting_sent"] is True

    def test_slow_search_does_not_hold_other_users(
        self, post_events, settle, mock_search, profiles, sent
    ):
        """Test that one user's slow search delays neither the response nor other users."""

        async def slow_search(criteria):
            await asyncio.sleep(1.5)
            return profiles

        mock_search.search.side_effect = slow_search
        post_events(
            messaging(user_id="a", message={"text": "hi"}),
            messaging(user_id="a", postback={"payload": '{"id": 0, "answer": 1}'}),
            messaging(
                user_id="a",
                message={"text": "18-25", "quick_reply": {"payload": '{"id": 1, "answer": 0}'}},
            ),
        )
        before = len(sent())

        started = time.monotonic()
        response = post_events(
            messaging(user_id="a", postback={"payload": '{"id": 2, "answer": 0}'}),
            messaging(user_id="b", message={"text": "hi"}),
            wait=False,
        )
        assert response.status_code == 200
        assert time.monotonic() - started < 0.5

        deadline = time.monotonic() + 0.5
        while time.monotonic() < deadline:
            if any(m["recipient"]["id"] == "b" for m in sent()[before:]):
                break
            time.sleep(0.01)
        recipients = [m["recipient"]["id"] for m in sent()[before:]]
        assert "b" in recipients
        assert len([r for r in recipients if r == "a"]) <= 1  # typing indicator only

        settle()
        assert sent()[-1]["recipient"] == {"id": "a"}
        assert "attachment" in sent()[-1]["message"]


class TestObservability:
    """Tests for the observability API."""

    def test_session_snapshot(self, client, post_events):
        post_events(messaging(message={"text": "hi"}))
        post_events(messaging(postback={"payload": '{"id": 0, "answer": 1}'}))

        response = client.get("/api/sessions/user1")

        assert response.status_code == 200
        data = response.json()
        assert data["user_id"] == "user1"
        assert data["answers"] == {"0": 1}
        assert data["next_question"] == 1
        assert data["profile_state"] == "empty"
        assert data["profile_cursor"] == 0
        assert data["greeting_sent"] is True

    def test_unknown_session(self, client):
        assert client.get("/api/sessions/nobody").status_code == 404

    def test_trace_events(self, client, post_events):
        post_events(messaging(message={"text": "hi"}))

        response = client.get("/api/trace-events", params={"event_type": "question_sent"})

        assert response.status_code == 200
        events = response.json()
        assert len(events) == 1
        assert events[0]["actor"] == "dialog_agent"
        assert events[0]["data"] == {"user_id": "user1", "question_index": 0}

    def test_trace_events_bad_after(self, client):
        response = client.get("/api/trace-events", params={"after": "yesterday"})
        assert response.status_code == 400


class TestControl:
    """Tests for the control API."""

    def test_reset(self, client, post_events):
        post_events(messaging(message={"text": "hi"}))

        response = client.post("/api/control/reset")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}
        assert client.get("/api/sessions/user1").status_code == 404
        assert client.get("/api/trace-events").json() == []

    def test_sweep_is_rate_limited(self, client, post_events):
        """Test that a sweep right after start removes nothing."""
        post_events(messaging(message={"text": "hi"}))

        response = client.post("/api/control/sweep")

        assert response.json() == {"removed": 0, "remaining": 1}


class TestWebhookMalformed:
    """Tests for batches with malformed parts."""

    def test_null_fields_do_not_drop_batch(self, post_events, sent):
        """Test that null fields skip one event and the rest still run."""
        response = post_events(
            {"sender": None, "message": {"text": "hi"}},
            messaging(user_id="b", message={"text": "hi"}),
        )

        assert response.status_code == 200
        assert [m["recipient"]["id"] for m in sent()] == ["b"]
