"""Messenger webhook routes."""

import json

from fastapi import APIRouter, HTTPException, Query, Request, Response
from fastapi.responses import PlainTextResponse

from ...app import Application
from ...errors import SignatureError
from ...logging_config import get_logger
from ...messenger import parse_webhook, verify_request_signature

logger = get_logger(__name__)


def create_webhook_router(app: Application) -> APIRouter:
    """Create webhook router."""
    router = APIRouter(tags=["webhook"])

    @router.get("/")
    async def verify_webhook(
        hub_mode: str | None = Query(None, alias="hub.mode"),
        hub_verify_token: str | None = Query(None, alias="hub.verify_token"),
        hub_challenge: str | None = Query(None, alias="hub.challenge"),
    ) -> PlainTextResponse:
        """Answer the platform's subscription challenge."""
        token = app.settings.validation_token
        if hub_mode == "subscribe" and token and hub_verify_token == token:
            logger.info("Validating webhook")
            return PlainTextResponse(hub_challenge or "")

        logger.error("Failed validation. Make sure the validation tokens match.")
        raise HTTPException(status_code=403, detail="Validation failed")

    @router.post("/")
    async def receive_webhook(request: Request) -> Response:
        """Handle a batch of page messaging events."""
        body = await request.body()
        signature = request.headers.get("x-hub-signature-256") or request.headers.get(
            "x-hub-signature"
        )
        try:
            verify_request_signature(
                body,
                signature,
                app.settings.app_secret or "",
                required=app.settings.require_signature,
            )
        except SignatureError as e:
            logger.error("Rejected webhook request: %s", e)
            raise HTTPException(status_code=403, detail=str(e))

        try:
            data = json.loads(body)
        except ValueError:
            raise HTTPException(status_code=400, detail="Body is not JSON")

        if not isinstance(data, dict) or data.get("object") != "page":
            raise HTTPException(status_code=404, detail="Not a page subscription")

        # Events run in background tasks; the platform gets 200 right away.
        app.dispatch(parse_webhook(data))
        app.sweep_expired()
        return Response(status_code=200)

    return router
