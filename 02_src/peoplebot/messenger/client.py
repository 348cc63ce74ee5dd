"""Messenger Send API client."""

from typing import Any, Protocol

import httpx

from ..errors import DeliveryFailed
from ..logging_config import get_logger

logger = get_logger(__name__)


class IMessageSender(Protocol):
    """Outbound delivery of Send API messages."""

    async def send(self, message: dict) -> bool:
        """Deliver a message; False when delivery failed (already logged)."""
        ...

    async def close(self) -> None:
        """Release network resources."""
        ...


class SendAPIClient:
    """Posts to the Graph API on behalf of the page."""

    def __init__(
        self,
        graph_url: str,
        page_access_token: str | None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if not graph_url.endswith("/"):
            graph_url += "/"
        self._graph_url = graph_url
        self._token = page_access_token
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def send(self, message: dict) -> bool:
        """Call the Send API. Failures are logged, never retried."""
        recipient_id = message.get("recipient", {}).get("id")
        try:
            body = await self.graph_request("messages", message)
        except DeliveryFailed as e:
            logger.error(
                "Failed calling Send API: %s",
                e,
                extra={"user_id": recipient_id, "context": {"status": e.status_code}},
            )
            return False

        message_id = body.get("message_id")
        if message_id:
            logger.info(
                "Successfully sent message with id %s to recipient %s",
                message_id,
                body.get("recipient_id", recipient_id),
            )
        else:
            logger.debug(
                "Successfully called Send API for recipient %s",
                body.get("recipient_id", recipient_id),
            )
        return True

    async def graph_request(
        self,
        path: str,
        data: dict | None = None,
        method: str = "POST",
    ) -> dict[str, Any]:
        """Page-scoped Graph API call; raises DeliveryFailed on any error."""
        if not self._token:
            raise DeliveryFailed("Page access token is not configured")

        try:
            response = await self._client.request(
                method,
                self._graph_url + path,
                params={"access_token": self._token},
                json=data or {},
            )
        except httpx.HTTPError as e:
            raise DeliveryFailed(f"{method} {path}: {e}") from e

        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.status_code != 200:
            error = body.get("error") if isinstance(body, dict) else None
            raise DeliveryFailed(
                f"{method} {path}: {response.status_code} {response.reason_phrase} {error}",
                status_code=response.status_code,
            )

        return body if isinstance(body, dict) else {}

    async def close(self) -> None:
        await self._client.aclose()
