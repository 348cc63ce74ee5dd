"""Webhook request signature verification."""

import hashlib
import hmac

from ..errors import SignatureError
from ..logging_config import get_logger

logger = get_logger(__name__)

_ALGORITHMS = {"sha1": hashlib.sha1, "sha256": hashlib.sha256}


def verify_request_signature(
    body: bytes,
    signature: str | None,
    app_secret: str,
    required: bool = False,
) -> None:
    """Check an X-Hub-Signature(-256) header ("sha1=<hex>") against the raw body.

    A missing header is only logged unless ``required`` is set.
    """
    if not signature:
        if required:
            raise SignatureError("Missing request signature")
        logger.error("Couldn't validate the signature: header is missing")
        return

    method, _, received = signature.partition("=")
    digest = _ALGORITHMS.get(method.lower())
    if digest is None or not received:
        raise SignatureError(f"Unsupported signature format {method!r}")

    expected = hmac.new(app_secret.encode("utf-8"), body, digest).hexdigest()
    if not hmac.compare_digest(expected, received):
        raise SignatureError("Couldn't validate the request signature")
