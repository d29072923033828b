"""
Svix signature verification for Clerk webhooks.

Clerk delivers webhooks through Svix. Every delivery carries three headers
(svix-id, svix-timestamp, svix-signature); the signature is an HMAC-SHA256 of
"{id}.{timestamp}.{body}" keyed with the endpoint's signing secret. The svix
library checks the signature and rejects timestamps outside its tolerance
window (five minutes).
"""

import base64
import binascii
import json
import logging
from typing import Any, Dict, Mapping

from svix.webhooks import Webhook, WebhookVerificationError

from ..errors import AuthenticationError, ConfigurationError, MalformedRequestError

logger = logging.getLogger(__name__)

SVIX_ID_HEADER = "svix-id"
SVIX_TIMESTAMP_HEADER = "svix-timestamp"
SVIX_SIGNATURE_HEADER = "svix-signature"

REQUIRED_HEADERS = (SVIX_ID_HEADER, SVIX_TIMESTAMP_HEADER, SVIX_SIGNATURE_HEADER)

SECRET_PREFIX = "whsec_"


def extract_svix_headers(headers: Mapping[str, str]) -> Dict[str, str]:
    """
    Pick the Svix headers out of the request headers.

    Args:
        headers: Request headers; lookups must be case-insensitive
            (Starlette's Headers) or keys must already be lowercase

    Returns:
        dict: The three Svix headers keyed by lowercase name

    Raises:
        MalformedRequestError: If any of the three headers is missing or empty
    """
    svix_headers = {name: headers.get(name) for name in REQUIRED_HEADERS}
    missing = [name for name, value in svix_headers.items() if not value]
    if missing:
        raise MalformedRequestError(f"Missing Svix headers: {', '.join(missing)}")
    return svix_headers


def validate_signing_secret(secret: str) -> bytes:
    """
    Decode a Svix signing secret strictly.

    svix decodes secrets leniently, so a mistyped secret would otherwise start
    the service and reject every delivery.

    Args:
        secret: Signing secret, with or without the "whsec_" prefix

    Returns:
        bytes: The decoded HMAC key

    Raises:
        ConfigurationError: If the secret is empty or not valid base64
    """
    raw = secret[len(SECRET_PREFIX):] if secret.startswith(SECRET_PREFIX) else secret
    if not raw:
        raise ConfigurationError("Webhook signing secret is required")
    try:
        return base64.b64decode(raw, validate=True)
    except binascii.Error as e:
        raise ConfigurationError(f"Webhook signing secret is not valid base64: {e}") from e


class WebhookVerifier:
    """
    Verifies Svix-signed webhook deliveries with a shared signing secret.

    Example:
        verifier = WebhookVerifier("whsec_MfKQ9r8GKYqrTwjUPD8ILPZIo2LaLaSw")
        payload = verifier.verify(body, request.headers)
    """

    def __init__(self, secret: str):
        """
        Args:
            secret: Signing secret, with or without the "whsec_" prefix

        Raises:
            ConfigurationError: If the secret is empty or not valid base64
        """
        validate_signing_secret(secret)
        self._webhook = Webhook(secret)

    def verify(self, body: bytes, headers: Mapping[str, str]) -> Any:
        """
        Verify a delivery and return its decoded payload.

        The body is decoded only after the signature check passes; the returned
        payload is the only copy of the body downstream code may trust.

        Args:
            body: Raw request body, exactly as received
            headers: Request headers

        Returns:
            The JSON-decoded body

        Raises:
            MalformedRequestError: If a Svix header is missing or the verified
                body is not JSON
            AuthenticationError: If the signature or timestamp is invalid
        """
        svix_headers = extract_svix_headers(headers)

        try:
            self._webhook.verify(body, svix_headers)
        except WebhookVerificationError as e:
            raise AuthenticationError(str(e)) from e
        except ValueError as e:
            # Malformed signature list or non UTF-8 body
            raise AuthenticationError(f"Unverifiable webhook: {e}") from e

        # svix 2.x verifies without returning the payload; decode the verified bytes
        try:
            return json.loads(body)
        except ValueError as e:
            raise MalformedRequestError(f"Verified webhook body is not JSON: {e}") from e
