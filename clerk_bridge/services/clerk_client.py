"""
Clerk Backend API Client

Minimal client for the Clerk Backend API calls the bridge needs: writing the
local user ID back onto the Clerk user as metadata.
"""

import logging
from typing import Any, Dict, Optional

import requests

from ..errors import ClerkAPIError

logger = logging.getLogger(__name__)


class ClerkClient:
    """
    Clerk Backend API client.

    Authenticates with a Clerk secret key (sk_live_... / sk_test_...).
    """

    def __init__(
        self,
        secret_key: str,
        api_url: str = "https://api.clerk.com/v1",
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize ClerkClient.

        Args:
            secret_key: Clerk Backend API secret key
            api_url: Base URL of the Clerk Backend API
            timeout: Request timeout in seconds
            session: Optional requests session (used by tests)
        """
        if not secret_key:
            raise ValueError("Clerk secret key is required")

        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {secret_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        })

    def update_user_metadata(
        self,
        user_id: str,
        public_metadata: Optional[Dict[str, Any]] = None,
        private_metadata: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Merge metadata into a Clerk user.

        Clerk deep-merges the given objects into the user's existing metadata.

        Args:
            user_id: Clerk user ID
            public_metadata: Metadata readable from the frontend
            private_metadata: Metadata only readable from the backend

        Returns:
            The updated Clerk user object

        Raises:
            ClerkAPIError: If the request fails or Clerk answers with an error
        """
        payload: Dict[str, Any] = {}
        if public_metadata is not None:
            payload["public_metadata"] = public_metadata
        if private_metadata is not None:
            payload["private_metadata"] = private_metadata

        url = f"{self.api_url}/users/{user_id}/metadata"

        try:
            response = self.session.patch(url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            raise ClerkAPIError(f"Clerk metadata update for {user_id} failed: {e}") from e

        if not response.ok:
            raise ClerkAPIError(
                f"Clerk metadata update for {user_id} returned "
                f"{response.status_code}: {_error_message(response)}",
                status_code=response.status_code,
            )

        try:
            result = response.json()
        except ValueError as e:
            raise ClerkAPIError(
                f"Clerk metadata update for {user_id} returned a non-JSON body",
                status_code=response.status_code,
            ) from e

        logger.info(f"Updated Clerk metadata for user {user_id}")
        return result


def _error_message(response: requests.Response) -> str:
    """Extract a readable message from a Clerk API error response.

    Clerk returns {"errors": [{"message": "...", "long_message": "...", "code": "..."}]}.
    Returns the first long_message (or message) when parseable, raw text otherwise.
    """
    try:
        body = response.json()
    except ValueError:
        return response.text
    errors = body.get("errors") if isinstance(body, dict) else None
    if isinstance(errors, list) and errors and isinstance(errors[0], dict):
        first = errors[0]
        return first.get("long_message") or first.get("message") or response.text
    return response.text
