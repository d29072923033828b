"""
Exception types raised by the Clerk Webhook Bridge.

Each exception maps to one HTTP outcome of the webhook endpoint; the mapping
lives in ``clerk_bridge.handlers.webhook``.
"""

from typing import Optional


class ClerkBridgeError(Exception):
    """Base class for all bridge errors."""


class ConfigurationError(ClerkBridgeError):
    """Required settings are missing or invalid. Not recoverable per request."""


class MalformedRequestError(ClerkBridgeError):
    """Request is missing Svix headers or carries an unusable payload."""


class AuthenticationError(ClerkBridgeError):
    """Webhook signature or timestamp did not validate."""


class UserStoreError(ClerkBridgeError):
    """The user store could not be read or written."""


class ClerkAPIError(ClerkBridgeError):
    """A call to the Clerk Backend API failed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
