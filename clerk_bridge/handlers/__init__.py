"""
Webhook verification and request handlers for the Clerk Webhook Bridge.
"""

from .verification import WebhookVerifier, extract_svix_headers
from .webhook import ClerkWebhookHandler

__all__ = ["ClerkWebhookHandler", "WebhookVerifier", "extract_svix_headers"]
