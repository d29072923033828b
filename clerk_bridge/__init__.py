"""
Clerk Webhook Bridge

Receives Clerk user lifecycle webhooks, verifies their Svix signature and
mirrors the users into the local user store.
"""

__version__ = "1.0.0"
