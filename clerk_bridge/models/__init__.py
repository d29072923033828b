"""
Clerk Bridge Models Package

Pydantic models for Clerk webhook events and user store records.
"""

from .clerk_event import (
    ClerkEmailAddress,
    ClerkUserData,
    ClerkDeletedObject,
    ClerkWebhookEvent,
    UserCreatedEvent,
    UserUpdatedEvent,
    UserDeletedEvent,
    UnhandledEvent,
    UserCreateRecord,
    UserUpdateRecord,
    WebhookResponse,
    parse_event,
    USER_CREATED,
    USER_UPDATED,
    USER_DELETED,
)

__all__ = [
    "ClerkEmailAddress",
    "ClerkUserData",
    "ClerkDeletedObject",
    "ClerkWebhookEvent",
    "UserCreatedEvent",
    "UserUpdatedEvent",
    "UserDeletedEvent",
    "UnhandledEvent",
    "UserCreateRecord",
    "UserUpdateRecord",
    "WebhookResponse",
    "parse_event",
    "USER_CREATED",
    "USER_UPDATED",
    "USER_DELETED",
]
