"""
Clerk Webhook Event Models

Pydantic models for the Clerk user lifecycle events delivered through Svix,
and for the user records handed to the user store.

Only payloads returned by the signature verifier are parsed into these models.
"""

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from ..errors import MalformedRequestError


USER_CREATED = "user.created"
USER_UPDATED = "user.updated"
USER_DELETED = "user.deleted"


class ClerkEmailAddress(BaseModel):
    """Clerk email address object"""
    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    email_address: str


class ClerkUserData(BaseModel):
    """
    Clerk User object as sent in user.created and user.updated events.

    Clerk sends many more attributes (phone numbers, metadata, MFA flags...);
    only the ones mirrored locally are modelled, the rest are ignored.
    """
    model_config = ConfigDict(extra="ignore")

    id: str  # Clerk user ID (user_...)
    email_addresses: List[ClerkEmailAddress] = Field(default_factory=list)
    primary_email_address_id: Optional[str] = None
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    image_url: Optional[str] = None


class ClerkDeletedObject(BaseModel):
    """Clerk deleted object as sent in user.deleted events"""
    model_config = ConfigDict(extra="ignore")

    id: str
    object: str = "user"
    deleted: bool = True


class UserCreateRecord(BaseModel):
    """Fields the user store accepts when creating a user."""
    clerkId: str
    email: str
    username: Optional[str] = None
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    photo: Optional[str] = None


class UserUpdateRecord(BaseModel):
    """
    Fields the user store accepts when updating a user.

    Email is deliberately absent: it is only set on creation.
    """
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    username: Optional[str] = None
    photo: Optional[str] = None


class UserCreatedEvent(BaseModel):
    """user.created webhook event"""
    model_config = ConfigDict(extra="ignore")

    type: Literal["user.created"]
    object: str = "event"
    data: ClerkUserData

    @model_validator(mode="after")
    def require_email(self):
        if not self.data.email_addresses:
            raise ValueError("user.created payload has no email addresses")
        return self

    def to_record(self) -> UserCreateRecord:
        """Project the event payload, taking the first email address as primary."""
        user = self.data
        return UserCreateRecord(
            clerkId=user.id,
            email=user.email_addresses[0].email_address,
            username=user.username,
            firstName=user.first_name,
            lastName=user.last_name,
            photo=user.image_url,
        )


class UserUpdatedEvent(BaseModel):
    """user.updated webhook event"""
    model_config = ConfigDict(extra="ignore")

    type: Literal["user.updated"]
    object: str = "event"
    data: ClerkUserData

    def to_record(self) -> UserUpdateRecord:
        user = self.data
        return UserUpdateRecord(
            firstName=user.first_name,
            lastName=user.last_name,
            username=user.username,
            photo=user.image_url,
        )


class UserDeletedEvent(BaseModel):
    """user.deleted webhook event"""
    model_config = ConfigDict(extra="ignore")

    type: Literal["user.deleted"]
    object: str = "event"
    data: ClerkDeletedObject


class UnhandledEvent(BaseModel):
    """Any other Clerk event (session.created, organization.updated, ...)"""
    model_config = ConfigDict(extra="ignore")

    type: str
    object: str = "event"
    data: Any = None


ClerkWebhookEvent = Union[UserCreatedEvent, UserUpdatedEvent, UserDeletedEvent, UnhandledEvent]

EVENT_MODELS = {
    USER_CREATED: UserCreatedEvent,
    USER_UPDATED: UserUpdatedEvent,
    USER_DELETED: UserDeletedEvent,
}


class WebhookResponse(BaseModel):
    """JSON body returned for handled user events."""
    message: str = "OK"
    user: Optional[Dict[str, Any]] = None


def parse_event(payload: Any) -> ClerkWebhookEvent:
    """
    Build a typed event from a verified webhook payload.

    Args:
        payload: Decoded JSON returned by the signature verifier

    Returns:
        The event model matching ``payload["type"]``, or UnhandledEvent

    Raises:
        MalformedRequestError: If the payload is not an event object or lacks
            fields required for its event type
    """
    if not isinstance(payload, dict):
        raise MalformedRequestError("Webhook payload is not a JSON object")

    event_type = payload.get("type")
    if not isinstance(event_type, str) or not event_type:
        raise MalformedRequestError("Webhook payload has no event type")

    model = EVENT_MODELS.get(event_type, UnhandledEvent)
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise MalformedRequestError(f"Invalid {event_type} payload: {e.error_count()} error(s)") from e
