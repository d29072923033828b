"""
Clerk webhook ingress handler.

Turns one verified Clerk delivery into at most one user store call (plus the
metadata back-reference for new users) and builds the HTTP response.
"""

import logging
from typing import Any, Dict, Mapping, Optional

from fastapi import status
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from ..errors import AuthenticationError, ClerkAPIError, MalformedRequestError, UserStoreError
from ..models import (
    ClerkWebhookEvent,
    UserCreatedEvent,
    UserDeletedEvent,
    UserUpdatedEvent,
    WebhookResponse,
    parse_event,
)
from .verification import SVIX_ID_HEADER, WebhookVerifier, extract_svix_headers

logger = logging.getLogger(__name__)


class ClerkWebhookHandler:
    """
    Handles Clerk user lifecycle webhooks.

    Collaborators are injected so tests can substitute any of them:

    - verifier: WebhookVerifier holding the signing secret
    - user_store: object with create_user(record), update_user(clerk_id, record)
      and delete_user(clerk_id), each returning the stored user dict or None
    - clerk_client: ClerkClient used to write the internal user ID back onto the
      Clerk user; None disables the back-reference
    """

    def __init__(self, verifier: WebhookVerifier, user_store, clerk_client=None):
        self.verifier = verifier
        self.user_store = user_store
        self.clerk_client = clerk_client

    def handle(self, body: bytes, headers: Mapping[str, str]) -> Response:
        """
        Verify and dispatch one webhook delivery.

        Args:
            body: Raw request body
            headers: Request headers

        Returns:
            Response: 400 for missing headers, bad signatures or unusable
            payloads; 200 with {"message", "user"} for user events; 200 with an
            empty body for any other event type; 500 if the user store fails
        """
        try:
            extract_svix_headers(headers)
        except MalformedRequestError as e:
            logger.warning(f"Rejected webhook: {e}")
            return PlainTextResponse(
                "Error occured -- no svix headers",
                status_code=status.HTTP_400_BAD_REQUEST,
            )

        try:
            event = parse_event(self.verifier.verify(body, headers))
        except AuthenticationError as e:
            logger.warning(f"Error verifying webhook {headers.get(SVIX_ID_HEADER)}: {e}")
            return PlainTextResponse("Error occured", status_code=status.HTTP_400_BAD_REQUEST)
        except MalformedRequestError as e:
            logger.warning(f"Malformed webhook {headers.get(SVIX_ID_HEADER)}: {e}")
            return PlainTextResponse("Error occured -- malformed payload", status_code=status.HTTP_400_BAD_REQUEST)

        logger.info(f"Received webhook {headers.get(SVIX_ID_HEADER)} type={event.type}")

        try:
            return self.dispatch(event)
        except UserStoreError as e:
            logger.exception(f"Failed to handle {event.type} webhook: {e}")
            return JSONResponse(
                content={"message": "Internal error processing webhook"},
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

    def dispatch(self, event: ClerkWebhookEvent) -> Response:
        """Route a typed event to its user store operation."""
        if isinstance(event, UserCreatedEvent):
            user = self.on_user_created(event)
        elif isinstance(event, UserUpdatedEvent):
            user = self.on_user_updated(event)
        elif isinstance(event, UserDeletedEvent):
            user = self.on_user_deleted(event)
        else:
            # Acknowledge so Svix does not redeliver events we don't act on
            logger.debug(f"Ignoring webhook type={event.type}")
            return Response(status_code=status.HTTP_200_OK)

        return JSONResponse(
            content=WebhookResponse(message="OK", user=user).model_dump(),
            status_code=status.HTTP_200_OK,
        )

    def on_user_created(self, event: UserCreatedEvent) -> Optional[Dict[str, Any]]:
        record = event.to_record()
        logger.info(f"Creating user {record.clerkId}")

        new_user = self.user_store.create_user(record.model_dump())

        if new_user:
            self._link_clerk_user(record.clerkId, new_user)

        return new_user

    def on_user_updated(self, event: UserUpdatedEvent) -> Optional[Dict[str, Any]]:
        record = event.to_record()
        logger.info(f"Updating user {event.data.id}")

        updated_user = self.user_store.update_user(event.data.id, record.model_dump())
        if updated_user is None:
            logger.warning(f"user.updated for unknown user {event.data.id}")
        return updated_user

    def on_user_deleted(self, event: UserDeletedEvent) -> Optional[Dict[str, Any]]:
        logger.info(f"Deleting user {event.data.id}")

        deleted_user = self.user_store.delete_user(event.data.id)
        if deleted_user is None:
            logger.warning(f"user.deleted for unknown user {event.data.id}")
        return deleted_user

    def _link_clerk_user(self, clerk_id: str, user: Dict[str, Any]) -> None:
        """
        Store the internal user ID on the Clerk user as public metadata.

        A failure is logged but does not fail the webhook: the local user
        already exists and a redelivery would only repeat this step.
        """
        if self.clerk_client is None:
            logger.warning(f"CLERK_SECRET_KEY not set, skipping metadata sync for {clerk_id}")
            return

        try:
            self.clerk_client.update_user_metadata(
                clerk_id,
                public_metadata={"userId": user["_id"]},
            )
        except ClerkAPIError as e:
            logger.error(f"Failed to store userId on Clerk user {clerk_id}: {e}")
