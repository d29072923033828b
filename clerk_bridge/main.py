"""
Clerk Webhook Bridge - Main FastAPI Application

This FastAPI application receives Clerk user lifecycle webhooks and mirrors
the users into the local user store.

The bridge verifies the Svix signature of each delivery, creates, updates or
deletes the matching local user, and writes the local user ID back onto new
Clerk users as public metadata.

Endpoints:
- GET /health - Health check
- POST /api/webhook/clerk - Clerk webhook receiver

Run with:
    uvicorn clerk_bridge.main:create_app --factory --port 8080
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, Response

from . import __version__
from .config import ClerkBridgeSettings, configure_logging, get_settings
from .handlers import ClerkWebhookHandler, WebhookVerifier
from .services import ClerkClient, UserStore

logger = logging.getLogger(__name__)

WEBHOOK_PATH = "/api/webhook/clerk"


def create_app(
    settings: Optional[ClerkBridgeSettings] = None,
    user_store=None,
    clerk_client: Optional[ClerkClient] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Bridge settings; loaded from the environment when omitted
        user_store: User store; a UserStore on settings.user_store_file when omitted
        clerk_client: Clerk API client; built from settings.clerk_secret_key when
            omitted and a key is configured

    Returns:
        FastAPI: The configured application

    Raises:
        ConfigurationError: If WEBHOOK_SECRET (or any other setting) is missing
            or invalid
    """
    if settings is None:
        settings = get_settings()

    configure_logging(settings.log_level)
    logger.info("Starting Clerk Webhook Bridge...")

    verifier = WebhookVerifier(settings.webhook_secret)

    if user_store is None:
        user_store = UserStore(data_file=str(settings.user_store_file))

    if clerk_client is None and settings.metadata_sync_enabled:
        clerk_client = ClerkClient(
            secret_key=settings.clerk_secret_key,
            api_url=settings.clerk_api_url,
            timeout=settings.clerk_api_timeout,
        )
    if clerk_client is None:
        logger.warning("CLERK_SECRET_KEY not configured, Clerk metadata sync disabled")

    app = FastAPI(
        title="Clerk Webhook Bridge",
        description="Receives Clerk user webhooks and mirrors users into the local user store",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc"
    )

    app.state.settings = settings
    app.state.user_store = user_store
    app.state.clerk_client = clerk_client
    app.state.webhook_handler = ClerkWebhookHandler(
        verifier=verifier,
        user_store=user_store,
        clerk_client=clerk_client,
    )

    @app.get("/health")
    async def health_check():
        """
        Health check endpoint.

        Returns:
            dict: Health status and service availability
        """
        services_status = {
            "webhook_verifier": True,
            "user_store": app.state.user_store is not None,
            "clerk_metadata_sync": app.state.clerk_client is not None,
        }

        health_response = {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "services": services_status,
            "version": __version__
        }

        return JSONResponse(content=health_response, status_code=status.HTTP_200_OK)

    @app.post(WEBHOOK_PATH)
    async def clerk_webhook(request: Request) -> Response:
        """
        Receive a Clerk webhook.

        The raw body is read unparsed: the Svix signature covers the exact bytes.
        Verification and user store calls block, so they run in the threadpool.
        """
        body = await request.body()
        handler: ClerkWebhookHandler = request.app.state.webhook_handler
        return await run_in_threadpool(handler.handle, body, request.headers)

    @app.exception_handler(Exception)
    async def general_exception_handler(request, exc):
        """Convert unhandled exceptions to a generic error response."""
        logger.error(f"Unhandled exception on {request.url.path}: {exc!r}")

        return JSONResponse(
            content={"message": "Internal server error"},
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    logger.info("Clerk Webhook Bridge initialized successfully")
    return app


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("clerk_bridge.main:create_app", factory=True, host="0.0.0.0", port=8080)
