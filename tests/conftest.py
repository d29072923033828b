"""
Shared fixtures for the Clerk Webhook Bridge tests.

Deliveries are signed with the fixture secret from tests.helpers, which is also
injected through settings.
"""

from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient

from clerk_bridge.config import ClerkBridgeSettings
from clerk_bridge.main import create_app, WEBHOOK_PATH
from clerk_bridge.services import UserStore

from tests.helpers import WEBHOOK_SECRET, sign_delivery


@pytest.fixture
def clerk_user_payload():
    """Clerk user object as sent in user.created / user.updated events"""
    return {
        "id": "u1",
        "object": "user",
        "email_addresses": [
            {
                "id": "idn_2kerjDvEkkSAPi1loceRsa5cog9",
                "object": "email_address",
                "email_address": "a@b.com",
                "linked_to": [],
            }
        ],
        "primary_email_address_id": "idn_2kerjDvEkkSAPi1loceRsa5cog9",
        "username": "abu",
        "first_name": "A",
        "last_name": "B",
        "image_url": "http://img",
        "has_image": False,
        "public_metadata": {},
        "private_metadata": {},
        "unsafe_metadata": {},
        "two_factor_enabled": False,
    }


@pytest.fixture
def user_created_event(clerk_user_payload):
    return {"type": "user.created", "object": "event", "data": clerk_user_payload}


@pytest.fixture
def user_updated_event(clerk_user_payload):
    return {"type": "user.updated", "object": "event", "data": clerk_user_payload}


@pytest.fixture
def user_deleted_event():
    return {"type": "user.deleted", "object": "event", "data": {"id": "u1", "object": "user", "deleted": True}}


@pytest.fixture
def settings(tmp_path):
    return ClerkBridgeSettings(
        _env_file=None,
        webhook_secret=WEBHOOK_SECRET,
        clerk_secret_key="",
        user_store_file=tmp_path / "users.json",
    )


@pytest.fixture
def mock_user_store():
    """Mock user store returning canned users"""
    store = Mock()
    store.create_user.return_value = {"_id": "local-1", "clerkId": "u1", "email": "a@b.com"}
    store.update_user.return_value = {"_id": "local-1", "clerkId": "u1", "firstName": "A"}
    store.delete_user.return_value = {"_id": "local-1", "clerkId": "u1"}
    return store


@pytest.fixture
def mock_clerk_client():
    client = Mock()
    client.update_user_metadata.return_value = {"id": "u1"}
    return client


@pytest.fixture
def client(settings, mock_user_store, mock_clerk_client):
    """TestClient over an app wired with mock collaborators"""
    app = create_app(settings=settings, user_store=mock_user_store, clerk_client=mock_clerk_client)
    return TestClient(app)


@pytest.fixture
def post_webhook(client):
    """Sign a payload and POST it to the webhook route"""
    def _post(payload, **sign_kwargs):
        body, headers = sign_delivery(payload, **sign_kwargs)
        return client.post(WEBHOOK_PATH, content=body, headers=headers)
    return _post


@pytest.fixture
def user_store(tmp_path):
    return UserStore(data_file=str(tmp_path / "users.json"))
