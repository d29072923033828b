"""
Helpers for signing Clerk webhook deliveries in tests.

Deliveries are signed with svix exactly as Clerk signs them.
"""

import base64
import json
import uuid
from datetime import datetime, timedelta, timezone

from svix.webhooks import Webhook


WEBHOOK_SECRET = "whsec_" + base64.b64encode(b"clerk-bridge-test-signing-secret").decode()
OTHER_SECRET = "whsec_" + base64.b64encode(b"some-other-endpoint-secret-value").decode()


def sign_delivery(payload, secret=WEBHOOK_SECRET, timestamp=None, msg_id=None):
    """Serialize a payload and build matching Svix headers.

    Returns:
        (body bytes, headers dict)
    """
    body = json.dumps(payload)
    msg_id = msg_id or f"msg_{uuid.uuid4().hex}"
    timestamp = timestamp or datetime.now(timezone.utc)
    headers = {
        "svix-id": msg_id,
        "svix-timestamp": str(int(timestamp.timestamp())),
        "svix-signature": Webhook(secret).sign(msg_id, timestamp, body),
    }
    return body.encode("utf-8"), headers


def sign_raw(body: bytes, secret=WEBHOOK_SECRET):
    """Build Svix headers for an arbitrary (possibly non-JSON) body."""
    msg_id = f"msg_{uuid.uuid4().hex}"
    timestamp = datetime.now(timezone.utc)
    return {
        "svix-id": msg_id,
        "svix-timestamp": str(int(timestamp.timestamp())),
        "svix-signature": Webhook(secret).sign(msg_id, timestamp, body.decode("utf-8")),
    }


def stale_timestamp():
    return datetime.now(timezone.utc) - timedelta(minutes=10)
