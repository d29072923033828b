#!/usr/bin/env python3
"""
Mock Clerk Webhook Client Script

This script simulates Clerk (through Svix) delivering user webhooks to the
Clerk Webhook Bridge for local testing. It signs every delivery with the same
secret the bridge verifies with, so the full user lifecycle can be exercised
without a Clerk instance.

Usage:
    python mock-clerk-webhook-client.py

Configuration:
    Set CLERK_BRIDGE_URL and WEBHOOK_SECRET environment variables or modify the defaults below.

Examples:
    # Test full user lifecycle
    python mock-clerk-webhook-client.py

    # Set custom endpoint and secret
    export CLERK_BRIDGE_URL="http://localhost:8080"
    export WEBHOOK_SECRET="whsec_MfKQ9r8GKYqrTwjUPD8ILPZIo2LaLaSw"
    python mock-clerk-webhook-client.py
"""

import json
import os
import sys
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import requests
from svix.webhooks import Webhook


class MockClerkWebhookClient:
    """Mock webhook sender that simulates Clerk user lifecycle deliveries."""

    def __init__(self, base_url: str, webhook_secret: str):
        """Initialize the mock webhook client.

        Args:
            base_url: Clerk Webhook Bridge base URL (e.g., http://localhost:8080)
            webhook_secret: Svix signing secret shared with the bridge
        """
        self.base_url = base_url.rstrip('/')
        self.webhook = Webhook(webhook_secret)
        self.session = requests.Session()

    def signed_headers(self, body: str) -> Dict[str, str]:
        """Build Svix headers for a body, signed now."""
        msg_id = f"msg_{uuid.uuid4().hex}"
        timestamp = datetime.now(timezone.utc)
        return {
            'svix-id': msg_id,
            'svix-timestamp': str(int(timestamp.timestamp())),
            'svix-signature': self.webhook.sign(msg_id, timestamp, body),
            'Content-Type': 'application/json',
        }

    def send_event(self, event: Dict[str, Any]) -> Optional[requests.Response]:
        """Sign and deliver one event.

        Args:
            event: Clerk event envelope ({"type", "object", "data"})

        Returns:
            The bridge response or None if the request failed
        """
        url = f"{self.base_url}/api/webhook/clerk"
        body = json.dumps(event)

        print(f"\n🔄 Sending {event['type']} for {event['data'].get('id', 'N/A')}")

        try:
            response = self.session.post(url, data=body.encode('utf-8'), headers=self.signed_headers(body))
            print(f"📤 POST {url}")
            print(f"📊 Status: {response.status_code}")

            if response.status_code == 200:
                if response.content:
                    result = response.json()
                    user = result.get('user') or {}
                    print(f"✅ {result.get('message')} - local user: {user.get('_id', 'none')}")
                else:
                    print("✅ Acknowledged (no action)")
            else:
                print(f"❌ Delivery failed: {response.status_code}")
                print(f"🔍 Response: {response.text}")
            return response

        except requests.RequestException as e:
            print(f"💥 Request failed: {e}")
            return None

    def send_unsigned(self, event: Dict[str, Any]) -> Optional[requests.Response]:
        """Deliver an event with a forged signature; the bridge must answer 400."""
        url = f"{self.base_url}/api/webhook/clerk"
        body = json.dumps(event)
        headers = self.signed_headers(body)
        headers['svix-signature'] = 'v1,Zm9yZ2VkLXNpZ25hdHVyZQ=='

        print(f"\n🔄 Sending forged {event['type']}")

        try:
            response = self.session.post(url, data=body.encode('utf-8'), headers=headers)
            print(f"📊 Status: {response.status_code}")
            if response.status_code == 400:
                print("✅ Forged delivery rejected")
            else:
                print(f"❌ Forged delivery was not rejected: {response.status_code}")
            return response
        except requests.RequestException as e:
            print(f"💥 Request failed: {e}")
            return None

    def test_health_endpoint(self) -> bool:
        """Test the bridge health endpoint.

        Returns:
            True if healthy, False otherwise
        """
        url = f"{self.base_url}/health"

        print("🏥 Testing health endpoint...")

        try:
            response = requests.get(url, timeout=5)
            print(f"📤 GET {url}")
            print(f"📊 Status: {response.status_code}")

            if response.status_code == 200:
                print("✅ Clerk Webhook Bridge is healthy!")
                return True
            else:
                print(f"⚠️  Health check failed: {response.status_code}")
                return False

        except requests.RequestException as e:
            print(f"💥 Health check failed: {e}")
            return False


def create_sample_user_event(event_type: str, clerk_id: str, email: str,
                             username: str, first_name: str, last_name: str) -> Dict[str, Any]:
    """Create a sample user.created / user.updated event.

    Args:
        event_type: "user.created" or "user.updated"
        clerk_id: Clerk user ID (e.g., "user_2kerzjYiQFhFNCQW0pGVYmVoC48")
        email: Primary email address
        username: Clerk username
        first_name: First name
        last_name: Last name

    Returns:
        Clerk event envelope
    """
    email_id = f"idn_{uuid.uuid4().hex[:27]}"
    return {
        "type": event_type,
        "object": "event",
        "data": {
            "id": clerk_id,
            "object": "user",
            "email_addresses": [
                {
                    "id": email_id,
                    "object": "email_address",
                    "email_address": email,
                    "linked_to": [],
                }
            ],
            "primary_email_address_id": email_id,
            "username": username,
            "first_name": first_name,
            "last_name": last_name,
            "image_url": "https://img.clerk.com/default",
            "public_metadata": {},
            "private_metadata": {},
            "unsafe_metadata": {},
        },
    }


def main():
    """Main function to run the mock webhook test scenarios."""

    # Configuration
    CLERK_BRIDGE_URL = os.environ.get('CLERK_BRIDGE_URL', 'http://localhost:8080')
    WEBHOOK_SECRET = os.environ.get('WEBHOOK_SECRET', 'whsec_MfKQ9r8GKYqrTwjUPD8ILPZIo2LaLaSw')

    print("🚀 Mock Clerk Webhook Client")
    print("=" * 50)
    print(f"📡 Clerk Bridge URL: {CLERK_BRIDGE_URL}")
    print(f"🔐 Webhook Secret: {WEBHOOK_SECRET[:8]}{'*' * 8}")
    print()

    client = MockClerkWebhookClient(CLERK_BRIDGE_URL, WEBHOOK_SECRET)

    if not client.test_health_endpoint():
        print("\n❌ Health check failed - is the Clerk Webhook Bridge running?")
        print("   Try: uvicorn clerk_bridge.main:create_app --factory --port 8080")
        sys.exit(1)

    clerk_id = f"user_{uuid.uuid4().hex[:27]}"

    print("\n📋 Test 1: user.created")
    print("-" * 30)
    created = client.send_event(create_sample_user_event(
        "user.created", clerk_id, "alice.johnson@example.com", "alice", "Alice", "Johnson"
    ))
    if created is None or created.status_code != 200:
        print("❌ User creation failed, skipping remaining tests")
        return

    print("\n📋 Test 2: user.updated")
    print("-" * 30)
    client.send_event(create_sample_user_event(
        "user.updated", clerk_id, "alice.johnson@example.com", "alice.j", "Alice", "Johnson-Smith"
    ))

    print("\n📋 Test 3: session.created (ignored)")
    print("-" * 30)
    client.send_event({
        "type": "session.created",
        "object": "event",
        "data": {"id": f"sess_{uuid.uuid4().hex[:27]}", "user_id": clerk_id},
    })

    print("\n📋 Test 4: forged signature")
    print("-" * 30)
    client.send_unsigned(create_sample_user_event(
        "user.created", f"user_{uuid.uuid4().hex[:27]}", "mallory@example.com", "mallory", "Mal", "Lory"
    ))

    print("\n📋 Test 5: user.deleted")
    print("-" * 30)
    client.send_event({
        "type": "user.deleted",
        "object": "event",
        "data": {"id": clerk_id, "object": "user", "deleted": True},
    })

    print("\n" + "=" * 50)
    print("🎉 Clerk Webhook Scenarios Complete!")
    print("=" * 50)
    print()
    print("🔍 Check the bridge logs and the user store file for the results.")


if __name__ == "__main__":
    main()
