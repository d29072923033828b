"""
Tests for Svix signature verification
"""

import base64

import pytest

from clerk_bridge.errors import AuthenticationError, ConfigurationError, MalformedRequestError
from clerk_bridge.handlers import WebhookVerifier, extract_svix_headers
from clerk_bridge.handlers.verification import validate_signing_secret

from tests.helpers import OTHER_SECRET, WEBHOOK_SECRET, sign_delivery, sign_raw, stale_timestamp


@pytest.fixture
def verifier():
    return WebhookVerifier(WEBHOOK_SECRET)


def test_round_trip_returns_original_payload(verifier, user_created_event):
    body, headers = sign_delivery(user_created_event)

    assert verifier.verify(body, headers) == user_created_event


def test_secret_without_prefix(user_deleted_event):
    raw_secret = WEBHOOK_SECRET[len("whsec_"):]
    body, headers = sign_delivery(user_deleted_event)

    assert WebhookVerifier(raw_secret).verify(body, headers) == user_deleted_event


def test_wrong_secret_fails(verifier, user_created_event):
    body, headers = sign_delivery(user_created_event, secret=OTHER_SECRET)

    with pytest.raises(AuthenticationError):
        verifier.verify(body, headers)


def test_any_other_secret_fails(verifier, user_deleted_event):
    for seed in (b"a", b"another-secret", WEBHOOK_SECRET.encode() + b"x"):
        secret = "whsec_" + base64.b64encode(seed).decode()
        body, headers = sign_delivery(user_deleted_event, secret=secret)

        with pytest.raises(AuthenticationError):
            verifier.verify(body, headers)


def test_stale_timestamp_fails(verifier, user_created_event):
    body, headers = sign_delivery(user_created_event, timestamp=stale_timestamp())

    with pytest.raises(AuthenticationError):
        verifier.verify(body, headers)


def test_mismatched_message_id_fails(verifier, user_created_event):
    body, headers = sign_delivery(user_created_event)
    headers["svix-id"] = "msg_replayed"

    with pytest.raises(AuthenticationError):
        verifier.verify(body, headers)


def test_signature_list_accepts_any_valid_entry(verifier, user_created_event):
    body, headers = sign_delivery(user_created_event)
    headers["svix-signature"] = "v1,Zm9yZ2Vk " + headers["svix-signature"]

    assert verifier.verify(body, headers)["type"] == "user.created"


def test_missing_header_is_malformed(verifier, user_created_event):
    body, headers = sign_delivery(user_created_event)
    headers.pop("svix-timestamp")

    with pytest.raises(MalformedRequestError):
        verifier.verify(body, headers)


def test_extract_svix_headers_reports_missing():
    with pytest.raises(MalformedRequestError) as exc_info:
        extract_svix_headers({"svix-id": "msg_1", "svix-signature": ""})

    assert "svix-timestamp" in str(exc_info.value)
    assert "svix-signature" in str(exc_info.value)


def test_extract_svix_headers_ignores_other_headers():
    headers = {
        "svix-id": "msg_1",
        "svix-timestamp": "1723655147",
        "svix-signature": "v1,abc",
        "content-type": "application/json",
    }

    assert extract_svix_headers(headers) == {
        "svix-id": "msg_1",
        "svix-timestamp": "1723655147",
        "svix-signature": "v1,abc",
    }


def test_empty_secret_is_configuration_error():
    with pytest.raises(ConfigurationError):
        WebhookVerifier("")


def test_payload_decoded_when_library_returns_nothing(verifier, monkeypatch, user_created_event):
    """svix 2.x verifies without returning the body; the payload must still come back"""
    body, headers = sign_delivery(user_created_event)
    monkeypatch.setattr(verifier._webhook, "verify", lambda data, hdrs: None)

    assert verifier.verify(body, headers) == user_created_event


def test_verified_non_json_body_is_malformed(verifier):
    body = b"plain text, correctly signed"
    headers = sign_raw(body)

    with pytest.raises(MalformedRequestError):
        verifier.verify(body, headers)


@pytest.mark.parametrize("secret", [
    "whsec_not*valid*base64",
    "whsec_abc",
    "whsec_",
    "not base64 at all!",
])
def test_invalid_secret_is_configuration_error(secret):
    with pytest.raises(ConfigurationError):
        WebhookVerifier(secret)


def test_validate_signing_secret_decodes_key():
    assert validate_signing_secret(WEBHOOK_SECRET) == b"clerk-bridge-test-signing-secret"
    assert validate_signing_secret(WEBHOOK_SECRET[len("whsec_"):]) == b"clerk-bridge-test-signing-secret"
