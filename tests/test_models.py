"""
Tests for Clerk event parsing and record projection
"""

import pytest

from clerk_bridge.errors import MalformedRequestError
from clerk_bridge.models import (
    UnhandledEvent,
    UserCreatedEvent,
    UserDeletedEvent,
    UserUpdatedEvent,
    parse_event,
)


class TestParseEvent:
    def test_user_created(self, user_created_event):
        event = parse_event(user_created_event)

        assert isinstance(event, UserCreatedEvent)
        assert event.data.id == "u1"
        assert event.data.email_addresses[0].email_address == "a@b.com"

    def test_user_updated(self, user_updated_event):
        assert isinstance(parse_event(user_updated_event), UserUpdatedEvent)

    def test_user_deleted(self, user_deleted_event):
        event = parse_event(user_deleted_event)

        assert isinstance(event, UserDeletedEvent)
        assert event.data.id == "u1"
        assert event.data.deleted is True

    def test_other_types_are_unhandled(self):
        event = parse_event({"type": "session.ended", "object": "event", "data": {"id": "sess_1"}})

        assert isinstance(event, UnhandledEvent)
        assert event.type == "session.ended"

    def test_unhandled_event_tolerates_any_data(self):
        event = parse_event({"type": "waitlistEntry.created", "data": ["unexpected"]})

        assert isinstance(event, UnhandledEvent)

    @pytest.mark.parametrize("payload", [None, "user.created", [], {"data": {}}, {"type": ""}, {"type": 3}])
    def test_not_an_event(self, payload):
        with pytest.raises(MalformedRequestError):
            parse_event(payload)

    def test_created_without_emails_is_malformed(self, user_created_event):
        del user_created_event["data"]["email_addresses"]

        with pytest.raises(MalformedRequestError):
            parse_event(user_created_event)

    def test_updated_without_emails_is_accepted(self, user_updated_event):
        user_updated_event["data"]["email_addresses"] = []

        assert isinstance(parse_event(user_updated_event), UserUpdatedEvent)

    def test_email_without_address_is_malformed(self, user_created_event):
        user_created_event["data"]["email_addresses"] = [{"id": "idn_1"}]

        with pytest.raises(MalformedRequestError):
            parse_event(user_created_event)


class TestRecords:
    def test_create_record(self, user_created_event):
        record = parse_event(user_created_event).to_record()

        assert record.model_dump() == {
            "clerkId": "u1",
            "email": "a@b.com",
            "username": "abu",
            "firstName": "A",
            "lastName": "B",
            "photo": "http://img",
        }

    def test_update_record_has_no_email(self, user_updated_event):
        record = parse_event(user_updated_event).to_record().model_dump()

        assert record == {
            "firstName": "A",
            "lastName": "B",
            "username": "abu",
            "photo": "http://img",
        }
