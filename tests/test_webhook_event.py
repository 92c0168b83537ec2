import pytest
from pydantic import ValidationError

from app.models.push_message import PushMessage, UserPushProfile
from app.models.webhook_event import NotificationRecord, Operation, WebhookEvent

from conftest import make_event


def test_parses_wire_format():
    event = WebhookEvent.model_validate(make_event())

    assert event.operation is Operation.INSERT
    assert event.source_table == "notifications"
    assert event.schema_name == "public"
    assert event.previous_record is None
    assert event.is_insert_on("notifications")
    assert not event.is_insert_on("events")
    assert event.notification_record() == NotificationRecord(
        id="n1", user_id="u1", title="Devoir", body="Nouveau devoir"
    )


def test_delete_without_record():
    event = WebhookEvent.model_validate(
        make_event("DELETE", old_record={"id": "n1", "user_id": "u1", "title": "t", "body": "b"})
    )

    assert event.operation is Operation.DELETE
    assert event.new_record is None
    assert event.previous_record["id"] == "n1"


def test_insert_requires_record():
    with pytest.raises(ValidationError):
        WebhookEvent.model_validate({"type": "INSERT", "table": "notifications", "record": None})


def test_numeric_ids_are_coerced_and_extra_columns_ignored():
    record = NotificationRecord.model_validate(
        {"id": 12, "user_id": 34, "title": "t", "body": "b", "created_at": "2024-09-01T08:00:00Z", "read": False}
    )

    assert record.id == "12"
    assert record.user_id == "34"


def test_push_message_from_record():
    record = NotificationRecord(id="n1", user_id="u1", title="Devoir", body="Nouveau devoir")

    message = PushMessage.for_record(record, "ExponentPushToken[xyz]")

    assert message.model_dump() == {
        "to": "ExponentPushToken[xyz]",
        "sound": "default",
        "title": "Devoir",
        "body": "Nouveau devoir",
        "data": {"notification_id": "n1"},
    }
    assert message.notification_id == "n1"


@pytest.mark.parametrize("token, expected", [("tok", True), ("", False), (" ", False), (None, False)])
def test_profile_has_token(token, expected):
    assert UserPushProfile(user_id="u1", push_token=token).has_token is expected
