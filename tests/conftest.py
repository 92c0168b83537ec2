"""Fixtures compartidos: fakes del profile store y del gateway."""
from typing import Dict, List, Optional

import pytest

from app.config import Settings
from app.errors import ProfileStoreError
from app.infra.push_gateway import GatewayResponse
from app.models.push_message import PushMessage, UserPushProfile
from app.services.notification_relay import NotificationRelay

EXPO_OK = {"data": {"status": "ok", "id": "ticket-1"}}


class FakeProfileStore:
    def __init__(self, profiles: Optional[Dict[str, Optional[str]]] = None, error: Exception = None):
        # user_id -> push_token (None = usuario sin token)
        self.profiles = profiles or {}
        self.error = error
        self.lookups: List[str] = []

    async def get_push_profile(self, user_id: str) -> Optional[UserPushProfile]:
        self.lookups.append(user_id)
        if self.error is not None:
            raise self.error
        if user_id not in self.profiles:
            return None
        return UserPushProfile(user_id=user_id, push_token=self.profiles[user_id])


class FakePushGateway:
    def __init__(self, response: GatewayResponse = None, error: Exception = None):
        self.response = response or GatewayResponse(200, EXPO_OK)
        self.error = error
        self.sent: List[PushMessage] = []

    async def send(self, message: PushMessage) -> GatewayResponse:
        self.sent.append(message)
        if self.error is not None:
            raise self.error
        return self.response


def make_event(type_="INSERT", table="notifications", record=None, old_record=None) -> dict:
    if record is None and type_ != "DELETE":
        record = {"id": "n1", "user_id": "u1", "title": "Devoir", "body": "Nouveau devoir"}
    return {
        "type": type_,
        "table": table,
        "schema": "public",
        "record": record,
        "old_record": old_record,
    }


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def profiles():
    return FakeProfileStore({"u1": "ExponentPushToken[xyz]"})


@pytest.fixture
def gateway():
    return FakePushGateway()


@pytest.fixture
def relay(profiles, gateway):
    return NotificationRelay(profiles, gateway)


@pytest.fixture
def unreachable_store():
    return FakeProfileStore(error=ProfileStoreError("profile store unreachable: boom"))
