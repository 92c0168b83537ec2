# app/models/push_message.py
from typing import Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict

from app.models.webhook_event import NotificationRecord


class UserPushProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str
    push_token: Optional[str] = None

    @property
    def has_token(self) -> bool:
        return bool(self.push_token and self.push_token.strip())


class PushMessage(BaseModel):
    """Payload que se manda al gateway de push (formato Expo)."""
    model_config = ConfigDict(frozen=True)

    to: str
    sound: Literal["default"] = "default"
    title: str
    body: str
    data: Dict[str, str]

    @classmethod
    def for_record(cls, record: NotificationRecord, token: str) -> "PushMessage":
        return cls(
            to=token,
            title=record.title,
            body=record.body,
            data={"notification_id": record.id},
        )

    @property
    def notification_id(self) -> str:
        return self.data["notification_id"]
