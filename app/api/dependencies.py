# app/api/dependencies.py
from fastapi import Request

from app.config import Settings
from app.services.notification_relay import NotificationRelay


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_relay(request: Request) -> NotificationRelay:
    return request.app.state.relay
