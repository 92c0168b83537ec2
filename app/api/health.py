# app/api/health.py
from fastapi import APIRouter, Depends

from app.api.dependencies import get_settings
from app.config import Settings

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(settings: Settings = Depends(get_settings)):
    """
    Estado del servicio y qué backends están configurados
    (sin exponer secretos).
    """
    return {
        "status": "ok",
        "profileBackend": settings.profile_backend,
        "notificationsTable": settings.notifications_table,
        "pushGateway": settings.push_gateway_url,
        "hasExpoAccessToken": bool(settings.expo_access_token),
        "webhookAuth": {
            "sharedSecret": bool(settings.webhook_secret),
            "jwt": bool(settings.webhook_jwt_secret),
        },
    }
