# app/api/webhooks.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Request
from fastapi.responses import JSONResponse

from app.api.dependencies import get_relay, get_settings
from app.config import Settings
from app.models.relay_result import Outcome, RelayResult
from app.security.webhook_auth import verify_webhook
from app.services.notification_relay import NotificationRelay

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks", tags=["webhooks"])

_LOG_LEVELS = {
    Outcome.SUCCESS: logging.INFO,
    Outcome.IGNORED: logging.DEBUG,
    Outcome.NO_PUSH_TOKEN: logging.INFO,
    Outcome.PARTIAL_FAILURE: logging.WARNING,
    Outcome.BAD_REQUEST: logging.WARNING,
    Outcome.UNAUTHORIZED: logging.WARNING,
    Outcome.USER_NOT_FOUND: logging.WARNING,
}


def _log_result(result: RelayResult) -> None:
    level = _LOG_LEVELS.get(result.outcome, logging.ERROR)
    logger.log(
        level,
        "push-notification %s (notification=%s user=%s status=%s retryable=%s)",
        result.outcome.value,
        result.notification_id,
        result.user_id,
        result.status_code,
        result.retryable,
        extra={
            "outcome": result.outcome.value,
            "notification_id": result.notification_id,
            "user_id": result.user_id,
        },
    )


def _respond(result: RelayResult) -> JSONResponse:
    _log_result(result)
    return JSONResponse(status_code=result.status_code, content=result.body)


@router.post("/push-notification")
async def push_notification(
    request: Request,
    authorization: Optional[str] = Header(default=None),
    x_webhook_secret: Optional[str] = Header(default=None),
    settings: Settings = Depends(get_settings),
    relay: NotificationRelay = Depends(get_relay),
):
    """
    Webhook de la tabla notifications. Cuerpo esperado:
      {"type": "INSERT", "table": "notifications", "schema": "public",
       "record": {"id": "...", "user_id": "...", "title": "...", "body": "..."},
       "old_record": null}
    Devuelve la respuesta del gateway de push tal cual (200) o un
    objeto de error con el status que corresponde.
    """
    # 1) autenticación (si está configurada)
    try:
        verify_webhook(settings, authorization, x_webhook_secret)
    except HTTPException as e:
        return _respond(RelayResult.error(Outcome.UNAUTHORIZED, str(e.detail)))

    # 2) el cuerpo tiene que ser JSON
    try:
        payload = await request.json()
    except ValueError:
        return _respond(RelayResult.error(Outcome.BAD_REQUEST, "body is not valid JSON"))

    if not isinstance(payload, dict):
        return _respond(RelayResult.error(Outcome.BAD_REQUEST, "body must be a JSON object"))

    # 3) relay
    result = await relay.handle_notification_event(payload)
    return _respond(result)
