# app/services/notification_relay.py
import logging
from typing import Any, Mapping, Union

from pydantic import ValidationError

from app.errors import GatewayAuthError, GatewayTimeout, GatewayUnreachable, ProfileStoreError
from app.infra.profile_store import ProfileStore
from app.infra.push_gateway import PushGateway
from app.models.push_message import PushMessage
from app.models.relay_result import Outcome, RelayResult
from app.models.webhook_event import NotificationRecord, WebhookEvent

logger = logging.getLogger(__name__)


def _validation_detail(error: ValidationError) -> str:
    parts = []
    for err in error.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "body"
        parts.append(f"{loc}: {err.get('msg')}")
    return "; ".join(parts)


class NotificationRelay:
    """
    Convierte un INSERT en la tabla de notificaciones en un push:
      1. valida el sobre del webhook
      2. busca el push_token del usuario
      3. manda un POST al gateway de push
      4. devuelve un RelayResult (nunca lanza)

    No guarda estado entre invocaciones; se puede llamar en paralelo.
    """

    def __init__(
        self,
        profiles: ProfileStore,
        gateway: PushGateway,
        notifications_table: str = "notifications",
    ):
        self.profiles = profiles
        self.gateway = gateway
        self.notifications_table = notifications_table

    async def handle_notification_event(
        self, payload: Union[WebhookEvent, Mapping[str, Any]]
    ) -> RelayResult:
        # 1) validar el sobre
        if isinstance(payload, WebhookEvent):
            event = payload
        else:
            try:
                event = WebhookEvent.model_validate(payload)
            except ValidationError as e:
                return RelayResult.error(Outcome.BAD_REQUEST, _validation_detail(e))

        if not event.is_insert_on(self.notifications_table):
            return RelayResult.ignored(
                f"{event.operation.value} on {event.source_table} is not handled"
            )

        try:
            record = event.notification_record()
        except ValidationError as e:
            return RelayResult.error(Outcome.BAD_REQUEST, f"record: {_validation_detail(e)}")

        try:
            return await self._relay(record)
        except Exception:
            logger.exception(
                "Error inesperado procesando la notificación %s (user=%s)",
                record.id,
                record.user_id,
                extra={"notification_id": record.id, "user_id": record.user_id},
            )
            return RelayResult.error(Outcome.INTERNAL_ERROR, "internal error", record.id, record.user_id)

    async def _relay(self, record: NotificationRecord) -> RelayResult:
        # 2) perfil del usuario
        try:
            profile = await self.profiles.get_push_profile(record.user_id)
        except ProfileStoreError as e:
            return RelayResult.error(Outcome.PROFILE_STORE_UNAVAILABLE, str(e), record.id, record.user_id)

        if profile is None:
            return RelayResult.error(
                Outcome.USER_NOT_FOUND,
                f"user {record.user_id} not found",
                record.id,
                record.user_id,
            )

        if not profile.has_token:
            return RelayResult.no_push_token(record.id, record.user_id)

        # 3) envío al gateway
        message = PushMessage.for_record(record, profile.push_token)
        try:
            response = await self.gateway.send(message)
        except GatewayTimeout as e:
            return RelayResult.error(Outcome.GATEWAY_TIMEOUT, str(e), record.id, record.user_id)
        except GatewayUnreachable as e:
            return RelayResult.error(Outcome.GATEWAY_UNREACHABLE, str(e), record.id, record.user_id)
        except GatewayAuthError as e:
            return RelayResult.error(Outcome.GATEWAY_AUTH_FAILED, str(e), record.id, record.user_id)

        # 4) el error de entrega (token inválido, etc.) no es un error duro
        detail = response.error_detail()
        if detail is not None:
            logger.debug("Gateway rechazó el push %s: %s", record.id, detail)
            return RelayResult.partial_failure(response.body, detail, record.id, record.user_id)

        return RelayResult.success(response.body, record.id, record.user_id)
