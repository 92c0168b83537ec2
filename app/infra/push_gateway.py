# app/infra/push_gateway.py
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol

import httpx

from app.config import Settings
from app.errors import GatewayAuthError, GatewayTimeout, GatewayUnreachable
from app.models.push_message import PushMessage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GatewayResponse:
    status_code: int
    body: Any

    def _tickets(self) -> List[Any]:
        data = self.body.get("data") if isinstance(self.body, dict) else self.body
        if isinstance(data, dict):
            return [data]
        if isinstance(data, list):
            return data
        return []

    def error_detail(self) -> Optional[str]:
        """
        Devuelve el error de entrega que reporta el gateway, o None si
        el ticket salió OK. Formatos de Expo:
          200 {"data": {"status": "ok", "id": "..."}}
          200 {"data": {"status": "error", "message": "...", "details": {"error": "DeviceNotRegistered"}}}
          4xx {"errors": [{"code": "...", "message": "..."}]}
        """
        errors = self.body.get("errors") if isinstance(self.body, dict) else None
        if errors:
            first = errors[0] if isinstance(errors, list) else errors
            if isinstance(first, dict):
                return first.get("message") or first.get("code") or str(first)
            return str(first)

        for ticket in self._tickets():
            if isinstance(ticket, dict) and ticket.get("status") == "error":
                details = ticket.get("details") or {}
                code = details.get("error") if isinstance(details, dict) else None
                message = ticket.get("message") or "delivery error"
                return f"{code}: {message}" if code else message

        if self.status_code >= 400:
            detail = self.body.get("detail") if isinstance(self.body, dict) else None
            return detail or f"HTTP {self.status_code}"
        return None


class PushGateway(Protocol):
    async def send(self, message: PushMessage) -> GatewayResponse:
        ...


class ExpoPushGateway:
    """
    Cliente del servicio de push de Expo. Un solo POST por mensaje,
    sin reintentos (el reintento es reenviar el webhook).
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        url: str,
        access_token: Optional[str] = None,
        timeout: float = 10.0,
    ):
        self.client = client
        self.url = url
        self.access_token = access_token
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings, client: httpx.AsyncClient) -> "ExpoPushGateway":
        return cls(
            client,
            settings.push_gateway_url,
            access_token=settings.expo_access_token,
            timeout=settings.push_timeout_seconds,
        )

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"
        return headers

    async def send(self, message: PushMessage) -> GatewayResponse:
        try:
            response = await self.client.post(
                self.url,
                headers=self._headers(),
                json=message.model_dump(),
                timeout=self.timeout,
            )
        except httpx.TimeoutException as e:
            logger.error("Push gateway sin respuesta tras %ss (%s)", self.timeout, self.url)
            raise GatewayTimeout(f"push gateway timeout after {self.timeout}s") from e
        except httpx.HTTPError as e:
            logger.error("Push gateway inalcanzable en %s: %s", self.url, e)
            raise GatewayUnreachable(f"push gateway unreachable: {e}") from e

        # 429 y 5xx son transitorios: que el remitente reenvíe el webhook
        if response.status_code == 429 or response.status_code >= 500:
            logger.error("Push gateway respondió %s", response.status_code)
            raise GatewayUnreachable(f"push gateway returned HTTP {response.status_code}")

        # credencial propia inválida: no es un problema del dispositivo
        if response.status_code in (401, 403):
            logger.error("Push gateway rechazó la credencial (HTTP %s)", response.status_code)
            raise GatewayAuthError(f"push gateway rejected credentials: HTTP {response.status_code}")

        try:
            body = response.json()
        except ValueError:
            body = {"detail": response.text}

        return GatewayResponse(status_code=response.status_code, body=body)
