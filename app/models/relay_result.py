# app/models/relay_result.py
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class Outcome(str, Enum):
    SUCCESS = "success"
    IGNORED = "ignored"
    PARTIAL_FAILURE = "partial_failure"
    NO_PUSH_TOKEN = "no_push_token"
    BAD_REQUEST = "bad_request"
    UNAUTHORIZED = "unauthorized"
    USER_NOT_FOUND = "user_not_found"
    PROFILE_STORE_UNAVAILABLE = "profile_store_unavailable"
    GATEWAY_UNREACHABLE = "gateway_unreachable"
    GATEWAY_TIMEOUT = "gateway_timeout"
    GATEWAY_AUTH_FAILED = "gateway_auth_failed"
    INTERNAL_ERROR = "internal_error"


STATUS_CODES = {
    Outcome.SUCCESS: 200,
    Outcome.IGNORED: 200,
    Outcome.PARTIAL_FAILURE: 200,
    Outcome.NO_PUSH_TOKEN: 200,
    Outcome.BAD_REQUEST: 400,
    Outcome.UNAUTHORIZED: 401,
    Outcome.USER_NOT_FOUND: 404,
    Outcome.PROFILE_STORE_UNAVAILABLE: 503,
    Outcome.GATEWAY_UNREACHABLE: 502,
    Outcome.GATEWAY_TIMEOUT: 504,
    Outcome.GATEWAY_AUTH_FAILED: 502,
    Outcome.INTERNAL_ERROR: 500,
}

# el remitente del webhook puede reenviar el mismo evento
RETRYABLE = frozenset({
    Outcome.PROFILE_STORE_UNAVAILABLE,
    Outcome.GATEWAY_UNREACHABLE,
    Outcome.GATEWAY_TIMEOUT,
    Outcome.GATEWAY_AUTH_FAILED,
})


@dataclass(frozen=True)
class RelayResult:
    """
    Resultado de procesar un evento. 'body' es lo que se devuelve
    tal cual al que llamó el webhook.
    """
    outcome: Outcome
    body: Any = field(default_factory=dict)
    notification_id: Optional[str] = None
    user_id: Optional[str] = None

    @property
    def status_code(self) -> int:
        return STATUS_CODES[self.outcome]

    @property
    def retryable(self) -> bool:
        return self.outcome in RETRYABLE

    @classmethod
    def success(cls, gateway_body: Any, notification_id: str, user_id: str) -> "RelayResult":
        return cls(Outcome.SUCCESS, gateway_body, notification_id, user_id)

    @classmethod
    def partial_failure(
        cls, gateway_body: Any, detail: str, notification_id: str, user_id: str
    ) -> "RelayResult":
        if isinstance(gateway_body, dict):
            body = dict(gateway_body)
            body.setdefault("status", "partial_failure")
        else:
            body = {"status": "partial_failure", "gateway_response": gateway_body}
        body["error_detail"] = detail
        return cls(Outcome.PARTIAL_FAILURE, body, notification_id, user_id)

    @classmethod
    def ignored(cls, reason: str) -> "RelayResult":
        return cls(Outcome.IGNORED, {"status": "ignored", "reason": reason})

    @classmethod
    def no_push_token(cls, notification_id: str, user_id: str) -> "RelayResult":
        return cls(
            Outcome.NO_PUSH_TOKEN,
            {
                "status": "skipped",
                "reason": Outcome.NO_PUSH_TOKEN.value,
                "notification_id": notification_id,
            },
            notification_id,
            user_id,
        )

    @classmethod
    def error(
        cls,
        outcome: Outcome,
        detail: str,
        notification_id: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> "RelayResult":
        body: Dict[str, Any] = {"status": "error", "error": outcome.value, "detail": detail}
        if notification_id is not None:
            body["notification_id"] = notification_id
        return cls(outcome, body, notification_id, user_id)
