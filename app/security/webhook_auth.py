# app/security/webhook_auth.py
import hmac
from typing import Optional

import jwt
from fastapi import HTTPException, status

from app.config import Settings


def decode_token(token: str, secret: str, algorithm: str = "HS256") -> dict:
    """
    Decodifica y valida el JWT que manda el backend en el webhook
    (normalmente la service role key). Lanza 401 si es inválido.
    """
    try:
        return jwt.decode(
            token,
            secret,
            algorithms=[algorithm],
            options={"verify_aud": False},
        )
    except jwt.PyJWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
        )


def _bearer_token(authorization_header: Optional[str]) -> str:
    """
    Toma el header: Authorization: Bearer <token>
    Lanza 401 si falta o tiene otro formato.
    """
    if not authorization_header:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing Authorization header",
        )

    if not authorization_header.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid Authorization header format",
        )

    return authorization_header.removeprefix("Bearer ").strip()


def verify_webhook(
    settings: Settings,
    authorization_header: Optional[str] = None,
    secret_header: Optional[str] = None,
) -> None:
    """
    Autenticación del webhook entrante. Cada mecanismo se activa solo
    si su secreto está configurado; sin ninguno, se confía en la red.
    """
    if settings.webhook_secret:
        if not secret_header or not hmac.compare_digest(
            secret_header.encode(), settings.webhook_secret.encode()
        ):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid webhook secret",
            )

    if settings.webhook_jwt_secret:
        token = _bearer_token(authorization_header)
        decode_token(token, settings.webhook_jwt_secret, settings.jwt_alg)
