# app/main.py
import logging
from contextlib import asynccontextmanager
from typing import Optional

from dotenv import load_dotenv

# 1) cargar variables de entorno del .env
load_dotenv()

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.api.health import router as health_router
from app.api.webhooks import router as webhooks_router
from app.config import Settings
from app.infra.profile_store import build_profile_store
from app.infra.push_gateway import ExpoPushGateway
from app.services.notification_relay import NotificationRelay

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if app.state.relay is not None:
        # relay inyectado (tests): no hay clientes que abrir
        yield
        return

    settings: Settings = app.state.settings
    # 2) un solo cliente HTTP para el profile store y el gateway
    async with httpx.AsyncClient() as client:
        profiles = build_profile_store(settings, client)
        app.state.relay = NotificationRelay(
            profiles,
            ExpoPushGateway.from_settings(settings, client),
            notifications_table=settings.notifications_table,
        )
        logger.info(
            "Relay listo (profiles=%s, tabla=%s, gateway=%s)",
            settings.profile_backend,
            settings.notifications_table,
            settings.push_gateway_url,
        )
        try:
            yield
        finally:
            close = getattr(profiles, "close", None)
            if close is not None:
                close()


def create_app(
    settings: Optional[Settings] = None,
    relay: Optional[NotificationRelay] = None,
) -> FastAPI:
    settings = settings or Settings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    app = FastAPI(title="Push Notification Relay", lifespan=lifespan)
    app.state.settings = settings
    app.state.relay = relay

    # 3) Rutas
    app.include_router(webhooks_router)
    app.include_router(health_router)

    @app.exception_handler(Exception)
    async def unhandled_exception(request: Request, exc: Exception):
        logger.exception("Error no controlado en %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"status": "error", "error": "internal_error", "detail": "internal server error"},
        )

    return app


app = create_app()
