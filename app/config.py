# app/config.py
from typing import Literal, Optional

from pydantic import PositiveFloat, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.errors import ConfigError

EXPO_PUSH_URL = "https://exp.host/--/api/v2/push/send"


class Settings(BaseSettings):
    """
    Configuración del proceso. Se lee una sola vez al arrancar
    (después de load_dotenv) y se inyecta donde haga falta.
    """
    model_config = SettingsConfigDict(
        case_sensitive=False,
        extra="ignore",
        env_ignore_empty=True,
        frozen=True,
    )

    supabase_url: Optional[str] = None
    supabase_service_role_key: Optional[str] = None
    expo_access_token: Optional[str] = None
    push_gateway_url: str = EXPO_PUSH_URL
    push_timeout_seconds: PositiveFloat = 10.0
    profile_timeout_seconds: PositiveFloat = 10.0
    profile_backend: Literal["supabase", "azure_table"] = "supabase"
    users_table: str = "users"
    users_partition: str = "users"
    azure_storage_connection_string: Optional[str] = None
    notifications_table: str = "notifications"
    webhook_secret: Optional[str] = None
    webhook_jwt_secret: Optional[str] = None
    jwt_alg: str = "HS256"
    log_level: str = "INFO"

    @field_validator(
        "supabase_url",
        "supabase_service_role_key",
        "expo_access_token",
        "azure_storage_connection_string",
        "webhook_secret",
        "webhook_jwt_secret",
        mode="before",
    )
    @classmethod
    def _blank_is_unset(cls, value):
        if isinstance(value, str):
            return value.strip() or None
        return value

    @field_validator("profile_backend", mode="before")
    @classmethod
    def _lower_backend(cls, value):
        return value.strip().lower() if isinstance(value, str) else value

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, value):
        return value.strip().upper() if isinstance(value, str) else value

    @classmethod
    def from_env(cls) -> "Settings":
        try:
            return cls()
        except ValidationError as e:
            raise ConfigError(f"configuración inválida: {e}") from e
