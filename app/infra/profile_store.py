# app/infra/profile_store.py
import asyncio
import logging
from typing import Optional, Protocol

import httpx
from azure.core.exceptions import AzureError, ResourceNotFoundError
from azure.data.tables import TableClient, TableServiceClient
from pydantic import ValidationError

from app.config import Settings
from app.errors import ConfigError, ProfileStoreError
from app.models.push_message import UserPushProfile

logger = logging.getLogger(__name__)


class ProfileStore(Protocol):
    async def get_push_profile(self, user_id: str) -> Optional[UserPushProfile]:
        """None si el usuario no existe."""
        ...


class SupabaseProfileStore:
    """
    Lectura del push_token vía la API REST (PostgREST) del backend:
      GET {url}/rest/v1/users?id=eq.<id>&select=id,push_token
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str,
        service_role_key: str,
        table: str = "users",
        timeout: float = 10.0,
    ):
        self.client = client
        self.base_url = base_url.rstrip("/")
        self.service_role_key = service_role_key
        self.table = table
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings, client: httpx.AsyncClient) -> "SupabaseProfileStore":
        if not settings.supabase_url or not settings.supabase_service_role_key:
            raise ConfigError("SUPABASE_URL y SUPABASE_SERVICE_ROLE_KEY son obligatorias")
        return cls(
            client,
            settings.supabase_url,
            settings.supabase_service_role_key,
            table=settings.users_table,
            timeout=settings.profile_timeout_seconds,
        )

    async def get_push_profile(self, user_id: str) -> Optional[UserPushProfile]:
        url = f"{self.base_url}/rest/v1/{self.table}"
        headers = {
            "apikey": self.service_role_key,
            "Authorization": f"Bearer {self.service_role_key}",
            "Accept": "application/json",
        }
        params = {"id": f"eq.{user_id}", "select": "id,push_token", "limit": "1"}

        try:
            response = await self.client.get(url, headers=headers, params=params, timeout=self.timeout)
            response.raise_for_status()
            rows = response.json()
        except httpx.HTTPStatusError as e:
            logger.error("Lookup de perfil falló para %s: HTTP %s", user_id, e.response.status_code)
            raise ProfileStoreError(f"profile store returned HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.error("Profile store inalcanzable en %s: %s", url, e)
            raise ProfileStoreError(f"profile store unreachable: {e}") from e
        except ValueError as e:
            raise ProfileStoreError("profile store returned invalid JSON") from e

        if not isinstance(rows, list):
            raise ProfileStoreError("profile store returned an unexpected payload")
        if not rows:
            return None

        row = rows[0]
        if not isinstance(row, dict):
            raise ProfileStoreError(f"profile row for user {user_id} is not an object")
        try:
            return UserPushProfile(user_id=str(row.get("id", user_id)), push_token=row.get("push_token"))
        except ValidationError as e:
            logger.error("Perfil inválido para %s: %s", user_id, e)
            raise ProfileStoreError(f"profile row for user {user_id} is malformed") from e


class TableProfileStore:
    """
    Perfiles guardados en Azure Table Storage:
    PartitionKey = partición fija (p.ej. "users"), RowKey = user_id.
    """

    def __init__(self, table_client: TableClient, partition_key: str = "users"):
        self.table_client = table_client
        self.partition_key = partition_key

    @classmethod
    def from_settings(cls, settings: Settings) -> "TableProfileStore":
        if not settings.azure_storage_connection_string:
            raise ConfigError("AZURE_STORAGE_CONNECTION_STRING no está configurada")
        service = TableServiceClient.from_connection_string(conn_str=settings.azure_storage_connection_string)
        return cls(
            service.get_table_client(table_name=settings.users_table),
            partition_key=settings.users_partition,
        )

    def _get_entity(self, user_id: str) -> Optional[UserPushProfile]:
        try:
            entity = self.table_client.get_entity(partition_key=self.partition_key, row_key=user_id)
        except ResourceNotFoundError:
            return None
        except AzureError as e:
            logger.error("Table Storage falló leyendo %s: %s", user_id, e)
            raise ProfileStoreError(f"table storage error: {e}") from e
        try:
            return UserPushProfile(user_id=user_id, push_token=entity.get("push_token"))
        except ValidationError as e:
            logger.error("Perfil inválido para %s: %s", user_id, e)
            raise ProfileStoreError(f"profile entity for user {user_id} is malformed") from e

    async def get_push_profile(self, user_id: str) -> Optional[UserPushProfile]:
        # el SDK de tablas es síncrono
        return await asyncio.to_thread(self._get_entity, user_id)

    def close(self) -> None:
        self.table_client.close()


def build_profile_store(settings: Settings, client: httpx.AsyncClient) -> ProfileStore:
    if settings.profile_backend == "azure_table":
        return TableProfileStore.from_settings(settings)
    return SupabaseProfileStore.from_settings(settings, client)
