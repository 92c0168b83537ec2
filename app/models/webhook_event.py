# app/models/webhook_event.py
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class Operation(str, Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class NotificationRecord(BaseModel):
    """Fila de la tabla notifications tal como llega en el webhook."""
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    user_id: str
    title: str
    body: str

    @field_validator("id", "user_id", mode="before")
    @classmethod
    def _coerce_ids(cls, value: Any) -> Any:
        # ids numéricos (bigint) llegan como int en el JSON
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("id", "user_id")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("no puede estar vacío")
        return value


class WebhookEvent(BaseModel):
    """
    Sobre del database webhook:
      {
        "type": "INSERT",
        "table": "notifications",
        "schema": "public",
        "record": { ... },
        "old_record": null
      }
    'record' se guarda como dict; se convierte a NotificationRecord
    solo cuando el evento es de la tabla de notificaciones.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    operation: Operation = Field(alias="type")
    source_table: str = Field(alias="table", min_length=1)
    schema_name: str = Field(default="public", alias="schema")
    new_record: Optional[Dict[str, Any]] = Field(default=None, alias="record")
    previous_record: Optional[Dict[str, Any]] = Field(default=None, alias="old_record")

    @model_validator(mode="after")
    def _record_required(self) -> "WebhookEvent":
        if self.operation in (Operation.INSERT, Operation.UPDATE) and self.new_record is None:
            raise ValueError(f"'record' es obligatorio para {self.operation.value}")
        return self

    def is_insert_on(self, table: str) -> bool:
        return self.operation is Operation.INSERT and self.source_table == table

    def notification_record(self) -> NotificationRecord:
        """Lanza pydantic.ValidationError si la fila no tiene la forma esperada."""
        return NotificationRecord.model_validate(self.new_record or {})
