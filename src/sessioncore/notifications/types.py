"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Notification and feed event types.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..errors import ParseError
from ..utils import ensure_aware, local_to_utc


class NotificationCategory(str, Enum):
    NEW_ENTITY_CREATED = "new_client"
    OPERATIONAL_ERROR = "error"
    INFORMATIONAL = "info"


@dataclass(frozen=True, slots=True)
class EntityRef:
    """Opaque id/name pair of the business entity a notification is about."""

    id: str = ""
    name: str = ""


@dataclass(frozen=True, slots=True)
class NotificationEvent:
    """
    One retained notification.

    Attributes:
        id: Unique notification identifier.
        category: Taxonomy category.
        title: Short headline.
        message: Body text.
        timestamp: Aware UTC datetime the source event happened (insertion
            time for notifications added directly).
        read: Whether the user has seen it.
        entity_ref: Entity the notification is about.
        data: Opaque JSON payload of the source feed event.
    """

    id: str
    category: NotificationCategory
    title: str
    message: str
    timestamp: datetime
    read: bool = False
    entity_ref: EntityRef = field(default_factory=EntityRef)
    data: dict[str, Any] = field(default_factory=dict)

    def as_read(self) -> "NotificationEvent":
        return self if self.read else replace(self, read=True)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.category.value,
            "title": self.title,
            "message": self.message,
            "timestamp": self.timestamp.isoformat(),
            "read": self.read,
            "entity": {"id": self.entity_ref.id, "name": self.entity_ref.name},
            "data": self.data,
        }

    @staticmethod
    def from_dict(row: Any) -> "NotificationEvent":
        if not isinstance(row, dict):
            raise ParseError("Stored notification is not an object")
        try:
            entity = row.get("entity") if isinstance(row.get("entity"), dict) else {}
            return NotificationEvent(
                id=str(row["id"]),
                category=NotificationCategory(row["type"]),
                title=str(row.get("title", "")),
                message=str(row.get("message", "")),
                timestamp=ensure_aware(datetime.fromisoformat(row["timestamp"])),
                read=bool(row.get("read", False)),
                entity_ref=EntityRef(
                    id=str(entity.get("id", "")),
                    name=str(entity.get("name", "")),
                ),
                data=row.get("data") if isinstance(row.get("data"), dict) else {},
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ParseError(f"Stored notification is malformed: {e}") from e


class FeedEvent(BaseModel):
    """Integration log row as returned by the event feed; unknown fields are kept."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    created_at: datetime
    title: str | None = None
    acao: str | None = None
    code_log: str | None = Field(default=None, alias="codeLog")
    id_cliente: str | None = None
    nome_cliente: str | None = None
    cliente_nome: str | None = None

    @field_validator("id_cliente", "code_log", "title", "acao", "nome_cliente", "cliente_nome", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @classmethod
    def parse(cls, raw: Any) -> "FeedEvent":
        if isinstance(raw, FeedEvent):
            return raw
        if not isinstance(raw, dict):
            raise ParseError("Feed event is not an object")
        try:
            return cls.model_validate(raw)
        except ValidationError as e:
            raise ParseError(f"Malformed feed event: {e.error_count()} error(s)") from e

    @property
    def timestamp(self) -> datetime:
        return local_to_utc(self.created_at)

    @property
    def code(self) -> str:
        return (self.code_log or "").strip().lower()

    @property
    def entity_ref(self) -> EntityRef:
        return EntityRef(
            id=(self.id_cliente or "").strip(),
            name=(self.nome_cliente or self.cliente_nome or "").strip(),
        )

    def match_text(self) -> str:
        return f"{self.title or ''} {self.acao or ''}".lower()

    def payload(self) -> dict[str, Any]:
        data = self.model_dump(mode="json", by_alias=True)
        ref = self.entity_ref
        data["clienteId"] = ref.id
        data["clienteNome"] = ref.name
        return data
