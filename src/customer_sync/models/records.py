"""Plain value types passed between stores and jobs."""
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

# Names under which structural columns appear in CustomerRecord.to_fields()
ID_FIELD = "_id"
VERSION_FIELD = "__v"
AUDIENCES_FIELD = "audiences"
OWNER_FIELD = "ownerId"
EXTERNAL_ID_FIELD = "externalId"


@dataclass
class CustomerRecord:
    """Sparse customer record: structural columns plus a free-form field mapping."""

    owner_id: str
    fields: dict[str, Any] = field(default_factory=dict)
    id: int | None = None
    external_id: str | None = None
    version: int | None = None
    audiences: list[Any] = field(default_factory=list)

    def to_fields(self) -> dict[str, Any]:
        flat: dict[str, Any] = {
            ID_FIELD: self.id,
            VERSION_FIELD: self.version,
            AUDIENCES_FIELD: self.audiences,
            OWNER_FIELD: self.owner_id,
        }
        if self.external_id is not None:
            flat[EXTERNAL_ID_FIELD] = self.external_id
        flat.update(self.fields)
        return flat

    @classmethod
    def from_row(cls, row) -> "CustomerRecord":
        return cls(
            id=row.id,
            owner_id=row.owner_id,
            external_id=row.external_id,
            version=row.version,
            audiences=list(row.audiences or []),
            fields=dict(row.attributes or {}),
        )


@dataclass(frozen=True)
class MessageStatusEvent:
    """One delivery-lifecycle event. Identity is (audience_id, customer_id, message_id, event_type)."""

    audience_id: str
    customer_id: str
    message_id: str
    event_type: str
    provider_name: str
    created_at: datetime

    @property
    def key(self) -> tuple[str, str, str, str]:
        return (self.audience_id, self.customer_id, self.message_id, self.event_type)
