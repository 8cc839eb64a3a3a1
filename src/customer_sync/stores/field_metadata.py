from __future__ import annotations
from sqlalchemy import select
from sqlalchemy.orm import sessionmaker
from customer_sync.models.enums import FieldType
from customer_sync.models.tables import CustomerKey


class FieldMetadataStore:
    """Field metadata keyed on name: re-running an upsert overwrites type and is_array."""

    def __init__(self, session_factory: sessionmaker):
        self._sessions = session_factory

    def upsert(self, name: str, type: FieldType, is_array: bool) -> None:
        with self._sessions() as session:
            row = session.execute(select(CustomerKey).where(CustomerKey.name == name)).scalar_one_or_none()
            if row is None:
                session.add(CustomerKey(name=name, type=type.value, is_array=is_array))
            else:
                row.type = type.value
                row.is_array = is_array
            session.commit()

    def get(self, name: str) -> CustomerKey | None:
        with self._sessions() as session:
            return session.execute(select(CustomerKey).where(CustomerKey.name == name)).scalar_one_or_none()

    def snapshot(self) -> dict[str, tuple[str, bool]]:
        with self._sessions() as session:
            return {k.name: (k.type, k.is_array) for k in session.execute(select(CustomerKey)).scalars()}
