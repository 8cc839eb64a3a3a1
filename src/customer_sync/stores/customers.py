from __future__ import annotations
import logging
from datetime import datetime, date
from decimal import Decimal
from typing import Any, Mapping
from sqlalchemy import select, func
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.orm.exc import StaleDataError
from customer_sync.models.records import CustomerRecord
from customer_sync.models.tables import Customer

logger = logging.getLogger(__name__)


def sanitize_value(obj):
    """Coerce warehouse values into JSON-storable shapes."""
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, Decimal):
        return float(obj)
    if isinstance(obj, dict):
        return {k: sanitize_value(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [sanitize_value(v) for v in obj]
    return obj


class CustomerStore:
    """Customer record store.

    Read-modify-write paths (`upsert`, `merge_external`) lock the row for the duration of the
    transaction and rely on the mapper version counter, so two writers racing on the same
    record cannot silently overwrite each other.
    """

    def __init__(self, session_factory: sessionmaker):
        self._sessions = session_factory

    def count(self) -> int:
        with self._sessions() as session:
            return session.execute(select(func.count()).select_from(Customer)).scalar_one()

    def find_batch(self, offset: int, limit: int) -> list[CustomerRecord]:
        with self._sessions() as session:
            rows = session.execute(
                select(Customer).order_by(Customer.id).offset(offset).limit(limit)
            ).scalars().all()
            return [CustomerRecord.from_row(r) for r in rows]

    def find_one(self, external_id: str, owner_id: str) -> CustomerRecord | None:
        with self._sessions() as session:
            row = self._lookup(session, external_id, owner_id)
            return CustomerRecord.from_row(row) if row else None

    def upsert(self, record: CustomerRecord) -> CustomerRecord:
        session: Session = self._sessions()
        try:
            row = None
            if record.id is not None:
                row = session.execute(
                    select(Customer).where(Customer.id == record.id).with_for_update()
                ).scalar_one_or_none()
                if row is not None and record.version is not None and row.version != record.version:
                    raise StaleDataError(
                        f"customer {record.id} changed since read (version {record.version} != {row.version})"
                    )
            if row is None:
                row = Customer(owner_id=record.owner_id)
                session.add(row)
            row.owner_id = record.owner_id
            row.external_id = record.external_id
            row.audiences = list(record.audiences)
            row.attributes = sanitize_value(dict(record.fields))
            session.commit()
            return CustomerRecord.from_row(row)
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def merge_external(self, owner_id: str, external_id: str, values: Mapping[str, Any]) -> bool:
        """Merge warehouse values into the record correlated by (external_id, owner_id).

        Existing fields not present in `values` are kept. Returns True when a record was created.
        """
        session: Session = self._sessions()
        try:
            clean = sanitize_value(dict(values))
            row = self._lookup(session, external_id, owner_id, lock=True)
            created = row is None
            if created:
                session.add(Customer(owner_id=owner_id, external_id=external_id, audiences=[], attributes=clean))
            else:
                # reassign so the JSON column is flagged dirty
                row.attributes = {**(row.attributes or {}), **clean}
            session.commit()
            return created
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    @staticmethod
    def _lookup(session: Session, external_id: str, owner_id: str, lock: bool = False) -> Customer | None:
        stmt = select(Customer).where(Customer.external_id == external_id, Customer.owner_id == owner_id)
        if lock:
            stmt = stmt.with_for_update()
        return session.execute(stmt).scalars().first()
