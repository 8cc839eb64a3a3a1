from __future__ import annotations
from datetime import datetime
from typing import Iterator
from sqlalchemy import select, update, func
from sqlalchemy.orm import sessionmaker
from customer_sync.models.tables import Integration, Database


class IntegrationStore:
    def __init__(self, session_factory: sessionmaker):
        self._sessions = session_factory

    def count(self) -> int:
        with self._sessions() as session:
            return session.execute(select(func.count()).select_from(Integration)).scalar_one()

    def find_batch(self, offset: int, limit: int) -> list[Integration]:
        with self._sessions() as session:
            stmt = select(Integration).order_by(Integration.id).offset(offset).limit(limit)
            return list(session.execute(stmt).unique().scalars().all())

    def iter_batches(self, limit: int) -> Iterator[list[Integration]]:
        total = self.count()
        offset = 0
        while offset < total:
            batch = self.find_batch(offset, limit)
            if not batch:
                break
            yield batch
            offset += limit

    def save_last_sync(self, database_id: int, ts: datetime) -> None:
        with self._sessions() as session:
            session.execute(update(Database).where(Database.id == database_id).values(last_sync=ts))
            session.commit()

    def get_database(self, database_id: int) -> Database | None:
        with self._sessions() as session:
            return session.get(Database, database_id)
