from __future__ import annotations
from sqlalchemy import select, delete
from sqlalchemy.orm import sessionmaker
from customer_sync.models.tables import SendgridEvent


class SendgridStagingStore:
    """Rows written once by the SendGrid webhook and consumed once by the ingestion job."""

    def __init__(self, session_factory: sessionmaker):
        self._sessions = session_factory

    def take_batch(self, limit: int) -> list[SendgridEvent]:
        with self._sessions() as session:
            stmt = select(SendgridEvent).order_by(SendgridEvent.id).limit(limit)
            return list(session.execute(stmt).scalars().all())

    def delete(self, row: SendgridEvent) -> None:
        with self._sessions() as session:
            session.execute(delete(SendgridEvent).where(SendgridEvent.id == row.id))
            session.commit()
