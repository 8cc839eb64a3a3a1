"""Analytical sink for message status events and the watermark read from it.

The sink is an explicitly constructed handle: open() on worker start, close() on shutdown.
Rows are keyed by (audience_id, customer_id, message_id, event). Writes are single-statement
INSERT ... ON CONFLICT DO UPDATE upserts on that key, so re-ingesting an event replaces the
previous row instead of duplicating it, also when two runs write the same key concurrently.
"""
from __future__ import annotations
import logging
from datetime import datetime, timedelta
from typing import Iterable
from sqlalchemy import String, DateTime, select, func
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, sessionmaker
from prometheus_client import Counter
from customer_sync.models.records import MessageStatusEvent
from customer_sync.infrastructure.db import make_engine

logger = logging.getLogger(__name__)

SINK_ROWS_WRITTEN = Counter('message_status_rows_written_total', 'Message status rows merged into the sink', ['provider'])

# Dialects with INSERT ... ON CONFLICT support
_DIALECT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}

KEY_COLUMNS = ["audience_id", "customer_id", "message_id", "event"]


class AnalyticsBase(DeclarativeBase):
    pass


class MessageStatus(AnalyticsBase):
    __tablename__ = "message_status"
    audience_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    customer_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    message_id: Mapped[str] = mapped_column(String(256), primary_key=True)
    event: Mapped[str] = mapped_column(String(64), primary_key=True)
    event_provider: Mapped[str] = mapped_column(String(16))
    created_at: Mapped[datetime] = mapped_column(DateTime, index=True)


class MessageStatusSink:
    # rows per upsert statement, under the SQLite bound-parameter limit
    statement_rows = 1000

    def __init__(self, url: str | None = None, engine=None):
        if url is None and engine is None:
            raise ValueError("MessageStatusSink needs a url or an engine")
        self._url = url
        self._engine = engine
        self._owns_engine = engine is None
        self._sessions: sessionmaker | None = None

    @property
    def is_open(self) -> bool:
        return self._sessions is not None

    def open(self) -> "MessageStatusSink":
        if self._sessions is not None:
            return self
        if self._engine is None:
            self._engine = make_engine(self._url)
        if self._engine.dialect.name not in _DIALECT_INSERTS:
            raise ValueError(f"message status sink does not support the {self._engine.dialect.name} dialect")
        AnalyticsBase.metadata.create_all(self._engine)
        self._sessions = sessionmaker(bind=self._engine, autoflush=False, expire_on_commit=False)
        logger.info("message status sink opened")
        return self

    def close(self):
        if self._sessions is None:
            return
        self._sessions = None
        if self._owns_engine and self._engine is not None:
            self._engine.dispose()
            self._engine = None
        logger.info("message status sink closed")

    def __enter__(self):
        return self.open()

    def __exit__(self, *exc):
        self.close()

    def _session(self):
        if self._sessions is None:
            raise RuntimeError("MessageStatusSink is not open")
        return self._sessions()

    def max_timestamp(self) -> datetime | None:
        with self._session() as session:
            return session.execute(select(func.max(MessageStatus.created_at))).scalar()

    @property
    def engine(self):
        return self._engine

    def upsert_statement(self, events: Iterable[MessageStatusEvent]):
        """Single INSERT ... ON CONFLICT DO UPDATE for `events`; the key conflict is resolved by the database."""
        rows = [{
            "audience_id": ev.audience_id,
            "customer_id": ev.customer_id,
            "message_id": ev.message_id,
            "event": ev.event_type,
            "event_provider": ev.provider_name,
            "created_at": ev.created_at,
        } for ev in events]
        stmt = _DIALECT_INSERTS[self._engine.dialect.name](MessageStatus).values(rows)
        return stmt.on_conflict_do_update(
            index_elements=KEY_COLUMNS,
            set_={"event_provider": stmt.excluded.event_provider, "created_at": stmt.excluded.created_at},
        )

    def insert_batch(self, events: Iterable[MessageStatusEvent]) -> int:
        """Upsert events on their composite key; the last write for a key wins."""
        latest: dict[tuple[str, str, str, str], MessageStatusEvent] = {}
        for ev in events:
            latest[ev.key] = ev
        if not latest:
            return 0
        pending = list(latest.values())
        with self._session() as session:
            for i in range(0, len(pending), self.statement_rows):
                session.execute(self.upsert_statement(pending[i:i + self.statement_rows]))
            session.commit()
        for ev in pending:
            SINK_ROWS_WRITTEN.labels(ev.provider_name).inc()
        return len(pending)

    def count_by_key(self, audience_id: str, customer_id: str, message_id: str, event: str) -> int:
        with self._session() as session:
            stmt = select(func.count()).select_from(MessageStatus).where(
                MessageStatus.audience_id == audience_id,
                MessageStatus.customer_id == customer_id,
                MessageStatus.message_id == message_id,
                MessageStatus.event == event,
            )
            return session.execute(stmt).scalar_one()

    def count(self) -> int:
        with self._session() as session:
            return session.execute(select(func.count()).select_from(MessageStatus)).scalar_one()


class WatermarkTracker:
    """Latest durably ingested event time, used as the lower bound of the next fetch."""

    step = timedelta(seconds=1)

    def __init__(self, sink: MessageStatusSink, floor: datetime):
        self._sink = sink
        self._floor = floor

    def read(self) -> datetime:
        latest = self._sink.max_timestamp()
        if latest is None:
            logger.info("no ingested events yet, starting from %s", self._floor.isoformat())
            return self._floor
        return latest

    def begin_after(self, watermark: datetime) -> datetime:
        # exclude events sitting exactly on the boundary (already stored)
        return watermark + self.step
