from __future__ import annotations
from datetime import datetime
from sqlalchemy import String, Integer, DateTime, JSON, ForeignKey, Boolean, Text, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship
from customer_sync.infrastructure.db import Base


class Account(Base):
    __tablename__ = "accounts"
    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    email: Mapped[str | None] = mapped_column(String(256), default=None)
    mailgun_api_key: Mapped[str | None] = mapped_column(String(256), default=None, index=True)
    sending_domain: Mapped[str | None] = mapped_column(String(256), default=None)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class Customer(Base):
    """Customer record. Free-form fields live in `attributes`; the rest is structural.

    `version` is the mapper's version counter so concurrent read-modify-write on the
    same row fails with StaleDataError instead of losing an update.
    """
    __tablename__ = "customers"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    owner_id: Mapped[str] = mapped_column(String(64), index=True)
    external_id: Mapped[str | None] = mapped_column(String(128), default=None)
    audiences: Mapped[list] = mapped_column(JSON, default=list)
    attributes: Mapped[dict] = mapped_column(JSON, default=dict)
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __mapper_args__ = {"version_id_col": version}
    __table_args__ = (
        Index("ix_customer_external_owner", "external_id", "owner_id"),
    )


class CustomerKey(Base):
    """Inferred field metadata, one row per distinct customer field name."""
    __tablename__ = "customer_keys"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(256), unique=True, index=True)
    type: Mapped[str] = mapped_column(String(16))
    is_array: Mapped[bool] = mapped_column(Boolean, default=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class Database(Base):
    """Warehouse configuration attached to an integration."""
    __tablename__ = "databases"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str | None] = mapped_column(String(128), default=None)
    db_type: Mapped[str] = mapped_column(String(32), index=True)
    frequency_number: Mapped[int] = mapped_column(Integer, default=1)
    frequency_unit: Mapped[str] = mapped_column(String(16), default="day")
    last_sync: Mapped[datetime | None] = mapped_column(DateTime, default=None)
    query: Mapped[str] = mapped_column(Text, default="")
    databricks_host: Mapped[str | None] = mapped_column(String(256), default=None)
    databricks_path: Mapped[str | None] = mapped_column(String(256), default=None)
    databricks_token: Mapped[str | None] = mapped_column(String(256), default=None)


class Integration(Base):
    __tablename__ = "integrations"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    owner_id: Mapped[str] = mapped_column(ForeignKey("accounts.id"), index=True)
    database_id: Mapped[int | None] = mapped_column(ForeignKey("databases.id"), default=None)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    owner: Mapped[Account] = relationship(lazy="joined")
    database: Mapped[Database | None] = relationship(lazy="joined")


class SendgridEvent(Base):
    """Staging rows written by the inbound SendGrid webhook, drained into the analytical sink."""
    __tablename__ = "sendgrid_events"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    audience_id: Mapped[str] = mapped_column(String(64))
    customer_id: Mapped[str] = mapped_column(String(64))
    message_id: Mapped[str] = mapped_column(String(256))
    event: Mapped[str] = mapped_column(String(64))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
