"""Shared test fixtures: in-memory SQLite stores and an open analytical sink."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ANALYTICS_DATABASE_URL", "sqlite://")

from datetime import datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from customer_sync.infrastructure import db
from customer_sync.infrastructure.analytics import MessageStatusSink
from customer_sync.models import tables
from customer_sync.models.records import CustomerRecord
from customer_sync.stores import (
    AccountStore,
    CustomerStore,
    FieldMetadataStore,
    IntegrationStore,
    SendgridStagingStore,
)


def _memory_engine():
    return create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)


@pytest.fixture
def engine():
    e = _memory_engine()
    db.Base.metadata.create_all(e)
    yield e
    e.dispose()


@pytest.fixture
def sessions(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def bound_engine(engine):
    """Point the module-level session factory (used by celery tasks) at the test engine."""
    previous = db.engine
    db.override_engine(engine)
    yield engine
    db.override_engine(previous)


@pytest.fixture
def sink():
    e = _memory_engine()
    s = MessageStatusSink(engine=e).open()
    yield s
    s.close()
    e.dispose()


@pytest.fixture
def customer_store(sessions):
    return CustomerStore(sessions)


@pytest.fixture
def metadata_store(sessions):
    return FieldMetadataStore(sessions)


@pytest.fixture
def account_store(sessions):
    return AccountStore(sessions)


@pytest.fixture
def staging_store(sessions):
    return SendgridStagingStore(sessions)


@pytest.fixture
def integration_store(sessions):
    return IntegrationStore(sessions)


@pytest.fixture
def add_customers(customer_store):
    def _add(*field_maps, owner_id="acc-1"):
        return [customer_store.upsert(CustomerRecord(owner_id=owner_id, fields=dict(f))) for f in field_maps]
    return _add


@pytest.fixture
def add_integration(sessions):
    """Factory creating an account + database + integration row; returns the integration id."""

    def _add(db_type="databricks", last_sync=None, frequency_number=1, frequency_unit="day",
             owner_id="acc-1", with_database=True, query="SELECT * FROM customers"):
        with sessions() as session:
            if session.get(tables.Account, owner_id) is None:
                session.add(tables.Account(id=owner_id))
            database = None
            if with_database:
                database = tables.Database(
                    db_type=db_type,
                    frequency_number=frequency_number,
                    frequency_unit=frequency_unit,
                    last_sync=last_sync,
                    query=query,
                    databricks_host="dbc.example.cloud",
                    databricks_path="/sql/1.0/warehouses/abc",
                    databricks_token="token",
                )
                session.add(database)
                session.flush()
            integration = tables.Integration(owner_id=owner_id, database_id=database.id if database else None)
            session.add(integration)
            session.commit()
            return integration.id

    return _add


@pytest.fixture
def fixed_now():
    return datetime(2026, 10, 18, 12, 0, 0)
