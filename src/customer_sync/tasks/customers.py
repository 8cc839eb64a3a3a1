from __future__ import annotations
from celery import shared_task
from customer_sync.config import get_settings, parse_excluded_fields
from customer_sync.infrastructure.db import get_session_factory
from customer_sync.jobs.schema_discovery import SchemaDiscoveryJob
from customer_sync.stores.customers import CustomerStore
from customer_sync.stores.field_metadata import FieldMetadataStore


def build_schema_job() -> SchemaDiscoveryJob:
    settings = get_settings()
    sessions = get_session_factory()
    return SchemaDiscoveryJob(
        customers=CustomerStore(sessions),
        metadata=FieldMetadataStore(sessions),
        excluded_fields=parse_excluded_fields(settings.schema_excluded_fields),
        batch_size=settings.schema_batch_size,
    )


@shared_task
def discover_customer_keys():
    """Infer customer field types and upsert their metadata (every minute)."""
    written = build_schema_job().run()
    return {"status": "ok", "fields": written}
