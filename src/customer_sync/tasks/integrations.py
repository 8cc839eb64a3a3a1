from __future__ import annotations
import logging
from celery import shared_task
from customer_sync.config import get_settings
from customer_sync.errors import InvalidSyncTask
from customer_sync.infrastructure.db import get_session_factory
from customer_sync.jobs.warehouse_sync import WarehouseSyncJob
from customer_sync.stores.customers import CustomerStore
from customer_sync.stores.integrations import IntegrationStore
from customer_sync.validation.tasks import integration_to_payload
from customer_sync.warehouse.registry import default_registry

logger = logging.getLogger(__name__)

INTEGRATIONS_QUEUE = "integrations"


def build_sync_job(registry=None) -> WarehouseSyncJob:
    settings = get_settings()
    sessions = get_session_factory()
    if registry is None:
        registry = default_registry(
            CustomerStore(sessions),
            row_cap=settings.warehouse_row_cap,
            chunk_size=settings.warehouse_chunk_size,
        )
    return WarehouseSyncJob(registry=registry, integrations=IntegrationStore(sessions))


@shared_task(throws=(InvalidSyncTask,))
def sync_integration(payload: dict):
    """Sync one integration's warehouse rows into the customer store.

    InvalidSyncTask propagates: a task without database configuration is not retried.
    """
    return build_sync_job().run(payload).as_dict()


@shared_task
def dispatch_integration_syncs():
    """Queue one sync_integration task per integration (hourly); the due check runs in the task."""
    settings = get_settings()
    store = IntegrationStore(get_session_factory())
    dispatched = 0
    skipped = 0
    for batch in store.iter_batches(settings.integration_dispatch_batch):
        for integration in batch:
            if integration.database is None:
                skipped += 1
                logger.warning("integration %s has no database configuration, not queued", integration.id)
                continue
            sync_integration.apply_async(args=[integration_to_payload(integration)], queue=INTEGRATIONS_QUEUE)
            dispatched += 1
    return {"status": "dispatched", "dispatched": dispatched, "skipped": skipped}
