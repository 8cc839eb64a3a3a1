from __future__ import annotations
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable
from prometheus_client import Counter
from customer_sync.stores.integrations import IntegrationStore
from customer_sync.validation.tasks import DatabaseConfig, parse_sync_task
from customer_sync.warehouse.registry import ConnectorRegistry

logger = logging.getLogger(__name__)

WAREHOUSE_SYNCS = Counter('warehouse_syncs_total', 'Warehouse sync task outcomes', ['db_type', 'status'])


@dataclass
class SyncResult:
    status: str
    integration_id: int | None = None
    database_id: int | None = None
    stats: dict = field(default_factory=dict)
    error: str | None = None

    def as_dict(self) -> dict:
        return {
            "status": self.status,
            "integration_id": self.integration_id,
            "database_id": self.database_id,
            "stats": self.stats,
            "error": self.error,
        }


def should_sync(database: DatabaseConfig, now: datetime) -> bool:
    """Due check for an integration.

    Syncs only while `last_sync + frequency` has not yet passed; once the due time is in the
    past the task is skipped. A database that was never synced counts from the Unix epoch, so
    its due time is long past and it is skipped as well.
    """
    return not (database.due_at < now)


class WarehouseSyncJob:
    def __init__(self, registry: ConnectorRegistry, integrations: IntegrationStore,
                 clock: Callable[[], datetime] = datetime.utcnow):
        self.registry = registry
        self.integrations = integrations
        self.clock = clock

    def run(self, payload: dict) -> SyncResult:
        """Run one queued integration sync. Raises InvalidSyncTask for malformed payloads."""
        integration, database = parse_sync_task(payload)
        result = SyncResult(status="ok", integration_id=integration.id, database_id=database.id)
        if not should_sync(database, self.clock()):
            result.status = "skipped"
            WAREHOUSE_SYNCS.labels(database.db_type.value, 'skipped').inc()
            logger.debug("integration %s not synced, due at %s", integration.id, database.due_at)
            return result
        connector = self.registry.get(database.db_type)
        try:
            stats = connector.sync(database, integration.owner.id)
        except Exception as e:
            result.status = "error"
            result.error = str(e)[:250]
            WAREHOUSE_SYNCS.labels(database.db_type.value, 'error').inc()
            logger.exception("warehouse sync failed for integration %s (database %s)", integration.id, database.id)
            return result
        self.integrations.save_last_sync(database.id, self.clock())
        result.stats = stats.as_dict()
        WAREHOUSE_SYNCS.labels(database.db_type.value, 'ok').inc()
        return result
