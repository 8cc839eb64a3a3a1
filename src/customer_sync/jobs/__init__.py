from .schema_discovery import SchemaDiscoveryJob
from .event_ingestion import ProviderEventIngestionJob, IngestionResult
from .warehouse_sync import WarehouseSyncJob, SyncResult, should_sync

__all__ = [
    "SchemaDiscoveryJob",
    "ProviderEventIngestionJob",
    "IngestionResult",
    "WarehouseSyncJob",
    "SyncResult",
    "should_sync",
]
