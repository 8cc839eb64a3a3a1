from .base import WarehouseConnector, NoopConnector, WarehouseSyncStats
from .databricks import DatabricksConnector
from .registry import ConnectorRegistry, default_registry

__all__ = [
    "WarehouseConnector",
    "NoopConnector",
    "WarehouseSyncStats",
    "DatabricksConnector",
    "ConnectorRegistry",
    "default_registry",
]
