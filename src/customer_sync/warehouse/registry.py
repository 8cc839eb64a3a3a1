from __future__ import annotations
from typing import Mapping
from customer_sync.models.enums import DBType
from customer_sync.stores.customers import CustomerStore
from .base import WarehouseConnector, NoopConnector
from .databricks import DatabricksConnector


class ConnectorRegistry:
    """Warehouse type -> connector. Every DBType must be registered, unimplemented ones as NoopConnector."""

    def __init__(self, connectors: Mapping[DBType, WarehouseConnector]):
        missing = [t.value for t in DBType if t not in connectors]
        if missing:
            raise ValueError(f"no connector registered for: {', '.join(missing)}")
        self._connectors = dict(connectors)

    def get(self, db_type: DBType) -> WarehouseConnector:
        return self._connectors[DBType(db_type)]

    def implemented(self) -> list[DBType]:
        return [t for t, c in self._connectors.items() if not isinstance(c, NoopConnector)]


def default_registry(customers: CustomerStore, row_cap: int = 10_000_000, chunk_size: int = 1000) -> ConnectorRegistry:
    return ConnectorRegistry({
        DBType.DATABRICKS: DatabricksConnector(customers, row_cap=row_cap, chunk_size=chunk_size),
        DBType.POSTGRESQL: NoopConnector(DBType.POSTGRESQL),
    })
