from __future__ import annotations
import logging
from typing import Any, Callable
from prometheus_client import Counter
from customer_sync.models.enums import DBType
from customer_sync.stores.customers import CustomerStore
from customer_sync.validation.tasks import DatabaseConfig
from .base import WarehouseConnector, WarehouseSyncStats

logger = logging.getLogger(__name__)

WAREHOUSE_ROWS = Counter('warehouse_rows_total', 'Warehouse rows processed', ['db_type', 'outcome'])

# Column carrying the warehouse-assigned identifier
ID_COLUMN = "id"


def _default_connect(database: DatabaseConfig):
    from databricks import sql as databricks_sql
    return databricks_sql.connect(
        server_hostname=database.databricks_host or "",
        http_path=database.databricks_path or "",
        access_token=database.databricks_token or "",
    )


class DatabricksConnector(WarehouseConnector):
    """Run the integration's query on a Databricks SQL warehouse and merge rows by `id`.

    `connect` returns a DB-API connection; rows are pulled with fetchmany so at most one chunk
    is held in memory. Cursor and connection are closed whether or not the sync succeeds.
    """

    db_type = DBType.DATABRICKS

    def __init__(self, customers: CustomerStore, connect: Callable[[DatabaseConfig], Any] | None = None,
                 row_cap: int = 10_000_000, chunk_size: int = 1000):
        self.customers = customers
        self._connect = connect or _default_connect
        self.row_cap = row_cap
        self.chunk_size = chunk_size

    def sync(self, database: DatabaseConfig, owner_id: str) -> WarehouseSyncStats:
        stats = WarehouseSyncStats()
        connection = self._connect(database)
        cursor = None
        try:
            cursor = connection.cursor()
            cursor.execute(database.query)
            columns: list[str] | None = None
            while stats.rows_read < self.row_cap:
                chunk = cursor.fetchmany(min(self.chunk_size, self.row_cap - stats.rows_read))
                if not chunk:
                    break
                if columns is None:
                    columns = [d[0] for d in cursor.description]
                stats.chunks += 1
                for raw in chunk:
                    stats.rows_read += 1
                    self.apply_row(dict(zip(columns, raw)), owner_id, stats)
            if stats.rows_read >= self.row_cap:
                logger.warning("databricks sync for database %s stopped at row cap %d", database.id, self.row_cap)
        finally:
            if cursor is not None:
                cursor.close()
            connection.close()
        logger.info("databricks sync for database %s: %s", database.id, stats.as_dict())
        return stats

    def apply_row(self, row: dict[str, Any], owner_id: str, stats: WarehouseSyncStats) -> None:
        external_id = row.get(ID_COLUMN)
        if external_id is None or external_id == "":
            stats.skipped += 1
            WAREHOUSE_ROWS.labels(self.db_type.value, 'skipped').inc()
            return
        values = {k: v for k, v in row.items() if k != ID_COLUMN}
        if self.customers.merge_external(owner_id, str(external_id), values):
            stats.created += 1
            WAREHOUSE_ROWS.labels(self.db_type.value, 'created').inc()
        else:
            stats.updated += 1
            WAREHOUSE_ROWS.labels(self.db_type.value, 'updated').inc()
