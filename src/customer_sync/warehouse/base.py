from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, asdict
import logging
from customer_sync.models.enums import DBType
from customer_sync.validation.tasks import DatabaseConfig

logger = logging.getLogger(__name__)


@dataclass
class WarehouseSyncStats:
    rows_read: int = 0
    created: int = 0
    updated: int = 0
    skipped: int = 0
    chunks: int = 0

    def as_dict(self) -> dict:
        return asdict(self)


class WarehouseConnector(ABC):
    db_type: DBType

    @abstractmethod
    def sync(self, database: DatabaseConfig, owner_id: str) -> WarehouseSyncStats:
        """Stream the configured query and merge every row into the customer store."""
        ...


class NoopConnector(WarehouseConnector):
    """Registered for warehouse types without an implementation."""

    def __init__(self, db_type: DBType):
        self.db_type = db_type

    def sync(self, database: DatabaseConfig, owner_id: str) -> WarehouseSyncStats:
        logger.debug("no connector implemented for %s, database %s skipped", self.db_type.value, database.id)
        return WarehouseSyncStats()
