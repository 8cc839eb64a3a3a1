from __future__ import annotations
import logging
import time
from collections import defaultdict
from typing import Any, Iterable
from prometheus_client import Counter, Histogram
from customer_sync.schema.inference import infer
from customer_sync.stores.customers import CustomerStore
from customer_sync.stores.field_metadata import FieldMetadataStore

logger = logging.getLogger(__name__)

SCHEMA_RUNS = Counter('schema_discovery_runs_total', 'Schema discovery runs', ['status'])
SCHEMA_FIELDS_WRITTEN = Counter('schema_discovery_fields_written_total', 'Field metadata upserts')
SCHEMA_RUN_DURATION = Histogram('schema_discovery_duration_seconds', 'Schema discovery runtime', buckets=(0.1,0.5,1,5,15,60,300))


class SchemaDiscoveryJob:
    """Scan all customer records in offset batches and upsert one metadata row per field.

    The total is a snapshot taken before the scan; records inserted meanwhile may be missed
    or seen twice. Writes are upserts so the next run repairs any drift.
    """

    def __init__(self, customers: CustomerStore, metadata: FieldMetadataStore,
                 excluded_fields: Iterable[str], batch_size: int = 500):
        self.customers = customers
        self.metadata = metadata
        self.excluded_fields = frozenset(excluded_fields)
        self.batch_size = batch_size

    def collect_samples(self, total: int) -> dict[str, list[Any]]:
        samples: dict[str, list[Any]] = defaultdict(list)
        offset = 0
        while offset < total:
            for record in self.customers.find_batch(offset, self.batch_size):
                for name, value in record.to_fields().items():
                    if name in self.excluded_fields:
                        continue
                    samples[name].append(value)
            offset += self.batch_size
        return samples

    def run(self) -> int:
        start = time.time()
        written = 0
        try:
            logger.info("customer keys job started")
            total = self.customers.count()
            samples = self.collect_samples(total)
            for name, values in samples.items():
                inferred = infer(values)
                if inferred is None:
                    continue
                self.metadata.upsert(name, inferred.type, inferred.is_array)
                SCHEMA_FIELDS_WRITTEN.inc()
                written += 1
            logger.info("customer keys job finished, checked %d records, found %d keys", total, len(samples))
            SCHEMA_RUNS.labels('ok').inc()
        except Exception:
            logger.exception("customer keys job failed after %d field upserts", written)
            SCHEMA_RUNS.labels('error').inc()
        finally:
            SCHEMA_RUN_DURATION.observe(time.time() - start)
        return written
