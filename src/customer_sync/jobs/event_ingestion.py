from __future__ import annotations
import logging
from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Callable
from prometheus_client import Counter, Gauge
from customer_sync.connectors.base import ProviderEventClient
from customer_sync.connectors.normalizer import normalize_mailgun_page, normalize_sendgrid, item_timestamp
from customer_sync.infrastructure.analytics import MessageStatusSink, WatermarkTracker
from customer_sync.models.records import MessageStatusEvent
from customer_sync.models.tables import Account
from customer_sync.stores.accounts import AccountStore
from customer_sync.stores.staging import SendgridStagingStore

logger = logging.getLogger(__name__)

INGEST_ACCOUNTS = Counter('event_ingest_accounts_total', 'Accounts processed by event ingestion', ['status'])
INGEST_PAGES = Counter('event_ingest_pages_total', 'Provider event pages fetched', ['provider'])
INGEST_EVENTS = Counter('event_ingest_events_total', 'Events written to the sink', ['provider'])
STAGING_DRAINED = Counter('event_ingest_staging_rows_drained_total', 'Staging rows drained into the sink')
WATERMARK_LAG = Gauge('event_ingest_watermark_lag_seconds', 'Seconds between now and the ingestion watermark')

ClientFactory = Callable[[str], ProviderEventClient]


@dataclass
class IngestionResult:
    watermark: datetime | None = None
    accounts_processed: int = 0
    accounts_failed: int = 0
    pages_fetched: int = 0
    events_inserted: int = 0
    staged_rows_drained: int = 0
    drain_batches: int = 0
    pull_status: str = "ok"
    push_status: str = "ok"

    def as_dict(self) -> dict:
        d = asdict(self)
        d["watermark"] = self.watermark.isoformat() if self.watermark else None
        return d


class ProviderEventIngestionJob:
    """Pull Mailgun events forward from the sink watermark and drain staged SendGrid rows.

    Both flows write to the same sink, whose merge key makes re-delivery (overlapping runs,
    a crash between insert and delete) harmless.
    """

    def __init__(self, sink: MessageStatusSink, accounts: AccountStore, staging: SendgridStagingStore,
                 client_factory: ClientFactory, epoch_floor: datetime, batch_size: int = 500,
                 max_pages: int = 10000):
        self.sink = sink
        self.accounts = accounts
        self.staging = staging
        self.client_factory = client_factory
        self.watermarks = WatermarkTracker(sink, epoch_floor)
        self.batch_size = batch_size
        self.max_pages = max_pages

    def run(self) -> IngestionResult:
        result = IngestionResult()
        try:
            self.ingest_pull_provider(result)
        except Exception:
            result.pull_status = "error"
            logger.exception("mailgun ingestion aborted")
        try:
            self.drain_push_provider(result)
        except Exception:
            result.push_status = "error"
            logger.exception("sendgrid staging drain aborted")
        logger.info(
            "event ingestion finished: %d accounts (%d failed), %d pages, %d events, %d staged rows drained",
            result.accounts_processed, result.accounts_failed, result.pages_fetched,
            result.events_inserted, result.staged_rows_drained,
        )
        return result

    # -- pull based provider -------------------------------------------------

    def ingest_pull_provider(self, result: IngestionResult) -> None:
        watermark = self.watermarks.read()
        result.watermark = watermark
        WATERMARK_LAG.set(max(0.0, (datetime.utcnow() - watermark).total_seconds()))
        total = self.accounts.count_with_mailgun()
        offset = 0
        while offset < total:
            for account in self.accounts.find_with_mailgun(offset, self.batch_size):
                try:
                    events, pages = self.fetch_account_events(account, watermark)
                    result.pages_fetched += pages
                    if events:
                        result.events_inserted += self.sink.insert_batch(events)
                        INGEST_EVENTS.labels('mailgun').inc(len(events))
                    result.accounts_processed += 1
                    INGEST_ACCOUNTS.labels('ok').inc()
                except Exception:
                    result.accounts_failed += 1
                    INGEST_ACCOUNTS.labels('error').inc()
                    logger.exception("mailgun ingestion failed for account %s", account.id)
            offset += self.batch_size

    def fetch_account_events(self, account: Account, watermark: datetime) -> tuple[list[MessageStatusEvent], int]:
        """Follow pagination until a page ends at or before the watermark.

        Also stops on an empty page or a missing next-page token, which is how the provider
        signals end of data once the cursor has caught up.
        """
        if not account.sending_domain:
            raise ValueError(f"account {account.id} has an API key but no sending domain")
        client = self.client_factory(account.mailgun_api_key)
        begin = self.watermarks.begin_after(watermark)
        batch: list[MessageStatusEvent] = []
        token: str | None = None
        pages = 0
        while pages < self.max_pages:
            page = client.instrumented_list_events(account.sending_domain, begin, ascending=True, page=token)
            pages += 1
            INGEST_PAGES.labels('mailgun').inc()
            if not page.items:
                break
            batch.extend(normalize_mailgun_page(page.items))
            last_ts = item_timestamp(page.items[-1])
            if last_ts is None or last_ts <= watermark or not page.next_page:
                break
            token = page.next_page
        else:
            logger.warning("mailgun pagination for account %s stopped at page cap %d", account.id, self.max_pages)
        return batch, pages

    # -- push based provider -------------------------------------------------

    def drain_push_provider(self, result: IngestionResult) -> None:
        rows = self.staging.take_batch(self.batch_size)
        while rows:
            events = [ev for ev in (normalize_sendgrid(r) for r in rows) if ev is not None]
            if events:
                result.events_inserted += self.sink.insert_batch(events)
                INGEST_EVENTS.labels('sendgrid').inc(len(events))
            for row in rows:
                self.staging.delete(row)
            result.staged_rows_drained += len(rows)
            result.drain_batches += 1
            STAGING_DRAINED.inc(len(rows))
            rows = self.staging.take_batch(self.batch_size)
