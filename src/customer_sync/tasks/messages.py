from __future__ import annotations
from functools import partial
from celery import shared_task
from customer_sync.config import get_settings
from customer_sync.connectors.mailgun import MailgunClient
from customer_sync.infrastructure import resources
from customer_sync.infrastructure.db import get_session_factory
from customer_sync.jobs.event_ingestion import ProviderEventIngestionJob
from customer_sync.stores.accounts import AccountStore
from customer_sync.stores.staging import SendgridStagingStore


def build_ingestion_job(sink=None, client_factory=None) -> ProviderEventIngestionJob:
    settings = get_settings()
    sessions = get_session_factory()
    if client_factory is None:
        client_factory = partial(
            MailgunClient,
            api_base=settings.mailgun_api_base,
            page_limit=settings.mailgun_page_limit,
            timeout=settings.mailgun_timeout_seconds,
        )
    return ProviderEventIngestionJob(
        sink=sink or resources.get_sink(),
        accounts=AccountStore(sessions),
        staging=SendgridStagingStore(sessions),
        client_factory=client_factory,
        epoch_floor=settings.event_epoch_floor,
        batch_size=settings.ingest_batch_size,
        max_pages=settings.mailgun_max_pages,
    )


@shared_task
def ingest_message_events():
    """Pull Mailgun events and drain staged SendGrid events into the analytical sink (daily)."""
    result = build_ingestion_job().run()
    return {"status": "ok", **result.as_dict()}
