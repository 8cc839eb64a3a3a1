"""Map provider payloads onto MessageStatusEvent.

Events carry the sending application's correlation identifiers (audienceId, customerId);
anything missing either one cannot be linked to a customer and is dropped.
"""
from __future__ import annotations
from datetime import datetime, timezone
from typing import Any, Iterable
from prometheus_client import Counter
from customer_sync.models.enums import EventProvider
from customer_sync.models.records import MessageStatusEvent

EVENTS_DROPPED = Counter('provider_events_dropped_total', 'Provider events dropped during normalization', ['provider', 'reason'])


def _utc_naive(epoch_seconds: float) -> datetime:
    return datetime.fromtimestamp(epoch_seconds, tz=timezone.utc).replace(tzinfo=None)


def normalize_mailgun(item: dict[str, Any]) -> MessageStatusEvent | None:
    variables = item.get("user-variables") or {}
    audience_id = variables.get("audienceId")
    customer_id = variables.get("customerId")
    if not audience_id or not customer_id:
        EVENTS_DROPPED.labels(EventProvider.MAILGUN.value, 'missing_correlation').inc()
        return None
    created_at = item_timestamp(item)
    if created_at is None:
        EVENTS_DROPPED.labels(EventProvider.MAILGUN.value, 'missing_timestamp').inc()
        return None
    headers = (item.get("message") or {}).get("headers") or {}
    return MessageStatusEvent(
        audience_id=str(audience_id),
        customer_id=str(customer_id),
        message_id=headers.get("message-id") or "",
        event_type=item.get("event") or "",
        provider_name=EventProvider.MAILGUN.value,
        created_at=created_at,
    )


def normalize_mailgun_page(items: Iterable[dict[str, Any]]) -> list[MessageStatusEvent]:
    return [ev for ev in (normalize_mailgun(i) for i in items) if ev is not None]


def normalize_sendgrid(row) -> MessageStatusEvent | None:
    if not row.audience_id or not row.customer_id:
        EVENTS_DROPPED.labels(EventProvider.SENDGRID.value, 'missing_correlation').inc()
        return None
    return MessageStatusEvent(
        audience_id=row.audience_id,
        customer_id=row.customer_id,
        message_id=row.message_id,
        event_type=row.event,
        provider_name=EventProvider.SENDGRID.value,
        created_at=row.created_at,
    )


def item_timestamp(item: dict[str, Any]) -> datetime | None:
    ts = item.get("timestamp")
    if ts is None:
        return None
    try:
        return _utc_naive(float(ts))
    except (TypeError, ValueError, OverflowError):
        return None
