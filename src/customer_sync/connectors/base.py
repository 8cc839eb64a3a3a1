from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List
import logging
import time
from prometheus_client import Counter, Histogram

CONNECTOR_CALLS = Counter('provider_calls_total', 'Provider event page requests', ['provider'])
CONNECTOR_EVENTS = Counter('provider_events_total', 'Raw events pulled per provider', ['provider'])
CONNECTOR_ERRORS = Counter('provider_errors_total', 'Errors during provider fetch', ['provider'])
CONNECTOR_RATE_LIMITS = Counter('provider_rate_limits_total', 'Rate limit hits per provider', ['provider'])
CONNECTOR_LATENCY = Histogram('provider_fetch_latency_seconds', 'Latency of provider page fetches', ['provider'], buckets=(0.1,0.5,1,2,5,10,30,60))

logger = logging.getLogger(__name__)

Event = Dict[str, Any]


@dataclass
class EventPage:
    items: List[Event] = field(default_factory=list)
    next_page: str | None = None


class ProviderEventClient(ABC):
    """Pull-based provider event API, one page per call."""

    name: str

    @abstractmethod
    def list_events(self, domain: str, begin: datetime, ascending: bool = True, page: str | None = None) -> EventPage:
        """Return one page of events starting at `begin`.

        `page` is the opaque token from a previous EventPage.next_page; when given, it
        supersedes `begin`.
        """
        ...

    def instrumented_list_events(self, domain: str, begin: datetime, ascending: bool = True, page: str | None = None) -> EventPage:
        """Wrap list_events with call, event, error and latency metrics."""
        CONNECTOR_CALLS.labels(self.name).inc()
        start = time.time()
        try:
            result = self.list_events(domain, begin, ascending=ascending, page=page)
        except Exception:
            CONNECTOR_ERRORS.labels(self.name).inc()
            raise
        finally:
            CONNECTOR_LATENCY.labels(self.name).observe(time.time() - start)
        CONNECTOR_EVENTS.labels(self.name).inc(len(result.items))
        return result
