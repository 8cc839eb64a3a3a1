from __future__ import annotations
from datetime import datetime, timezone
from email.utils import format_datetime
import requests
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential
from customer_sync.errors import ProviderError, ProviderRateLimitError
from .base import ProviderEventClient, EventPage, CONNECTOR_RATE_LIMITS, logger


class MailgunClient(ProviderEventClient):
    name = "mailgun"

    def __init__(self, api_key: str, api_base: str = "https://api.mailgun.net/v3", page_limit: int = 300,
                 timeout: int = 30, session: requests.Session | None = None):
        self.api_key = api_key
        self.api_base = api_base.rstrip("/")
        self.page_limit = page_limit
        self.timeout = timeout
        self.http = session or requests.Session()

    @staticmethod
    def format_begin(begin: datetime) -> str:
        if begin.tzinfo is None:
            begin = begin.replace(tzinfo=timezone.utc)
        return format_datetime(begin.astimezone(timezone.utc), usegmt=True)

    @retry(retry=retry_if_exception_type(ProviderRateLimitError), stop=stop_after_attempt(3),
           wait=wait_exponential(multiplier=1, min=1, max=30), reraise=True)
    def list_events(self, domain: str, begin: datetime, ascending: bool = True, page: str | None = None) -> EventPage:
        if page:
            url, params = page, None
        else:
            url = f"{self.api_base}/{domain}/events"
            params = {
                "begin": self.format_begin(begin),
                "ascending": "yes" if ascending else "no",
                "limit": self.page_limit,
            }
        resp = self.http.get(url, params=params, auth=("api", self.api_key), timeout=self.timeout)
        if resp.status_code == 429 or resp.status_code >= 500:
            if resp.status_code == 429:
                CONNECTOR_RATE_LIMITS.labels(self.name).inc()
            logger.warning("mailgun events request for %s returned %s", domain, resp.status_code)
            raise ProviderRateLimitError(self.name, resp.status_code, resp.text[:200])
        if resp.status_code >= 400:
            raise ProviderError(self.name, resp.status_code, resp.text[:200])
        data = resp.json()
        paging = data.get("paging") or {}
        return EventPage(items=data.get("items") or [], next_page=paging.get("next"))
