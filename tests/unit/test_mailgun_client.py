"""Mailgun events client against a scripted HTTP session."""

from datetime import datetime

import pytest

from customer_sync.connectors.mailgun import MailgunClient
from customer_sync.errors import ProviderError, ProviderRateLimitError


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload or {}
        self.text = text

    def json(self):
        return self._payload


class FakeSession:
    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def get(self, url, params=None, auth=None, timeout=None):
        self.calls.append({"url": url, "params": params, "auth": auth, "timeout": timeout})
        return self.responses.pop(0)


@pytest.fixture(autouse=True)
def no_retry_sleep(monkeypatch):
    monkeypatch.setattr(MailgunClient.list_events.retry, "sleep", lambda seconds: None)


def page(items, next_url=None):
    return FakeResponse(200, {"items": items, "paging": {"next": next_url} if next_url else {}})


class TestMailgunClient:
    def test_first_page_request(self):
        http = FakeSession(page([{"event": "delivered"}], "https://api.mailgun.net/v3/mg.example.com/events/tok2"))
        client = MailgunClient("key-123", page_limit=300, timeout=15, session=http)

        result = client.list_events("mg.example.com", datetime(2024, 6, 1, 12, 0, 1))

        call = http.calls[0]
        assert call["url"] == "https://api.mailgun.net/v3/mg.example.com/events"
        assert call["params"] == {"begin": "Sat, 01 Jun 2024 12:00:01 GMT", "ascending": "yes", "limit": 300}
        assert call["auth"] == ("api", "key-123")
        assert call["timeout"] == 15
        assert result.items == [{"event": "delivered"}]
        assert result.next_page == "https://api.mailgun.net/v3/mg.example.com/events/tok2"

    def test_next_page_follows_token_url(self):
        http = FakeSession(page([]))
        client = MailgunClient("key-123", session=http)

        result = client.list_events("mg.example.com", datetime(2024, 6, 1), page="https://api.mailgun.net/v3/x/events/tok3")

        assert http.calls[0]["url"] == "https://api.mailgun.net/v3/x/events/tok3"
        assert http.calls[0]["params"] is None
        assert result.items == []
        assert result.next_page is None

    def test_descending_order(self):
        http = FakeSession(page([]))

        MailgunClient("k", session=http).list_events("mg.example.com", datetime(2024, 6, 1), ascending=False)

        assert http.calls[0]["params"]["ascending"] == "no"

    def test_rate_limit_is_retried(self):
        http = FakeSession(FakeResponse(429, text="slow down"), page([{"event": "opened"}]))

        result = MailgunClient("k", session=http).list_events("mg.example.com", datetime(2024, 6, 1))

        assert len(http.calls) == 2
        assert result.items == [{"event": "opened"}]

    def test_persistent_server_errors_are_raised(self):
        http = FakeSession(*[FakeResponse(503) for _ in range(3)])

        with pytest.raises(ProviderRateLimitError):
            MailgunClient("k", session=http).list_events("mg.example.com", datetime(2024, 6, 1))
        assert len(http.calls) == 3

    def test_client_error_is_not_retried(self):
        http = FakeSession(FakeResponse(401, text="Forbidden"))

        with pytest.raises(ProviderError) as exc:
            MailgunClient("bad", session=http).list_events("mg.example.com", datetime(2024, 6, 1))
        assert exc.value.status_code == 401
        assert len(http.calls) == 1

    def test_begin_is_formatted_in_gmt(self):
        assert MailgunClient.format_begin(datetime(2000, 10, 10, 0, 0, 1)) == "Tue, 10 Oct 2000 00:00:01 GMT"
