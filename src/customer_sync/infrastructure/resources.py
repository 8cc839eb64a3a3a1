"""Worker-lifetime handles. Opened on worker process start, closed on shutdown."""
from __future__ import annotations
import logging
from customer_sync.config import get_settings
from customer_sync.infrastructure.analytics import MessageStatusSink

logger = logging.getLogger(__name__)

_sink: MessageStatusSink | None = None


def open_sink(url: str | None = None) -> MessageStatusSink:
    global _sink
    if _sink is None or not _sink.is_open:
        _sink = MessageStatusSink(url or get_settings().analytics_database_url).open()
    return _sink


def get_sink() -> MessageStatusSink:
    """Return the open sink; opens it on first use for pools without process-init signals."""
    if _sink is None or not _sink.is_open:
        return open_sink()
    return _sink


def install_sink(sink: MessageStatusSink) -> None:  # test helper
    global _sink
    _sink = sink


def close_sink() -> None:
    global _sink
    if _sink is not None:
        _sink.close()
        _sink = None
