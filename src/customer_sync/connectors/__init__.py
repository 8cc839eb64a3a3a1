from .base import ProviderEventClient, EventPage
from .mailgun import MailgunClient

__all__ = ["ProviderEventClient", "EventPage", "MailgunClient"]
