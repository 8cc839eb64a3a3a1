"""Background synchronization engine for customer data.

Scheduled jobs: customer schema discovery, provider message-event ingestion and warehouse
integration sync. Celery tasks live in `customer_sync.tasks`; the jobs they wrap in
`customer_sync.jobs`.
"""

__version__ = "0.1.0"
