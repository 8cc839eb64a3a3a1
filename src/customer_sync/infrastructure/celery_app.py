from celery import Celery
from celery import signals
from celery.schedules import crontab
import logging
import time
from prometheus_client import Counter, Histogram
from customer_sync.config import get_settings
from customer_sync.infrastructure import resources

settings = get_settings()
logger = logging.getLogger(__name__)

celery_app = Celery(
    "customer_sync",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=[
        "customer_sync.tasks.customers",
        "customer_sync.tasks.messages",
        "customer_sync.tasks.integrations",
    ],
)

celery_app.conf.update(task_serializer="json", result_serializer="json", accept_content=["json"], timezone="UTC", enable_utc=True)

# One warehouse sync task per integration, consumed by a dedicated worker pool
celery_app.conf.task_routes = {
    "customer_sync.tasks.integrations.sync_integration": {"queue": "integrations"},
}

TASK_SUCCESS = Counter('celery_task_success_total', 'Celery task successes', ['task'])
TASK_FAILURE = Counter('celery_task_failure_total', 'Celery task failures', ['task'])
TASK_DURATION = Histogram('celery_task_duration_seconds', 'Celery task runtime', ['task'], buckets=(0.05,0.1,0.25,0.5,1,2,5,10,30,60,300,1800))

_task_start_times = {}


@signals.task_prerun.connect
def _task_prerun(sender=None, task_id=None, **kwargs):  # noqa
    _task_start_times[task_id] = time.time()


@signals.task_postrun.connect
def _task_postrun(sender=None, task_id=None, state=None, **kwargs):  # noqa
    name = sender.name if sender else 'unknown'
    start = _task_start_times.pop(task_id, None)
    if start is not None:
        TASK_DURATION.labels(task=name).observe(time.time() - start)
    if state == 'SUCCESS':
        TASK_SUCCESS.labels(task=name).inc()
    elif state is not None:
        TASK_FAILURE.labels(task=name).inc()


@signals.worker_process_init.connect
def _open_worker_resources(**kwargs):  # noqa
    logging.getLogger("customer_sync").setLevel(get_settings().log_level.upper())
    resources.open_sink()


@signals.worker_process_shutdown.connect
def _close_worker_resources(**kwargs):  # noqa
    resources.close_sink()


# Periodic tasks (beat). Requires worker with -B or separate beat service.
celery_app.conf.beat_schedule = {
    "customer-keys-every-minute": {
        "task": "customer_sync.tasks.customers.discover_customer_keys",
        "schedule": 60.0,
        "options": {"expires": 55},
    },
    "message-events-daily": {
        "task": "customer_sync.tasks.messages.ingest_message_events",
        "schedule": crontab(minute=0, hour=0),
    },
    "dispatch-integration-syncs-hourly": {
        "task": "customer_sync.tasks.integrations.dispatch_integration_syncs",
        "schedule": 3600.0,
    },
}
