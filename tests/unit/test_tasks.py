"""Celery task wiring: beat schedule, dispatch fan-out and task entry points."""

from datetime import datetime
from unittest.mock import MagicMock

import pytest
from celery.schedules import crontab

from customer_sync.errors import InvalidSyncTask
from customer_sync.infrastructure import resources
from customer_sync.infrastructure.celery_app import celery_app
from customer_sync.tasks.customers import discover_customer_keys
from customer_sync.tasks.integrations import INTEGRATIONS_QUEUE, dispatch_integration_syncs, sync_integration
from customer_sync.tasks.messages import ingest_message_events
from customer_sync.validation.tasks import integration_to_payload, parse_sync_task


@pytest.fixture
def installed_sink(sink):
    resources.install_sink(sink)
    yield sink
    resources.install_sink(None)


class TestBeatSchedule:
    def test_periodic_jobs_are_scheduled(self):
        schedule = celery_app.conf.beat_schedule

        assert schedule["customer-keys-every-minute"]["schedule"] == 60.0
        assert schedule["dispatch-integration-syncs-hourly"]["schedule"] == 3600.0
        assert schedule["message-events-daily"]["schedule"] == crontab(minute=0, hour=0)

    def test_scheduled_tasks_are_registered(self):
        celery_app.loader.import_default_modules()
        for entry in celery_app.conf.beat_schedule.values():
            assert entry["task"] in celery_app.tasks

    def test_sync_tasks_are_routed_to_their_queue(self):
        route = celery_app.conf.task_routes["customer_sync.tasks.integrations.sync_integration"]

        assert route["queue"] == INTEGRATIONS_QUEUE


class TestDispatchIntegrationSyncs:
    def test_queues_one_task_per_configured_integration(self, bound_engine, add_integration, monkeypatch):
        first = add_integration()
        second = add_integration(db_type="postgresql", owner_id="acc-2")
        add_integration(with_database=False)
        queued = MagicMock()
        monkeypatch.setattr("customer_sync.tasks.integrations.sync_integration", queued)

        result = dispatch_integration_syncs()

        assert result == {"status": "dispatched", "dispatched": 2, "skipped": 1}
        payloads = [c.kwargs["args"][0] for c in queued.apply_async.call_args_list]
        assert [p["integration"]["id"] for p in payloads] == [first, second]
        assert all(c.kwargs["queue"] == INTEGRATIONS_QUEUE for c in queued.apply_async.call_args_list)

    def test_no_integrations(self, bound_engine, monkeypatch):
        queued = MagicMock()
        monkeypatch.setattr("customer_sync.tasks.integrations.sync_integration", queued)

        assert dispatch_integration_syncs()["dispatched"] == 0
        queued.apply_async.assert_not_called()


class TestSyncPayload:
    def test_payload_round_trips_through_json_task_body(self, integration_store, add_integration):
        last_sync = datetime(2026, 10, 17, 6, 30)
        integration_id = add_integration(last_sync=last_sync, frequency_number=2, frequency_unit="week")
        integration = next(i for batch in integration_store.iter_batches(10) for i in batch if i.id == integration_id)

        payload = integration_to_payload(integration)
        parsed, database = parse_sync_task(payload)

        assert payload["integration"]["database"]["dbType"] == "databricks"
        assert parsed.id == integration_id
        assert parsed.owner.id == "acc-1"
        assert database.last_sync == last_sync
        assert database.frequency_number == 2
        assert database.databricks_host == "dbc.example.cloud"

    def test_timezone_aware_last_sync_is_normalized(self):
        payload = {"integration": {"id": 1, "owner": {"id": "acc-1"}, "database": {
            "id": 3, "dbType": "databricks", "lastSync": "2026-10-17T08:30:00+02:00"}}}

        _, database = parse_sync_task(payload)

        assert database.last_sync == datetime(2026, 10, 17, 6, 30)

    def test_unknown_db_type_is_rejected(self):
        payload = {"integration": {"id": 1, "owner": {"id": "acc-1"}, "database": {"id": 3, "dbType": "oracle"}}}

        with pytest.raises(InvalidSyncTask):
            parse_sync_task(payload)


class TestTaskEntryPoints:
    def test_sync_integration_runs_job(self, bound_engine, add_integration, integration_store):
        integration_id = add_integration(db_type="postgresql", last_sync=datetime.utcnow())
        integration = next(i for batch in integration_store.iter_batches(10) for i in batch if i.id == integration_id)

        result = sync_integration(integration_to_payload(integration))

        assert result["status"] == "ok"
        assert result["integration_id"] == integration_id

    def test_sync_integration_raises_for_invalid_task(self, bound_engine):
        with pytest.raises(InvalidSyncTask):
            sync_integration({"integration": None})

    def test_discover_customer_keys(self, bound_engine, add_customers, metadata_store):
        add_customers({"email": "a@example.com", "age": 31})

        result = discover_customer_keys()

        assert result == {"status": "ok", "fields": 2}
        assert metadata_store.snapshot() == {"email": ("Email", False), "age": ("Number", False)}

    def test_ingest_message_events_with_nothing_to_do(self, bound_engine, installed_sink):
        result = ingest_message_events()

        assert result["status"] == "ok"
        assert result["events_inserted"] == 0
        assert result["pull_status"] == "ok"
        assert result["push_status"] == "ok"
