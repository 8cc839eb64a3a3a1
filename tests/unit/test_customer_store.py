"""Customer store read-modify-write paths."""

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy.orm.exc import StaleDataError

from customer_sync.models.records import CustomerRecord
from customer_sync.stores.customers import sanitize_value


class TestUpsert:
    def test_create_then_update_bumps_version(self, customer_store):
        created = customer_store.upsert(CustomerRecord(owner_id="acc-1", fields={"name": "Ada"}))

        updated = customer_store.upsert(CustomerRecord(owner_id="acc-1", id=created.id, version=created.version,
                                                       fields={"name": "Ada L."}))

        assert updated.id == created.id
        assert updated.version > created.version
        assert updated.fields == {"name": "Ada L."}

    def test_stale_version_is_rejected(self, customer_store):
        created = customer_store.upsert(CustomerRecord(owner_id="acc-1", fields={"name": "Ada"}))
        customer_store.upsert(CustomerRecord(owner_id="acc-1", id=created.id, version=created.version,
                                             fields={"name": "first writer"}))

        with pytest.raises(StaleDataError):
            customer_store.upsert(CustomerRecord(owner_id="acc-1", id=created.id, version=created.version,
                                                 fields={"name": "second writer"}))

        assert customer_store.find_batch(0, 10)[0].fields == {"name": "first writer"}


class TestMergeExternal:
    def test_creates_then_merges(self, customer_store):
        assert customer_store.merge_external("acc-1", "w-1", {"email": "a@example.com", "tier": "gold"}) is True
        assert customer_store.merge_external("acc-1", "w-1", {"tier": "platinum"}) is False

        record = customer_store.find_one("w-1", "acc-1")
        assert record.fields == {"email": "a@example.com", "tier": "platinum"}
        assert record.audiences == []

    def test_lookup_is_scoped_by_owner(self, customer_store):
        customer_store.merge_external("acc-1", "w-1", {"tier": "gold"})

        assert customer_store.find_one("w-1", "acc-2") is None


def test_sanitize_value_produces_json_shapes():
    raw = {"when": date(2024, 1, 2), "amount": Decimal("3.25"), "tags": ("a", "b"), "nested": {"d": date(2024, 1, 3)}}

    assert sanitize_value(raw) == {"when": "2024-01-02", "amount": 3.25, "tags": ["a", "b"], "nested": {"d": "2024-01-03"}}
