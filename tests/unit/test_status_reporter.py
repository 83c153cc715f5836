"""
Tests unitarios del reporte de estado del sync.
"""
from dataclasses import replace
from datetime import datetime, timezone

import pytest

from app.infrastructure.sync.status_reporter import SyncStatusReporter
from tests.fakes import FakeFirestoreSource, make_documents


def _mirror(collection, collection_id: str, doc_id: str, synced_at: datetime) -> None:
    collection.documents.append({
        "_id": f"{collection_id}-{doc_id}",
        "_firestore_id": doc_id,
        "_firestore_collection": collection_id,
        "_synced_at": synced_at,
    })


@pytest.mark.asyncio
async def test_status_compares_counts_and_reports_last_sync(fake_connection, fake_db, sync_config) -> None:
    source = FakeFirestoreSource({"users": make_documents(2), "orders": make_documents(3, prefix="order")})
    older = datetime(2024, 1, 1, tzinfo=timezone.utc)
    newer = datetime(2024, 1, 2, tzinfo=timezone.utc)
    _mirror(fake_db["users"], "users", "doc-0000", older)
    _mirror(fake_db["users"], "users", "doc-0001", newer)
    _mirror(fake_db["orders"], "orders", "order-0000", older)

    reporter = SyncStatusReporter(connection=fake_connection, source=source, config=sync_config)
    status = await reporter.collect()

    assert status["users"].in_sync is True
    assert status["users"].source_count == 2
    assert status["users"].destination_count == 2
    assert status["users"].last_synced == newer
    assert status["orders"].in_sync is False
    assert status["orders"].destination_count == 1


@pytest.mark.asyncio
async def test_shared_destination_counts_only_its_source(fake_connection, fake_db, sync_config) -> None:
    source = FakeFirestoreSource({"users": make_documents(1), "legacy_users": make_documents(2)})
    config = replace(sync_config, collection_mapping={"users": "people", "legacy_users": "people"})
    now = datetime(2024, 1, 1, tzinfo=timezone.utc)
    _mirror(fake_db["people"], "users", "doc-0000", now)
    _mirror(fake_db["people"], "legacy_users", "doc-0000", now)
    _mirror(fake_db["people"], "legacy_users", "doc-0001", now)

    status = await SyncStatusReporter(connection=fake_connection, source=source, config=config).collect()

    assert status["users"].destination_count == 1
    assert status["legacy_users"].destination_count == 2
    assert status["users"].destination_collection == "people"


@pytest.mark.asyncio
async def test_never_synced_collection_has_no_last_sync(fake_connection, sync_config) -> None:
    source = FakeFirestoreSource({"users": make_documents(2)})

    status = await SyncStatusReporter(connection=fake_connection, source=source, config=sync_config).collect()

    assert status["users"].last_synced is None
    assert status["users"].in_sync is False


@pytest.mark.asyncio
async def test_collection_error_is_reported_in_its_entry(fake_connection, sync_config) -> None:
    source = FakeFirestoreSource({"broken": make_documents(1), "users": {}})
    source.failing_collections.add("broken")

    status = await SyncStatusReporter(connection=fake_connection, source=source, config=sync_config).collect()

    assert status["broken"].error is not None
    assert status["broken"].in_sync is False
    assert status["users"].error is None
    assert status["users"].in_sync is True


def test_config_snapshot(fake_connection, sync_config) -> None:
    reporter = SyncStatusReporter(connection=fake_connection, source=FakeFirestoreSource(), config=sync_config)
    assert reporter.config_snapshot() == {"sync_mode": "realtime", "preserve_indexes": False, "batch_size": 100}
