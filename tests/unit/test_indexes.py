from dataclasses import replace

import pytest

from app.infrastructure.sync.indexes import ensure_indexes
from tests.fakes import FakeMongoCollection


@pytest.mark.asyncio
async def test_indexes_are_skipped_when_disabled(sync_config) -> None:
    collection = FakeMongoCollection("users")

    assert await ensure_indexes(collection, sync_config) is False
    assert collection.indexes == []


@pytest.mark.asyncio
async def test_sync_indexes_are_created(sync_config) -> None:
    collection = FakeMongoCollection("users")

    assert await ensure_indexes(collection, replace(sync_config, preserve_indexes=True)) is True

    documents = {tuple(index.document["key"].keys()): index.document for index in collection.indexes}
    assert set(documents) == {("_firestore_id",), ("_synced_at",), ("_firestore_collection",)}
    assert documents[("_firestore_id",)].get("unique") is True
    assert not documents[("_synced_at",)].get("unique")


@pytest.mark.asyncio
async def test_index_failure_is_logged_not_raised(sync_config) -> None:
    collection = FakeMongoCollection("users")
    collection.fail_create_indexes = True

    assert await ensure_indexes(collection, replace(sync_config, preserve_indexes=True)) is False
