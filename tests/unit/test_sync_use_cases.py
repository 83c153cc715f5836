"""
Tests unitarios para SyncUseCases.

Los colaboradores se mockean: se verifica el enrutamiento de eventos
y el comportamiento en modo batch.
"""
from dataclasses import replace
from datetime import datetime, timezone
from unittest.mock import AsyncMock, Mock

import pytest

from app.application.use_cases.sync_use_cases import SyncUseCases
from app.domain.entities.source_values import TimestampValue
from app.domain.entities.sync import (
    DocumentSyncResult,
    DocumentWriteEvent,
    SyncMode,
    SyncOperation,
)
from app.shared.exceptions.sync import TransformError, WriteError


@pytest.fixture
def synchronizer() -> AsyncMock:
    mock = AsyncMock()
    mock.sync = AsyncMock(
        side_effect=lambda collection_id, document_id, raw_value, operation: DocumentSyncResult(
            operation=operation,
            destination_collection=collection_id,
            document_id=document_id,
        )
    )
    return mock


def _use_cases(config, synchronizer, migrator=None, reporter=None) -> SyncUseCases:
    return SyncUseCases(
        config=config,
        synchronizer=synchronizer,
        migrator=migrator or AsyncMock(),
        reporter=reporter or AsyncMock(),
    )


@pytest.mark.parametrize(
    "before_exists, after_exists, expected",
    [
        (False, True, SyncOperation.CREATE),
        (True, True, SyncOperation.UPDATE),
        (True, False, SyncOperation.DELETE),
        (False, False, SyncOperation.DELETE),
    ],
)
def test_event_operation_mapping(before_exists, after_exists, expected) -> None:
    event = DocumentWriteEvent("users", "u1", before_exists=before_exists, after_exists=after_exists)
    assert event.operation == expected


@pytest.mark.asyncio
async def test_realtime_event_is_synchronized(sync_config, synchronizer) -> None:
    use_cases = _use_cases(sync_config, synchronizer)
    event = DocumentWriteEvent(
        "users",
        "u1",
        before_exists=False,
        after_exists=True,
        after_value={
            "name": {"stringValue": "Ana"},
            "created": {"timestampValue": "2024-01-15T10:30:00Z"},
        },
    )

    result = await use_cases.handle_document_write(event)

    assert result.operation == SyncOperation.CREATE
    synchronizer.sync.assert_awaited_once_with(
        "users",
        "u1",
        {"name": "Ana", "created": TimestampValue(instant=datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc))},
        SyncOperation.CREATE,
    )


@pytest.mark.asyncio
async def test_batch_mode_skips_realtime_events(sync_config, synchronizer) -> None:
    use_cases = _use_cases(replace(sync_config, sync_mode=SyncMode.BATCH), synchronizer)
    event = DocumentWriteEvent("users", "u1", before_exists=True, after_exists=True, after_value={"name": "Ana"})

    assert await use_cases.handle_document_write(event) is None
    synchronizer.sync.assert_not_awaited()


@pytest.mark.asyncio
async def test_sync_errors_are_reraised(sync_config, synchronizer) -> None:
    synchronizer.sync.side_effect = WriteError("falló", collection="users", document_id="u1")
    use_cases = _use_cases(sync_config, synchronizer)

    with pytest.raises(WriteError):
        await use_cases.handle_document_write(
            DocumentWriteEvent("users", "u1", before_exists=True, after_exists=False)
        )


@pytest.mark.asyncio
async def test_bulk_and_status_delegate_to_collaborators(sync_config, synchronizer) -> None:
    migrator = AsyncMock()
    reporter = Mock()
    reporter.collect = AsyncMock(return_value={})
    reporter.config_snapshot = Mock(return_value={"sync_mode": "realtime"})
    use_cases = _use_cases(sync_config, synchronizer, migrator=migrator, reporter=reporter)

    await use_cases.run_initial_sync()
    await use_cases.run_collection_sync("users")
    status, config = await use_cases.get_status()

    migrator.migrate_all.assert_awaited_once()
    migrator.migrate_one.assert_awaited_once_with("users")
    assert status == {}
    assert config == {"sync_mode": "realtime"}


@pytest.mark.asyncio
async def test_batch_mode_skips_undecodable_payload(sync_config, synchronizer) -> None:
    """En batch el evento se omite antes de decodificar after_value."""
    use_cases = _use_cases(replace(sync_config, sync_mode=SyncMode.BATCH), synchronizer)
    event = DocumentWriteEvent(
        "users",
        "u1",
        before_exists=True,
        after_exists=True,
        after_value={"embedding": {"vectorValue": {"values": [0.1, 0.2]}}},
    )

    assert await use_cases.handle_document_write(event) is None
    synchronizer.sync.assert_not_awaited()


@pytest.mark.asyncio
async def test_undecodable_payload_raises_in_realtime_mode(sync_config, synchronizer) -> None:
    use_cases = _use_cases(sync_config, synchronizer)
    event = DocumentWriteEvent(
        "users",
        "u1",
        before_exists=True,
        after_exists=True,
        after_value={"embedding": {"vectorValue": {"values": [0.1, 0.2]}}},
    )

    with pytest.raises(TransformError):
        await use_cases.handle_document_write(event)
    synchronizer.sync.assert_not_awaited()


@pytest.mark.asyncio
async def test_delete_event_ignores_after_value(sync_config, synchronizer) -> None:
    use_cases = _use_cases(sync_config, synchronizer)
    event = DocumentWriteEvent(
        "users", "u1", before_exists=True, after_exists=False, after_value={"name": {"stringValue": "Ana"}}
    )

    await use_cases.handle_document_write(event)

    synchronizer.sync.assert_awaited_once_with("users", "u1", None, SyncOperation.DELETE)
