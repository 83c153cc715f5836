"""
Configuración de fixtures para pytest.
"""
import pytest

from app.domain.entities.sync import SyncConfig, SyncMode
from tests.fakes import FakeConnection, FakeDatabase, FakeFirestoreSource


@pytest.fixture
def sync_config() -> SyncConfig:
    """Configuración de sync por defecto para tests (modo realtime)."""
    return SyncConfig(
        uri="mongodb://localhost:27017",
        database="firemongo_test",
        collection_mapping={},
        preserve_indexes=False,
        batch_size=100,
        sync_mode=SyncMode.REALTIME,
    )


@pytest.fixture
def fake_db() -> FakeDatabase:
    return FakeDatabase()


@pytest.fixture
def fake_connection(fake_db: FakeDatabase) -> FakeConnection:
    return FakeConnection(fake_db)


@pytest.fixture
def fake_source() -> FakeFirestoreSource:
    return FakeFirestoreSource()
