"""
Tests unitarios de MongoConnectionManager.

El cliente motor se reemplaza por una factory fake: no se abre
ninguna conexión real.
"""
import asyncio

import pytest
from pymongo.errors import ServerSelectionTimeoutError

from app.infrastructure.sync.connection import MongoConnectionManager, MongoPoolOptions
from app.shared.exceptions.sync import DestinationConnectionError


class _FakeAdmin:
    def __init__(self, client: "_FakeClient") -> None:
        self._client = client

    async def command(self, name: str):
        assert name == "ping"
        # Cede el loop para que otros acquire() concurrentes lleguen al lock
        await asyncio.sleep(0)
        if self._client.fail:
            raise ServerSelectionTimeoutError("sin servidor")
        return {"ok": 1}


class _FakeClient:
    def __init__(self, uri: str, fail: bool, **kwargs) -> None:
        self.uri = uri
        self.kwargs = kwargs
        self.fail = fail
        self.closed = False
        self.admin = _FakeAdmin(self)

    def __getitem__(self, name: str):
        return f"db:{name}"

    def close(self) -> None:
        self.closed = True


class _ClientFactory:
    def __init__(self, failures: int = 0) -> None:
        self.failures = failures
        self.clients = []

    def __call__(self, uri: str, **kwargs) -> _FakeClient:
        client = _FakeClient(uri, fail=len(self.clients) < self.failures, **kwargs)
        self.clients.append(client)
        return client


@pytest.mark.asyncio
async def test_acquire_connects_once_and_reuses_handle() -> None:
    factory = _ClientFactory()
    manager = MongoConnectionManager("mongodb://db", "firemongo", client_factory=factory)

    assert manager.is_connected is False
    first = await manager.acquire()
    second = await manager.acquire()

    assert first == second == "db:firemongo"
    assert len(factory.clients) == 1
    assert manager.is_connected is True


@pytest.mark.asyncio
async def test_concurrent_acquire_creates_a_single_client() -> None:
    factory = _ClientFactory()
    manager = MongoConnectionManager("mongodb://db", "firemongo", client_factory=factory)

    handles = await asyncio.gather(*(manager.acquire() for _ in range(10)))

    assert set(handles) == {"db:firemongo"}
    assert len(factory.clients) == 1


@pytest.mark.asyncio
async def test_pool_options_are_passed_to_client() -> None:
    factory = _ClientFactory()
    options = MongoPoolOptions(max_pool_size=20, min_pool_size=1)
    manager = MongoConnectionManager("mongodb://db", "firemongo", pool_options=options, client_factory=factory)

    await manager.acquire()

    assert factory.clients[0].kwargs == {
        "maxPoolSize": 20,
        "minPoolSize": 1,
        "maxIdleTimeMS": 30000,
        "serverSelectionTimeoutMS": 5000,
        "socketTimeoutMS": 45000,
    }


@pytest.mark.asyncio
async def test_failed_connect_is_not_cached() -> None:
    factory = _ClientFactory(failures=1)
    manager = MongoConnectionManager("mongodb://db", "firemongo", client_factory=factory)

    with pytest.raises(DestinationConnectionError):
        await manager.acquire()
    assert factory.clients[0].closed is True
    assert manager.is_connected is False

    assert await manager.acquire() == "db:firemongo"
    assert len(factory.clients) == 2


@pytest.mark.asyncio
async def test_close_releases_client_and_allows_reconnect() -> None:
    factory = _ClientFactory()
    manager = MongoConnectionManager("mongodb://db", "firemongo", client_factory=factory)

    await manager.acquire()
    await manager.close()

    assert factory.clients[0].closed is True
    assert manager.is_connected is False

    await manager.acquire()
    assert len(factory.clients) == 2
