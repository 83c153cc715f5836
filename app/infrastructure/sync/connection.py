"""
Gestión de la conexión a MongoDB (motor).

Una instancia de MongoConnectionManager se crea en el startup de la app
y se inyecta en cada componente; el shutdown la cierra. No hay cliente
global de módulo.

Características:
- Conexión lazy: el cliente se crea en el primer acquire().
- Un solo cliente físico: los acquire() concurrentes durante el primer
  connect esperan el mismo intento (asyncio.Lock) en vez de repetirlo.
- Un connect fallido no se cachea: el siguiente acquire() reintenta.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Callable, Optional

from loguru import logger
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from app.shared.exceptions.sync import DestinationConnectionError


@dataclass(frozen=True)
class MongoPoolOptions:
    """Límites del pool, fijados una sola vez al conectar."""

    max_pool_size: int = 10
    min_pool_size: int = 2
    max_idle_time_ms: int = 30000
    server_selection_timeout_ms: int = 5000
    socket_timeout_ms: int = 45000

    def as_client_kwargs(self) -> dict[str, int]:
        return {
            "maxPoolSize": self.max_pool_size,
            "minPoolSize": self.min_pool_size,
            "maxIdleTimeMS": self.max_idle_time_ms,
            "serverSelectionTimeoutMS": self.server_selection_timeout_ms,
            "socketTimeoutMS": self.socket_timeout_ms,
        }


ClientFactory = Callable[..., Any]


class MongoConnectionManager:
    """Dueño del cliente motor durante la vida del proceso."""

    def __init__(
        self,
        uri: str,
        database: str,
        *,
        pool_options: Optional[MongoPoolOptions] = None,
        client_factory: ClientFactory = AsyncIOMotorClient,
    ) -> None:
        self._uri = uri
        self._database_name = database
        self._pool_options = pool_options or MongoPoolOptions()
        self._client_factory = client_factory
        self._client: Any = None
        self._db: Optional[AsyncIOMotorDatabase] = None
        self._lock = asyncio.Lock()

    @property
    def is_connected(self) -> bool:
        return self._db is not None

    async def acquire(self) -> AsyncIOMotorDatabase:
        """
        Retorna el handle de la base de datos, conectando si hace falta.

        Raises:
            DestinationConnectionError: si el connect (ping) falla.
        """
        if self._db is not None:
            return self._db

        async with self._lock:
            # Otro caller pudo completar el connect mientras esperábamos
            if self._db is None:
                self._db = await self._connect()
        return self._db

    async def _connect(self) -> AsyncIOMotorDatabase:
        client = self._client_factory(self._uri, **self._pool_options.as_client_kwargs())
        try:
            # motor conecta de forma lazy: el ping fuerza server selection
            await client.admin.command("ping")
        except PyMongoError as e:
            client.close()
            logger.error(f"No se pudo conectar a MongoDB: {e}")
            raise DestinationConnectionError(f"No se pudo conectar a MongoDB: {e}") from e

        self._client = client
        logger.info("Conexión a MongoDB establecida")
        return client[self._database_name]

    async def close(self) -> None:
        """Cierra el cliente (hook de shutdown)."""
        async with self._lock:
            if self._client is not None:
                self._client.close()
                logger.info("Conexión a MongoDB cerrada")
            self._client = None
            self._db = None
