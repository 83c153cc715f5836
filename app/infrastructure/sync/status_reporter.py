"""
Reporte de estado del sync (solo lectura).

Compara conteos Firestore vs MongoDB por colección y obtiene el último
_synced_at. in_sync es una heurística por conteo: no compara contenido.
"""

from __future__ import annotations

from typing import Any, Dict

from loguru import logger
from pymongo import DESCENDING

from app.domain.entities.sync import (
    FIRESTORE_COLLECTION_FIELD,
    SYNCED_AT_FIELD,
    CollectionStatus,
    SyncConfig,
)
from app.infrastructure.sync.collection_names import resolve_collection_name
from app.infrastructure.sync.connection import MongoConnectionManager
from app.infrastructure.sync.firestore_source import FirestoreSource
from app.shared.utils.datetime_utils import ensure_utc


class SyncStatusReporter:
    def __init__(
        self,
        *,
        connection: MongoConnectionManager,
        source: FirestoreSource,
        config: SyncConfig,
    ) -> None:
        self._connection = connection
        self._source = source
        self._config = config

    async def collect(self) -> Dict[str, CollectionStatus]:
        """
        Estado de cada colección raíz de Firestore.

        Un error en una colección se reporta en su entrada y no corta
        el resto del reporte.
        """
        db = await self._connection.acquire()
        status: Dict[str, CollectionStatus] = {}

        for collection_id in await self._source.list_collection_ids():
            mongo_collection_name = resolve_collection_name(collection_id, self._config.collection_mapping)
            try:
                status[collection_id] = await self._collection_status(
                    db[mongo_collection_name], collection_id, mongo_collection_name
                )
            except Exception as e:
                logger.error(f"Error obteniendo estado de colección {collection_id}: {e}")
                status[collection_id] = CollectionStatus(
                    source_count=0,
                    destination_count=0,
                    last_synced=None,
                    in_sync=False,
                    destination_collection=mongo_collection_name,
                    error=str(e),
                )

        return status

    async def _collection_status(self, mongo_collection, collection_id: str, mongo_collection_name: str) -> CollectionStatus:
        # Varias colecciones Firestore pueden mapear a la misma colección
        # MongoDB: se filtra por colección origen.
        source_filter = {FIRESTORE_COLLECTION_FIELD: collection_id}

        source_count = await self._source.count(collection_id)
        destination_count = await mongo_collection.count_documents(source_filter)
        last_doc = await mongo_collection.find_one(
            source_filter,
            projection={SYNCED_AT_FIELD: 1},
            sort=[(SYNCED_AT_FIELD, DESCENDING)],
        )
        last_synced = last_doc.get(SYNCED_AT_FIELD) if last_doc else None

        return CollectionStatus(
            source_count=source_count,
            destination_count=destination_count,
            last_synced=ensure_utc(last_synced) if last_synced else None,
            in_sync=source_count == destination_count,
            destination_collection=mongo_collection_name,
        )

    def config_snapshot(self) -> Dict[str, Any]:
        return {
            "sync_mode": self._config.sync_mode.value,
            "preserve_indexes": self._config.preserve_indexes,
            "batch_size": self._config.batch_size,
        }
