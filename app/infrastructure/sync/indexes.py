"""
Provisión de índices en colecciones destino.

Best-effort: un fallo se loguea y no corta la migración. El estado de
índices se corrige solo en una corrida posterior (create_indexes es
idempotente en MongoDB).
"""

from __future__ import annotations

from loguru import logger
from pymongo import ASCENDING, IndexModel
from pymongo.errors import PyMongoError

from app.domain.entities.sync import (
    FIRESTORE_COLLECTION_FIELD,
    FIRESTORE_ID_FIELD,
    SYNCED_AT_FIELD,
    SyncConfig,
)
from app.shared.exceptions.sync import IndexProvisionError

SYNC_INDEXES = [
    IndexModel([(FIRESTORE_ID_FIELD, ASCENDING)], unique=True),
    IndexModel([(SYNCED_AT_FIELD, ASCENDING)]),
    IndexModel([(FIRESTORE_COLLECTION_FIELD, ASCENDING)]),
]


async def _create_sync_indexes(collection) -> None:
    try:
        await collection.create_indexes(SYNC_INDEXES)
    except PyMongoError as e:
        raise IndexProvisionError(f"No se pudieron crear índices: {e}", collection=collection.name) from e


async def ensure_indexes(collection, config: SyncConfig) -> bool:
    """
    Asegura los índices de sync si PRESERVE_INDEXES está activo.

    Returns:
        True si los índices quedaron creados, False si se omitió o falló.
    """
    if not config.preserve_indexes:
        return False

    try:
        await _create_sync_indexes(collection)
    except IndexProvisionError as e:
        logger.error(f"Error creando índices en {collection.name}: {e.message}")
        return False

    logger.info(f"Índices asegurados en colección: {collection.name}")
    return True
