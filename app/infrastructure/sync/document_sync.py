"""
Sincronización de un único documento (camino incremental).

Una invocación = una escritura en MongoDB:
- delete: delete_one por _firestore_id (idempotente, no falla si no existe)
- create/update: upsert-by-replace por _firestore_id. Ambos comparten
  el mismo camino: siempre se reemplaza el documento completo, nunca se
  actualizan campos sueltos.

Los errores se relanzan: el dispatcher del evento decide los reintentos.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from loguru import logger
from pymongo.errors import PyMongoError

from app.domain.entities.sync import (
    FIRESTORE_ID_FIELD,
    DocumentSyncResult,
    SyncConfig,
    SyncEnvelope,
    SyncOperation,
    build_envelope,
)
from app.infrastructure.sync.collection_names import resolve_collection_name
from app.infrastructure.sync.connection import MongoConnectionManager
from app.infrastructure.sync.decoder import decode_value
from app.infrastructure.sync.normalizer import normalize
from app.shared.exceptions.sync import TransformError, WriteError
from app.shared.utils.datetime_utils import utc_now


def build_document_envelope(
    collection_id: str,
    document_id: str,
    raw_value: Optional[Dict[str, Any]],
) -> SyncEnvelope:
    """
    Decodifica, normaliza y envuelve un documento.

    Compartido por el camino incremental y el bulk.

    Raises:
        TransformError: si el valor no se puede decodificar o no es un mapa.
    """
    content = normalize(decode_value(raw_value))
    if content is not None and not isinstance(content, dict):
        raise TransformError(
            f"El documento {collection_id}/{document_id} no es un mapa",
            document_id=document_id,
        )
    return build_envelope(collection_id, document_id, content, synced_at=utc_now())


class DocumentSynchronizer:
    """Convierte un cambio lógico en una escritura MongoDB."""

    def __init__(self, connection: MongoConnectionManager, config: SyncConfig) -> None:
        self._connection = connection
        self._config = config

    async def sync(
        self,
        collection_id: str,
        document_id: str,
        raw_value: Optional[Dict[str, Any]],
        operation: SyncOperation,
    ) -> DocumentSyncResult:
        """
        Sincroniza un documento.

        Args:
            raw_value: datos del documento (None en delete). Acepta objetos
                del SDK o valores ya decodificados desde JSON tipado.

        Raises:
            TransformError: el documento no se pudo convertir.
            WriteError: MongoDB rechazó la escritura.
            DestinationConnectionError: no hay conexión a MongoDB.
        """
        db = await self._connection.acquire()
        mongo_collection_name = resolve_collection_name(collection_id, self._config.collection_mapping)
        collection = db[mongo_collection_name]

        if operation == SyncOperation.DELETE:
            return await self._delete(collection, mongo_collection_name, document_id)

        envelope = build_document_envelope(collection_id, document_id, raw_value)
        try:
            result = await collection.replace_one(envelope.key_filter, envelope.to_document(), upsert=True)
        except PyMongoError as e:
            logger.error(f"Error sincronizando documento {document_id} en colección {mongo_collection_name}: {e}")
            raise WriteError(
                f"Falló el upsert de {collection_id}/{document_id}: {e}",
                collection=mongo_collection_name,
                document_id=document_id,
            ) from e

        action = "Creado" if operation == SyncOperation.CREATE else "Actualizado"
        logger.info(f"{action} documento {document_id} en colección {mongo_collection_name}")
        return DocumentSyncResult(
            operation=operation,
            destination_collection=mongo_collection_name,
            document_id=document_id,
            upserted=result.upserted_id is not None,
        )

    async def _delete(self, collection, mongo_collection_name: str, document_id: str) -> DocumentSyncResult:
        try:
            result = await collection.delete_one({FIRESTORE_ID_FIELD: document_id})
        except PyMongoError as e:
            logger.error(f"Error eliminando documento {document_id} de colección {mongo_collection_name}: {e}")
            raise WriteError(
                f"Falló el delete de {document_id}: {e}",
                collection=mongo_collection_name,
                document_id=document_id,
            ) from e

        logger.info(f"Eliminado documento {document_id} de colección {mongo_collection_name} (n={result.deleted_count})")
        return DocumentSyncResult(
            operation=SyncOperation.DELETE,
            destination_collection=mongo_collection_name,
            document_id=document_id,
            deleted_count=result.deleted_count,
        )
