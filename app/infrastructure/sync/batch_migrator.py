"""
Migración bulk Firestore -> MongoDB (sync inicial / manual).

Diseño (resumen), por colección:
- Asegura índices (best-effort)
- Cuenta documentos en Firestore (total del reporte)
- Pagina por document id (start_after = último id de la página anterior)
- Normaliza cada documento y arma un ReplaceOne(upsert=True) por documento
- Ejecuta un bulk_write por página

Estrategia ante fallos:
- Documento que no se puede transformar: se omite y cuenta como fallido.
- Página cuyo bulk_write falla: cuenta todos sus upserts como fallidos y
  sigue con la siguiente página.
- Colección que falla (p.ej. count): se registra el error en sus stats y
  se sigue con la siguiente colección.

No hay checkpoint: volver a correr es seguro porque todo es upsert.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from loguru import logger
from pymongo import ReplaceOne
from pymongo.errors import PyMongoError

from app.domain.entities.source_values import SourceDocument
from app.domain.entities.sync import (
    CollectionStats,
    CollectionSyncResult,
    SyncConfig,
    SyncStats,
)
from app.infrastructure.sync.collection_names import resolve_collection_name
from app.infrastructure.sync.connection import MongoConnectionManager
from app.infrastructure.sync.document_sync import build_document_envelope
from app.infrastructure.sync.firestore_source import FirestoreSource
from app.infrastructure.sync.indexes import ensure_indexes
from app.infrastructure.sync.pagination import iter_pages
from app.shared.exceptions.sync import SyncError
from app.shared.utils.datetime_utils import utc_now


@dataclass
class _PageResult:
    processed: int = 0
    failed: int = 0


class BatchMigrator:
    """
    Orquestador de la migración bulk.
    """

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

    async def migrate_all(self) -> SyncStats:
        """
        Migra todas las colecciones raíz de Firestore.

        Un fallo en una colección queda registrado en sus stats y no
        impide continuar con las siguientes.
        """
        stats = SyncStats()
        collection_ids = await self._source.list_collection_ids()
        logger.info(f"Encontradas {len(collection_ids)} colecciones para sincronizar")

        for collection_id in collection_ids:
            try:
                collection_stats = await self._migrate_collection(collection_id)
            except Exception as e:
                logger.exception(f"Error sincronizando colección {collection_id}: {e}")
                collection_stats = CollectionStats(
                    destination_collection=resolve_collection_name(collection_id, self._config.collection_mapping),
                    error=str(e),
                )
            stats.add(collection_id, collection_stats)

        logger.info(
            f"Sync inicial completado: total={stats.total_documents}, "
            f"procesados={stats.processed_documents}, fallidos={stats.failed_documents}"
        )
        return stats

    async def migrate_one(self, collection_id: str) -> CollectionSyncResult:
        """
        Migra una sola colección. Los errores a nivel colección se propagan.
        """
        collection_stats = await self._migrate_collection(collection_id)
        return CollectionSyncResult(
            collection_id=collection_id,
            destination_collection=collection_stats.destination_collection or collection_id,
            total_documents=collection_stats.count,
            processed_documents=collection_stats.processed,
            failed_documents=collection_stats.failed,
            last_sync=collection_stats.last_sync,
        )

    async def _migrate_collection(self, collection_id: str) -> CollectionStats:
        db = await self._connection.acquire()
        mongo_collection_name = resolve_collection_name(collection_id, self._config.collection_mapping)
        mongo_collection = db[mongo_collection_name]

        await ensure_indexes(mongo_collection, self._config)

        total = await self._source.count(collection_id)
        stats = CollectionStats(count=total, destination_collection=mongo_collection_name)
        logger.info(f"Iniciando sync de colección: {collection_id} ({total} documentos)")

        async def fetch_page(start_after: Optional[str], limit: int) -> List[SourceDocument]:
            return await self._source.fetch_page(collection_id, start_after=start_after, limit=limit)

        async for page in iter_pages(fetch_page, page_size=self._config.batch_size):
            page_result = await self._write_page(collection_id, mongo_collection, page)
            stats.processed += page_result.processed
            stats.failed += page_result.failed

            # Corta aunque queden páginas si los conteos derivaron durante la corrida
            if stats.processed >= total:
                break

        stats.last_sync = utc_now()
        logger.info(
            f"Sync completado para colección {collection_id}: "
            f"{stats.processed} procesados, {stats.failed} fallidos"
        )
        return stats

    async def _write_page(self, collection_id: str, mongo_collection, page: List[SourceDocument]) -> _PageResult:
        result = _PageResult()
        operations: List[ReplaceOne] = []

        for document in page:
            try:
                envelope = build_document_envelope(collection_id, document.document_id, document.data)
            except SyncError as e:
                logger.error(f"No se pudo transformar el documento {document.document_id}: {e.message}")
                result.failed += 1
                continue
            operations.append(ReplaceOne(envelope.key_filter, envelope.to_document(), upsert=True))

        if not operations:
            return result

        try:
            write_result = await mongo_collection.bulk_write(operations, ordered=False)
        except PyMongoError as e:
            logger.error(f"Bulk write falló para colección {mongo_collection.name}: {e}")
            result.failed += len(operations)
            return result

        result.processed += write_result.upserted_count + write_result.modified_count
        logger.info(
            f"Lote procesado para {collection_id}: "
            f"{write_result.upserted_count} insertados, {write_result.modified_count} actualizados"
        )
        return result
