"""
Casos de uso de sincronizacion Firestore -> MongoDB.

Agrupa los tres caminos del motor:
- incremental: un evento de escritura -> una escritura en MongoDB
- bulk: migracion completa o de una coleccion
- estado: reporte de drift de solo lectura
"""
from typing import Any, Dict, Optional, Tuple

from loguru import logger

from app.domain.entities.sync import (
    CollectionStatus,
    CollectionSyncResult,
    DocumentSyncResult,
    DocumentWriteEvent,
    SyncConfig,
    SyncMode,
    SyncStats,
)
from app.infrastructure.sync.batch_migrator import BatchMigrator
from app.infrastructure.sync.decoder import decode_typed_fields
from app.infrastructure.sync.document_sync import DocumentSynchronizer
from app.infrastructure.sync.status_reporter import SyncStatusReporter


class SyncUseCases:
    """
    Orquestador de los casos de uso de sync.
    Recibe sus colaboradores ya construidos (ver app.core.events).
    """

    def __init__(
        self,
        *,
        config: SyncConfig,
        synchronizer: DocumentSynchronizer,
        migrator: BatchMigrator,
        reporter: SyncStatusReporter,
    ):
        self.config = config
        self.synchronizer = synchronizer
        self.migrator = migrator
        self.reporter = reporter

    async def handle_document_write(self, event: DocumentWriteEvent) -> Optional[DocumentSyncResult]:
        """
        Procesa un evento de escritura de Firestore.

        El modo se verifica antes de decodificar after_value (JSON tipado):
        en batch el evento se omite aunque el payload no sea decodificable.

        Returns:
            El resultado de la escritura, o None si el modo es batch
            (sync en tiempo real deshabilitado).

        Raises:
            SyncError: cualquier fallo se relanza para que el dispatcher
                aplique su politica de reintentos.
        """
        if self.config.sync_mode == SyncMode.BATCH:
            logger.info(
                f"Omitiendo sync en tiempo real para {event.collection_id}/{event.document_id} (modo batch)"
            )
            return None

        try:
            after_value = decode_typed_fields(event.after_value) if event.after_exists and event.after_value else None
            return await self.synchronizer.sync(
                event.collection_id,
                event.document_id,
                after_value,
                event.operation,
            )
        except Exception as e:
            logger.error(f"Error en sync de {event.collection_id}/{event.document_id}: {e}")
            raise

    async def run_initial_sync(self) -> SyncStats:
        """Migra todas las colecciones de Firestore."""
        logger.info("Iniciando sync inicial Firestore -> MongoDB")
        return await self.migrator.migrate_all()

    async def run_collection_sync(self, collection_name: str) -> CollectionSyncResult:
        """Migra manualmente una coleccion."""
        logger.info(f"Iniciando sync manual de coleccion: {collection_name}")
        return await self.migrator.migrate_one(collection_name)

    async def get_status(self) -> Tuple[Dict[str, CollectionStatus], Dict[str, Any]]:
        """Estado por coleccion + snapshot de configuracion."""
        status = await self.reporter.collect()
        return status, self.reporter.config_snapshot()
