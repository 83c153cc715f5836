"""
Entidades del sync Firestore -> MongoDB.

Se mantienen libres de I/O para poder testearlas fácilmente.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


# Nombres de los campos de metadata en el documento destino
FIRESTORE_ID_FIELD = "_firestore_id"
FIRESTORE_COLLECTION_FIELD = "_firestore_collection"
FIRESTORE_PATH_FIELD = "_firestore_path"
SYNCED_AT_FIELD = "_synced_at"


class SyncMode(str, Enum):
    """Modo de sincronización del proceso."""
    REALTIME = "realtime"
    BATCH = "batch"


class SyncOperation(str, Enum):
    """Operación derivada de un evento de escritura en Firestore."""
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True)
class SyncConfig:
    """
    Configuración inmutable del sync, cargada una vez por proceso.

    - collection_mapping: nombre Firestore -> nombre MongoDB. Los nombres
      ausentes pasan sin cambio.
    - batch_size: tamaño de página para la migración bulk (> 0).
    """

    uri: str
    database: str
    collection_mapping: Dict[str, str] = field(default_factory=dict)
    preserve_indexes: bool = False
    batch_size: int = 100
    sync_mode: SyncMode = SyncMode.REALTIME


@dataclass(frozen=True)
class DocumentWriteEvent:
    """
    Evento de escritura de un documento en Firestore.

    after_value es el mapa `fields` en JSON tipado de Firestore
    ({"name": {"stringValue": "Ana"}}), sin decodificar.
    """

    collection_id: str
    document_id: str
    before_exists: bool
    after_exists: bool
    after_value: Optional[Dict[str, Any]] = None

    @property
    def operation(self) -> SyncOperation:
        if not self.after_exists:
            return SyncOperation.DELETE
        if not self.before_exists:
            return SyncOperation.CREATE
        return SyncOperation.UPDATE


@dataclass(frozen=True)
class SyncMetadata:
    """Metadata obligatoria de cada documento sincronizado."""

    source_document_id: str
    source_collection_id: str
    synced_at: datetime

    @property
    def source_path(self) -> str:
        return f"{self.source_collection_id}/{self.source_document_id}"

    def as_fields(self) -> Dict[str, Any]:
        return {
            FIRESTORE_ID_FIELD: self.source_document_id,
            FIRESTORE_COLLECTION_FIELD: self.source_collection_id,
            FIRESTORE_PATH_FIELD: self.source_path,
            SYNCED_AT_FIELD: self.synced_at,
        }


@dataclass(frozen=True)
class SyncEnvelope:
    """
    Documento normalizado + metadata.

    Internamente se mantienen separados; solo se aplanan al escribir
    en MongoDB (`to_document`). La metadata se aplica después del
    contenido, así que gana ante colisiones de nombres.
    """

    metadata: SyncMetadata
    content: Dict[str, Any]

    @property
    def key_filter(self) -> Dict[str, str]:
        return {FIRESTORE_ID_FIELD: self.metadata.source_document_id}

    def to_document(self) -> Dict[str, Any]:
        return {**self.content, **self.metadata.as_fields()}


def build_envelope(
    collection_id: str,
    document_id: str,
    content: Optional[Dict[str, Any]],
    *,
    synced_at: datetime,
) -> SyncEnvelope:
    """Construye el envelope de un documento ya normalizado."""
    return SyncEnvelope(
        metadata=SyncMetadata(
            source_document_id=document_id,
            source_collection_id=collection_id,
            synced_at=synced_at,
        ),
        content=dict(content or {}),
    )


@dataclass(frozen=True)
class DocumentSyncResult:
    """Resultado de sincronizar un único documento."""

    operation: SyncOperation
    destination_collection: str
    document_id: str
    upserted: bool = False
    deleted_count: int = 0


@dataclass
class CollectionStats:
    """Estadísticas de una colección dentro de una corrida bulk."""

    count: int = 0
    last_sync: Optional[datetime] = None
    processed: int = 0
    failed: int = 0
    destination_collection: Optional[str] = None
    error: Optional[str] = None


@dataclass
class SyncStats:
    """Reporte agregado de una corrida de migración bulk."""

    total_documents: int = 0
    processed_documents: int = 0
    failed_documents: int = 0
    collections: Dict[str, CollectionStats] = field(default_factory=dict)

    def add(self, collection_id: str, stats: CollectionStats) -> None:
        self.collections[collection_id] = stats
        self.total_documents += stats.count
        self.processed_documents += stats.processed
        self.failed_documents += stats.failed


@dataclass(frozen=True)
class CollectionSyncResult:
    """Resultado de sincronizar manualmente una sola colección."""

    collection_id: str
    destination_collection: str
    total_documents: int
    processed_documents: int
    failed_documents: int
    last_sync: Optional[datetime] = None


@dataclass(frozen=True)
class CollectionStatus:
    """
    Estado de sync de una colección (solo lectura).

    in_sync es una heurística de conteo: no compara contenido.
    """

    source_count: int
    destination_count: int
    last_synced: Optional[datetime]
    in_sync: bool
    destination_collection: str
    error: Optional[str] = None
