"""
DTOs para sincronizacion Firestore -> MongoDB.

Definen el contrato HTTP de:
- webhook de eventos de escritura (camino incremental)
- sync inicial (bulk)
- endpoint de gestion (estado + sync manual por coleccion)
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from app.domain.entities.sync import (
    CollectionStats,
    CollectionStatus,
    CollectionSyncResult,
    DocumentSyncResult,
    SyncStats,
)


class DocumentWriteEventDTO(BaseModel):
    """
    Evento de escritura de un documento Firestore.

    `after_value` es el mapa `fields` del documento en formato Value
    tipado de Firestore ({"name": {"stringValue": "Ana"}, ...}).
    """
    collection_id: str = Field(..., min_length=1)
    document_id: str = Field(..., min_length=1)
    before_exists: bool = False
    after_exists: bool = True
    after_value: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Campos del documento despues de la escritura (JSON tipado)"
    )


class DocumentSyncResponseDTO(BaseModel):
    """Resultado del camino incremental."""
    success: bool = True
    skipped: bool = False
    operation: Optional[str] = None
    destination_collection: Optional[str] = None
    document_id: str
    message: str

    @classmethod
    def from_result(cls, result: DocumentSyncResult) -> "DocumentSyncResponseDTO":
        return cls(
            operation=result.operation.value,
            destination_collection=result.destination_collection,
            document_id=result.document_id,
            message=f"Documento sincronizado ({result.operation.value})",
        )


class CollectionStatsDTO(BaseModel):
    count: int
    last_sync: Optional[datetime] = None
    processed: int = 0
    failed: int = 0
    destination_collection: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def from_entity(cls, stats: CollectionStats) -> "CollectionStatsDTO":
        return cls(
            count=stats.count,
            last_sync=stats.last_sync,
            processed=stats.processed,
            failed=stats.failed,
            destination_collection=stats.destination_collection,
            error=stats.error,
        )


class SyncStatsDTO(BaseModel):
    """Estadisticas de una corrida bulk."""
    total_documents: int
    processed_documents: int
    failed_documents: int
    collections: Dict[str, CollectionStatsDTO] = Field(default_factory=dict)

    @classmethod
    def from_entity(cls, stats: SyncStats) -> "SyncStatsDTO":
        return cls(
            total_documents=stats.total_documents,
            processed_documents=stats.processed_documents,
            failed_documents=stats.failed_documents,
            collections={
                name: CollectionStatsDTO.from_entity(collection)
                for name, collection in stats.collections.items()
            },
        )


class InitialSyncResponseDTO(BaseModel):
    success: bool = True
    message: str
    stats: SyncStatsDTO
    timestamp: datetime


class ManualSyncRequestDTO(BaseModel):
    """Request del sync manual. collection_name se valida en el endpoint (400)."""
    collection_name: Optional[str] = None


class CollectionSyncStatsDTO(BaseModel):
    total_documents: int
    processed_documents: int
    failed_documents: int
    destination_collection: str
    last_sync: Optional[datetime] = None

    @classmethod
    def from_result(cls, result: CollectionSyncResult) -> "CollectionSyncStatsDTO":
        return cls(
            total_documents=result.total_documents,
            processed_documents=result.processed_documents,
            failed_documents=result.failed_documents,
            destination_collection=result.destination_collection,
            last_sync=result.last_sync,
        )


class ManualSyncResponseDTO(BaseModel):
    success: bool = True
    message: str
    stats: CollectionSyncStatsDTO
    timestamp: datetime


class CollectionStatusDTO(BaseModel):
    source_count: int
    destination_count: int
    last_sync: Optional[datetime] = None
    in_sync: bool
    destination_collection: str
    error: Optional[str] = None

    @classmethod
    def from_entity(cls, status: CollectionStatus) -> "CollectionStatusDTO":
        return cls(
            source_count=status.source_count,
            destination_count=status.destination_count,
            last_sync=status.last_synced,
            in_sync=status.in_sync,
            destination_collection=status.destination_collection,
            error=status.error,
        )


class SyncConfigSnapshotDTO(BaseModel):
    sync_mode: str
    preserve_indexes: bool
    batch_size: int


class SyncStatusResponseDTO(BaseModel):
    success: bool = True
    status: Dict[str, CollectionStatusDTO]
    config: SyncConfigSnapshotDTO
    timestamp: datetime


class SyncErrorResponseDTO(BaseModel):
    success: bool = False
    error: str
    message: Optional[str] = None
