"""
Entidades del dominio.
"""
from app.domain.entities.source_values import (
    TimestampValue,
    ReferenceValue,
    GeoPointValue,
    SourceValue,
    SourceDocument
)
from app.domain.entities.sync import (
    SyncMode,
    SyncOperation,
    SyncConfig,
    DocumentWriteEvent,
    SyncMetadata,
    SyncEnvelope,
    DocumentSyncResult,
    CollectionStats,
    SyncStats,
    CollectionSyncResult,
    CollectionStatus
)

__all__ = [
    "TimestampValue",
    "ReferenceValue",
    "GeoPointValue",
    "SourceValue",
    "SourceDocument",
    "SyncMode",
    "SyncOperation",
    "SyncConfig",
    "DocumentWriteEvent",
    "SyncMetadata",
    "SyncEnvelope",
    "DocumentSyncResult",
    "CollectionStats",
    "SyncStats",
    "CollectionSyncResult",
    "CollectionStatus"
]
