"""
Data Transfer Objects (DTOs) para la capa de aplicacion.
"""
from .sync_dto import (
    DocumentWriteEventDTO,
    DocumentSyncResponseDTO,
    CollectionStatsDTO,
    SyncStatsDTO,
    InitialSyncResponseDTO,
    ManualSyncRequestDTO,
    CollectionSyncStatsDTO,
    ManualSyncResponseDTO,
    CollectionStatusDTO,
    SyncConfigSnapshotDTO,
    SyncStatusResponseDTO,
    SyncErrorResponseDTO,
)

__all__ = [
    "DocumentWriteEventDTO",
    "DocumentSyncResponseDTO",
    "CollectionStatsDTO",
    "SyncStatsDTO",
    "InitialSyncResponseDTO",
    "ManualSyncRequestDTO",
    "CollectionSyncStatsDTO",
    "ManualSyncResponseDTO",
    "CollectionStatusDTO",
    "SyncConfigSnapshotDTO",
    "SyncStatusResponseDTO",
    "SyncErrorResponseDTO",
]
