"""
Endpoints para sincronizacion Firestore -> MongoDB.

- POST /sync/events: evento de escritura (camino incremental)
- POST /sync/initial: sync inicial de todas las colecciones
- GET/POST /sync/management: estado del sync / sync manual de una coleccion

Los errores se devuelven como JSON {success: false, error, message},
nunca como stack trace.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import JSONResponse
from loguru import logger

from app.api.v1.dependencies.use_case_deps import get_sync_use_cases
from app.application.dto.sync_dto import (
    CollectionStatusDTO,
    CollectionSyncStatsDTO,
    DocumentSyncResponseDTO,
    DocumentWriteEventDTO,
    InitialSyncResponseDTO,
    ManualSyncRequestDTO,
    ManualSyncResponseDTO,
    SyncConfigSnapshotDTO,
    SyncErrorResponseDTO,
    SyncStatsDTO,
    SyncStatusResponseDTO,
)
from app.application.use_cases.sync_use_cases import SyncUseCases
from app.domain.entities.sync import DocumentWriteEvent
from app.shared.exceptions.sync import SyncError
from app.shared.utils.datetime_utils import utc_now


router = APIRouter(prefix="/sync", tags=["Sync"])


def _error_response(status_code: int, error: str, message: str = None) -> JSONResponse:
    body = SyncErrorResponseDTO(error=error, message=message)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def _preflight() -> Response:
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/events",
    response_model=DocumentSyncResponseDTO,
    summary="Sincronizar un evento de escritura de Firestore"
)
async def sync_document_event(
    event: DocumentWriteEventDTO,
    use_cases: SyncUseCases = Depends(get_sync_use_cases),
):
    """
    Aplica un evento de escritura de Firestore en MongoDB.

    - after_exists=false -> delete
    - after_exists=true, before_exists=false -> create
    - after_exists=true, before_exists=true -> update

    after_value llega como JSON tipado; se decodifica en el caso de uso,
    despues de verificar el modo (en batch el evento se omite sin leerlo).

    Un error responde 5xx/4xx para que el dispatcher reintente.
    """
    try:
        result = await use_cases.handle_document_write(
            DocumentWriteEvent(
                collection_id=event.collection_id,
                document_id=event.document_id,
                before_exists=event.before_exists,
                after_exists=event.after_exists,
                after_value=event.after_value,
            )
        )
    except SyncError as e:
        return _error_response(e.status_code, e.error_code, e.message)
    except Exception as e:
        logger.exception(f"Error procesando evento {event.collection_id}/{event.document_id}")
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Error interno sincronizando documento", str(e))

    if result is None:
        return DocumentSyncResponseDTO(
            skipped=True,
            document_id=event.document_id,
            message="Sync en tiempo real deshabilitado (modo batch)",
        )
    return DocumentSyncResponseDTO.from_result(result)


@router.options("/initial", status_code=status.HTTP_204_NO_CONTENT, include_in_schema=False)
async def initial_sync_preflight() -> Response:
    return _preflight()


@router.post(
    "/initial",
    response_model=InitialSyncResponseDTO,
    status_code=status.HTTP_200_OK,
    summary="Sincronizar todas las colecciones de Firestore con MongoDB"
)
async def initial_sync(use_cases: SyncUseCases = Depends(get_sync_use_cases)):
    """
    Ejecuta el sync inicial (bulk) de todas las colecciones.

    Los fallos por documento/pagina/coleccion se reportan en stats;
    solo un fallo inesperado responde 500.
    """
    try:
        stats = await use_cases.run_initial_sync()
    except Exception as e:
        logger.exception("Error en sync inicial")
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Error interno durante el sync inicial",
            str(e),
        )

    return InitialSyncResponseDTO(
        message="Sync inicial completado",
        stats=SyncStatsDTO.from_entity(stats),
        timestamp=utc_now(),
    )


@router.options("/management", status_code=status.HTTP_204_NO_CONTENT, include_in_schema=False)
async def management_preflight() -> Response:
    return _preflight()


@router.get(
    "/management",
    response_model=SyncStatusResponseDTO,
    summary="Estado del sync por coleccion"
)
async def sync_status(use_cases: SyncUseCases = Depends(get_sync_use_cases)):
    """Compara conteos Firestore vs MongoDB y retorna la configuracion actual."""
    try:
        collections, config = await use_cases.get_status()
    except Exception as e:
        logger.exception("Error obteniendo estado del sync")
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Error interno", str(e))

    return SyncStatusResponseDTO(
        status={name: CollectionStatusDTO.from_entity(item) for name, item in collections.items()},
        config=SyncConfigSnapshotDTO(**config),
        timestamp=utc_now(),
    )


@router.post(
    "/management",
    response_model=ManualSyncResponseDTO,
    summary="Sync manual de una coleccion"
)
async def manual_collection_sync(
    request: Optional[ManualSyncRequestDTO] = None,
    use_cases: SyncUseCases = Depends(get_sync_use_cases),
):
    """Ejecuta el sync bulk de una sola coleccion (collection_name)."""
    collection_name = ((request.collection_name if request else None) or "").strip()
    if not collection_name:
        return _error_response(status.HTTP_400_BAD_REQUEST, "collection_name es obligatorio en el body")

    try:
        result = await use_cases.run_collection_sync(collection_name)
    except Exception as e:
        logger.exception(f"Error en sync manual de {collection_name}")
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Error interno", str(e))

    return ManualSyncResponseDTO(
        message=f"Sync manual completado para coleccion: {collection_name}",
        stats=CollectionSyncStatsDTO.from_result(result),
        timestamp=utc_now(),
    )
