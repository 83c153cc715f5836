"""
Excepciones del motor de sincronización Firestore -> MongoDB.

Taxonomía:
- ConfigurationError: configuración inválida, fatal al cargar.
- TransformError: un documento no se pudo decodificar/normalizar.
- WriteError: falló una escritura en MongoDB (simple o bulk).
- IndexProvisionError: falló la creación de índices (solo se loguea).
- DestinationConnectionError: no se pudo conectar a MongoDB.
"""
from typing import Any, Dict, Optional

from app.shared.exceptions.base import AppException


class SyncError(AppException):
    """Excepción base para errores del sync."""

    def __init__(
        self,
        message: str,
        error_code: str = "SYNC_ERROR",
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            status_code=status_code,
            error_code=error_code,
            details=details,
        )


class ConfigurationError(SyncError):
    """Falta configuración obligatoria o tiene un valor inutilizable."""

    def __init__(self, message: str, setting: str = None):
        details = {"setting": setting} if setting else None
        super().__init__(message=message, error_code="CONFIGURATION_ERROR", details=details)


class TransformError(SyncError):
    """Un valor de Firestore no tiene una forma reconocida."""

    def __init__(self, message: str, document_id: str = None):
        details = {"document_id": document_id} if document_id else None
        super().__init__(message=message, error_code="TRANSFORM_ERROR", status_code=422, details=details)


class WriteError(SyncError):
    """Falló una escritura en la colección destino."""

    def __init__(self, message: str, collection: str, document_id: str = None):
        details: Dict[str, Any] = {"collection": collection}
        if document_id:
            details["document_id"] = document_id
        super().__init__(message=message, error_code="WRITE_ERROR", details=details)


class IndexProvisionError(SyncError):
    """Falló la creación de índices en una colección destino."""

    def __init__(self, message: str, collection: str):
        super().__init__(
            message=message,
            error_code="INDEX_ERROR",
            details={"collection": collection},
        )


class DestinationConnectionError(SyncError):
    """No se pudo establecer la conexión con MongoDB."""

    def __init__(self, message: str):
        super().__init__(message=message, error_code="DESTINATION_CONNECTION_ERROR", status_code=503)
