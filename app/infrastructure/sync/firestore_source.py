"""
Adaptador de lectura de Firestore (google-cloud-firestore, AsyncClient).

Solo lectura: lista colecciones raíz, cuenta documentos y lee páginas
ordenadas por document id. No convierte tipos: los documentos salen con
los objetos del SDK y el decoder los traduce en el migrador, donde un
fallo cuenta como documento fallido.
"""

from __future__ import annotations

from typing import List, Optional

from google.cloud import firestore
from google.cloud.firestore_v1.field_path import FieldPath
from loguru import logger

from app.domain.entities.source_values import SourceDocument


class FirestoreSource:
    """Fuente Firestore para el migrador y el reporter."""

    def __init__(self, client: firestore.AsyncClient) -> None:
        self._client = client

    @classmethod
    def from_settings(cls, *, project_id: str = "", database: str = "(default)") -> "FirestoreSource":
        """Crea el cliente con las credenciales por defecto del entorno."""
        client = firestore.AsyncClient(project=project_id or None, database=database)
        return cls(client)

    async def list_collection_ids(self) -> List[str]:
        return [collection.id async for collection in self._client.collections()]

    async def count(self, collection_id: str) -> int:
        """Cuenta documentos con una agregación (no descarga la colección)."""
        query = self._client.collection(collection_id).count(alias="total")
        results = await query.get()
        for aggregation in results:
            for result in aggregation:
                if result.alias == "total":
                    return int(result.value)
        return 0

    async def fetch_page(
        self,
        collection_id: str,
        *,
        start_after: Optional[str],
        limit: int,
    ) -> List[SourceDocument]:
        """
        Lee una página ordenada por document id.

        start_after es el último id de la página anterior (exclusivo).
        El orden por id es estable: no depende de campos mutables ni de
        offsets que se desplacen si la colección cambia durante la lectura.
        """
        document_id = FieldPath.document_id()
        query = self._client.collection(collection_id).order_by(document_id).limit(limit)
        if start_after is not None:
            query = query.start_after({document_id: start_after})

        page = [
            SourceDocument(document_id=snapshot.id, data=snapshot.to_dict() or {})
            async for snapshot in query.stream()
        ]
        logger.debug(f"Página leída de {collection_id}: {len(page)} documentos (start_after={start_after})")
        return page
