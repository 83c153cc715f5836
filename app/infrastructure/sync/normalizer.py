"""
Normalización de valores Firestore (ya decodificados) a valores MongoDB.

Función pura y recursiva, sin I/O. Reglas (gana la primera):
1. None -> None
2. TimestampValue -> datetime UTC
3. ReferenceValue -> {"_type": "reference", "_path": ..., "_id": ...}
4. GeoPointValue -> GeoJSON Point, coordenadas [longitude, latitude]
5. lista -> lista normalizada elemento a elemento
6. mapa -> mapa con los mismos keys, valores normalizados
7. resto (primitivos, datetime, bytes) -> sin cambios

normalize(normalize(x)) == normalize(x): la salida solo contiene
primitivos, datetimes, listas y mapas.
"""

from __future__ import annotations

from typing import Any

from app.domain.entities.source_values import (
    GeoPointValue,
    ReferenceValue,
    SourceValue,
    TimestampValue,
)


def normalize(value: SourceValue) -> Any:
    if value is None:
        return None

    if isinstance(value, TimestampValue):
        return value.instant

    if isinstance(value, ReferenceValue):
        return {"_type": "reference", "_path": value.path, "_id": value.id}

    if isinstance(value, GeoPointValue):
        # GeoJSON: longitude primero
        return {"type": "Point", "coordinates": [value.longitude, value.latitude]}

    if isinstance(value, list):
        return [normalize(item) for item in value]

    if isinstance(value, dict):
        return {key: normalize(item) for key, item in value.items()}

    return value
