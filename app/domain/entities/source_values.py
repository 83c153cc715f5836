"""
Variantes tipadas de los valores leídos desde Firestore.

El decoder convierte cada valor de Firestore (objetos del SDK o JSON
tipado de eventos/REST) a este conjunto cerrado. A partir de ahí el
normalizador solo hace un match exhaustivo, sin inspeccionar formas.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Union


@dataclass(frozen=True)
class TimestampValue:
    """Timestamp de Firestore convertido a instante UTC."""

    instant: datetime


@dataclass(frozen=True)
class ReferenceValue:
    """Referencia a otro documento (DocumentReference)."""

    path: str  # "users/123"
    id: str    # "123"


@dataclass(frozen=True)
class GeoPointValue:
    """Coordenada geográfica de Firestore."""

    latitude: float
    longitude: float


SourceValue = Union[
    None,
    bool,
    int,
    float,
    str,
    bytes,
    datetime,
    TimestampValue,
    ReferenceValue,
    GeoPointValue,
    List[Any],
    Dict[str, Any],
]


@dataclass(frozen=True)
class SourceDocument:
    """Snapshot de un documento de Firestore, tal como se leyó."""

    document_id: str
    data: Dict[str, Any]
