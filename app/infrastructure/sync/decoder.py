"""
Decodificación de valores Firestore a variantes tipadas (SourceValue).

Es el único punto donde se inspecciona la forma de los valores. Hay dos
entradas:
- decode_value: objetos del SDK (google-cloud-firestore).
- decode_typed_fields: JSON tipado de eventos / API REST
  ({"stringValue": ...}, {"timestampValue": ...}, ...).
"""

from __future__ import annotations

import base64
import binascii
from datetime import datetime
from typing import Any, Dict, Mapping

from google.api_core.datetime_helpers import DatetimeWithNanoseconds

from app.domain.entities.source_values import (
    GeoPointValue,
    ReferenceValue,
    SourceValue,
    TimestampValue,
)
from app.shared.exceptions.sync import TransformError
from app.shared.utils.datetime_utils import ensure_utc

_TIMESTAMP_CONVERTERS = ("ToDatetime", "to_datetime")
_PRIMITIVES = (bool, int, float, str, bytes)
_VARIANTS = (TimestampValue, ReferenceValue, GeoPointValue)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _as_timestamp(value: Any) -> TimestampValue | None:
    if isinstance(value, datetime):
        return TimestampValue(instant=ensure_utc(value))
    for name in _TIMESTAMP_CONVERTERS:
        converter = getattr(value, name, None)
        if callable(converter):
            return TimestampValue(instant=ensure_utc(converter()))
    return None


def _as_reference(value: Any) -> ReferenceValue | None:
    path = getattr(value, "path", None)
    doc_id = getattr(value, "id", None)
    if isinstance(path, str) and isinstance(doc_id, str):
        return ReferenceValue(path=path, id=doc_id)
    return None


def _as_geo_point(value: Any) -> GeoPointValue | None:
    latitude = getattr(value, "latitude", None)
    longitude = getattr(value, "longitude", None)
    if _is_number(latitude) and _is_number(longitude):
        return GeoPointValue(latitude=float(latitude), longitude=float(longitude))
    return None


def decode_value(value: Any) -> SourceValue:
    """
    Convierte un valor del SDK de Firestore a SourceValue.

    Orden de evaluación (gana el primer match):
    None, variante ya decodificada, primitivo, timestamp, referencia,
    geopoint, secuencia, mapa.
    Los mapas se decodifican clave por clave: nunca se reinterpretan como
    referencias aunque tengan claves "path" / "id".
    """
    if value is None:
        return None

    # Ya decodificado (p.ej. desde JSON tipado)
    if isinstance(value, _VARIANTS):
        return value

    # bool/int/str exponen atributos que no coinciden con ninguna forma,
    # pero se resuelven primero para no pagar los getattr.
    if isinstance(value, _PRIMITIVES):
        return value

    for probe in (_as_timestamp, _as_reference, _as_geo_point):
        decoded = probe(value)
        if decoded is not None:
            return decoded

    if isinstance(value, (list, tuple)):
        return [decode_value(item) for item in value]

    if isinstance(value, Mapping):
        decoded_map: Dict[str, SourceValue] = {}
        for key, item in value.items():
            if not isinstance(key, str):
                raise TransformError(f"Clave de mapa no soportada: {key!r}")
            decoded_map[key] = decode_value(item)
        return decoded_map

    raise TransformError(f"Tipo de valor Firestore no soportado: {type(value).__name__}")


def _reference_from_name(name: str) -> ReferenceValue:
    """
    Reduce un nombre de recurso a path relativo.

    projects/p/databases/(default)/documents/users/123 -> users/123
    """
    _, sep, relative = name.partition("/documents/")
    path = relative if sep else name
    path = path.strip("/")
    if not path or "/" not in path:
        raise TransformError(f"referenceValue inválido: {name!r}")
    return ReferenceValue(path=path, id=path.rsplit("/", 1)[-1])


def _decode_double(raw: Any) -> float:
    # La API REST serializa NaN / Infinity como strings
    if isinstance(raw, str):
        return float(raw)
    if not _is_number(raw):
        raise TypeError(f"doubleValue inválido: {raw!r}")
    return float(raw)


def decode_typed_value(typed: Mapping[str, Any]) -> SourceValue:
    """Convierte un Value tipado de Firestore (JSON) a SourceValue."""
    if not isinstance(typed, Mapping) or len(typed) != 1:
        raise TransformError(f"Value tipado inválido: {typed!r}")

    kind, raw = next(iter(typed.items()))
    try:
        if kind == "nullValue":
            return None
        if kind == "booleanValue":
            return bool(raw)
        if kind == "integerValue":
            return int(raw)
        if kind == "doubleValue":
            return _decode_double(raw)
        if kind == "stringValue":
            return str(raw)
        if kind == "bytesValue":
            return base64.b64decode(raw, validate=True)
        if kind == "timestampValue":
            return TimestampValue(instant=ensure_utc(DatetimeWithNanoseconds.from_rfc3339(raw)))
        if kind == "referenceValue":
            return _reference_from_name(raw)
        if kind == "geoPointValue":
            return GeoPointValue(
                latitude=float(raw.get("latitude", 0.0)),
                longitude=float(raw.get("longitude", 0.0)),
            )
        if kind == "arrayValue":
            return [decode_typed_value(item) for item in (raw or {}).get("values", [])]
        if kind == "mapValue":
            return decode_typed_fields((raw or {}).get("fields", {}))
    except TransformError:
        raise
    except (TypeError, ValueError, AttributeError, binascii.Error) as e:
        raise TransformError(f"No se pudo decodificar {kind}: {raw!r}") from e

    raise TransformError(f"Tipo de Value Firestore desconocido: {kind}")


def decode_typed_fields(fields: Mapping[str, Any]) -> Dict[str, SourceValue]:
    """Decodifica el mapa `fields` de un documento Firestore en JSON."""
    if not isinstance(fields, Mapping):
        raise TransformError(f"fields debe ser un objeto, se recibió {type(fields).__name__}")
    return {key: decode_typed_value(value) for key, value in fields.items()}
