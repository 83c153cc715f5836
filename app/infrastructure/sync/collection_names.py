"""
Resolución de nombres de colección Firestore -> MongoDB.
"""

from __future__ import annotations

from typing import Mapping


def resolve_collection_name(source_collection_id: str, mapping: Mapping[str, str]) -> str:
    """
    Aplica el mapeo configurado; los nombres ausentes pasan sin cambio.

    No valida que el nombre sea legal en MongoDB: eso falla al escribir.
    """
    return mapping.get(source_collection_id) or source_collection_id
