"""
Secuencia lazy de páginas con cursor por document id.

Cada request se deriva solo del último elemento de la página anterior,
así que la secuencia es reiniciable (llamar de nuevo empieza desde cero)
y se puede testear sin Firestore.
"""

from __future__ import annotations

from typing import AsyncIterator, Awaitable, Callable, List, Optional

from app.domain.entities.source_values import SourceDocument

PageFetcher = Callable[[Optional[str], int], Awaitable[List[SourceDocument]]]


async def iter_pages(fetch_page: PageFetcher, *, page_size: int) -> AsyncIterator[List[SourceDocument]]:
    """
    Itera páginas hasta recibir una vacía.

    Se detiene antes de pedir la siguiente página si el consumidor corta
    la iteración (p.ej. porque ya procesó el total esperado).
    """
    if page_size <= 0:
        raise ValueError(f"page_size debe ser mayor que 0: {page_size}")

    start_after: Optional[str] = None
    while True:
        page = await fetch_page(start_after, page_size)
        if not page:
            return
        yield page
        start_after = page[-1].document_id
