"""
Motor de sincronización one-way: Firestore -> MongoDB.

Objetivos de diseño:
- Idempotencia: cada escritura es un upsert-by-replace por _firestore_id,
  se puede ejecutar N veces sin duplicar documentos.
- Dos caminos sobre la misma colección destino: incremental (un evento,
  una escritura) y bulk (paginación de la colección completa).
- Last-write-wins: no hay merge ni control de versiones.
- Conversión explícita de tipos Firestore (timestamps, referencias,
  geopoints) a valores seguros para MongoDB.
"""
