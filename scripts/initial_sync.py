"""
CLI: Firestore -> MongoDB (sync bulk).

Uso recomendado:
  - Ejecutar como job (cron / Cloud Run job) para el sync inicial o para
    re-sincronizar después de un incidente. Es seguro re-ejecutarlo: todas
    las escrituras son upserts.

Variables de entorno requeridas:
  - MONGODB_URI
  - MONGODB_DATABASE
  - Credenciales de Google (GOOGLE_APPLICATION_CREDENTIALS o ADC)

Ejecución:
  python scripts/initial_sync.py
  python scripts/initial_sync.py --collection users
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Dict

from dotenv import load_dotenv
from loguru import logger

# Permite ejecutar este script desde cualquier cwd sin configurar PYTHONPATH.
_PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))

load_dotenv(_PROJECT_ROOT / ".env", override=False)

from app.application.dto.sync_dto import CollectionSyncStatsDTO, SyncStatsDTO
from app.core.config import Settings, load_sync_config
from app.core.events import build_connection_manager, build_sync_use_cases
from app.infrastructure.sync.firestore_source import FirestoreSource


async def run(collection: str | None) -> Dict[str, Any]:
    source = Settings()
    config = load_sync_config(source)
    connection = build_connection_manager(source, config)
    firestore_source = FirestoreSource.from_settings(
        project_id=source.FIRESTORE_PROJECT_ID,
        database=source.FIRESTORE_DATABASE,
    )
    use_cases = build_sync_use_cases(config, connection=connection, firestore_source=firestore_source)

    try:
        if collection:
            result = await use_cases.run_collection_sync(collection)
            return CollectionSyncStatsDTO.from_result(result).model_dump(mode="json")
        stats = await use_cases.run_initial_sync()
        return SyncStatsDTO.from_entity(stats).model_dump(mode="json")
    finally:
        await connection.close()


def main() -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "--collection",
        default=None,
        help="Sincroniza solo esta colección (por defecto: todas).",
    )
    args = parser.parse_args()

    logger.info("Iniciando Firestore -> MongoDB sync...")
    stats = asyncio.run(run(args.collection))
    print(json.dumps(stats, indent=2, ensure_ascii=False))

    failed = stats.get("failed_documents", 0)
    if failed:
        logger.warning(f"Sync terminado con {failed} documento(s) fallido(s)")
        return 1
    logger.info("Sync OK")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
