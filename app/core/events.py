"""
Ciclo de vida (lifespan) de la aplicacion.

El startup construye los componentes del sync una sola vez (conexion a
MongoDB, fuente Firestore, sincronizador, migrador, reporter) y los deja
en app.state; el shutdown cierra la conexion.
"""
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from loguru import logger

from app.application.use_cases.sync_use_cases import SyncUseCases
from app.core.config import Settings, load_sync_config, settings
from app.domain.entities.sync import SyncConfig
from app.infrastructure.sync.batch_migrator import BatchMigrator
from app.infrastructure.sync.connection import MongoConnectionManager, MongoPoolOptions
from app.infrastructure.sync.document_sync import DocumentSynchronizer
from app.infrastructure.sync.firestore_source import FirestoreSource
from app.infrastructure.sync.status_reporter import SyncStatusReporter


def build_connection_manager(source: Settings, config: SyncConfig) -> MongoConnectionManager:
    """Crea el gestor de conexion con los limites de pool configurados."""
    return MongoConnectionManager(
        config.uri,
        config.database,
        pool_options=MongoPoolOptions(
            max_pool_size=source.MONGODB_MAX_POOL_SIZE,
            min_pool_size=source.MONGODB_MIN_POOL_SIZE,
            max_idle_time_ms=source.MONGODB_MAX_IDLE_TIME_MS,
            server_selection_timeout_ms=source.MONGODB_SERVER_SELECTION_TIMEOUT_MS,
            socket_timeout_ms=source.MONGODB_SOCKET_TIMEOUT_MS,
        ),
    )


def build_sync_use_cases(
    config: SyncConfig,
    *,
    connection: MongoConnectionManager,
    firestore_source: FirestoreSource,
) -> SyncUseCases:
    """Ensambla los casos de uso del sync con colaboradores compartidos."""
    return SyncUseCases(
        config=config,
        synchronizer=DocumentSynchronizer(connection, config),
        migrator=BatchMigrator(connection=connection, source=firestore_source, config=config),
        reporter=SyncStatusReporter(connection=connection, source=firestore_source, config=config),
    )


def configure_logging(source: Settings) -> int:
    """Agrega el sink de archivo con rotacion. Retorna el id del sink."""
    return logger.add(
        source.LOG_FILE,
        rotation="500 MB",
        retention="10 days",
        level=source.LOG_LEVEL,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Ciclo de vida de la aplicacion.

    Antes del yield construye los componentes del sync y los deja en
    app.state; despues del yield cierra la conexion a MongoDB.

    Args:
        app: Instancia de FastAPI
    """
    sink_id = None
    try:
        logger.info(f"Iniciando {settings.APP_NAME} v{settings.APP_VERSION}")
        logger.info(f"Entorno: {settings.ENVIRONMENT}")

        sink_id = configure_logging(settings)

        # Configuracion invalida es fatal: el startup se aborta
        config = load_sync_config(settings)
        connection = build_connection_manager(settings, config)
        firestore_source = FirestoreSource.from_settings(
            project_id=settings.FIRESTORE_PROJECT_ID,
            database=settings.FIRESTORE_DATABASE,
        )

        app.state.mongo_connection = connection
        app.state.sync_use_cases = build_sync_use_cases(
            config, connection=connection, firestore_source=firestore_source
        )
        logger.info(
            f"Sync configurado: modo={config.sync_mode.value}, batch_size={config.batch_size}, "
            f"preserve_indexes={config.preserve_indexes}, mapeos={len(config.collection_mapping)}"
        )
        logger.success("Aplicacion iniciada correctamente")

    except Exception as e:
        logger.error(f"Error durante startup: {e}")
        logger.exception("Detalle del error:")
        if sink_id is not None:
            logger.remove(sink_id)
        raise

    try:
        yield
    finally:
        logger.info("Cerrando aplicacion...")
        await connection.close()
        logger.success("Aplicacion cerrada correctamente")
        logger.remove(sink_id)
