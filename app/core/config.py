"""
Configuracion central de la aplicacion.
Gestiona variables de entorno y configuraciones globales.

Las variables del sync (MONGODB_URI, MONGODB_DATABASE, ...) se leen una
vez como strings y se validan en `load_sync_config`, que construye el
SyncConfig inmutable usado por el motor.
"""
import json
from typing import Dict, List

from loguru import logger
from pydantic import Field, computed_field
from pydantic_settings import BaseSettings

from app.domain.entities.sync import SyncConfig, SyncMode
from app.shared.exceptions.sync import ConfigurationError


class Settings(BaseSettings):
    """
    Clase de configuracion de la aplicacion.
    Lee variables de entorno y proporciona valores por defecto.

    MONGODB_URI y MONGODB_DATABASE son obligatorias, pero se validan en
    load_sync_config para que el error sea un ConfigurationError claro.
    """

    # Configuracion de la aplicacion
    APP_NAME: str = Field(default="FireMongo Bridge")
    APP_VERSION: str = Field(default="1.0.0")
    DEBUG: bool = Field(default=False)
    ENVIRONMENT: str = Field(default="production")

    # Configuracion del servidor
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=8000)

    # MongoDB (destino)
    MONGODB_URI: str = Field(default="")
    MONGODB_DATABASE: str = Field(default="")
    MONGODB_MAX_POOL_SIZE: int = Field(default=10)
    MONGODB_MIN_POOL_SIZE: int = Field(default=2)
    MONGODB_MAX_IDLE_TIME_MS: int = Field(default=30000)
    MONGODB_SERVER_SELECTION_TIMEOUT_MS: int = Field(default=5000)
    MONGODB_SOCKET_TIMEOUT_MS: int = Field(default=45000)

    # Firestore (origen). Sin proyecto se usan las credenciales por defecto.
    FIRESTORE_PROJECT_ID: str = Field(default="")
    FIRESTORE_DATABASE: str = Field(default="(default)")

    # Sync. BATCH_SIZE se valida a mano: un valor no numerico no debe
    # tumbar la carga de Settings sino fallar como ConfigurationError.
    COLLECTION_MAPPING: str = Field(default="{}")
    PRESERVE_INDEXES: bool = Field(default=False)
    BATCH_SIZE: str = Field(default="100")
    SYNC_MODE: str = Field(default=SyncMode.REALTIME.value)

    # CORS (acepta lista JSON o "*" para todos los origenes)
    CORS_ORIGINS: str = Field(default="*")

    # Logging
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FILE: str = Field(default="logs/app.log")

    @computed_field
    @property
    def is_development(self) -> bool:
        """Indica si el entorno es de desarrollo."""
        return self.ENVIRONMENT.lower() == "development"

    class Config:
        """Configuracion de Pydantic."""
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignorar campos extra del .env


def get_cors_origins(cors_string: str) -> List[str]:
    """
    Parsea la configuracion de CORS.
    Acepta "*" para todos los origenes o una lista JSON.
    """
    if cors_string == "*":
        return ["*"]
    try:
        return json.loads(cors_string)
    except json.JSONDecodeError:
        # Si no es JSON valido, retornar como lista simple
        return [origin.strip() for origin in cors_string.split(",")]


def parse_collection_mapping(raw: str) -> Dict[str, str]:
    """
    Parsea COLLECTION_MAPPING (objeto JSON string -> string).

    Un JSON invalido no es fatal: se usa un mapeo vacio y se loguea
    un warning.
    """
    try:
        mapping = json.loads(raw or "{}")
    except json.JSONDecodeError:
        logger.warning("COLLECTION_MAPPING no es JSON valido, se usa mapeo vacio")
        return {}

    if not isinstance(mapping, dict) or not all(
        isinstance(k, str) and isinstance(v, str) for k, v in mapping.items()
    ):
        logger.warning("COLLECTION_MAPPING debe ser un objeto string -> string, se usa mapeo vacio")
        return {}

    return mapping


def parse_batch_size(raw: str) -> int:
    """Valida BATCH_SIZE como entero positivo."""
    try:
        value = int(str(raw).strip())
    except ValueError:
        raise ConfigurationError(f"BATCH_SIZE debe ser un entero, valor actual: {raw!r}", setting="BATCH_SIZE")
    if value <= 0:
        raise ConfigurationError(f"BATCH_SIZE debe ser mayor que 0, valor actual: {value}", setting="BATCH_SIZE")
    return value


def load_sync_config(source: Settings) -> SyncConfig:
    """
    Construye el SyncConfig a partir de Settings.

    Raises:
        ConfigurationError: si falta MONGODB_URI / MONGODB_DATABASE o si
            BATCH_SIZE / SYNC_MODE no son utilizables.
    """
    for name in ("MONGODB_URI", "MONGODB_DATABASE"):
        if not getattr(source, name):
            raise ConfigurationError(f"Falta variable de entorno obligatoria: {name}", setting=name)

    try:
        sync_mode = SyncMode(source.SYNC_MODE.strip().lower())
    except ValueError:
        raise ConfigurationError(
            f"SYNC_MODE debe ser 'realtime' o 'batch', valor actual: {source.SYNC_MODE!r}",
            setting="SYNC_MODE",
        )

    return SyncConfig(
        uri=source.MONGODB_URI,
        database=source.MONGODB_DATABASE,
        collection_mapping=parse_collection_mapping(source.COLLECTION_MAPPING),
        preserve_indexes=source.PRESERVE_INDEXES,
        batch_size=parse_batch_size(source.BATCH_SIZE),
        sync_mode=sync_mode,
    )


# Instancia global de configuracion
settings = Settings()
