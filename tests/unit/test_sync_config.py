"""
Tests unitarios de la carga de configuración del sync.
"""
import pytest

from app.core.config import Settings, load_sync_config, parse_batch_size, parse_collection_mapping
from app.domain.entities.sync import SyncMode
from app.shared.exceptions.sync import ConfigurationError


def _settings(**overrides) -> Settings:
    values = {
        "MONGODB_URI": "mongodb://localhost:27017",
        "MONGODB_DATABASE": "firemongo",
        "COLLECTION_MAPPING": "{}",
        "PRESERVE_INDEXES": False,
        "BATCH_SIZE": "100",
        "SYNC_MODE": "realtime",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def test_load_sync_config_with_defaults() -> None:
    config = load_sync_config(_settings())

    assert config.uri == "mongodb://localhost:27017"
    assert config.database == "firemongo"
    assert config.collection_mapping == {}
    assert config.preserve_indexes is False
    assert config.batch_size == 100
    assert config.sync_mode == SyncMode.REALTIME


def test_load_sync_config_parses_every_setting() -> None:
    config = load_sync_config(
        _settings(
            COLLECTION_MAPPING='{"users": "app_users"}',
            PRESERVE_INDEXES=True,
            BATCH_SIZE="250",
            SYNC_MODE="BATCH",
        )
    )

    assert config.collection_mapping == {"users": "app_users"}
    assert config.preserve_indexes is True
    assert config.batch_size == 250
    assert config.sync_mode == SyncMode.BATCH


@pytest.mark.parametrize("missing", ["MONGODB_URI", "MONGODB_DATABASE"])
def test_missing_required_setting_is_fatal(missing: str) -> None:
    with pytest.raises(ConfigurationError) as exc_info:
        load_sync_config(_settings(**{missing: ""}))
    assert exc_info.value.details == {"setting": missing}


def test_invalid_sync_mode_is_fatal() -> None:
    with pytest.raises(ConfigurationError):
        load_sync_config(_settings(SYNC_MODE="streaming"))


@pytest.mark.parametrize("raw", ["abc", "0", "-5", ""])
def test_invalid_batch_size_is_fatal(raw: str) -> None:
    with pytest.raises(ConfigurationError):
        parse_batch_size(raw)


def test_batch_size_accepts_surrounding_whitespace() -> None:
    assert parse_batch_size(" 50 ") == 50


@pytest.mark.parametrize("raw", ["not json", "[1, 2]", '{"users": 1}', '"users"'])
def test_malformed_collection_mapping_falls_back_to_empty(raw: str) -> None:
    assert parse_collection_mapping(raw) == {}


def test_collection_mapping_is_parsed() -> None:
    assert parse_collection_mapping('{"a": "b", "c": "d"}') == {"a": "b", "c": "d"}
