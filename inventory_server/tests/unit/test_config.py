import pytest
from pydantic import ValidationError

from inventory_server.config import get_config
from inventory_server.config.models import (
    AppConfig,
    LoggingConfig,
    NotificationConfig,
    PersistenceConfig,
    WorldConfig,
)


def test_get_config_returns_fresh_instances_under_pytest():
    assert get_config() is not get_config()


def test_defaults():
    config = AppConfig()

    assert config.logging.environment == "unit_test"
    assert config.catalog.config_path.endswith("items.json")
    assert config.notification.timeout_seconds == 5.0
    assert config.world.maps["world1"].width == 64


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("PERSISTENCE_BACKEND", "JSON")
    monkeypatch.setenv("PERSISTENCE_DATA_PATH", "/tmp/items.json")
    monkeypatch.setenv("NOTIFICATION_TIMEOUT_SECONDS", "0.5")
    monkeypatch.setenv("WORLD_MAPS", '{"cave": {"width": 8, "height": 3}}')

    config = AppConfig()

    assert config.persistence.backend == "json"
    assert config.persistence.data_path == "/tmp/items.json"
    assert config.notification.timeout_seconds == 0.5
    assert list(config.world.maps) == ["cave"]
    assert config.world.maps["cave"].height == 3


def test_log_level_is_normalized():
    assert LoggingConfig(level="debug").level == "DEBUG"


@pytest.mark.parametrize(
    ("model", "kwargs"),
    [
        (LoggingConfig, {"environment": "staging"}),
        (LoggingConfig, {"level": "LOUD"}),
        (PersistenceConfig, {"backend": "redis"}),
        (NotificationConfig, {"timeout_seconds": 0}),
        (WorldConfig, {"maps": {}}),
        (WorldConfig, {"maps": {"world1": {"width": 0, "height": 4}}}),
    ],
)
def test_invalid_values_are_rejected(model, kwargs):
    with pytest.raises(ValidationError):
        model(**kwargs)


def test_legacy_dict_feeds_logging_setup():
    legacy = AppConfig().to_legacy_dict()

    assert legacy["logging"]["environment"] == "unit_test"
    assert legacy["world"]["world1"] == {"width": 64, "height": 64}
