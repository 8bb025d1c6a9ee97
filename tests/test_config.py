import pytest
from pydantic import ValidationError

from vocab_core import config
from vocab_core.srs import ConfigurationError, SRSSettings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in list(config.SETTINGS_ENV_VARS) + ["DATABASE_URL", "TEST_MODE", "DEFAULT_USER_ID"]:
        monkeypatch.delenv(name, raising=False)


def test_default_settings():
    settings = config.load_settings()
    assert settings == SRSSettings()
    assert settings.initial_ease_factor == 2.5
    assert settings.min_ease_factor == 1.3
    assert settings.max_ease_factor == 2.5
    assert settings.initial_interval == 1
    assert settings.max_interval == 36500


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("SRS_MAX_INTERVAL", "365")
    monkeypatch.setenv("SRS_MIN_EASE", "1.5")
    monkeypatch.setenv("SRS_INITIAL_INTERVAL", " ")
    settings = config.load_settings()
    assert settings.max_interval == 365
    assert settings.min_ease_factor == 1.5
    assert settings.initial_interval == 1


def test_unparseable_env_value(monkeypatch):
    monkeypatch.setenv("SRS_MAX_INTERVAL", "forever")
    with pytest.raises(ConfigurationError):
        config.load_settings()


def test_inconsistent_env_settings(monkeypatch):
    monkeypatch.setenv("SRS_MIN_EASE", "3.0")
    with pytest.raises(ConfigurationError):
        config.load_settings()


def test_settings_validation():
    with pytest.raises(ValidationError):
        SRSSettings(initial_ease_factor=3.0)
    with pytest.raises(ValidationError):
        SRSSettings(initial_interval=10, max_interval=5)
    with pytest.raises(ValidationError):
        SRSSettings(initial_interval=0)


def test_database_url_default():
    assert config.get_database_url() == "sqlite:///logs/srs.db"


def test_database_url_test_mode(monkeypatch):
    monkeypatch.setenv("TEST_MODE", "true")
    assert config.get_database_url() == "sqlite:///logs/test_srs.db"

    monkeypatch.setenv("DATABASE_URL", "postgresql://u:p@db:5432/srs")
    assert config.get_database_url() == "postgresql://u:p@db:5432/test_srs"


def test_default_user_id(monkeypatch):
    assert config.get_default_user_id() == "default"
    monkeypatch.setenv("DEFAULT_USER_ID", "alice")
    assert config.get_default_user_id() == "alice"
