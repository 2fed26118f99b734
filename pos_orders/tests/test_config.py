import pytest

from pos_orders.config import AppConfig, get_config, set_config_for_test

@pytest.fixture(autouse=True)
def clear_env(monkeypatch):
    for var in [
        "APP_ENV", "LOG_LEVEL", "DB_PATH", "DB_TIMEOUT_SECONDS", "ID_DIGITS",
        "ID_MAX_ATTEMPTS", "DISPLAY_NUMBER_MAX", "STRICT_REFUNDS",
    ]:
        monkeypatch.delenv(var, raising=False)
    yield
    set_config_for_test()

def test_defaults():
    """Defaults match the register's historical behaviour."""
    config = AppConfig(_env_file=None)
    assert config.id_digits == 6
    assert config.id_max_attempts == 100
    assert config.display_number_max == 99
    assert config.strict_refunds is False

def test_environment_overrides(monkeypatch):
    """Environment variables are picked up case-insensitively."""
    monkeypatch.setenv("DISPLAY_NUMBER_MAX", "250")
    monkeypatch.setenv("STRICT_REFUNDS", "true")
    config = AppConfig(_env_file=None)
    assert config.display_number_max == 250
    assert config.strict_refunds is True

def test_set_config_for_test_replaces_singleton():
    set_config_for_test(db_path="/tmp/other.db", log_level="ERROR")
    assert get_config().db_path == "/tmp/other.db"
    assert get_config().log_level == "ERROR"
