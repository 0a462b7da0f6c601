import logging
import os

import pytest

from rri_client import config


@pytest.fixture(autouse=True)
def _restore_config():
    saved = config.CLIENT_CONFIG.copy()
    level = logging.getLogger().level
    yield
    config.CLIENT_CONFIG.clear()
    config.CLIENT_CONFIG.update(saved)
    logging.getLogger().setLevel(level)


def test_defaults(tmp_path, monkeypatch):
    for key in config.DEFAULT_CONFIG:
        monkeypatch.delenv(f"RRI_{key.upper()}", raising=False)
    loaded = config.load_config(str(tmp_path / "missing.env"))
    assert loaded["connect_timeout"] == 10.0
    assert loaded["verbose"] is False
    assert config.get("log_level") == "WARNING"


def test_environment_variables_are_coerced(tmp_path, monkeypatch):
    monkeypatch.setenv("RRI_CONNECT_TIMEOUT", "2.5")
    monkeypatch.setenv("RRI_VERBOSE", "yes")
    monkeypatch.setenv("RRI_LOG_LEVEL", "debug")
    loaded = config.load_config(str(tmp_path / "missing.env"))
    assert loaded["connect_timeout"] == 2.5
    assert loaded["verbose"] is True
    assert loaded["log_level"] == "DEBUG"
    assert logging.getLogger().level == logging.DEBUG


def test_dotenv_file_is_loaded(tmp_path, monkeypatch):
    monkeypatch.delenv("RRI_ADDRESS", raising=False)
    env_file = tmp_path / ".env"
    env_file.write_text("RRI_ADDRESS=rri.denic.de:51131\n", encoding="utf-8")
    try:
        assert config.load_config(str(env_file))["address"] == "rri.denic.de:51131"
    finally:
        # load_dotenv writes os.environ directly
        os.environ.pop("RRI_ADDRESS", None)


@pytest.mark.parametrize(
    "key,value",
    [("RRI_CONNECT_TIMEOUT", "abc"), ("RRI_CONNECT_TIMEOUT", "0"), ("RRI_READ_TIMEOUT", "-1"), ("RRI_LOG_LEVEL", "LOUD")],
)
def test_invalid_values(tmp_path, monkeypatch, key, value):
    monkeypatch.setenv(key, value)
    with pytest.raises(config.ConfigError):
        config.load_config(str(tmp_path / "missing.env"))


def test_invalid_value_names_the_variable(tmp_path, monkeypatch):
    monkeypatch.setenv("RRI_CONNECT_TIMEOUT", "soon")
    with pytest.raises(config.ConfigError) as excinfo:
        config.load_config(str(tmp_path / "missing.env"))
    assert "RRI_CONNECT_TIMEOUT" in str(excinfo.value)


def test_get_falls_back_to_default():
    config.CLIENT_CONFIG.pop("read_timeout")
    assert config.get("read_timeout") == 0.0
    assert config.get("unknown", "x") == "x"
