"""
Tests for loading client settings from the environment.
"""

import pytest

# Path setup handled by conftest.py
from personadev import config
from personadev.config import ClientConfig
from personadev.core.exceptions import InvalidInputError


@pytest.fixture(autouse=True)
def no_dotenv(monkeypatch):
    monkeypatch.setattr(config, "load_dotenv", lambda: None)


def test_client_config_from_env(monkeypatch):
    monkeypatch.setenv("PERSONADEV_API_URL", "http://relay.local/api/")
    monkeypatch.setenv("PERSONADEV_TIMEOUT", "4.5")

    loaded = ClientConfig.from_env()
    assert loaded.api_url == "http://relay.local/api"
    assert loaded.timeout == 4.5


def test_client_config_defaults(monkeypatch):
    monkeypatch.delenv("PERSONADEV_API_URL", raising=False)
    monkeypatch.delenv("PERSONADEV_TIMEOUT", raising=False)

    loaded = ClientConfig.from_env()
    assert loaded.api_url == config.DEFAULT_API_URL
    assert loaded.timeout == config.DEFAULT_TIMEOUT


@pytest.mark.parametrize("raw", ["soon", "", "0", "-3"])
def test_bad_timeout_names_the_variable(monkeypatch, raw):
    monkeypatch.setenv("PERSONADEV_TIMEOUT", raw)
    with pytest.raises(InvalidInputError, match="PERSONADEV_TIMEOUT"):
        ClientConfig.from_env()
