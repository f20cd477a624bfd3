"""Pytest configuration for terrifi-gen unit tests."""

import pytest

from terrifi_gen.config import load_config
from terrifi_gen.mappers import load_mappers
from terrifi_gen.rendering import create_jinja_environment


@pytest.fixture(scope="session")
def mappers():
    """Type mappers compiled from the packaged config.yaml."""
    return load_mappers(load_config())


@pytest.fixture(scope="session")
def jinja_env():
    """Jinja2 environment with the packaged templates."""
    return create_jinja_environment()


@pytest.fixture
def clean_env(monkeypatch):
    """Remove UNIFI_* and TERRIFI_* variables from the environment."""
    for name in (
        "UNIFI_API",
        "UNIFI_USERNAME",
        "UNIFI_PASSWORD",
        "UNIFI_API_KEY",
        "UNIFI_SITE",
        "UNIFI_INSECURE",
        "TERRIFI_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch
