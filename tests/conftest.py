"""Pytest configuration for Raindrops."""
import os

import pytest
from fastapi.testclient import TestClient

from raindrops.base.config import LogConfig, RaindropsConfig, SecurityConfig, StorageConfig, set_config
from raindrops.events import ChangeBus
from raindrops.server.api import create_app
from raindrops.server.state import ApplicationState


def pytest_configure():
    # Keep test runs from writing ~/.raindrops/raindrops.log
    os.environ.setdefault("RAINDROPS_LOG_FILE", "false")


@pytest.fixture
def storage_root(tmp_path):
    root = tmp_path / "drop"
    root.mkdir()
    return root


@pytest.fixture
def config(storage_root, tmp_path):
    cfg = RaindropsConfig(
        security=SecurityConfig(pin="1234"),
        storage=StorageConfig(root=storage_root),
        log=LogConfig(file_enabled=False),
        state_dir=tmp_path / "state",
    )
    set_config(cfg)
    return cfg


@pytest.fixture
def state(config):
    return ApplicationState(config=config, bus=ChangeBus())


@pytest.fixture
def app(state):
    return create_app(state)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def authed_client(client, state):
    client.cookies.set(state.config.security.cookie_name, state.control.pin)
    return client
