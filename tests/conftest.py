"""Pytest configuration and shared fixtures.

Ensure the project root is on sys.path so tests can import the package
without requiring PYTHONPATH to be set externally.
"""
import sys
from pathlib import Path

import pytest


def pytest_configure(config):
    # Insert repo root (one level up from tests/) to sys.path
    repo_root = Path(__file__).resolve().parents[1]
    sys.path.insert(0, str(repo_root))


TOKEN = "abc123"


@pytest.fixture(params=["memory", "sqlite"])
def engine(request, tmp_path):
    from kvstore_lib.storage import open_engine

    e = open_engine(request.param, data_dir=tmp_path)
    yield e
    e.close()


@pytest.fixture
def gateway(engine):
    from kvstore_lib.storage import StorageGateway

    return StorageGateway(engine)


@pytest.fixture
def make_config(tmp_path):
    from kvstore_lib.main import Config

    def _make(**overrides):
        values = dict(
            storage_backend='sqlite',
            data_dir=str(tmp_path / 'data'),
            config_path=str(tmp_path / 'server_config.yml'),
            enable_brotli=False,
        )
        values.update(overrides)
        return Config(**values)

    return _make


@pytest.fixture
def app(make_config):
    from kvstore_lib.main import create_app

    return create_app(make_config())


@pytest.fixture
def client(app):
    from fastapi.testclient import TestClient

    with TestClient(app) as c:
        yield c


@pytest.fixture
def auth():
    return {'Authorization': TOKEN}
