# tests/conftest.py
import pytest
from fastapi.testclient import TestClient

from tutushop.config import Settings
from tutushop.main import create_app


@pytest.fixture
def settings(tmp_path):
    """Settings rooted in a throwaway directory."""
    return Settings(base_dir=tmp_path)


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    return TestClient(app)
