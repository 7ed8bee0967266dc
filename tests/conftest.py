from __future__ import annotations

import os

import pytest
from fastapi.testclient import TestClient

from gateway.common.config import get_settings

os.environ.setdefault("S3_BUCKET", "test-bucket")
os.environ["API_KEY_ENABLED"] = "false"
os.environ["TRACE_HTTP"] = "false"
get_settings.cache_clear()  # type: ignore[attr-defined]

from gateway.main import create_app  # noqa: E402

from tests.services.mock_storage import MockStorageClient  # noqa: E402


@pytest.fixture(autouse=True)
def reset_settings():
    get_settings.cache_clear()  # type: ignore[attr-defined]
    yield
    get_settings.cache_clear()  # type: ignore[attr-defined]


@pytest.fixture
def mock_storage() -> MockStorageClient:
    return MockStorageClient()


@pytest.fixture
def app(mock_storage):
    return create_app(storage_client=mock_storage)


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)
