from __future__ import annotations

import pytest

from gateway.common.errors import (
    ErrorKind,
    GatewayError,
    StorageOperation,
    map_storage_error,
)
from gateway.infra.storage.client import ObjectNotFoundError, StorageError


@pytest.mark.parametrize(
    "exc",
    [ObjectNotFoundError("gone"), StorageError("timeout"), RuntimeError("bug")],
)
def test_reads_always_map_to_not_found(exc):
    error = map_storage_error(exc, StorageOperation.GET)

    assert error.kind is ErrorKind.NOT_FOUND
    assert error.status_code == 404
    assert error.message == "File not found"
    assert error.__cause__ is exc


def test_writes_map_to_server_error():
    error = map_storage_error(StorageError("denied"), StorageOperation.PUT)

    assert error.kind is ErrorKind.SERVER_ERROR
    assert error.status_code == 500
    assert error.message == "Failed to upload file"


def test_delete_of_absent_key_is_still_server_error():
    error = map_storage_error(ObjectNotFoundError("gone"), StorageOperation.DELETE)

    assert error.kind is ErrorKind.SERVER_ERROR
    assert error.message == "Failed to delete file"


def test_messages_do_not_leak_storage_details():
    error = map_storage_error(
        StorageError("AccessDenied for arn:aws:s3:::secret"), StorageOperation.PUT
    )

    assert "arn:aws" not in error.message


def test_client_error_status():
    assert GatewayError.client_error("No file uploaded").status_code == 400
