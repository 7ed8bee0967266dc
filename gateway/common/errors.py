"""Gateway error taxonomy.

Every failure the gateway reports is a :class:`GatewayError` carrying one of
the three :class:`ErrorKind` values. Storage faults are translated in exactly
one place, :func:`map_storage_error`.
"""

from __future__ import annotations

from enum import Enum

FILE_NOT_FOUND_MESSAGE = "File not found"
UPLOAD_FAILED_MESSAGE = "Failed to upload file"
DELETE_FAILED_MESSAGE = "Failed to delete file"
INTERNAL_ERROR_MESSAGE = "Internal server error"


class ErrorKind(str, Enum):
    CLIENT_ERROR = "client_error"
    NOT_FOUND = "not_found"
    SERVER_ERROR = "server_error"

    @property
    def status_code(self) -> int:
        return _STATUS_BY_KIND[self]


_STATUS_BY_KIND = {
    ErrorKind.CLIENT_ERROR: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.SERVER_ERROR: 500,
}


class StorageOperation(str, Enum):
    PUT = "put"
    GET = "get"
    DELETE = "delete"


class GatewayError(Exception):
    """Raised by the gateway service; rendered as an error response."""

    def __init__(self, kind: ErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message

    @property
    def status_code(self) -> int:
        return self.kind.status_code

    @classmethod
    def client_error(cls, message: str) -> "GatewayError":
        return cls(ErrorKind.CLIENT_ERROR, message)

    def __repr__(self) -> str:
        return f"GatewayError(kind={self.kind.value!r}, message={self.message!r})"


def map_storage_error(exc: Exception, operation: StorageOperation) -> GatewayError:
    """Translate a storage client failure into a gateway error.

    Reads never distinguish a missing key from a store outage: both become
    NOT_FOUND. Writes and deletes always become SERVER_ERROR, including a
    delete the store rejects because the key is absent. The storage error
    text is never copied into the message.
    """
    if operation is StorageOperation.GET:
        error = GatewayError(ErrorKind.NOT_FOUND, FILE_NOT_FOUND_MESSAGE)
    elif operation is StorageOperation.PUT:
        error = GatewayError(ErrorKind.SERVER_ERROR, UPLOAD_FAILED_MESSAGE)
    else:
        error = GatewayError(ErrorKind.SERVER_ERROR, DELETE_FAILED_MESSAGE)
    error.__cause__ = exc
    return error
