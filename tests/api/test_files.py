"""API tests for the file endpoints."""

from __future__ import annotations

import asyncio

import httpx
from fastapi.testclient import TestClient

from gateway.main import create_app

from tests.services.mock_storage import MockStorageClient

REPORT_BYTES = b"%PDF-1.4\n\x00\xff\xe2%%EOF"


def _upload(
    client,
    filename="report.pdf",
    payload=REPORT_BYTES,
    content_type="application/pdf",
    data=None,
):
    return client.post(
        "/api/file/upload",
        files={"file": (filename, payload, content_type)},
        data=data or {},
    )


def test_upload_download_delete_scenario(client, mock_storage):
    assert len(REPORT_BYTES) == 17

    r = _upload(client)
    assert r.status_code == 201
    assert r.json() == {"message": "File uploaded", "key": "report.pdf"}

    r = client.get("/api/file/report.pdf")
    assert r.status_code == 200
    assert r.content == REPORT_BYTES
    assert r.headers["content-type"] == "application/pdf"

    r = client.delete("/api/file/report.pdf")
    assert r.status_code == 200
    assert r.json()["message"] == "File deleted"
    assert r.json()["key"] == "report.pdf"

    r = client.get("/api/file/report.pdf")
    assert r.status_code == 404
    assert r.json()["error"] == "File not found"


def test_upload_without_file_part_is_rejected(client, mock_storage):
    r = client.post("/api/file/upload", data={"key": "orphan.txt"})

    assert r.status_code == 400
    assert r.json()["error"] == "No file uploaded"
    assert r.json()["error_code"] == "client_error"
    assert mock_storage.store_calls() == []


def test_upload_with_empty_body_is_rejected(client, mock_storage):
    r = client.post("/api/file/upload")

    assert r.status_code == 400
    assert mock_storage.store_calls() == []


def test_file_part_without_filename_is_rejected(client, mock_storage):
    r = client.post("/api/file/upload", files={"file": ("", b"abc", "text/plain")})

    assert r.status_code == 400
    assert r.json()["error_code"] == "client_error"
    assert mock_storage.store_calls() == []


def test_plain_text_file_field_is_rejected(client, mock_storage):
    r = client.post("/api/file/upload", data={"file": "not-a-file"})

    assert r.status_code == 400
    assert r.json()["error"] == "No file uploaded"
    assert r.json()["error_code"] == "client_error"
    assert mock_storage.store_calls() == []


def test_more_than_one_file_part_is_rejected(client, mock_storage):
    r = client.post(
        "/api/file/upload",
        files=[
            ("file", ("a.txt", b"alpha", "text/plain")),
            ("file", ("b.txt", b"bravo", "text/plain")),
        ],
    )

    assert r.status_code == 400
    assert r.json()["error"] == "Only one file may be uploaded per request"
    assert r.json()["error_code"] == "client_error"
    assert mock_storage.store_calls() == []


def test_upload_overwrites_existing_key(client):
    assert _upload(client, payload=b"version A", content_type="text/plain").status_code == 201
    assert _upload(client, payload=b"version B", content_type="text/plain").status_code == 201

    r = client.get("/api/file/report.pdf")
    assert r.status_code == 200
    assert r.content == b"version B"


def test_upload_accepts_key_and_content_type_overrides(client, mock_storage):
    r = _upload(
        client,
        filename="scan.bin",
        payload=b"\x89PNG\r\n",
        content_type="application/octet-stream",
        data={"key": "images/scan.png", "content_type": "image/png"},
    )

    assert r.status_code == 201
    assert r.json()["key"] == "images/scan.png"

    r = client.get("/api/file/images/scan.png")
    assert r.status_code == 200
    assert r.content == b"\x89PNG\r\n"
    assert r.headers["content-type"] == "image/png"


def test_text_content_type_is_returned_verbatim(client):
    _upload(client, filename="notes.txt", payload=b"hello", content_type="text/plain")

    r = client.get("/api/file/notes.txt")

    assert r.status_code == 200
    assert r.headers["content-type"] == "text/plain"


def test_upload_larger_than_limit_is_rejected(monkeypatch, mock_storage):
    monkeypatch.setenv("STORAGE_MAX_UPLOAD_BYTES", "4")
    client = TestClient(create_app(storage_client=mock_storage))

    r = _upload(client, payload=b"12345")

    assert r.status_code == 400
    assert r.json()["error_code"] == "client_error"
    assert mock_storage.store_calls() == []


def test_upload_store_failure_returns_500(mock_storage, client):
    mock_storage.fail_on.add("put")

    r = _upload(client)

    assert r.status_code == 500
    body = r.json()
    assert body["error"] == "Failed to upload file"
    assert "mock store unavailable" not in r.text


def test_download_missing_and_store_outage_look_the_same():
    healthy = TestClient(create_app(storage_client=MockStorageClient()))
    broken = TestClient(
        create_app(storage_client=MockStorageClient(fail_on={"get"}))
    )

    missing = healthy.get("/api/file/never-uploaded.txt")
    outage = broken.get("/api/file/never-uploaded.txt")

    assert missing.status_code == outage.status_code == 404
    assert missing.headers["content-type"] == outage.headers["content-type"]
    for body in (missing.json(), outage.json()):
        assert body["error"] == "File not found"
        assert body["error_code"] == "not_found"
    assert set(missing.json()) == set(outage.json())


def test_delete_store_failure_returns_500(mock_storage, client):
    mock_storage.fail_on.add("delete")

    r = client.delete("/api/file/report.pdf")

    assert r.status_code == 500
    assert r.json()["error"] == "Failed to delete file"
    assert r.json()["error_code"] == "server_error"


def test_concurrent_uploads_are_independent(mock_storage, app):
    async def scenario():
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as ac:
            responses = await asyncio.gather(
                ac.post("/api/file/upload", files={"file": ("a.bin", b"aaaa", "application/octet-stream")}),
                ac.post("/api/file/upload", files={"file": ("b.bin", b"bbbb", "application/octet-stream")}),
            )
            downloads = await asyncio.gather(
                ac.get("/api/file/a.bin"),
                ac.get("/api/file/b.bin"),
            )
        return responses, downloads

    responses, downloads = asyncio.run(scenario())

    assert [r.status_code for r in responses] == [201, 201]
    assert downloads[0].content == b"aaaa"
    assert downloads[1].content == b"bbbb"
