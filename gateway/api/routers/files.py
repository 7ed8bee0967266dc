"""File API router.

Upload, download and delete objects in the configured bucket by key.
"""

from __future__ import annotations

from fastapi import (
    APIRouter,
    Depends,
    File,
    Form,
    Request,
    Response,
    UploadFile,
    status,
)
from starlette.datastructures import UploadFile as StarletteUploadFile

from gateway.api.deps import get_file_gateway
from gateway.api.schemas.files import ErrorOut, FileDeleteOut, FileUploadOut
from gateway.common.errors import GatewayError
from gateway.services.file_gateway import FileGateway, FileUpload

router = APIRouter()


async def _read_upload(file: UploadFile, limit: int) -> FileUpload:
    # One byte past the limit is enough for the gateway to reject the file
    try:
        payload = await file.read(limit + 1)
    finally:
        await file.close()
    return FileUpload(
        filename=file.filename,
        content_type=file.content_type,
        payload=payload,
    )


@router.post(
    "/file/upload",
    response_model=FileUploadOut,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a file",
    description=(
        "Store the `file` part of a multipart body. The object key defaults "
        "to the file name and the content type to the part's declared type. "
        "An existing object with the same key is replaced."
    ),
    responses={
        400: {"model": ErrorOut, "description": "No file uploaded"},
        500: {"model": ErrorOut, "description": "Object store rejected the write"},
    },
)
async def upload_file(
    request: Request,
    file: UploadFile | str | None = File(
        default=None, description="The file to upload"
    ),
    key: str | None = Form(default=None, description="Override the object key"),
    content_type: str | None = Form(
        default=None, description="Override the recorded content type"
    ),
    gateway: FileGateway = Depends(get_file_gateway),
) -> FileUploadOut:
    form = await request.form()
    if len(form.getlist("file")) > 1:
        raise GatewayError.client_error("Only one file may be uploaded per request")

    # A `file` field without a filename arrives as text and counts as no file
    upload = None
    if isinstance(file, StarletteUploadFile):
        upload = await _read_upload(file, gateway.max_upload_bytes)
    result = await gateway.upload(upload, key=key, content_type=content_type)
    return FileUploadOut(message="File uploaded", key=result.key)


@router.get(
    "/file/{key:path}",
    response_class=Response,
    summary="Download a file",
    description="Return the raw bytes stored under `key` with their recorded content type.",
    responses={
        200: {
            "content": {"application/octet-stream": {}},
            "description": "File retrieved successfully",
        },
        404: {"model": ErrorOut, "description": "File not found"},
    },
)
async def download_file(
    key: str,
    gateway: FileGateway = Depends(get_file_gateway),
) -> Response:
    result = await gateway.download(key)
    # Set the header directly so text types are not given a charset
    return Response(
        content=result.payload,
        headers={"Content-Type": result.content_type},
    )


@router.delete(
    "/file/{key:path}",
    response_model=FileDeleteOut,
    summary="Delete a file",
    responses={500: {"model": ErrorOut, "description": "Object store rejected the delete"}},
)
async def delete_file(
    key: str,
    gateway: FileGateway = Depends(get_file_gateway),
) -> FileDeleteOut:
    result = await gateway.delete(key)
    return FileDeleteOut(message="File deleted", key=result.key)
