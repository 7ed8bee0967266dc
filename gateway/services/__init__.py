from .file_gateway import (
    DeleteResult,
    DownloadResult,
    FileGateway,
    FileUpload,
    UploadResult,
)

__all__ = [
    "DeleteResult",
    "DownloadResult",
    "FileGateway",
    "FileUpload",
    "UploadResult",
]
