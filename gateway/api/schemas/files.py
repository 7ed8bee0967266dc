"""Pydantic schemas for the file endpoints."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class FileUploadOut(BaseModel):
    """Response body for a successful upload."""

    message: str = Field(examples=["File uploaded"])
    key: str = Field(description="Object key the file was stored under")


class FileDeleteOut(BaseModel):
    """Response body for a successful delete."""

    message: str = Field(examples=["File deleted"])
    key: str


class ErrorOut(BaseModel):
    """Error body returned by every failing file operation."""

    error: str = Field(examples=["File not found"])
    error_code: str
    status: int
    title: str
    type: str = "about:blank"
    detail: Any = None
    instance: str | None = None
    request_id: str | None = None
