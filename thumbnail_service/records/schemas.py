"""
Upload flow: Pydantic V2 request/response schemas.
"""
from __future__ import annotations

from pydantic import Field

from thumbnail_service.schemas import APIModel


# ── Requests ─────────────────────────────────────────────────────────────────

class UploadUrlRequest(APIModel):
    file_name: str = Field(alias="fileName", min_length=1, description="Object key to upload to")


class RecordUploadRequest(APIModel):
    """Register (or refresh) the metadata row of an uploaded original."""
    path: str = Field(min_length=1, max_length=1024)
    title: str = Field(min_length=1, max_length=255)
    category: str | None = Field(default=None, max_length=100)
    bucket: str | None = Field(default=None, max_length=255)
    uploaded_by: str | None = Field(default=None, alias="uploadedBy", max_length=255)


# ── Responses ────────────────────────────────────────────────────────────────

class UploadUrlResponse(APIModel):
    path: str
    signed_url: str = Field(serialization_alias="signedUrl")
    token: str | None = None
