"""
Derivatives: Pydantic V2 request/response schemas.
"""
from __future__ import annotations

from pydantic import Field, model_validator

from thumbnail_service.schemas import APIModel

# {size: {format: key | null}}; a whole size may be null as well
DerivedPathsInput = dict[str, dict[str, str | None] | None]


# ── Requests ─────────────────────────────────────────────────────────────────

class GenerateThumbnailsRequest(APIModel):
    """Source bucket and key of the original. ``path`` is the legacy name for ``file``."""
    bucket: str | None = Field(default=None, description="Bucket holding the original")
    file: str | None = Field(default=None, description="Key of the original")
    path: str | None = Field(default=None, description="Legacy alias for file")

    @model_validator(mode="after")
    def _require_bucket_and_file(self) -> GenerateThumbnailsRequest:
        if not self.bucket or not self.source_path:
            raise ValueError("Missing bucket/file")
        return self

    @property
    def source_path(self) -> str | None:
        return self.file or self.path


class DeleteJobBody(APIModel):
    path: str = Field(min_length=1, description="Key of the original")
    derived_paths: DerivedPathsInput | None = Field(
        default=None,
        description="generatedPaths as returned by /generate-thumbnails",
    )
    id: int | None = Field(default=None, description="Image record id to delete")
    bucket: str | None = Field(
        default=None,
        description="Bucket holding the original; only the originals bucket is accepted",
    )


class DeleteJobRequest(APIModel):
    """Accepts the job fields at the top level or nested under ``job``."""
    job: DeleteJobBody | None = None
    path: str | None = None
    derived_paths: DerivedPathsInput | None = None
    id: int | None = None
    bucket: str | None = None

    @model_validator(mode="after")
    def _require_path(self) -> DeleteJobRequest:
        if self.job is None and not self.path:
            raise ValueError("Missing path")
        return self

    def resolved(self) -> DeleteJobBody:
        if self.job is not None:
            return self.job
        return DeleteJobBody(
            path=self.path,
            derived_paths=self.derived_paths,
            id=self.id,
            bucket=self.bucket,
        )


# ── Responses ────────────────────────────────────────────────────────────────

class GenerateThumbnailsResponse(APIModel):
    ok: bool = True
    generated_paths: dict[str, dict[str, str | None]] = Field(
        serialization_alias="generatedPaths",
    )
