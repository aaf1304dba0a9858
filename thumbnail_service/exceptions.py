"""
Thumbnail service: domain-specific HTTP exceptions.

All exceptions use preset status codes and detail messages so that callers
never need to specify these at the call site.  The error_envelope_middleware
catches these and wraps them in the standard ``{ok: false, error}`` envelope.
"""
from fastapi import HTTPException, status


# ── Request ──────────────────────────────────────────────────────────────────

class InvalidRequest(HTTPException):
    def __init__(self, message: str) -> None:
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=message,
        )


# ── Object storage ───────────────────────────────────────────────────────────

class OriginalNotFound(HTTPException):
    def __init__(self, bucket: str, key: str) -> None:
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Original image not found: {bucket}/{key}",
        )


class StorageUnavailable(HTTPException):
    def __init__(self, message: str) -> None:
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Storage request failed: {message}",
        )


class UploadUrlError(HTTPException):
    def __init__(self, message: str) -> None:
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Could not generate upload URL: {message}",
        )


# ── Metadata table ───────────────────────────────────────────────────────────

class DatabaseNotConfigured(HTTPException):
    def __init__(self) -> None:
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Image metadata table is not configured.",
        )


class RecordWriteFailed(HTTPException):
    def __init__(self, message: str) -> None:
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Could not record upload: {message}",
        )
