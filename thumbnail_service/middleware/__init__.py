from thumbnail_service.middleware.request_id import request_id_middleware
from thumbnail_service.middleware.error_handler import (
    error_envelope_middleware,
    http_exception_handler,
    validation_exception_handler,
)

__all__ = [
    "request_id_middleware",
    "error_envelope_middleware",
    "http_exception_handler",
    "validation_exception_handler",
]
