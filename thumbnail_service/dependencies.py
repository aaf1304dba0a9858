"""
Process-wide collaborators, exposed as FastAPI dependencies.

``create_app`` builds the settings, object store and codec once and stores
them on ``app.state``; handlers receive them through these functions.
"""
from fastapi import Request

from thumbnail_service.config import Settings
from thumbnail_service.derivatives.codec import ImageCodec
from thumbnail_service.storage import ObjectStore


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> ObjectStore:
    return request.app.state.store


def get_codec(request: Request) -> ImageCodec:
    return request.app.state.codec
