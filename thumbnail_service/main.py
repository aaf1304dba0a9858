import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from thumbnail_service import __version__
from thumbnail_service.config import Settings
from thumbnail_service.database import close_db, get_session_factory, init_db
from thumbnail_service.derivatives.codec import ImageCodec
from thumbnail_service.derivatives.router import router as derivatives_router
from thumbnail_service.middleware import (
    error_envelope_middleware,
    http_exception_handler,
    request_id_middleware,
    validation_exception_handler,
)
from thumbnail_service.records.router import router as records_router
from thumbnail_service.storage import ObjectStore

logger = logging.getLogger(__name__)


# ── OpenAPI metadata ──────────────────────────────────────────────────────────

_DESCRIPTION = """
## Thumbnail Service

Resized derivatives for images held in S3-compatible object storage.

* **Upload**: presigned PUT URLs for direct uploads to the originals bucket.
* **Derivatives**: Pillow resize to small (360px), medium (800px) and
  large (1200px) widths, encoded as WebP and AVIF (JPEG optional).
* **Records**: optional metadata table keyed by storage path.
* **Deletion**: best-effort removal of an original, its derivatives and record.

### Error shape
All errors return a consistent JSON envelope:
```json
{ "ok": false, "error": "Human-readable message", "request_id": "..." }
```
"""

_TAGS_METADATA = [
    {
        "name": "thumbnails",
        "description": "Generate and delete resized derivatives of an original.",
    },
    {
        "name": "uploads",
        "description": "Presigned upload URLs and image metadata records.",
    },
]


# ── Health schema ─────────────────────────────────────────────────────────────

class HealthResponse(BaseModel):
    status: str
    service: str


# ── App factory ───────────────────────────────────────────────────────────────

def get_settings() -> Settings:
    return Settings()


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(levelname)s:%(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    owns_db = settings.database_enabled and get_session_factory() is None
    if owns_db:
        init_db(settings.database_url)
        logger.info("Metadata table enabled")
    yield
    if owns_db:
        await close_db()


def create_app(
    settings: Settings | None = None,
    *,
    store: ObjectStore | None = None,
    codec: ImageCodec | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title="Thumbnail Service",
        version=__version__,
        description=_DESCRIPTION,
        openapi_tags=_TAGS_METADATA,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.store = store or ObjectStore(settings)
    app.state.codec = codec or ImageCodec()

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    # Middleware (applied in reverse-registration order: last added = outermost)
    app.middleware("http")(error_envelope_middleware)
    app.middleware("http")(request_id_middleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        max_age=600,
    )

    app.include_router(derivatives_router)
    app.include_router(records_router)

    @app.get("/health", response_model=HealthResponse, tags=["health"])
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", service="thumbnails")

    return app


app = create_app()
