import io
from collections.abc import AsyncGenerator, Generator

import pytest
import pytest_asyncio
from fastapi import FastAPI
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient
from PIL import Image

from thumbnail_service.config import Settings
from thumbnail_service.database import Base, close_db, init_db
from thumbnail_service.derivatives.constants import FormatSpec, SizeSpec
from thumbnail_service.exceptions import OriginalNotFound, StorageUnavailable, UploadUrlError
from thumbnail_service.main import create_app
from thumbnail_service.records.models import ImageRecord  # noqa: F401 - register with Base


ORIGINALS = "photos-original"
DERIVED = "photos-derived"


class FakeStore:
    """In-memory stand-in for ObjectStore. Records every call."""

    def __init__(self) -> None:
        self.objects: dict[tuple[str, str], bytes] = {}
        self.content_types: dict[tuple[str, str], str] = {}
        self.calls: list[tuple[str, str, str]] = []
        self.fail_uploads: set[str] = set()
        self.fail_deletes: set[str] = set()
        self.fail_download = False
        self.fail_signing = False

    def put(self, bucket: str, key: str, data: bytes) -> None:
        self.objects[(bucket, key)] = data

    def keys(self, bucket: str) -> set[str]:
        return {k for b, k in self.objects if b == bucket}

    def calls_of(self, op: str) -> list[tuple[str, str, str]]:
        return [c for c in self.calls if c[0] == op]

    async def download(self, bucket: str, key: str) -> bytes:
        self.calls.append(("download", bucket, key))
        if self.fail_download:
            raise StorageUnavailable("connection reset")
        data = self.objects.get((bucket, key))
        if not data:
            raise OriginalNotFound(bucket, key)
        return data

    async def upload(self, bucket: str, key: str, data: bytes, content_type: str) -> None:
        self.calls.append(("upload", bucket, key))
        if key in self.fail_uploads:
            raise StorageUnavailable("upload rejected")
        self.objects[(bucket, key)] = data
        self.content_types[(bucket, key)] = content_type

    async def delete(self, bucket: str, key: str) -> None:
        self.calls.append(("delete", bucket, key))
        if key in self.fail_deletes:
            raise StorageUnavailable("delete rejected")
        self.objects.pop((bucket, key), None)

    async def create_signed_upload_url(
        self, bucket: str, key: str, expires_in: int,
    ) -> tuple[str, str | None]:
        self.calls.append(("sign", bucket, key))
        if self.fail_signing:
            raise UploadUrlError("access denied")
        return f"https://storage.test/{bucket}/{key}?X-Amz-Expires={expires_in}", None


class StubCodec:
    """Returns a tagged payload instead of real image bytes; can fail on chosen pairs."""

    def __init__(self) -> None:
        self.fail_pairs: set[tuple[str, str]] = set()
        self.calls: list[tuple[str, str]] = []

    def transform(self, data: bytes, size: SizeSpec, fmt: FormatSpec) -> bytes:
        self.calls.append((size.name, fmt.name))
        if (size.name, fmt.name) in self.fail_pairs:
            raise OSError("cannot encode")
        return f"{size.name}:{fmt.name}".encode()


def make_png(width: int = 1600, height: int = 900, mode: str = "RGB") -> bytes:
    color = (200, 30, 30, 128) if mode == "RGBA" else (200, 30, 30)
    buf = io.BytesIO()
    Image.new(mode, (width, height), color).save(buf, format="PNG")
    return buf.getvalue()


def make_settings(**overrides) -> Settings:
    values = {
        "originals_bucket": ORIGINALS,
        "derived_bucket": DERIVED,
        "derivative_sizes": "small,medium,large",
        "derivative_formats": "webp,avif",
        "database_url": "",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def codec() -> StubCodec:
    return StubCodec()


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def app(settings: Settings, store: FakeStore, codec: StubCodec) -> FastAPI:
    return create_app(settings, store=store, codec=codec)


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c


@pytest_asyncio.fixture
async def db_app(tmp_path, store: FakeStore, codec: StubCodec) -> AsyncGenerator[FastAPI, None]:
    url = f"sqlite+aiosqlite:///{tmp_path / 'records.db'}"
    engine = init_db(url)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield create_app(make_settings(database_url=url), store=store, codec=codec)
    await close_db()


@pytest_asyncio.fixture
async def async_client(db_app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=db_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
