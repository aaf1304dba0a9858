from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from thumbnail_service.derivatives.constants import FORMATS, SIZES


def _env_files() -> list[str]:
    """Load .env from the repository root, then a local .env."""
    base = Path(__file__).resolve().parent.parent
    return [str(base / ".env"), ".env"]


def _split_csv(value: str) -> list[str]:
    return [x.strip() for x in value.split(",") if x.strip()]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=_env_files(),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Object storage (any S3-compatible endpoint) ─────────────────────────
    storage_endpoint_url: str = ""
    storage_access_key_id: str = ""
    storage_secret_access_key: str = ""
    storage_region: str = "us-east-1"
    originals_bucket: str = "photos-original"
    derived_bucket: str = "photos-derived"

    # Presigned PUT URL validity
    upload_url_expiry_seconds: int = 60

    # ── Derivatives ──────────────────────────────────────────────────────────
    derivative_sizes: str = "small,medium,large"
    derivative_formats: str = "webp,avif"

    # ── Metadata table (disabled when empty) ─────────────────────────────────
    database_url: str = ""

    # ── HTTP ─────────────────────────────────────────────────────────────────
    cors_origins: str = "http://localhost:3000"
    port: int = 3000
    log_level: str = "INFO"

    @field_validator("derivative_sizes")
    @classmethod
    def _known_sizes(cls, value: str) -> str:
        unknown = [name for name in _split_csv(value) if name not in SIZES]
        if unknown:
            raise ValueError(f"unknown derivative sizes: {', '.join(unknown)}")
        return value

    @field_validator("derivative_formats")
    @classmethod
    def _known_formats(cls, value: str) -> str:
        unknown = [name for name in _split_csv(value) if name not in FORMATS]
        if unknown:
            raise ValueError(f"unknown derivative formats: {', '.join(unknown)}")
        return value

    @property
    def size_names(self) -> list[str]:
        return _split_csv(self.derivative_sizes)

    @property
    def format_names(self) -> list[str]:
        return _split_csv(self.derivative_formats)

    @property
    def cors_origins_list(self) -> list[str]:
        return _split_csv(self.cors_origins)

    @property
    def database_enabled(self) -> bool:
        return bool(self.database_url)
