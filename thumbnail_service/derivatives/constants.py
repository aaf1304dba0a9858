"""
Derivatives: size and format catalogs, and the deterministic key layout.
"""
from __future__ import annotations

import posixpath
from dataclasses import dataclass


@dataclass(frozen=True)
class SizeSpec:
    name: str
    width: int


@dataclass(frozen=True)
class FormatSpec:
    name: str
    extension: str
    pillow_format: str
    quality: int

    @property
    def content_type(self) -> str:
        return f"image/{self.name}"


SIZES: dict[str, SizeSpec] = {
    "small": SizeSpec("small", 360),
    "medium": SizeSpec("medium", 800),
    "large": SizeSpec("large", 1200),
}

FORMATS: dict[str, FormatSpec] = {
    "webp": FormatSpec("webp", "webp", "WEBP", 80),
    "avif": FormatSpec("avif", "avif", "AVIF", 50),
    # Legacy; only produced when selected in DERIVATIVE_FORMATS
    "jpeg": FormatSpec("jpeg", "jpg", "JPEG", 80),
}

GeneratedPaths = dict[str, dict[str, str | None]]


def normalize_path(path: str) -> str:
    """Strip leading slashes. No other sanitization is applied."""
    return path.lstrip("/")


def derived_key(path: str, size: SizeSpec, fmt: FormatSpec) -> str:
    """Build ``{size}/{path without extension}.{ext}`` for an original path."""
    stem, _ = posixpath.splitext(normalize_path(path))
    return f"{size.name}/{stem}.{fmt.extension}"


def all_derived_keys(
    path: str,
    sizes: list[SizeSpec] | None = None,
    formats: list[FormatSpec] | None = None,
) -> set[str]:
    """Every key a derivative of ``path`` can live under."""
    sizes = sizes if sizes is not None else list(SIZES.values())
    formats = formats if formats is not None else list(FORMATS.values())
    return {derived_key(path, s, f) for s in sizes for f in formats}
