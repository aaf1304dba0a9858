import io

import pytest
from PIL import Image, features

from conftest import make_png, make_settings
from thumbnail_service.derivatives.codec import ImageCodec
from thumbnail_service.derivatives.constants import (
    FORMATS,
    SIZES,
    all_derived_keys,
    derived_key,
    normalize_path,
)
from thumbnail_service.derivatives.service import deletable_keys, selected_formats


# ── Keys ─────────────────────────────────────────────────────────────────────

def test_derived_key_layout() -> None:
    assert derived_key("users/42/photo.png", SIZES["small"], FORMATS["webp"]) == (
        "small/users/42/photo.webp"
    )
    assert derived_key("photo.tar.gz", SIZES["large"], FORMATS["jpeg"]) == "large/photo.tar.jpg"
    assert derived_key("no_extension", SIZES["medium"], FORMATS["avif"]) == "medium/no_extension.avif"


def test_dots_in_directories_are_kept() -> None:
    assert derived_key("v1.2/photo", SIZES["small"], FORMATS["webp"]) == "small/v1.2/photo.webp"


def test_normalize_only_strips_leading_slashes() -> None:
    assert normalize_path("//a/../b.png") == "a/../b.png"
    assert derived_key("/a.png", SIZES["small"], FORMATS["webp"]) == derived_key(
        "a.png", SIZES["small"], FORMATS["webp"],
    )


def test_all_derived_keys_cover_every_catalog_pair() -> None:
    keys = all_derived_keys("a.png")
    assert len(keys) == len(SIZES) * len(FORMATS)
    assert "large/a.jpg" in keys


def test_deletable_keys_drop_nulls_and_foreign_keys() -> None:
    keys = deletable_keys(
        "a.png",
        {"small": {"webp": "small/a.webp", "avif": None}, "large": {"webp": "large/b.webp"}},
    )
    assert keys == ["small/a.webp"]


# ── Settings ─────────────────────────────────────────────────────────────────

def test_format_selection_follows_settings() -> None:
    settings = make_settings(derivative_formats="webp, jpeg")
    assert [f.name for f in selected_formats(settings)] == ["webp", "jpeg"]


def test_unknown_format_is_rejected() -> None:
    with pytest.raises(ValueError):
        make_settings(derivative_formats="webp,gif")


# ── Codec ────────────────────────────────────────────────────────────────────

def _decode(data: bytes) -> Image.Image:
    image = Image.open(io.BytesIO(data))
    image.load()
    return image


def test_resize_keeps_aspect_ratio() -> None:
    out = ImageCodec().transform(make_png(1600, 900), SIZES["small"], FORMATS["webp"])

    image = _decode(out)
    assert image.format == "WEBP"
    assert image.size == (360, 202)


def test_small_originals_are_enlarged_to_width() -> None:
    out = ImageCodec().transform(make_png(100, 50), SIZES["medium"], FORMATS["webp"])

    assert _decode(out).size == (800, 400)


def test_jpeg_flattens_transparency() -> None:
    out = ImageCodec().transform(make_png(400, 400, mode="RGBA"), SIZES["small"], FORMATS["jpeg"])

    image = _decode(out)
    assert image.format == "JPEG"
    assert image.mode == "RGB"
    assert image.size == (360, 360)


@pytest.mark.skipif(not features.check("avif"), reason="Pillow built without AVIF")
def test_avif_encoding() -> None:
    out = ImageCodec().transform(make_png(1600, 900), SIZES["large"], FORMATS["avif"])

    image = _decode(out)
    assert image.format == "AVIF"
    assert image.size == (1200, 675)


def test_garbage_input_raises() -> None:
    with pytest.raises(Exception):
        ImageCodec().transform(b"not an image", SIZES["small"], FORMATS["webp"])
