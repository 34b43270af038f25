"""Tests for image preprocessing."""

import base64
import io

import pytest
from PIL import Image

from calorie_hound.domain.errors import EncodeError
from calorie_hound.services.images import ImagePreprocessor, scaled_size
from tests.conftest import image_bytes


def _open(payload: bytes) -> Image.Image:
    return Image.open(io.BytesIO(payload))


def test_compress_scales_wide_image_proportionally() -> None:
    payload = ImagePreprocessor().compress(image_bytes((2000, 1000)), 800, 800)

    result = _open(payload)
    assert result.format == "JPEG"
    assert result.size == (800, 400)


def test_compress_clamps_height_after_width() -> None:
    payload = ImagePreprocessor().compress(image_bytes((1000, 2000)))

    assert _open(payload).size == (400, 800)


def test_compress_never_upscales() -> None:
    payload = ImagePreprocessor().compress(image_bytes((300, 200)))

    assert _open(payload).size == (300, 200)


def test_compress_flattens_transparency_to_rgb() -> None:
    payload = ImagePreprocessor().compress(image_bytes((64, 64), mode="RGBA"))

    assert _open(payload).mode == "RGB"


def test_compress_accepts_file_objects_and_paths(tmp_path) -> None:
    path = tmp_path / "meal.png"
    path.write_bytes(image_bytes((900, 900)))
    preprocessor = ImagePreprocessor(max_width=450, max_height=450)

    from_path = preprocessor.compress(path)
    with path.open("rb") as handle:
        from_file = preprocessor.compress(handle)

    assert _open(from_path).size == (450, 450)
    assert _open(from_file).size == (450, 450)


def test_compress_lower_quality_yields_smaller_payload() -> None:
    source = io.BytesIO()
    Image.effect_noise((400, 400), 64).convert("RGB").save(source, format="PNG")
    preprocessor = ImagePreprocessor()

    high = preprocessor.compress(source.getvalue(), quality=0.95)
    low = preprocessor.compress(source.getvalue(), quality=0.2)

    assert len(low) < len(high)


def test_compress_rejects_unreadable_input() -> None:
    with pytest.raises(EncodeError):
        ImagePreprocessor().compress(b"definitely not an image")


def test_compress_rejects_decompression_bombs(monkeypatch) -> None:
    payload = image_bytes((40, 40))
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 100)

    with pytest.raises(EncodeError, match="Failed to compress image"):
        ImagePreprocessor().compress(payload)


def test_compress_rejects_unsupported_source_type() -> None:
    with pytest.raises(EncodeError, match="Invalid file type"):
        ImagePreprocessor().compress(12345)  # type: ignore[arg-type]


def test_to_base64_has_no_data_url_prefix() -> None:
    encoded = ImagePreprocessor.to_base64(b"\xff\xd8\xffjpeg")

    assert not encoded.startswith("data:")
    assert base64.b64decode(encoded) == b"\xff\xd8\xffjpeg"


def test_scaled_size_keeps_minimum_of_one_pixel() -> None:
    assert scaled_size(5000, 1, 800, 800) == (800, 1)
