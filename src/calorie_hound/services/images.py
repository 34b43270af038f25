"""Image downsizing and re-encoding before upload."""

import base64
import io
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from PIL import Image, UnidentifiedImageError

from calorie_hound.domain.errors import EncodeError

ImageSource = bytes | str | Path | BinaryIO


@dataclass
class ImagePreprocessor:
    """Downsizes photos to a bounded box and re-encodes them as JPEG."""

    max_width: int = 800
    max_height: int = 800
    quality: float = 0.8

    def compress(
        self,
        image: ImageSource,
        max_width: int | None = None,
        max_height: int | None = None,
        quality: float | None = None,
    ) -> bytes:
        """Return JPEG bytes no larger than the bounding box."""
        bound_width = max_width or self.max_width
        bound_height = max_height or self.max_height
        jpeg_quality = _pillow_quality(self.quality if quality is None else quality)

        try:
            with Image.open(_as_stream(image)) as source:
                source.load()
                width, height = scaled_size(
                    source.width, source.height, bound_width, bound_height
                )
                rgb = _to_rgb(source)
                if (width, height) != rgb.size:
                    rgb = rgb.resize((width, height), Image.Resampling.LANCZOS)
                output = io.BytesIO()
                rgb.save(output, format="JPEG", quality=jpeg_quality, optimize=True)
        except (
            UnidentifiedImageError,
            Image.DecompressionBombError,
            OSError,
            ValueError,
        ) as exc:
            raise EncodeError("Failed to compress image") from exc

        payload = output.getvalue()
        if not payload:
            raise EncodeError("Failed to compress image")
        return payload

    @staticmethod
    def to_base64(payload: bytes) -> str:
        """Encode a payload as base64 text for a JSON request body."""
        return base64.b64encode(payload).decode("ascii")


def scaled_size(
    width: int, height: int, max_width: int, max_height: int
) -> tuple[int, int]:
    """Clamp width, then height, preserving aspect ratio and never upscaling."""
    new_width, new_height = float(width), float(height)
    if new_width > max_width:
        new_height = new_height * max_width / new_width
        new_width = max_width
    if new_height > max_height:
        new_width = new_width * max_height / new_height
        new_height = max_height
    return max(1, round(new_width)), max(1, round(new_height))


def _as_stream(image: ImageSource) -> BinaryIO | str | Path:
    if isinstance(image, bytes | bytearray):
        return io.BytesIO(image)
    if isinstance(image, str | Path):
        return image
    if hasattr(image, "read"):
        return image
    raise EncodeError("Invalid file type")


def _to_rgb(image: Image.Image) -> Image.Image:
    """Flatten transparency onto white and convert to RGB."""
    if image.mode == "P":
        image = image.convert("RGBA")
    if image.mode in ("RGBA", "LA"):
        background = Image.new("RGB", image.size, (255, 255, 255))
        background.paste(image, mask=image.split()[-1])
        return background
    if image.mode != "RGB":
        return image.convert("RGB")
    return image


def _pillow_quality(quality: float) -> int:
    """Map a 0-1 quality factor onto Pillow's 1-95 JPEG scale."""
    return min(95, max(1, round(quality * 100)))
