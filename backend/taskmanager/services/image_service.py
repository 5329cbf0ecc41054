"""Utilities for inspecting uploaded images."""

from __future__ import annotations

from dataclasses import dataclass
from io import BytesIO

from PIL import Image, UnidentifiedImageError

_FORMAT_EXTENSIONS = {
    "JPEG": ".jpg",
    "PNG": ".png",
    "GIF": ".gif",
    "WEBP": ".webp",
    "BMP": ".bmp",
}


@dataclass(frozen=True)
class ImageInfo:
    format: str
    width: int
    height: int

    @property
    def extension(self) -> str | None:
        return _FORMAT_EXTENSIONS.get(self.format)


def inspect_image(data: bytes) -> ImageInfo | None:
    """Return format and dimensions, or ``None`` if the bytes are not an image."""

    try:
        with Image.open(BytesIO(data)) as image:
            image.verify()
            width, height = image.size
            return ImageInfo(format=image.format or "", width=width, height=height)
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError):
        return None
