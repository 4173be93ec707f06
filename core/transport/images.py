"""Image decoding used to learn a diagram's native pixel size."""

from __future__ import annotations

import io

from PIL import Image, UnidentifiedImageError

from core.utils.errors import ImageDecodeError


def read_image_size(content: bytes) -> tuple[int, int]:
    """Return ``(natural_width, natural_height)`` of encoded image bytes."""

    if not content:
        raise ImageDecodeError("empty image content")
    try:
        with Image.open(io.BytesIO(content)) as image:
            width, height = image.size
    except (UnidentifiedImageError, OSError) as exc:
        raise ImageDecodeError(f"cannot decode image: {exc}") from exc
    return width, height
