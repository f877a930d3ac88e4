"""Pillow image decoding adapter."""

from __future__ import annotations

import io

from PIL import Image, UnidentifiedImageError

from core.errors import TransportError


class PillowImageDecoder:
    """Decode attachment bytes into an RGB Pillow image."""

    def decode(self, data: bytes) -> Image.Image:
        try:
            with Image.open(io.BytesIO(data)) as image:
                return image.convert("RGB")
        except (UnidentifiedImageError, OSError, ValueError) as exc:
            raise TransportError(f"Could not decode image: {exc}") from exc
