"""Fixed-point colour classifier.

The rarity banner of a pack screenshot always sits at the same relative
position, so one pixel is enough to tell the tiers apart. The classifier is a
pure function: it never performs I/O or touches shared state.
"""

from __future__ import annotations

import logging
from typing import Mapping, Protocol, Union

from core.categories import DEFAULT_CATEGORY_TABLE, Category, ColorRange
from core.errors import InvalidImageError

LOGGER = logging.getLogger(__name__)

# ~940x900 on a 1920x1080 screenshot.
SAMPLE_X_RATIO = 0.489583
SAMPLE_Y_RATIO = 0.83333


class PixelBuffer(Protocol):
    """Minimal image surface; Pillow's ``Image`` satisfies it."""

    width: int
    height: int

    def getpixel(self, xy: tuple[int, int]) -> Union[int, tuple[int, ...]]:
        ...


def sample_point(width: int, height: int) -> tuple[int, int]:
    """Return the sampled coordinate, truncated toward zero."""

    return int(width * SAMPLE_X_RATIO), int(height * SAMPLE_Y_RATIO)


def can_sample(image: PixelBuffer) -> bool:
    x, y = sample_point(image.width, image.height)
    return 0 <= x < image.width and 0 <= y < image.height


def sample_rgb(image: PixelBuffer) -> tuple[int, int, int]:
    if not can_sample(image):
        raise InvalidImageError(f"Image {image.width}x{image.height} is too small to sample")
    pixel = image.getpixel(sample_point(image.width, image.height))
    if isinstance(pixel, int):
        return pixel, pixel, pixel
    return int(pixel[0]), int(pixel[1]), int(pixel[2])


def classify(
    image: PixelBuffer,
    table: Mapping[Category, ColorRange] = DEFAULT_CATEGORY_TABLE,
) -> Category:
    """Return the first category whose three ranges contain the sampled pixel."""

    rgb = sample_rgb(image)
    for category, color_range in table.items():
        if color_range.matches(rgb):
            return category
    LOGGER.info("No category matched R: %d G: %d B: %d", *rgb)
    return Category.UNKNOWN
