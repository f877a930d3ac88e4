"""Pack rarity categories and their calibrated colour ranges."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional


class Category(str, Enum):
    """Classification outcome. Declaration order is the matching priority."""

    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, text: Optional[str]) -> Optional["Category"]:
        if text is None:
            return None
        try:
            return cls(text.strip().lower())
        except ValueError:
            return None

    @classmethod
    def ranked(cls) -> list["Category"]:
        return [category for category in cls if category is not cls.UNKNOWN]

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ChannelRange:
    """Inclusive 8-bit range for a single colour channel."""

    low: int
    high: int

    def __post_init__(self) -> None:
        if not 0 <= self.low <= self.high <= 255:
            raise ValueError(f"Invalid channel range [{self.low}, {self.high}]")

    def contains(self, value: int) -> bool:
        return self.low <= value <= self.high


@dataclass(frozen=True)
class ColorRange:
    red: ChannelRange
    green: ChannelRange
    blue: ChannelRange

    def matches(self, rgb: tuple[int, int, int]) -> bool:
        red, green, blue = rgb
        return self.red.contains(red) and self.green.contains(green) and self.blue.contains(blue)


def _range(red: tuple[int, int], green: tuple[int, int], blue: tuple[int, int]) -> ColorRange:
    return ColorRange(ChannelRange(*red), ChannelRange(*green), ChannelRange(*blue))


# Sampled from the rarity banner of 1920x1080 pack screenshots.
DEFAULT_CATEGORY_TABLE: dict[Category, ColorRange] = {
    Category.COMMON: _range((120, 200), (120, 200), (120, 200)),
    Category.UNCOMMON: _range((0, 50), (150, 255), (0, 60)),
    Category.RARE: _range((0, 60), (80, 180), (180, 255)),
    Category.EPIC: _range((120, 200), (0, 80), (180, 255)),
    Category.LEGENDARY: _range((200, 255), (120, 200), (0, 60)),
}


def build_category_table(overrides: Optional[Mapping[str, Mapping]] = None) -> dict[Category, ColorRange]:
    """Merge config overrides onto the default table.

    Overrides look like ``{"rare": {"red": [0, 60], "green": [80, 180], "blue": [180, 255]}}``.
    Any channel left out keeps its default range.
    """

    table = dict(DEFAULT_CATEGORY_TABLE)
    for name, channels in (overrides or {}).items():
        category = Category.parse(name)
        if category is None or category is Category.UNKNOWN:
            raise ValueError(f"Unknown category in overrides: {name!r}")
        current = table[category]
        parsed: dict[str, ChannelRange] = {}
        for channel in ("red", "green", "blue"):
            raw = channels.get(channel)
            if raw is None:
                parsed[channel] = getattr(current, channel)
                continue
            if len(raw) != 2:
                raise ValueError(f"{name}.{channel} must be [low, high]")
            parsed[channel] = ChannelRange(int(raw[0]), int(raw[1]))
        table[category] = ColorRange(**parsed)
    # Keep declared priority order regardless of override order.
    return {category: table[category] for category in Category.ranked()}
