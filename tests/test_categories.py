from __future__ import annotations

import pytest

from core.categories import DEFAULT_CATEGORY_TABLE, Category, ChannelRange, build_category_table


def test_parse_is_case_insensitive() -> None:
    assert Category.parse("Rare") is Category.RARE
    assert Category.parse("  legendary ") is Category.LEGENDARY
    assert Category.parse("ignored") is None
    assert Category.parse(None) is None


def test_ranked_excludes_unknown() -> None:
    assert Category.ranked() == [
        Category.COMMON,
        Category.UNCOMMON,
        Category.RARE,
        Category.EPIC,
        Category.LEGENDARY,
    ]


def test_overrides_keep_priority_order_and_unset_channels() -> None:
    table = build_category_table({"legendary": {"red": [210, 250]}, "common": {"blue": [0, 10]}})
    assert list(table) == Category.ranked()
    assert table[Category.LEGENDARY].red == ChannelRange(210, 250)
    assert table[Category.LEGENDARY].green == DEFAULT_CATEGORY_TABLE[Category.LEGENDARY].green
    assert table[Category.COMMON].blue == ChannelRange(0, 10)


def test_overrides_reject_unknown_names_and_bad_ranges() -> None:
    with pytest.raises(ValueError):
        build_category_table({"mythic": {"red": [0, 1]}})
    with pytest.raises(ValueError):
        build_category_table({"unknown": {"red": [0, 1]}})
    with pytest.raises(ValueError):
        build_category_table({"rare": {"red": [10]}})
    with pytest.raises(ValueError):
        build_category_table({"rare": {"red": [50, 300]}})


def test_channel_range_is_inclusive() -> None:
    channel = ChannelRange(0, 50)
    assert channel.contains(0)
    assert channel.contains(50)
    assert not channel.contains(51)
