"""
ARPG configuration factory.

Creates a GenerationConfig populated from config.py, the single home of
all tuning constants.
"""

from pathlib import Path
from typing import Optional

from core.generation_config import GenerationConfig


def create_arpg_config(
    cache_dir: Optional[Path] = None,
    catalog_file: Optional[Path] = None,
    catalog_url: Optional[str] = None,
) -> GenerationConfig:
    """Create a GenerationConfig with the stock ARPG tuning.

    Args:
        cache_dir: Override cache directory. Defaults to config.CACHE_DIR.
        catalog_file: Load the catalog from this JSON file instead of the
            remote/bundled one.
        catalog_url: Override config.CATALOG_URL ("" disables the download).

    Returns:
        Fully populated GenerationConfig.
    """
    from config import (
        CACHE_DIR,
        CATALOG_URL,
        CATALOG_CACHE_TTL,
        BUNDLED_BASE_ITEMS_FILE,
        TAG_VOCABULARY,
        TIER_THRESHOLDS,
        RARITY_WEIGHTS,
        MAGIC_COUNT_OPTIONS,
        RARE_SIDE_COUNT_WEIGHTS,
        RARE_MIN_TOTAL_AFFIXES,
        MAX_PREFIXES,
        MAX_SUFFIXES,
        LOOT_ITEM_LEVEL_SPREAD,
        LOOT_BASE_DROP_CHANCE,
        LOOT_FAMILY_WEIGHTS,
    )

    cache = cache_dir or CACHE_DIR

    return GenerationConfig(
        game_id="arpg",
        cache_dir=cache,
        catalog_file=catalog_file,
        catalog_url=CATALOG_URL if catalog_url is None else catalog_url,
        catalog_cache_file=cache / "affix_catalog.json",
        catalog_cache_ttl=CATALOG_CACHE_TTL,
        base_items_file=BUNDLED_BASE_ITEMS_FILE,
        tag_vocabulary=frozenset(TAG_VOCABULARY),
        tier_thresholds=list(TIER_THRESHOLDS),
        rarity_weights=dict(RARITY_WEIGHTS),
        magic_count_options=list(MAGIC_COUNT_OPTIONS),
        rare_side_count_weights=dict(RARE_SIDE_COUNT_WEIGHTS),
        rare_min_total_affixes=RARE_MIN_TOTAL_AFFIXES,
        max_prefixes=MAX_PREFIXES,
        max_suffixes=MAX_SUFFIXES,
        loot_item_level_spread=LOOT_ITEM_LEVEL_SPREAD,
        loot_base_drop_chance=LOOT_BASE_DROP_CHANCE,
        loot_family_weights=dict(LOOT_FAMILY_WEIGHTS),
    )
