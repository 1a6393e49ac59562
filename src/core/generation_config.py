"""
GenerationConfig - everything the item generator needs, in one object.

Consumers create a GenerationConfig (via a factory like create_arpg_config)
and pass it to ItemGenerator, which hands the values to the rolling
functions explicitly.  Nothing in the generation path reads config.py
directly, so two generators with different tuning can run side by side.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, FrozenSet, List, Optional, Tuple


@dataclass
class GenerationConfig:
    """Complete configuration for one item generator."""

    # ── Identity ────────────────────────────────────────────
    game_id: str                          # e.g. "arpg"
    cache_dir: Path                       # base cache directory

    # ── Data sources ────────────────────────────────────────
    catalog_file: Optional[Path] = None   # explicit catalog JSON (wins over URL)
    catalog_url: str = ""                 # remote catalog, cached on disk
    catalog_cache_file: Optional[Path] = None
    catalog_cache_ttl: int = 24 * 3600    # seconds
    base_items_file: Optional[Path] = None

    # Closed set of tags templates may use
    tag_vocabulary: FrozenSet[str] = field(default_factory=frozenset)

    # ── Tier gate ───────────────────────────────────────────
    # [(min item level, best tier)], highest level first
    tier_thresholds: List[Tuple[int, int]] = field(default_factory=list)

    # ── Rarity / counts ─────────────────────────────────────
    rarity_weights: Dict[str, float] = field(default_factory=dict)
    magic_count_options: List[Tuple[int, int]] = field(default_factory=list)
    rare_side_count_weights: Dict[int, float] = field(default_factory=dict)
    rare_min_total_affixes: int = 3
    max_prefixes: int = 3
    max_suffixes: int = 3

    # ── Loot table ──────────────────────────────────────────
    loot_item_level_spread: int = 25
    loot_base_drop_chance: float = 0.15
    loot_family_weights: Dict[str, float] = field(default_factory=dict)
