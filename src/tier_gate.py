"""
AffixForge - Tier Gate

Maps an item level to the strongest affix tier it may roll.  The staircase
itself lives in config.TIER_THRESHOLDS; nothing else hard-codes it.
"""

from typing import Iterable, List, Optional, Tuple

from affix_templates import AffixTemplate, Tier
from config import LOWEST_TIER, TIER_THRESHOLDS


def max_tier_for(item_level: int,
                 thresholds: Optional[Iterable[Tuple[int, int]]] = None,
                 lowest: int = LOWEST_TIER) -> Tier:
    """Best (numerically lowest) tier an item of this level can roll.

    >>> max_tier_for(80), max_tier_for(79), max_tier_for(9)
    (<Tier.T1: 1>, <Tier.T2: 2>, <Tier.T9: 9>)
    """
    for min_level, tier in (thresholds if thresholds is not None else TIER_THRESHOLDS):
        if item_level >= min_level:
            return Tier(tier)
    return Tier(lowest)


def is_eligible(template: AffixTemplate, item_level: int,
                thresholds: Optional[Iterable[Tuple[int, int]]] = None) -> bool:
    """True if the item level unlocks both the template's tier and level."""
    return (template.tier >= max_tier_for(item_level, thresholds)
            and item_level >= template.min_level)


def tier_table(thresholds: Optional[Iterable[Tuple[int, int]]] = None,
               lowest: int = LOWEST_TIER) -> List[Tuple[int, Tier]]:
    """(minimum item level, tier) rows for display, lowest tier first."""
    rows = [(0, Tier(lowest))]
    steps = sorted(thresholds if thresholds is not None else TIER_THRESHOLDS)
    rows.extend((level, Tier(tier)) for level, tier in steps)
    return rows
