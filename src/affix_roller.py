"""
AffixForge - Affix Roller

Fills one side (prefixes or suffixes) of an item:

    pool = every catalog entry for (family, slot)
           that passes the tier gate and the compatibility matcher
    repeat count times:
        weighted pick from pool
        drop the pick and everything else in its sub-category
        roll the pick's modifiers
    stop early if the pool runs dry

Running out of candidates is normal at low item levels and only means the
item ends up with fewer affixes (and possibly a lower rarity).
"""

import logging
import random
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from affix_catalog import AffixCatalog, CatalogEntry
from affix_templates import AffixSlot, AffixTemplate
from base_items import BaseItem
from compatibility import is_compatible
from range_roller import RolledModifier, roll_modifier
from tier_gate import is_eligible

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RolledAffix:
    template: AffixTemplate
    category: str
    subcategory: str
    modifiers: Tuple[RolledModifier, ...]

    @property
    def name(self) -> str:
        return self.template.name

    @property
    def slot(self) -> AffixSlot:
        return self.template.slot

    @property
    def group_key(self) -> Tuple[str, str]:
        return (self.category, self.subcategory)

    def to_dict(self) -> dict:
        return {
            "name": self.template.name,
            "tier": int(self.template.tier),
            "category": self.category,
            "subcategory": self.subcategory,
            "modifiers": [m.to_dict() for m in self.modifiers],
        }


def build_candidate_pool(item: BaseItem, item_level: int, slot: AffixSlot,
                         catalog: AffixCatalog,
                         thresholds: Optional[Iterable[Tuple[int, int]]] = None,
                         ) -> List[CatalogEntry]:
    """Catalog entries for this item's family and slot that may roll here."""
    thresholds = list(thresholds) if thresholds is not None else None
    return [
        e for e in catalog.entries(item.family, slot)
        if is_eligible(e.template, item_level, thresholds)
        and is_compatible(item, e.template)
    ]


def roll_affix(entry: CatalogEntry, rng: random.Random) -> RolledAffix:
    mods = tuple(roll_modifier(m, rng) for m in entry.template.modifiers)
    return RolledAffix(entry.template, entry.category, entry.subcategory, mods)


def pick_weighted(pool: List[CatalogEntry], rng: random.Random) -> CatalogEntry:
    weights = [e.template.weight for e in pool]
    return rng.choices(pool, weights=weights)[0]


def roll_side(pool: List[CatalogEntry], count: int,
              rng: random.Random) -> List[RolledAffix]:
    pool = list(pool)
    rolled = []
    for _ in range(count):
        if not pool:
            break
        entry = pick_weighted(pool, rng)
        rolled.append(roll_affix(entry, rng))
        pool = [e for e in pool if e.group_key != entry.group_key]
    return rolled


def roll_affixes(item: BaseItem, item_level: int, prefix_count: int,
                 suffix_count: int, catalog: AffixCatalog, rng: random.Random,
                 thresholds: Optional[Iterable[Tuple[int, int]]] = None,
                 ) -> Tuple[List[RolledAffix], List[RolledAffix]]:
    """Roll up to prefix_count prefixes and suffix_count suffixes.

    Returns (prefixes, suffixes); either list may be shorter than asked.
    """
    thresholds = list(thresholds) if thresholds is not None else None
    sides = []
    for slot, count in ((AffixSlot.PREFIX, prefix_count),
                        (AffixSlot.SUFFIX, suffix_count)):
        if count <= 0:
            sides.append([])
            continue
        pool = build_candidate_pool(item, item_level, slot, catalog, thresholds)
        rolled = roll_side(pool, count, rng)
        if len(rolled) < count:
            logger.debug(f"AffixRoller: {item.name} ilvl {item_level}: wanted "
                         f"{count} {slot.value}es, pool gave {len(rolled)}")
        sides.append(rolled)
    return sides[0], sides[1]


def reroll_affix(rolled: RolledAffix, rng: random.Random) -> RolledAffix:
    """Fresh numbers for the same affix; template and bounds are unchanged."""
    mods = tuple(roll_modifier(m.template, rng) for m in rolled.modifiers)
    return RolledAffix(rolled.template, rolled.category, rolled.subcategory, mods)
