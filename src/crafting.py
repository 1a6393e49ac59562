"""
AffixForge - Crafting

Edits an already generated item one affix at a time.  Rarity is never set
here; it follows from the affix counts, so adding a third affix to a Magic
item makes it Rare and removing one can drop it back to Magic.

    add_random_affix(item, catalog, rng)     one new affix on an open side
    remove_random_affix(item, rng)           one affix gone, side 50/50
    reforge_magic(item, catalog, rng)        Normal -> Magic with one affix
    clear_affixes(item)                      back to Normal

New affixes come from the same candidate pool generation uses (tier gate,
tags, dead stats) minus every sub-category already on the item.
"""

import logging
import random
from typing import Iterable, List, Optional, Tuple

from affix_catalog import AffixCatalog
from affix_roller import RolledAffix, build_candidate_pool, pick_weighted, roll_affix
from affix_templates import AffixSlot
from config import MAX_PREFIXES, MAX_SUFFIXES
from generated_item import GeneratedItem, roll_rare_name
from rarity import Rarity

logger = logging.getLogger(__name__)


class CraftingError(ValueError):
    """The item is in the wrong state for this craft."""


def _sync_rare_name(item: GeneratedItem, rng: random.Random):
    if item.calculated_rarity() is Rarity.RARE:
        if not item.rare_name:
            item.rare_name = roll_rare_name(item.base.family, rng)
    else:
        item.rare_name = None


def open_slots(item: GeneratedItem) -> List[AffixSlot]:
    """Sides that still have room, prefixes first."""
    slots = []
    if len(item.prefixes) < MAX_PREFIXES:
        slots.append(AffixSlot.PREFIX)
    if len(item.suffixes) < MAX_SUFFIXES:
        slots.append(AffixSlot.SUFFIX)
    return slots


def add_random_affix(item: GeneratedItem, catalog: AffixCatalog, rng: random.Random,
                     thresholds: Optional[Iterable[Tuple[int, int]]] = None,
                     ) -> Optional[RolledAffix]:
    """Roll one new affix onto an open side of `item`.

    The side is picked 50/50 among open sides that have candidates, then
    the affix by weight.  Returns the new affix, or None when nothing can
    roll (every candidate's sub-category is already taken).

    Raises:
        CraftingError: both sides are full.
    """
    slots = open_slots(item)
    if not slots:
        raise CraftingError(f"{item.base.name} already has "
                            f"{MAX_PREFIXES + MAX_SUFFIXES} affixes")

    thresholds = list(thresholds) if thresholds is not None else None
    taken = {a.group_key for a in item.affixes}
    pools = {}
    for slot in slots:
        pool = [e for e in build_candidate_pool(item.base, item.item_level, slot,
                                                catalog, thresholds)
                if e.group_key not in taken]
        if pool:
            pools[slot] = pool
    if not pools:
        logger.debug(f"Crafting: no affix left to add on {item.base.name} "
                     f"ilvl {item.item_level}")
        return None

    slot = rng.choice(sorted(pools, key=lambda s: s.value))
    affix = roll_affix(pick_weighted(pools[slot], rng), rng)
    item.add_affix(affix)
    _sync_rare_name(item, rng)
    logger.debug(f"Crafting: added {affix.name} to {item.base.name} "
                 f"(now {item.calculated_rarity().value})")
    return affix


def remove_random_affix(item: GeneratedItem, rng: random.Random) -> RolledAffix:
    """Remove one affix: a coin flip picks the side when both have affixes.

    Raises:
        CraftingError: the item has no affixes.
    """
    if not item.prefixes and not item.suffixes:
        raise CraftingError(f"{item.base.name} has no affixes to remove")

    if item.prefixes and item.suffixes:
        side = item.prefixes if rng.random() < 0.5 else item.suffixes
    else:
        side = item.prefixes or item.suffixes
    affix = side[rng.randrange(len(side))]
    item.remove_affix(affix)
    _sync_rare_name(item, rng)
    logger.debug(f"Crafting: removed {affix.name} from {item.base.name} "
                 f"(now {item.calculated_rarity().value})")
    return affix


def reforge_magic(item: GeneratedItem, catalog: AffixCatalog, rng: random.Random,
                  thresholds: Optional[Iterable[Tuple[int, int]]] = None,
                  ) -> Optional[RolledAffix]:
    """Turn a Normal item Magic by rolling one affix onto it.

    Raises:
        CraftingError: the item isn't Normal.
    """
    rarity = item.calculated_rarity()
    if rarity is not Rarity.NORMAL:
        raise CraftingError(f"can only reforge Normal items ({item.base.name} "
                            f"is {rarity.value})")
    return add_random_affix(item, catalog, rng, thresholds)


def clear_affixes(item: GeneratedItem) -> int:
    """Strip every prefix and suffix. Returns how many were removed."""
    removed = len(item.prefixes) + len(item.suffixes)
    item.prefixes.clear()
    item.suffixes.clear()
    item.rare_name = None
    return removed
