"""
AffixForge - Area Loot Table

Drives the generator the way a game area would: roll whether anything
drops, pick an item family by weight, pick a base whose level requirement
sits in the area's window, then generate the item at the area level.

    table = LootTable(generator, area_level=45)
    drops = table.roll_drops(20, seed=7)          # list of GeneratedItem
    lo, hi = table.level_window()                 # (20, 45)
"""

import logging
import random
from typing import Dict, List, Optional, Tuple

from affix_templates import ItemFamily

logger = logging.getLogger(__name__)


class LootTable:
    def __init__(self, generator, area_level: int,
                 family_weights: Optional[Dict[str, float]] = None,
                 drop_chance: Optional[float] = None,
                 level_spread: Optional[int] = None):
        cfg = generator.config
        self.generator = generator
        self.area_level = area_level
        self.family_weights = dict(family_weights if family_weights is not None
                                   else cfg.loot_family_weights)
        self.drop_chance = (drop_chance if drop_chance is not None
                            else cfg.loot_base_drop_chance)
        self.level_spread = (level_spread if level_spread is not None
                             else cfg.loot_item_level_spread)

    def level_window(self) -> Tuple[int, int]:
        """Base required levels that may drop here."""
        return max(1, self.area_level - self.level_spread), self.area_level

    def eligible_bases(self, family: Optional[ItemFamily] = None) -> list:
        lo, hi = self.level_window()
        return [
            b for b in self.generator.bases
            if lo <= b.required_level <= hi
            and (family is None or b.family is family)
        ]

    def _pick_family(self, rng: random.Random) -> Optional[ItemFamily]:
        families = [ItemFamily(k) for k, w in self.family_weights.items() if w > 0]
        if not families:
            return None
        weights = [self.family_weights[f.value] for f in families]
        return rng.choices(families, weights=weights)[0]

    def roll_drop(self, rng: random.Random, rarity=None):
        """One drop attempt.

        A forced rarity skips the drop-chance roll, matching how test
        drops are requested.  Returns None when nothing drops or the picked
        family has no base in the level window.
        """
        if rarity is None and rng.random() > self.drop_chance:
            return None

        family = self._pick_family(rng)
        pool = self.eligible_bases(family)
        if not pool:
            lo, hi = self.level_window()
            logger.debug(f"LootTable: no {family.value if family else '?'} bases "
                         f"for levels {lo}-{hi}")
            return None

        return self.generator.generate_item(
            base_pool=pool,
            item_level=self.area_level,
            rarity_policy=rarity,
            seed=rng.randrange(2 ** 32),
        )

    def roll_drops(self, attempts: int, seed: Optional[int] = None,
                   rarity=None) -> List:
        rng = random.Random(seed) if seed is not None else random.Random()
        drops = []
        for _ in range(attempts):
            item = self.roll_drop(rng, rarity)
            if item is not None:
                drops.append(item)
        logger.debug(f"LootTable: area {self.area_level}: {len(drops)}/{attempts} "
                     f"attempts dropped an item")
        return drops
