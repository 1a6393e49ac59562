"""
ItemGenerator - facade for the AffixForge generation pipeline.

Single entry point wrapping the affix catalog, base items, rarity
allocation and affix rolling.  Consumers pass a GenerationConfig; every
tuning value flows from it into the rolling functions as arguments.

Usage:
    from core import ItemGenerator
    from games.arpg import create_arpg_config

    gen = ItemGenerator(create_arpg_config())
    gen.initialize()
    item = gen.generate_item(item_level=80, rarity_policy="rare", seed=12345)
    print(item.describe())
"""

import logging
import random
from typing import List, Optional, Sequence

from core.generation_config import GenerationConfig

logger = logging.getLogger(__name__)


class InvalidRequest(ValueError):
    """Caller asked for something that can't be generated."""


class ItemGenerator:
    """Generates items from a loaded catalog and base pool.

    The catalog and bases can be injected (tests, tools) or loaded by
    initialize() from the locations in the config.
    """

    def __init__(self, config: GenerationConfig, catalog=None,
                 bases: Optional[List] = None):
        self.config = config
        self._catalog = catalog
        self._bases = list(bases) if bases is not None else None
        self._ready = False

    @property
    def ready(self) -> bool:
        return self._ready

    @property
    def catalog(self):
        return self._catalog

    @property
    def bases(self) -> List:
        return list(self._bases or [])

    def initialize(self) -> bool:
        """Load the catalog and base items. Returns True when generation works."""
        try:
            if self._catalog is None:
                self._init_catalog()
            if self._bases is None:
                self._init_bases()
        except (OSError, ValueError, KeyError) as e:
            logger.error(f"ItemGenerator init failed: {e}", exc_info=True)
            return False

        self._ready = self._catalog is not None and len(self._catalog) > 0
        logger.info(f"ItemGenerator initialized (ready={self._ready}, "
                    f"game={self.config.game_id}, "
                    f"affixes={len(self._catalog) if self._catalog else 0}, "
                    f"bases={len(self._bases or [])})")
        return self._ready

    # ── Public API ──────────────────────────────────────────

    def rarity_policy(self, rarity=None):
        """Build a RarityPolicy from the config's distributions.

        Args:
            rarity: None / "random" for a weighted roll, or a Rarity /
                rarity name ("normal", "magic", "rare") to force one.
        """
        from rarity import Rarity, RarityPolicy

        kwargs = dict(
            weights={Rarity(k): v for k, v in self.config.rarity_weights.items()},
            magic_options=tuple(tuple(o) for o in self.config.magic_count_options),
            rare_side_weights=dict(self.config.rare_side_count_weights),
            rare_min_total=self.config.rare_min_total_affixes,
            max_prefixes=self.config.max_prefixes,
            max_suffixes=self.config.max_suffixes,
        )
        if isinstance(rarity, Rarity):
            return RarityPolicy.forced_to(rarity, **kwargs)
        try:
            return RarityPolicy.parse(rarity, **kwargs)
        except ValueError:
            raise InvalidRequest(f"unknown rarity {rarity!r}") from None

    def generate_item(self, base_pool: Optional[Sequence] = None,
                      item_level: int = 1,
                      rarity_policy=None,
                      seed: Optional[int] = None):
        """Roll one item.

        Args:
            base_pool: Bases to choose from. Defaults to every loaded base.
            item_level: Level the item drops at (> 0).
            rarity_policy: RarityPolicy, Rarity, rarity name, or None for
                the weighted natural roll.
            seed: Fixed seed for a reproducible item; None rolls freshly.

        Returns:
            GeneratedItem, or None if the generator isn't initialized.

        Raises:
            InvalidRequest: bad item level, empty or tagless base pool, or
                no base the item level can drop.
        """
        if not self._ready:
            logger.warning("ItemGenerator: generate_item called before initialize()")
            return None

        from affix_roller import roll_affixes
        from generated_item import GeneratedItem, roll_rare_name
        from range_roller import fixed_modifier
        from rarity import Rarity, RarityPolicy, allocate_counts

        if item_level <= 0:
            raise InvalidRequest(f"item level must be positive, got {item_level}")

        pool = list(base_pool) if base_pool is not None else self.bases
        if not pool:
            raise InvalidRequest("base pool is empty")
        tagless = [b.name for b in pool if not b.tags]
        if tagless:
            raise InvalidRequest(f"base item(s) without tags: {', '.join(tagless)}")
        eligible = [b for b in pool if b.required_level <= item_level]
        if not eligible:
            raise InvalidRequest(f"no base in pool drops at item level {item_level}")

        if not isinstance(rarity_policy, RarityPolicy):
            rarity_policy = self.rarity_policy(rarity_policy)

        rng = random.Random(seed) if seed is not None else random.Random()

        base = rng.choice(eligible)
        implicits = [fixed_modifier(m) for m in base.implicits]
        prefix_count, suffix_count = allocate_counts(rarity_policy, rng)
        prefixes, suffixes = roll_affixes(
            base, item_level, prefix_count, suffix_count,
            self._catalog, rng, thresholds=self.config.tier_thresholds,
        )

        item = GeneratedItem(base=base, item_level=item_level,
                             implicits=implicits,
                             prefixes=prefixes, suffixes=suffixes)
        if item.calculated_rarity() is Rarity.RARE:
            item.rare_name = roll_rare_name(base.family, rng)

        logger.debug(f"ItemGenerator: {item.display_name()} ({base.name}, "
                     f"ilvl {item_level}, {item.calculated_rarity().value}, "
                     f"asked {prefix_count}p/{suffix_count}s, "
                     f"got {len(prefixes)}p/{len(suffixes)}s)")
        return item

    def generate_batch(self, count: int, base_pool: Optional[Sequence] = None,
                       item_level: int = 1, rarity_policy=None,
                       seed: Optional[int] = None) -> list:
        """Roll `count` items; a seed makes the whole batch reproducible."""
        master = random.Random(seed) if seed is not None else random.Random()
        return [
            self.generate_item(base_pool, item_level, rarity_policy,
                               seed=master.randrange(2 ** 32))
            for _ in range(count)
        ]

    def reroll_affix(self, item, affix, seed: Optional[int] = None):
        """Redraw one affix's numbers in place on `item`.

        Returns:
            The replacement RolledAffix.
        """
        from affix_roller import reroll_affix

        rng = random.Random(seed) if seed is not None else random.Random()
        new = reroll_affix(affix, rng)
        item.replace_affix(affix, new)
        return new

    def add_random_affix(self, item, seed: Optional[int] = None):
        """Roll one more affix onto `item` from this generator's catalog.

        Returns:
            The new RolledAffix, or None if no candidate is left.
        Raises:
            crafting.CraftingError if both sides are full.
        """
        from crafting import add_random_affix

        if not self._ready:
            logger.warning("ItemGenerator: add_random_affix called before initialize()")
            return None
        rng = random.Random(seed) if seed is not None else random.Random()
        return add_random_affix(item, self._catalog, rng,
                                thresholds=self.config.tier_thresholds)

    def remove_random_affix(self, item, seed: Optional[int] = None):
        from crafting import remove_random_affix

        rng = random.Random(seed) if seed is not None else random.Random()
        return remove_random_affix(item, rng)

    # ── Initialization ──────────────────────────────────────

    def _init_catalog(self):
        from affix_catalog import load_catalog

        kwargs = {"vocabulary": self.config.tag_vocabulary or None,
                  "ttl": self.config.catalog_cache_ttl}
        if self.config.catalog_cache_file is not None:
            kwargs["cache_file"] = self.config.catalog_cache_file
        self._catalog = load_catalog(path=self.config.catalog_file,
                                     url=self.config.catalog_url, **kwargs)
        if self._catalog.rejected:
            logger.warning(f"ItemGenerator: {len(self._catalog.rejected)} "
                           f"catalog template(s) excluded")

    def _init_bases(self):
        from base_items import load_base_items

        if self.config.base_items_file is None:
            self._bases = []
            return
        self._bases = load_base_items(self.config.base_items_file)
