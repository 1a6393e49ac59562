"""
AffixForge - Rarity & Affix Count Allocation

Rarity is never stored on an item.  It is computed from how many affixes
actually landed (calculate_rarity), so an item that asked for Rare but ran
out of candidates simply ends up Magic.

    policy = RarityPolicy.forced_to(Rarity.RARE)
    prefixes, suffixes = allocate_counts(policy, rng)
"""

import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from config import (
    MAGIC_COUNT_OPTIONS,
    MAX_PREFIXES,
    MAX_SUFFIXES,
    RARE_MIN_TOTAL_AFFIXES,
    RARE_SIDE_COUNT_WEIGHTS,
    RARITY_WEIGHTS,
)


class Rarity(Enum):
    NORMAL = "normal"
    MAGIC = "magic"
    RARE = "rare"

    @property
    def label(self) -> str:
        return self.value.title()


def calculate_rarity(prefix_count: int, suffix_count: int) -> Rarity:
    """0 affixes -> Normal, 1-2 -> Magic, 3+ -> Rare."""
    total = prefix_count + suffix_count
    if total <= 0:
        return Rarity.NORMAL
    if total <= 2:
        return Rarity.MAGIC
    return Rarity.RARE


@dataclass(frozen=True)
class RarityPolicy:
    """Either a forced rarity or a weighted natural roll.

    Carries the count distributions it draws from (defaults from config).
    """
    forced: Optional[Rarity] = None
    weights: Dict[Rarity, float] = field(default_factory=lambda: {
        Rarity(k): v for k, v in RARITY_WEIGHTS.items()})
    magic_options: Tuple[Tuple[int, int], ...] = tuple(MAGIC_COUNT_OPTIONS)
    rare_side_weights: Dict[int, float] = field(
        default_factory=lambda: dict(RARE_SIDE_COUNT_WEIGHTS))
    rare_min_total: int = RARE_MIN_TOTAL_AFFIXES
    max_prefixes: int = MAX_PREFIXES
    max_suffixes: int = MAX_SUFFIXES

    @classmethod
    def forced_to(cls, rarity: Rarity, **kwargs) -> "RarityPolicy":
        return cls(forced=rarity, **kwargs)

    @classmethod
    def weighted(cls, weights: Optional[Dict[Rarity, float]] = None,
                 **kwargs) -> "RarityPolicy":
        if weights is not None:
            kwargs["weights"] = dict(weights)
        return cls(forced=None, **kwargs)

    @classmethod
    def parse(cls, text: Optional[str], **kwargs) -> "RarityPolicy":
        """"normal" / "magic" / "rare" force a rarity; None or "random" rolls."""
        if text is None or text.strip().lower() in ("", "random", "weighted"):
            return cls.weighted(**kwargs)
        return cls.forced_to(Rarity(text.strip().lower()), **kwargs)

    def roll_rarity(self, rng: random.Random) -> Rarity:
        if self.forced is not None:
            return self.forced
        rarities: List[Rarity] = [r for r in Rarity if self.weights.get(r, 0) > 0]
        if not rarities:
            return Rarity.NORMAL
        return rng.choices(rarities, weights=[self.weights[r] for r in rarities])[0]


def _rare_side(policy: RarityPolicy, rng: random.Random, cap: int) -> int:
    options = [n for n in sorted(policy.rare_side_weights) if 1 <= n <= cap]
    if not options:
        return cap
    weights = [policy.rare_side_weights[n] for n in options]
    return rng.choices(options, weights=weights)[0]


def allocate_counts(policy: RarityPolicy,
                    rng: random.Random) -> Tuple[int, int]:
    """Requested (prefix_count, suffix_count) for one item.

    These are targets; the roller may fill fewer when candidates run out.
    """
    rarity = policy.roll_rarity(rng)

    if rarity is Rarity.NORMAL:
        return 0, 0

    if rarity is Rarity.MAGIC:
        prefixes, suffixes = rng.choice(policy.magic_options)
        return min(prefixes, policy.max_prefixes), min(suffixes, policy.max_suffixes)

    prefixes = _rare_side(policy, rng, policy.max_prefixes)
    suffixes = _rare_side(policy, rng, policy.max_suffixes)
    # Top up prefixes first, then suffixes, until the rare minimum is met
    while prefixes + suffixes < policy.rare_min_total:
        if prefixes < policy.max_prefixes:
            prefixes += 1
        elif suffixes < policy.max_suffixes:
            suffixes += 1
        else:
            break
    return prefixes, suffixes
