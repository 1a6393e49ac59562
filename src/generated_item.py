"""
AffixForge - Generated Item

A rolled item: base + item level + implicits + up to three prefixes and
three suffixes.  Rarity is always derived from the affix count.

Stat queries fold the item's own Local modifiers into its base stats:

    total = (base + sum(local flat))
            * (1 + (sum(increased) - sum(reduced)) / 100)
            * product(1 + more / 100)

Damage and defence totals are rounded up.  Global modifiers never touch
the item's own numbers; total_global_modifier() reports them separately
for whoever aggregates a character's gear.
"""

import json
import math
import random
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

from affix_roller import RolledAffix
from affix_templates import (
    AffixSlot, DamageType, ItemFamily, ModifierKind, ModifierScope, stat_label,
)
from base_items import BaseItem
from config import (
    CEILING_STATS, MAX_PREFIXES, MAX_SUFFIXES,
    RARE_NAME_PREFIXES, RARE_NAME_SUFFIXES,
)
from range_roller import RolledModifier
from rarity import Rarity, calculate_rarity


@dataclass(frozen=True)
class ModifierTotals:
    """Summed Global modifiers for one stat."""
    flat_min: float = 0.0
    flat_max: float = 0.0
    increased: float = 0.0
    reduced: float = 0.0
    more_multiplier: float = 1.0

    @property
    def net_increased(self) -> float:
        return self.increased - self.reduced


def _clean(x: float) -> float:
    # 20.000000000000004 must ceil to 20, not 21
    return round(x, 6)


def _fold(base: float, flat: float, increased: float, reduced: float,
          more: float) -> float:
    multiplier = max(0.0, 1 + (increased - reduced) / 100) * more
    return (base + flat) * multiplier


def roll_rare_name(family: ItemFamily, rng: random.Random) -> str:
    first = rng.choice(RARE_NAME_PREFIXES)
    second = rng.choice(RARE_NAME_SUFFIXES[family.value])
    return f"{first} {second}"


@dataclass
class GeneratedItem:
    base: BaseItem
    item_level: int
    implicits: List[RolledModifier] = field(default_factory=list)
    prefixes: List[RolledAffix] = field(default_factory=list)
    suffixes: List[RolledAffix] = field(default_factory=list)
    rare_name: Optional[str] = None

    # ── Rarity & naming ──────────────────────────────

    def calculated_rarity(self) -> Rarity:
        return calculate_rarity(len(self.prefixes), len(self.suffixes))

    @property
    def affixes(self) -> List[RolledAffix]:
        return list(self.prefixes) + list(self.suffixes)

    def display_name(self) -> str:
        rarity = self.calculated_rarity()
        if rarity is Rarity.MAGIC:
            parts = []
            if self.prefixes:
                parts.append(self.prefixes[0].name)
            parts.append(self.base.name)
            if self.suffixes:
                parts.append(self.suffixes[0].name)
            return " ".join(parts)
        if rarity is Rarity.RARE and self.rare_name:
            return self.rare_name
        return self.base.name

    # ── Mutation ─────────────────────────────────────

    def add_affix(self, affix: RolledAffix):
        """Append an affix to its side (max three per side)."""
        if affix.slot is AffixSlot.PREFIX:
            side, cap = self.prefixes, MAX_PREFIXES
        else:
            side, cap = self.suffixes, MAX_SUFFIXES
        if len(side) >= cap:
            raise ValueError(f"{self.base.name} already has {cap} {affix.slot.value}es")
        if any(a.group_key == affix.group_key for a in self.affixes):
            raise ValueError(f"{affix.subcategory} is already on {self.base.name}")
        side.append(affix)

    def replace_affix(self, old: RolledAffix, new: RolledAffix):
        side = self.prefixes if old.slot is AffixSlot.PREFIX else self.suffixes
        for i, affix in enumerate(side):
            if affix is old:
                side[i] = new
                return
        raise ValueError(f"{old.name} is not on {self.base.name}")

    def remove_affix(self, affix: RolledAffix):
        side = self.prefixes if affix.slot is AffixSlot.PREFIX else self.suffixes
        for i, existing in enumerate(side):
            if existing is affix:
                del side[i]
                return
        raise ValueError(f"{affix.name} is not on {self.base.name}")

    # ── Modifier iteration ───────────────────────────

    def all_modifiers(self) -> Iterator[RolledModifier]:
        yield from self.implicits
        for affix in self.affixes:
            yield from affix.modifiers

    def _modifiers_for(self, stat_name: str,
                       scope: ModifierScope) -> Iterator[RolledModifier]:
        for mod in self.all_modifiers():
            if mod.stat_name == stat_name and mod.template.scope is scope:
                yield mod

    # ── Local stat aggregation ───────────────────────

    def stat_range(self, stat_name: str) -> Tuple[float, float]:
        """(low, high) for a stat after local modifiers; equal for scalar stats."""
        base_lo, base_hi = self.base.base_range(stat_name)
        flat_lo = flat_hi = increased = reduced = 0.0
        more = 1.0
        for mod in self._modifiers_for(stat_name, ModifierScope.LOCAL):
            kind = mod.template.kind
            if kind is ModifierKind.FLAT:
                flat_lo += mod.low
                flat_hi += mod.high
            elif kind is ModifierKind.INCREASED:
                increased += mod.value
            elif kind is ModifierKind.REDUCED:
                reduced += mod.value
            elif kind is ModifierKind.MORE:
                more *= 1 + mod.value / 100

        lo = _clean(_fold(base_lo, flat_lo, increased, reduced, more))
        hi = _clean(_fold(base_hi, flat_hi, increased, reduced, more))
        if stat_name in CEILING_STATS:
            lo, hi = math.ceil(lo), math.ceil(hi)
        return lo, hi

    def total_stat(self, stat_name: str) -> float:
        """Final value of one of the item's own stats (midpoint for ranges)."""
        lo, hi = self.stat_range(stat_name)
        if lo == hi:
            return lo
        return (lo + hi) / 2

    def total_global_modifier(self, stat_name: str) -> ModifierTotals:
        flat_min = flat_max = increased = reduced = 0.0
        more = 1.0
        for mod in self._modifiers_for(stat_name, ModifierScope.GLOBAL):
            kind = mod.template.kind
            if kind is ModifierKind.FLAT:
                flat_min += mod.low
                flat_max += mod.high
            elif kind is ModifierKind.INCREASED:
                increased += mod.value
            elif kind is ModifierKind.REDUCED:
                reduced += mod.value
            elif kind is ModifierKind.MORE:
                more *= 1 + mod.value / 100
        return ModifierTotals(flat_min, flat_max, increased, reduced, _clean(more))

    def global_stats(self) -> List[str]:
        names = {m.stat_name for m in self.all_modifiers()
                 if m.template.scope is ModifierScope.GLOBAL}
        return sorted(names)

    # ── Derived weapon / armour numbers ──────────────

    def damage_range(self, damage_type: DamageType = DamageType.PHYSICAL):
        return self.stat_range(f"{damage_type.value}_damage")

    def total_damage(self) -> Tuple[float, float]:
        lo = hi = 0.0
        for dt in DamageType:
            d_lo, d_hi = self.damage_range(dt)
            lo += d_lo
            hi += d_hi
        return lo, hi

    def attack_speed(self) -> float:
        return round(self.total_stat("attack_speed"), 2)

    def dps(self) -> float:
        """Average hit times attacks per second (0 for non-weapons)."""
        if self.base.family is not ItemFamily.WEAPON:
            return 0.0
        lo, hi = self.total_damage()
        return round((lo + hi) / 2 * self.attack_speed(), 1)

    def total_armour(self) -> float:
        return self.total_stat("armour")

    def total_evasion(self) -> float:
        return self.total_stat("evasion")

    def total_energy_shield(self) -> float:
        return self.total_stat("energy_shield")

    # ── Output ───────────────────────────────────────

    def to_dict(self) -> dict:
        return {
            "name": self.display_name(),
            "rarity": self.calculated_rarity().value,
            "item_level": self.item_level,
            "base": self.base.to_dict(),
            "implicits": [m.to_dict() for m in self.implicits],
            "prefixes": [a.to_dict() for a in self.prefixes],
            "suffixes": [a.to_dict() for a in self.suffixes],
        }

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), sort_keys=True, indent=indent)

    def describe(self) -> str:
        """Tooltip-style multi-line text."""
        rarity = self.calculated_rarity()
        lines = [f"{self.display_name()}"]
        if rarity is Rarity.RARE and self.rare_name:
            lines.append(self.base.name)
        lines.append(f"{rarity.label} | Item Level {self.item_level}")
        lines.append("-" * 32)

        if self.base.family is ItemFamily.WEAPON:
            for dt in DamageType:
                lo, hi = self.damage_range(dt)
                if hi > 0:
                    lines.append(f"{dt.value.title()} Damage: {lo:g}-{hi:g}")
            lines.append(f"Attacks per Second: {self.attack_speed():.2f}")
            lines.append(f"Critical Strike Chance: "
                         f"{self.total_stat('critical_chance'):.2f}%")
            lines.append(f"DPS: {self.dps():g}")
        elif self.base.family is ItemFamily.ARMOUR:
            for stat in ("armour", "evasion", "energy_shield", "block_chance"):
                value = self.total_stat(stat)
                if value:
                    lines.append(f"{stat_label(stat)}: {value:g}")

        if self.implicits:
            lines.append("-" * 32)
            lines.extend(_describe_modifier(m) for m in self.implicits)
        if self.affixes:
            lines.append("-" * 32)
            for affix in self.affixes:
                for mod in affix.modifiers:
                    lines.append(f"{_describe_modifier(mod)}  "
                                 f"({affix.name}, {affix.template.tier.name})")
        return "\n".join(lines)


def _describe_modifier(mod: RolledModifier) -> str:
    label = stat_label(mod.stat_name)
    kind = mod.template.kind
    scope = "" if mod.template.scope is ModifierScope.LOCAL else " (global)"
    if mod.secondary_value is not None:
        return f"Adds {mod.low:g} to {mod.high:g} {label}{scope}"
    if kind is ModifierKind.FLAT:
        return f"+{mod.value:g} to {label}{scope}"
    if kind is ModifierKind.MORE:
        return f"{mod.value:g}% more {label}{scope}"
    if kind is ModifierKind.REDUCED:
        return f"{mod.value:g}% reduced {label}{scope}"
    return f"{mod.value:g}% increased {label}{scope}"
