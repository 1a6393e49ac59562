"""
AffixForge - Affix & Modifier Templates

Immutable descriptions of what an affix *can* roll.  A template is the
catalog-side record; rolling one produces a RolledAffix (see affix_roller).

    tmpl = AffixTemplate(
        name="Heavy", slot=AffixSlot.PREFIX, tier=Tier.T4, min_level=36,
        modifiers=(ModifierTemplate("physical_damage", (40, 49),
                                    ModifierKind.INCREASED, ModifierScope.LOCAL),),
        compatible_tags=frozenset({"weapon"}),
    )
    problems = tmpl.problems(TAG_VOCABULARY)   # [] when the template is sound
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple

from config import DEFAULT_AFFIX_WEIGHT

Range = Tuple[float, float]


# ─── Enums ───────────────────────────────────────────

class Tier(IntEnum):
    """Affix power tier. T1 is the strongest, T9 the weakest."""
    T1 = 1
    T2 = 2
    T3 = 3
    T4 = 4
    T5 = 5
    T6 = 6
    T7 = 7
    T8 = 8
    T9 = 9

    @classmethod
    def parse(cls, value) -> "Tier":
        """Accept 3, "3" or "T3"."""
        if isinstance(value, str):
            value = value.strip().upper().lstrip("T")
        return cls(int(value))


class ModifierKind(Enum):
    FLAT = "flat"
    INCREASED = "increased"
    MORE = "more"
    REDUCED = "reduced"


class ModifierScope(Enum):
    LOCAL = "local"      # folds into the item's own base stats
    GLOBAL = "global"    # applies to the wielder, reported separately


class DamageType(Enum):
    PHYSICAL = "physical"
    FIRE = "fire"
    COLD = "cold"
    LIGHTNING = "lightning"
    CHAOS = "chaos"


class AffixSlot(Enum):
    PREFIX = "prefix"
    SUFFIX = "suffix"


class ItemFamily(Enum):
    WEAPON = "weapon"
    ARMOUR = "armour"
    JEWELLERY = "jewellery"


class CatalogMisconfiguration(Exception):
    """A catalog record that can never roll correctly."""


def _parse_enum(enum_cls, value):
    if isinstance(value, enum_cls):
        return value
    return enum_cls(str(value).strip().lower())


def _parse_range(raw) -> Range:
    if isinstance(raw, (int, float)):
        return (float(raw), float(raw))
    lo, hi = raw
    return (float(lo), float(hi))


# ─── Templates ───────────────────────────────────────

@dataclass(frozen=True)
class ModifierTemplate:
    stat_name: str               # e.g. "physical_damage", "maximum_life"
    value_range: Range           # inclusive (min, max)
    kind: ModifierKind = ModifierKind.FLAT
    scope: ModifierScope = ModifierScope.GLOBAL
    secondary_range: Optional[Range] = None   # "Adds (a-b) to (c-d)" upper bound
    damage_type: Optional[DamageType] = None

    @property
    def is_dual(self) -> bool:
        return self.secondary_range is not None

    def problems(self) -> List[str]:
        issues = []
        if not self.stat_name:
            issues.append("modifier has no stat name")
        lo, hi = self.value_range
        if lo > hi:
            issues.append(f"{self.stat_name}: min {lo:g} > max {hi:g}")
        if self.secondary_range is not None:
            lo2, hi2 = self.secondary_range
            if lo2 > hi2:
                issues.append(
                    f"{self.stat_name}: secondary min {lo2:g} > max {hi2:g}")
        return issues

    def to_dict(self) -> dict:
        d = {
            "stat": self.stat_name,
            "range": list(self.value_range),
            "kind": self.kind.value,
            "scope": self.scope.value,
        }
        if self.secondary_range is not None:
            d["secondary_range"] = list(self.secondary_range)
        if self.damage_type is not None:
            d["damage_type"] = self.damage_type.value
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "ModifierTemplate":
        secondary = d.get("secondary_range")
        damage_type = d.get("damage_type")
        return cls(
            stat_name=str(d.get("stat", "")).strip(),
            value_range=_parse_range(d["range"]),
            kind=_parse_enum(ModifierKind, d.get("kind", "flat")),
            scope=_parse_enum(ModifierScope, d.get("scope", "global")),
            secondary_range=_parse_range(secondary) if secondary is not None else None,
            damage_type=_parse_enum(DamageType, damage_type) if damage_type else None,
        )


@dataclass(frozen=True)
class AffixTemplate:
    name: str                          # display word, e.g. "Heavy" or "of the Whale"
    slot: AffixSlot
    tier: Tier
    modifiers: Tuple[ModifierTemplate, ...]
    compatible_tags: FrozenSet[str] = field(default_factory=frozenset)
    min_level: int = 1
    weight: int = DEFAULT_AFFIX_WEIGHT

    def problems(self, vocabulary: Optional[Iterable[str]] = None) -> List[str]:
        """Return every reason this template can't be used (empty = valid)."""
        issues = []
        if not self.compatible_tags:
            issues.append("no compatible tags")
        elif vocabulary is not None:
            unknown = sorted(set(self.compatible_tags) - set(vocabulary))
            if unknown:
                issues.append(f"unknown tags: {', '.join(unknown)}")
        if not self.modifiers:
            issues.append("no modifiers")
        for mod in self.modifiers:
            issues.extend(mod.problems())
        if self.weight <= 0:
            issues.append(f"non-positive weight {self.weight}")
        return issues

    def validate(self, vocabulary: Optional[Iterable[str]] = None):
        """Raise CatalogMisconfiguration if problems() reports anything."""
        issues = self.problems(vocabulary)
        if issues:
            raise CatalogMisconfiguration(f"{self.name} ({self.tier.name}): "
                                          + "; ".join(issues))

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "slot": self.slot.value,
            "tier": int(self.tier),
            "min_level": self.min_level,
            "weight": self.weight,
            "tags": sorted(self.compatible_tags),
            "modifiers": [m.to_dict() for m in self.modifiers],
        }

    @classmethod
    def from_dict(cls, d: dict, slot: Optional[AffixSlot] = None) -> "AffixTemplate":
        return cls(
            name=str(d["name"]),
            slot=_parse_enum(AffixSlot, d.get("slot", slot.value if slot else "")),
            tier=Tier.parse(d.get("tier", 5)),
            modifiers=tuple(ModifierTemplate.from_dict(m)
                            for m in d.get("modifiers", [])),
            compatible_tags=frozenset(t.strip().lower()
                                      for t in d.get("tags", []) if t.strip()),
            min_level=int(d.get("min_level", 1)),
            weight=int(d.get("weight", DEFAULT_AFFIX_WEIGHT)),
        )


STAT_LABELS: Dict[str, str] = {
    "physical_damage": "Physical Damage",
    "fire_damage": "Fire Damage",
    "cold_damage": "Cold Damage",
    "lightning_damage": "Lightning Damage",
    "chaos_damage": "Chaos Damage",
    "attack_speed": "Attack Speed",
    "cast_speed": "Cast Speed",
    "critical_chance": "Critical Strike Chance",
    "critical_multiplier": "Critical Strike Multiplier",
    "armour": "Armour",
    "evasion": "Evasion Rating",
    "energy_shield": "Energy Shield",
    "block_chance": "Chance to Block",
}


def stat_label(stat_name: str) -> str:
    """Human label for a stat key ("maximum_life" -> "Maximum Life")."""
    return STAT_LABELS.get(stat_name, stat_name.replace("_", " ").title())
