"""
AffixForge - Base Items

A BaseItem is the fixed, unrolled envelope an item starts from: its name,
tags, level requirement, family-specific base stats and implicit modifiers.
Implicits are fixed by the base (min == max) and never rolled.
The family is carried by the type of `stats` (WeaponStats / ArmourStats /
JewelleryStats), so a weapon can never be asked for its evasion.

Bases are loaded from resources/base_items.json:

    bases = load_base_items(BUNDLED_BASE_ITEMS_FILE)
    sword = find_base(bases, "Broad Sword")
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, FrozenSet, List, Optional, Tuple, Union

from affix_templates import DamageType, ItemFamily, ModifierTemplate, Range

logger = logging.getLogger(__name__)


# ─── Family stat blocks ──────────────────────────────

@dataclass(frozen=True)
class WeaponStats:
    min_damage: float
    max_damage: float
    damage_type: DamageType = DamageType.PHYSICAL
    attack_speed: float = 1.0
    critical_chance: float = 5.0

    def base_range(self, stat_name: str) -> Range:
        if stat_name == f"{self.damage_type.value}_damage":
            return (self.min_damage, self.max_damage)
        if stat_name == "attack_speed":
            return (self.attack_speed, self.attack_speed)
        if stat_name == "critical_chance":
            return (self.critical_chance, self.critical_chance)
        return (0.0, 0.0)


@dataclass(frozen=True)
class ArmourStats:
    armour: float = 0.0
    evasion: float = 0.0
    energy_shield: float = 0.0
    block_chance: float = 0.0

    def base_range(self, stat_name: str) -> Range:
        value = getattr(self, stat_name, 0.0) if stat_name in _ARMOUR_FIELDS else 0.0
        return (value, value)


@dataclass(frozen=True)
class JewelleryStats:
    def base_range(self, stat_name: str) -> Range:
        return (0.0, 0.0)


_ARMOUR_FIELDS = frozenset({"armour", "evasion", "energy_shield", "block_chance"})

BaseStats = Union[WeaponStats, ArmourStats, JewelleryStats]


@dataclass(frozen=True)
class BaseItem:
    name: str
    tags: FrozenSet[str]
    stats: BaseStats
    required_level: int = 1
    implicits: Tuple[ModifierTemplate, ...] = field(default_factory=tuple)

    @property
    def family(self) -> ItemFamily:
        if isinstance(self.stats, WeaponStats):
            return ItemFamily.WEAPON
        if isinstance(self.stats, ArmourStats):
            return ItemFamily.ARMOUR
        return ItemFamily.JEWELLERY

    def base_range(self, stat_name: str) -> Range:
        return self.stats.base_range(stat_name)

    def to_dict(self) -> dict:
        d = {
            "name": self.name,
            "family": self.family.value,
            "tags": sorted(self.tags),
            "required_level": self.required_level,
        }
        if isinstance(self.stats, WeaponStats):
            d["damage"] = [self.stats.min_damage, self.stats.max_damage]
            d["damage_type"] = self.stats.damage_type.value
            d["attack_speed"] = self.stats.attack_speed
            d["critical_chance"] = self.stats.critical_chance
        elif isinstance(self.stats, ArmourStats):
            d["armour"] = self.stats.armour
            d["evasion"] = self.stats.evasion
            d["energy_shield"] = self.stats.energy_shield
            d["block_chance"] = self.stats.block_chance
        if self.implicits:
            d["implicits"] = [m.to_dict() for m in self.implicits]
        return d


# ─── Loading ─────────────────────────────────────────

def base_item_from_dict(d: dict) -> BaseItem:
    """Build a BaseItem from one JSON record.

    The family is read from d["family"]; stat keys that don't belong to
    that family are ignored.
    """
    family = ItemFamily(str(d.get("family", "")).strip().lower())
    if family is ItemFamily.WEAPON:
        lo, hi = d.get("damage", (0, 0))
        stats = WeaponStats(
            min_damage=float(lo),
            max_damage=float(hi),
            damage_type=DamageType(d.get("damage_type", "physical")),
            attack_speed=float(d.get("attack_speed", 1.0)),
            critical_chance=float(d.get("critical_chance", 5.0)),
        )
    elif family is ItemFamily.ARMOUR:
        stats = ArmourStats(
            armour=float(d.get("armour", 0)),
            evasion=float(d.get("evasion", 0)),
            energy_shield=float(d.get("energy_shield", 0)),
            block_chance=float(d.get("block_chance", 0)),
        )
    else:
        stats = JewelleryStats()

    return BaseItem(
        name=str(d["name"]),
        tags=frozenset(t.strip().lower() for t in d.get("tags", []) if t.strip()),
        stats=stats,
        required_level=int(d.get("required_level", 1)),
        implicits=_fixed_implicits(str(d["name"]), d.get("implicits", [])),
    )


def _is_fixed(mod: ModifierTemplate) -> bool:
    lo, hi = mod.value_range
    if mod.secondary_range is not None:
        s_lo, s_hi = mod.secondary_range
        if s_lo != s_hi:
            return False
    return lo == hi


def _fixed_implicits(name: str, records) -> Tuple[ModifierTemplate, ...]:
    """Implicits carry one fixed value; ranged ones are logged and dropped."""
    implicits = []
    for raw in records:
        mod = ModifierTemplate.from_dict(raw)
        if not _is_fixed(mod):
            logger.warning(f"BaseItems: dropping ranged implicit {mod.stat_name} "
                           f"{list(mod.value_range)} on {name}")
            continue
        implicits.append(mod)
    return tuple(implicits)


def load_base_items(path: Path) -> List[BaseItem]:
    """Load all base items from a JSON file ({"bases": [...]}).

    Malformed records are logged and skipped.
    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    bases = []
    for i, record in enumerate(data.get("bases", [])):
        try:
            bases.append(base_item_from_dict(record))
        except (KeyError, ValueError, TypeError) as e:
            logger.warning(f"BaseItems: skipping record {i} "
                           f"({record.get('name', '?')}): {e}")
    logger.debug(f"BaseItems: loaded {len(bases)} bases from {path.name}")
    return bases


def find_base(bases: List[BaseItem], name: str) -> Optional[BaseItem]:
    """Case-insensitive lookup by base name."""
    wanted = name.strip().lower()
    for base in bases:
        if base.name.lower() == wanted:
            return base
    return None


def bases_by_family(bases: List[BaseItem]) -> Dict[ItemFamily, List[BaseItem]]:
    grouped: Dict[ItemFamily, List[BaseItem]] = {f: [] for f in ItemFamily}
    for base in bases:
        grouped[base.family].append(base)
    return grouped
