"""
AffixForge - Compatibility Matcher

Decides whether an affix template may roll on a base item.  Two layers,
both must pass:

  1. Tag subset: every compatible tag on the template must be present on
     the item.  Magnitude pseudo-tags (armour_base, evasion_base,
     energyshield_base) are satisfied by the armour piece's base stats.
  2. Dead-stat check: every modifier must have something to act on.  An
     Energy Shield affix on a zero-ES base, a local attack-speed roll on a
     ring, increased physical damage on a fire-only sceptre, or a global
     "adds fire damage" roll on a weapon (which takes the local version
     instead) are all rejected.
"""

import logging
from typing import Optional

from affix_templates import (
    AffixTemplate, DamageType, ItemFamily, ModifierKind, ModifierScope, ModifierTemplate,
)
from base_items import ArmourStats, BaseItem, WeaponStats
from config import ARMOUR_TAGS, JEWELLERY_TAGS, MAGNITUDE_TAGS, WEAPON_TAGS

logger = logging.getLogger(__name__)

_DAMAGE_STATS = frozenset(f"{dt.value}_damage" for dt in DamageType)


# ─── Stat classification ─────────────────────────────

def is_damage_stat(stat: str) -> bool:
    return stat in _DAMAGE_STATS


def is_energy_shield_stat(stat: str) -> bool:
    return "energy_shield" in stat


def is_evasion_stat(stat: str) -> bool:
    return "evasion" in stat


def is_armour_stat(stat: str) -> bool:
    return "armour" in stat and not is_energy_shield_stat(stat)


def is_block_stat(stat: str) -> bool:
    return "block" in stat


def is_defence_stat(stat: str) -> bool:
    return (is_energy_shield_stat(stat) or is_evasion_stat(stat)
            or is_armour_stat(stat) or is_block_stat(stat))


# ─── Tag layer ───────────────────────────────────────

def has_tag(item: BaseItem, tag: str) -> bool:
    stat = MAGNITUDE_TAGS.get(tag)
    if stat is not None:
        return isinstance(item.stats, ArmourStats) and getattr(item.stats, stat) > 0
    return tag in item.tags


def tags_match(item: BaseItem, template: AffixTemplate) -> bool:
    if not template.compatible_tags:
        return False
    return all(has_tag(item, tag) for tag in template.compatible_tags)


def _adds_flat(template: Optional[AffixTemplate], stat: str) -> bool:
    if template is None:
        return False
    return any(m.stat_name == stat and m.kind is ModifierKind.FLAT
               and m.scope is ModifierScope.LOCAL for m in template.modifiers)


# ─── Dead-stat layer ─────────────────────────────────

def dead_stat_reason(item: BaseItem, modifier: ModifierTemplate,
                     template: Optional[AffixTemplate] = None) -> Optional[str]:
    """Why this modifier would do nothing on this item, or None if it's live.

    Pass the owning template when there is one: a local increased or more
    roll on a damage type the base doesn't deal is only live if the same
    affix also adds a flat amount of that damage.
    """
    stat = modifier.stat_name
    stats = item.stats

    # Defence stats on armour need the matching base, whatever the scope
    if isinstance(stats, ArmourStats):
        if is_energy_shield_stat(stat) and stats.energy_shield <= 0:
            return "no base energy shield"
        if is_evasion_stat(stat) and stats.evasion <= 0:
            return "no base evasion"
        if is_armour_stat(stat) and stats.armour <= 0:
            return "no base armour"
        if is_block_stat(stat) and "shield" not in item.tags:
            return "block on a non-shield"

    if modifier.scope is ModifierScope.LOCAL:
        if is_damage_stat(stat) or stat == "attack_speed":
            if not isinstance(stats, WeaponStats):
                return f"local {stat} on a non-weapon"
            if (modifier.kind is not ModifierKind.FLAT
                    and item.base_range(stat) == (0.0, 0.0)
                    and not _adds_flat(template, stat)):
                return f"no base {stat} to scale"
        elif "critical_chance" in stat:
            if not isinstance(stats, WeaponStats) or stats.critical_chance <= 0:
                return "local critical chance without base critical chance"
        elif stat == "cast_speed":
            if not isinstance(stats, WeaponStats) or "spell" not in item.tags:
                return "local cast speed on a non-spell weapon"
        elif is_defence_stat(stat) and not isinstance(stats, ArmourStats):
            return f"local {stat} on a non-armour item"
    elif isinstance(stats, WeaponStats):
        if (is_damage_stat(stat) or stat in ("attack_speed", "cast_speed")
                or "critical_chance" in stat):
            return f"global {stat} on a weapon"

    return None


def is_compatible(item: BaseItem, template: AffixTemplate) -> bool:
    """True if the template's tags match and none of its modifiers is dead."""
    if not tags_match(item, template):
        return False
    for mod in template.modifiers:
        reason = dead_stat_reason(item, mod, template)
        if reason:
            logger.debug(f"Compatibility: {template.name} rejected on "
                         f"{item.name}: {reason}")
            return False
    return True


def compatible_families(template: AffixTemplate):
    """Families a template's tags could ever match, for catalog diagnostics."""
    families = []
    for family, vocab in ((ItemFamily.WEAPON, WEAPON_TAGS),
                          (ItemFamily.ARMOUR, ARMOUR_TAGS),
                          (ItemFamily.JEWELLERY, JEWELLERY_TAGS)):
        if template.compatible_tags <= vocab:
            families.append(family)
    return families
