"""Shared fixtures for the AffixForge test suite."""

import sys
import logging
from pathlib import Path

import pytest

# Ensure src/ is importable
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from affix_catalog import AffixCatalog, AffixCategory, AffixSubCategory
from affix_templates import (
    AffixSlot, AffixTemplate, DamageType, ItemFamily, ModifierKind,
    ModifierScope, ModifierTemplate, Tier,
)
from base_items import ArmourStats, BaseItem, JewelleryStats, WeaponStats

logger = logging.getLogger(__name__)

RESOURCES_DIR = PROJECT_ROOT / "resources"


# ── Helper factories ─────────────────────────────────────

def make_mod(stat="physical_damage", lo=1, hi=None, kind=ModifierKind.FLAT,
             scope=ModifierScope.LOCAL, secondary=None):
    """Shorthand to create a ModifierTemplate."""
    return ModifierTemplate(
        stat_name=stat,
        value_range=(lo, lo if hi is None else hi),
        kind=kind,
        scope=scope,
        secondary_range=secondary,
    )


def make_template(name="Test Affix", slot=AffixSlot.PREFIX, tier=Tier.T5,
                  tags=("weapon",), mods=None, min_level=1, weight=1000):
    """Shorthand to create an AffixTemplate (one flat local phys mod by default)."""
    return AffixTemplate(
        name=name,
        slot=slot,
        tier=Tier(tier),
        modifiers=tuple(mods) if mods is not None else (make_mod(),),
        compatible_tags=frozenset(tags),
        min_level=min_level,
        weight=weight,
    )


def make_weapon(name="Test Sword", tags=("weapon", "melee", "sword", "onehanded"),
                damage=(8, 8), attack_speed=1.0, crit=5.0, required_level=1,
                implicits=(), damage_type=DamageType.PHYSICAL):
    return BaseItem(
        name=name,
        tags=frozenset(tags),
        stats=WeaponStats(damage[0], damage[1], damage_type,
                          attack_speed, crit),
        required_level=required_level,
        implicits=tuple(implicits),
    )


def make_armour(name="Test Vest", tags=("armour", "body_armour"), armour=0,
                evasion=0, energy_shield=0, block=0, required_level=1):
    return BaseItem(
        name=name,
        tags=frozenset(tags),
        stats=ArmourStats(armour, evasion, energy_shield, block),
        required_level=required_level,
    )


def make_jewellery(name="Test Ring", tags=("jewellery", "ring"), required_level=1,
                   implicits=()):
    return BaseItem(
        name=name,
        tags=frozenset(tags),
        stats=JewelleryStats(),
        required_level=required_level,
        implicits=tuple(implicits),
    )


def make_catalog(groups, vocabulary=None):
    """Build a catalog from {(family, slot, category, subcategory): [templates]}."""
    cats = {}
    for (family, slot, category, sub), templates in groups.items():
        cats.setdefault((family, slot, category), []).append(
            AffixSubCategory(sub, tuple(templates)))
    categories = [AffixCategory(name, family, slot, tuple(subs))
                  for (family, slot, name), subs in cats.items()]
    return AffixCatalog(categories, vocabulary)


def tiered(name, slot, stat, tags, ranges, kind=ModifierKind.INCREASED,
           scope=ModifierScope.LOCAL, secondary=None):
    """One template per tier; ranges is {tier: (lo, hi)}."""
    return [
        make_template(f"{name} T{t}", slot, t, tags,
                      [make_mod(stat, lo, hi, kind, scope,
                                secondary[t] if secondary else None)],
                      min_level=1)
        for t, (lo, hi) in ranges.items()
    ]


# ── Session-scoped fixtures ──────────────────────────────

@pytest.fixture(scope="session")
def small_catalog():
    """Hand-built catalog covering all three families."""
    W, A, J = ItemFamily.WEAPON, ItemFamily.ARMOUR, ItemFamily.JEWELLERY
    P, S = AffixSlot.PREFIX, AffixSlot.SUFFIX
    return make_catalog({
        (W, P, "Physical", "Increased Physical Damage"): tiered(
            "IncPhys", P, "physical_damage", ["weapon"],
            {1: (170, 179), 4: (100, 109), 9: (15, 19)}),
        (W, P, "Physical", "Added Physical Damage"): tiered(
            "AddPhys", P, "physical_damage", ["weapon"],
            {2: (10, 14), 8: (1, 2)}, kind=ModifierKind.FLAT,
            secondary={2: (20, 25), 8: (3, 4)}),
        (W, P, "Elemental", "Added Fire Damage"): tiered(
            "AddFire", P, "fire_damage", ["weapon"],
            {3: (12, 16), 9: (1, 2)}, kind=ModifierKind.FLAT,
            secondary={3: (24, 30), 9: (3, 4)}),
        (W, S, "Speed", "Attack Speed"): tiered(
            "AtkSpd", S, "attack_speed", ["weapon"], {1: (25, 27), 8: (5, 7)}),
        (W, S, "Critical", "Critical Chance"): tiered(
            "Crit", S, "critical_chance", ["weapon"], {2: (30, 34), 9: (10, 14)}),
        (W, S, "Attributes", "Strength"): tiered(
            "Str", S, "strength", ["weapon"], {1: (51, 55), 9: (8, 12)},
            kind=ModifierKind.FLAT, scope=ModifierScope.GLOBAL),
        (A, P, "Life", "Maximum Life"): tiered(
            "Life", P, "maximum_life", ["armour"], {1: (100, 109), 9: (10, 19)},
            kind=ModifierKind.FLAT, scope=ModifierScope.GLOBAL),
        (A, P, "Defences", "Increased Energy Shield"): tiered(
            "IncES", P, "energy_shield", ["armour"], {1: (101, 110), 8: (15, 26)}),
        (A, P, "Defences", "Increased Armour"): tiered(
            "IncArm", P, "armour", ["armour"], {1: (101, 110), 8: (15, 26)}),
        (A, S, "Resistances", "Fire Resistance"): tiered(
            "FireRes", S, "fire_resistance", ["armour"], {1: (46, 48), 9: (6, 11)},
            kind=ModifierKind.FLAT, scope=ModifierScope.GLOBAL),
        (A, S, "Block", "Block Chance"): tiered(
            "Block", S, "block_chance", ["armour", "shield"], {1: (10, 12), 9: (1, 2)},
            kind=ModifierKind.FLAT),
        (J, P, "Life", "Maximum Life"): tiered(
            "JLife", P, "maximum_life", ["jewellery"], {1: (70, 79), 9: (10, 19)},
            kind=ModifierKind.FLAT, scope=ModifierScope.GLOBAL),
        (J, S, "Resistances", "Cold Resistance"): tiered(
            "ColdRes", S, "cold_resistance", ["jewellery"], {1: (46, 48), 9: (6, 11)},
            kind=ModifierKind.FLAT, scope=ModifierScope.GLOBAL),
    })


@pytest.fixture(scope="session")
def bundled_catalog():
    """The catalog shipped in resources/."""
    from affix_catalog import load_catalog
    path = RESOURCES_DIR / "affix_catalog.json"
    if not path.exists():
        pytest.skip("Bundled catalog not found")
    return load_catalog(path=path)


@pytest.fixture(scope="session")
def bundled_bases():
    from base_items import load_base_items
    path = RESOURCES_DIR / "base_items.json"
    if not path.exists():
        pytest.skip("Bundled base items not found")
    return load_base_items(path)


@pytest.fixture
def generator(bundled_catalog, bundled_bases):
    """An initialized ItemGenerator over the bundled data."""
    from core import ItemGenerator
    from games.arpg import create_arpg_config

    gen = ItemGenerator(create_arpg_config(catalog_url=""),
                        catalog=bundled_catalog, bases=bundled_bases)
    assert gen.initialize()
    return gen
