"""
AffixForge - Configuration
All tunable constants in one place.
"""

import os
from pathlib import Path

from dotenv import load_dotenv
load_dotenv()

PROJECT_ROOT = Path(__file__).resolve().parent.parent
RESOURCES_DIR = Path(os.environ.get(
    "AFFIXFORGE_RESOURCES_DIR", str(PROJECT_ROOT / "resources")))

# ─────────────────────────────────────────────
# Version
# ─────────────────────────────────────────────
_version_file = RESOURCES_DIR / "VERSION"
APP_VERSION = _version_file.read_text().strip() if _version_file.exists() else "dev"

# ─────────────────────────────────────────────
# Paths
# ─────────────────────────────────────────────
CACHE_DIR = Path(os.environ.get(
    "AFFIXFORGE_CACHE_DIR", str(Path.home() / ".affixforge" / "cache")))

LOG_FILE = Path.home() / ".affixforge" / "affixforge.log"
LOG_LEVEL = os.environ.get("AFFIXFORGE_LOG_LEVEL", "INFO").upper()

# Bundled data shipped with the engine
BUNDLED_CATALOG_FILE = RESOURCES_DIR / "affix_catalog.json"
BUNDLED_BASE_ITEMS_FILE = RESOURCES_DIR / "base_items.json"

# ─────────────────────────────────────────────
# Remote Catalog (optional)
# ─────────────────────────────────────────────
# When set, the catalog JSON is downloaded and cached on disk instead of
# reading the bundled copy.
CATALOG_URL = os.environ.get("AFFIXFORGE_CATALOG_URL", "")
CATALOG_CACHE_FILE = CACHE_DIR / "affix_catalog.json"
CATALOG_CACHE_TTL = 24 * 3600  # 1 day
CATALOG_USER_AGENT = f"AffixForge/{APP_VERSION}"

# ─────────────────────────────────────────────
# Tier Gate
# ─────────────────────────────────────────────
# (minimum item level, best tier allowed). Checked top-down; the first
# threshold the item level meets wins. T1 is the strongest tier.
TIER_THRESHOLDS = [
    (80, 1),
    (70, 2),
    (60, 3),
    (50, 4),
    (40, 5),
    (30, 6),
    (20, 7),
    (10, 8),
]
LOWEST_TIER = 9

# ─────────────────────────────────────────────
# Rarity & Affix Counts
# ─────────────────────────────────────────────
MAX_PREFIXES = 3
MAX_SUFFIXES = 3

# Natural drop distribution when no rarity is forced
RARITY_WEIGHTS = {
    "normal": 60,
    "magic": 30,
    "rare": 10,
}

# Magic items: one of these (prefixes, suffixes) pairs, chosen uniformly
MAGIC_COUNT_OPTIONS = [(1, 0), (0, 1), (1, 1)]

# Rare items: per-side count weights, biased toward full sides
RARE_SIDE_COUNT_WEIGHTS = {
    1: 20,
    2: 35,
    3: 45,
}
RARE_MIN_TOTAL_AFFIXES = 3

# Selection weight for templates that don't declare one
DEFAULT_AFFIX_WEIGHT = 1000

# ─────────────────────────────────────────────
# Tag Vocabulary
# ─────────────────────────────────────────────
# Every compatible_tags entry in the catalog must come from this set.
WEAPON_TAGS = frozenset({
    "weapon", "melee", "ranged", "caster", "spell",
    "onehanded", "twohanded",
    "sword", "axe", "mace", "dagger", "claw", "spear", "flail",
    "bow", "crossbow", "wand", "staff", "sceptre", "quarterstaff",
})

ARMOUR_TAGS = frozenset({
    "armour", "helmet", "body_armour", "gloves", "boots", "shield", "focus",
    "str_armour", "dex_armour", "int_armour",
    # Magnitude pseudo-tags: satisfied when the base has that defence > 0
    "armour_base", "evasion_base", "energyshield_base",
})

JEWELLERY_TAGS = frozenset({
    "jewellery", "ring", "amulet", "belt",
})

TAG_VOCABULARY = WEAPON_TAGS | ARMOUR_TAGS | JEWELLERY_TAGS

# Pseudo-tag -> the armour stat that must be above zero
MAGNITUDE_TAGS = {
    "armour_base": "armour",
    "evasion_base": "evasion",
    "energyshield_base": "energy_shield",
}

# ─────────────────────────────────────────────
# Stat Naming
# ─────────────────────────────────────────────
# Totals for these stats are rounded up after aggregation
CEILING_STATS = frozenset({
    "physical_damage", "fire_damage", "cold_damage",
    "lightning_damage", "chaos_damage",
    "armour", "evasion", "energy_shield",
})

# ─────────────────────────────────────────────
# Item Naming
# ─────────────────────────────────────────────
RARE_NAME_PREFIXES = [
    "Agony", "Apocalypse", "Armageddon", "Beast", "Behemoth", "Blight",
    "Blood", "Bramble", "Brimstone", "Brood", "Carrion", "Cataclysm",
    "Corpse", "Corruption", "Damnation", "Death", "Demon", "Dire",
    "Dragon", "Dread", "Doom", "Eagle", "Empire", "Foe", "Gale",
    "Ghoul", "Gloom", "Glyph", "Golem", "Grim", "Hate", "Havoc",
    "Honour", "Horror", "Hypnotic", "Kraken", "Loath", "Maelstrom",
    "Mind", "Miracle", "Morbid", "Oblivion", "Onslaught", "Pain",
    "Pandemonium", "Phoenix", "Plague", "Rage", "Rapture", "Rune",
    "Skull", "Sol", "Soul", "Sorrow", "Spirit", "Storm", "Tempest",
    "Torment", "Vengeance", "Victory", "Viper", "Vortex", "Woe", "Wrath",
]

RARE_NAME_SUFFIXES = {
    "weapon": [
        "Bane", "Beak", "Bite", "Edge", "Fang", "Gutter", "Hunger",
        "Impaler", "Needle", "Razor", "Scalpel", "Scratch", "Sever",
        "Skewer", "Slicer", "Song", "Spike", "Spiker", "Stinger", "Thirst",
    ],
    "armour": [
        "Carapace", "Cloak", "Coat", "Curtain", "Guardian", "Hide",
        "Jack", "Keep", "Mantle", "Pelt", "Salvation", "Sanctuary",
        "Shell", "Shelter", "Shroud", "Skin", "Suit", "Veil", "Ward", "Wrap",
    ],
    "jewellery": [
        "Band", "Beads", "Bond", "Charm", "Circle", "Clasp", "Coil",
        "Eye", "Gyre", "Heart", "Hold", "Knot", "Locket", "Loop",
        "Noose", "Pendant", "Scarab", "Spiral", "Talisman", "Twirl",
    ],
}

# ─────────────────────────────────────────────
# Loot Table
# ─────────────────────────────────────────────
# Item level window below the area level that drops can roll at
LOOT_ITEM_LEVEL_SPREAD = 25
LOOT_BASE_DROP_CHANCE = 0.15
LOOT_FAMILY_WEIGHTS = {
    "weapon": 35,
    "armour": 45,
    "jewellery": 20,
}
