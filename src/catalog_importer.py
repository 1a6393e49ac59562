"""
AffixForge - Catalog Importer

Turns the designers' affix spreadsheet (CSV) into catalog categories.

Columns:
    Category, Prefix/Suffix, Name, Stat Text, Min, Max, Item Types,
    Stat Name, Tier, Min Level, Scope

  - Tier defaults to 5, Min Level to 1, Scope to Global.
  - Blank lines, lines starting with '#' and the header row are skipped.
  - "Adds (3–5) to (7–9) Fire Damage" in Stat Text makes a dual range.
  - Stat Name "armour|maximum_life" makes a hybrid; Min/Max may be given
    per stat ("10|20") or once (split evenly between the stats).
  - Item Types is free text ("Helmet Gloves", "Caster Weapon",
    "Armour ES base", "Jewelry").  Each explicitly named slot becomes its
    own template in the same sub-category, since a template matches only
    when the item carries all of its tags.

Usage:
    categories = read_csv_categories(Path("affixes.csv"))
    catalog = import_csv(Path("affixes.csv"))
"""

import csv
import logging
import re
from collections import OrderedDict
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from affix_catalog import AffixCatalog, AffixCategory, AffixSubCategory
from affix_templates import (
    AffixSlot, AffixTemplate, ItemFamily, ModifierKind, ModifierScope,
    ModifierTemplate, Tier,
)
from config import DEFAULT_AFFIX_WEIGHT

logger = logging.getLogger(__name__)

# "Adds (6–9) to (13–15)", en dash or hyphen
_DUAL_RANGE_RE = re.compile(
    r"adds\s+\((\d+(?:\.\d+)?)\s*[–-]\s*(\d+(?:\.\d+)?)\)\s+to\s+"
    r"\((\d+(?:\.\d+)?)\s*[–-]\s*(\d+(?:\.\d+)?)\)",
    re.IGNORECASE,
)
_CAMEL_RE = re.compile(r"(?<=[a-z0-9])([A-Z])")

_KIND_PREFIXES = ("added_", "increased_", "reduced_", "more_", "flat_")

_STAT_ALIASES = {
    "max_health": "maximum_life",
    "max_life": "maximum_life",
    "life": "maximum_life",
    "max_mana": "maximum_mana",
    "mana": "maximum_mana",
    "evasion_rating": "evasion",
    "critical_strike_chance": "critical_chance",
    "critical_strike_multiplier": "critical_multiplier",
    "all_resistance": "all_resistances",
}

_ARMOUR_SLOTS = ("helmet", "body armour", "gloves", "boots", "shield")
_JEWELLERY_SLOTS = ("ring", "amulet", "belt")
_BASE_TAGS = (
    (("es base", "energy shield base"), "energyshield_base"),
    (("armour base", "armor base"), "armour_base"),
    (("evasion base",), "evasion_base"),
)

_COLUMNS = 8    # Category .. Stat Name are required


@dataclass
class CsvAffixRow:
    category: str
    slot: AffixSlot
    name: str
    stat_text: str
    min_value: str
    max_value: str
    item_types: str
    stat_name: str
    tier: Tier = Tier.T5
    min_level: int = 1
    scope: ModifierScope = ModifierScope.GLOBAL
    line_no: int = 0


# ─── Parsing helpers ─────────────────────────────────

def normalize_stat_name(raw: str) -> str:
    """'increasedPhysicalDamage' -> 'physical_damage', 'maxHealth' -> 'maximum_life'."""
    snake = _CAMEL_RE.sub(r"_\1", raw.strip()).lower().replace(" ", "_")
    for prefix in _KIND_PREFIXES:
        if snake.startswith(prefix):
            snake = snake[len(prefix):]
            break
    return _STAT_ALIASES.get(snake, snake)


def detect_kind(stat_text: str) -> ModifierKind:
    lower = stat_text.lower()
    if "reduced" in lower or "decreased" in lower:
        return ModifierKind.REDUCED
    if "more" in lower:
        return ModifierKind.MORE
    if "increased" in lower:
        return ModifierKind.INCREASED
    # "+12% to Fire Resistance" is a flat percentage, "12% Attack Speed" is not
    if "%" in lower and "to" not in lower.split():
        return ModifierKind.INCREASED
    return ModifierKind.FLAT


def parse_dual_range(stat_text: str) -> Optional[Tuple[Tuple[float, float], Tuple[float, float]]]:
    m = _DUAL_RANGE_RE.search(stat_text)
    if not m:
        return None
    a, b, c, d = (float(g) for g in m.groups())
    return (a, b), (c, d)


def families_for(item_types: str) -> List[ItemFamily]:
    lower = item_types.lower()
    families = []
    if "weapon" in lower:
        families.append(ItemFamily.WEAPON)
    if ("armour" in lower or "armor" in lower
            or any(s in lower for s in _ARMOUR_SLOTS)):
        families.append(ItemFamily.ARMOUR)
    if ("jewelry" in lower or "jewellery" in lower
            or any(s in lower for s in _JEWELLERY_SLOTS)):
        families.append(ItemFamily.JEWELLERY)
    return families or list(ItemFamily)


def tag_sets_for(item_types: str, family: ItemFamily) -> List[frozenset]:
    """One tag set per template to emit for this family."""
    lower = item_types.lower()

    if family is ItemFamily.WEAPON:
        tags = {"weapon"}
        if "caster weapon" in lower:
            tags.add("caster")
        elif "ranged weapon" in lower:
            tags.add("ranged")
        return [frozenset(tags)]

    if family is ItemFamily.ARMOUR:
        base = {"armour"}
        for needles, tag in _BASE_TAGS:
            if any(n in lower for n in needles):
                base.add(tag)
        # "shield" would also match inside "energy shield base"
        slot_text = lower
        for needles, _ in _BASE_TAGS:
            for n in needles:
                slot_text = slot_text.replace(n, "")
        slots = [s.replace(" ", "_") for s in _ARMOUR_SLOTS if s in slot_text]
        if not slots:
            return [frozenset(base)]
        return [frozenset(base | {slot}) for slot in slots]

    slots = [s for s in _JEWELLERY_SLOTS if s in lower]
    if not slots:
        return [frozenset({"jewellery"})]
    return [frozenset({"jewellery", slot}) for slot in slots]


def _split_values(raw: str, count: int) -> List[float]:
    parts = [p.strip() for p in raw.split("|")]
    if len(parts) == count:
        return [float(p) for p in parts]
    value = float(parts[0])
    return [value / count] * count


def build_modifiers(row: CsvAffixRow) -> Tuple[ModifierTemplate, ...]:
    kind = detect_kind(row.stat_text)
    stats = [normalize_stat_name(s) for s in row.stat_name.split("|") if s.strip()]

    if len(stats) > 1:
        mins = _split_values(row.min_value, len(stats))
        maxs = _split_values(row.max_value, len(stats))
        # "(6-13)% increased Armour and +(7-10) to maximum Life"
        parts = re.split(r"\s+and\s+", row.stat_text)
        kinds = ([detect_kind(p) for p in parts] if len(parts) == len(stats)
                 else [kind] * len(stats))
        return tuple(
            ModifierTemplate(stat, (lo, hi), k, row.scope)
            for stat, lo, hi, k in zip(stats, mins, maxs, kinds)
        )

    stat = stats[0] if stats else ""
    dual = parse_dual_range(row.stat_text)
    if dual is not None:
        primary, secondary = dual
        return (ModifierTemplate(stat, primary, ModifierKind.FLAT, row.scope,
                                 secondary_range=secondary),)
    return (ModifierTemplate(stat, (float(row.min_value), float(row.max_value)),
                             kind, row.scope),)


def parse_row(columns: List[str], line_no: int = 0) -> Optional[CsvAffixRow]:
    """One CSV row -> CsvAffixRow, or None for comments/headers/blank lines."""
    cols = [c.strip() for c in columns]
    if not cols or not any(cols) or cols[0].startswith("#"):
        return None
    if cols[0].lower() == "category":
        return None
    if len(cols) < _COLUMNS:
        raise ValueError(f"expected at least {_COLUMNS} columns, got {len(cols)}")

    def opt(i: int, default: str) -> str:
        return cols[i] if len(cols) > i and cols[i] else default

    try:
        tier = Tier.parse(opt(8, "5"))
    except ValueError:
        logger.warning(f"CatalogImporter: line {line_no}: invalid tier "
                       f"{cols[8]!r}, defaulting to T5")
        tier = Tier.T5

    return CsvAffixRow(
        category=cols[0],
        slot=AffixSlot(cols[1].lower()),
        name=cols[2],
        stat_text=cols[3],
        min_value=cols[4],
        max_value=cols[5],
        item_types=cols[6],
        stat_name=cols[7],
        tier=tier,
        min_level=int(opt(9, "1")),
        scope=ModifierScope(opt(10, "Global").lower()),
        line_no=line_no,
    )


# ─── Import ──────────────────────────────────────────

def rows_to_categories(rows: Iterable[CsvAffixRow]) -> List[AffixCategory]:
    """Group rows into categories; sub-categories are keyed by kind + stat."""
    grouped: Dict[Tuple[ItemFamily, AffixSlot, str], Dict[str, list]] = OrderedDict()

    for row in rows:
        try:
            modifiers = build_modifiers(row)
        except ValueError as e:
            logger.warning(f"CatalogImporter: line {row.line_no} ({row.name}): "
                           f"bad values, skipped ({e})")
            continue
        sub_name = " / ".join(f"{m.kind.value} {m.stat_name}" for m in modifiers)
        for family in families_for(row.item_types):
            subs = grouped.setdefault((family, row.slot, row.category), OrderedDict())
            templates = subs.setdefault(sub_name, [])
            for tags in tag_sets_for(row.item_types, family):
                tmpl = AffixTemplate(
                    name=row.name,
                    slot=row.slot,
                    tier=row.tier,
                    modifiers=modifiers,
                    compatible_tags=tags,
                    min_level=row.min_level,
                    weight=DEFAULT_AFFIX_WEIGHT,
                )
                if any(t.name == tmpl.name and t.compatible_tags == tags
                       for t in templates):
                    continue
                templates.append(tmpl)

    return [
        AffixCategory(name, family, slot, tuple(
            AffixSubCategory(sub, tuple(tmpls)) for sub, tmpls in subs.items()))
        for (family, slot, name), subs in grouped.items()
    ]


def read_csv_rows(path: Path) -> List[CsvAffixRow]:
    rows = []
    with open(path, "r", encoding="utf-8", newline="") as f:
        for line_no, columns in enumerate(csv.reader(f), start=1):
            try:
                row = parse_row(columns, line_no)
            except ValueError as e:
                logger.warning(f"CatalogImporter: {path.name}:{line_no}: skipped ({e})")
                continue
            if row is not None:
                rows.append(row)
    logger.info(f"CatalogImporter: read {len(rows)} affix rows from {path.name}")
    return rows


def read_csv_categories(path: Path) -> List[AffixCategory]:
    return rows_to_categories(read_csv_rows(path))


def import_csv(path: Path, vocabulary: Optional[Iterable[str]] = None) -> AffixCatalog:
    """CSV file -> validated AffixCatalog (invalid rows end up in .rejected)."""
    return AffixCatalog(read_csv_categories(Path(path)), vocabulary)


def summarize(categories: List[AffixCategory]) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for cat in categories:
        key = f"{cat.family.value}.{cat.slot.value}"
        counts[key] = counts.get(key, 0) + len(cat.all_templates())
    return counts
