"""
AffixForge - Affix Catalog

The full set of affix templates, organised as

    family + slot  ->  AffixCategory  ->  AffixSubCategory  ->  AffixTemplate

A sub-category groups the tiers of one logical affix ("Increased Physical
Damage" T1..T9).  The roller never puts two templates from the same
sub-category on one item, so the (category, sub-category) pair is carried
on every CatalogEntry.

Templates are validated when the catalog is built.  Broken ones are logged,
left out and listed in `catalog.rejected`; the rest of the catalog loads.
Once built the catalog is read-only and can be shared freely.

Data source: resources/affix_catalog.json (bundled), or a remote JSON
catalog at CATALOG_URL cached in ~/.affixforge/cache/, 1-day TTL,
stale-cache fallback.

Class API:
    catalog = load_catalog()                       # bundled / remote / cached
    entries = catalog.entries(ItemFamily.WEAPON, AffixSlot.PREFIX)
    hits    = catalog.find("Heavy")
    catalog.counts()                               # {"weapon.prefix": 42, ...}
"""

import json
import time
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

import requests

from affix_templates import (
    AffixSlot, AffixTemplate, CatalogMisconfiguration, ItemFamily,
)
from compatibility import compatible_families
from config import (
    BUNDLED_CATALOG_FILE, CATALOG_CACHE_FILE, CATALOG_CACHE_TTL,
    CATALOG_URL, CATALOG_USER_AGENT, TAG_VOCABULARY,
)

logger = logging.getLogger(__name__)


# ─── Data Structures ─────────────────────────────────

@dataclass(frozen=True)
class AffixSubCategory:
    name: str                              # e.g. "Increased Physical Damage"
    templates: Tuple[AffixTemplate, ...]


@dataclass(frozen=True)
class AffixCategory:
    name: str                              # e.g. "Physical Damage"
    family: ItemFamily
    slot: AffixSlot
    subcategories: Tuple[AffixSubCategory, ...]

    def all_templates(self) -> List[AffixTemplate]:
        return [t for sub in self.subcategories for t in sub.templates]


@dataclass(frozen=True)
class CatalogEntry:
    category: str
    subcategory: str
    template: AffixTemplate

    @property
    def group_key(self) -> Tuple[str, str]:
        """Identity used for the one-per-sub-category rule."""
        return (self.category, self.subcategory)


@dataclass(frozen=True)
class RejectedTemplate:
    category: str
    subcategory: str
    name: str
    reason: str


# ─── Catalog ─────────────────────────────────────────

class AffixCatalog:
    """Validated, read-only affix catalog."""

    def __init__(self, categories: Iterable[AffixCategory],
                 vocabulary: Optional[Iterable[str]] = None):
        self._vocabulary = frozenset(vocabulary if vocabulary is not None
                                     else TAG_VOCABULARY)
        kept_categories = []
        rejected: List[RejectedTemplate] = []
        by_key: Dict[Tuple[ItemFamily, AffixSlot], List[CatalogEntry]] = {
            (f, s): [] for f in ItemFamily for s in AffixSlot
        }

        for cat in categories:
            kept_subs = []
            for sub in cat.subcategories:
                kept = []
                for tmpl in sub.templates:
                    try:
                        tmpl.validate(self._vocabulary)
                        if tmpl.slot is not cat.slot:
                            raise CatalogMisconfiguration(
                                f"{tmpl.name}: {tmpl.slot.value} filed under "
                                f"{cat.slot.value} category")
                    except CatalogMisconfiguration as e:
                        logger.warning(f"AffixCatalog: rejected {cat.name}/"
                                       f"{sub.name}: {e}")
                        rejected.append(RejectedTemplate(
                            cat.name, sub.name, tmpl.name, str(e)))
                        continue
                    if cat.family not in compatible_families(tmpl):
                        logger.debug(f"AffixCatalog: {tmpl.name} tags "
                                     f"{sorted(tmpl.compatible_tags)} can't match "
                                     f"any {cat.family.value} base")
                    kept.append(tmpl)
                    by_key[(cat.family, cat.slot)].append(
                        CatalogEntry(cat.name, sub.name, tmpl))
                kept_subs.append(AffixSubCategory(sub.name, tuple(kept)))
            kept_categories.append(AffixCategory(
                cat.name, cat.family, cat.slot, tuple(kept_subs)))

        self._categories: Tuple[AffixCategory, ...] = tuple(kept_categories)
        self._entries: Dict[Tuple[ItemFamily, AffixSlot], Tuple[CatalogEntry, ...]] = {
            k: tuple(v) for k, v in by_key.items()
        }
        self._rejected: Tuple[RejectedTemplate, ...] = tuple(rejected)

        if rejected:
            logger.warning(f"AffixCatalog: {len(rejected)} template(s) rejected, "
                           f"{len(self)} loaded")
        else:
            logger.debug(f"AffixCatalog: {len(self)} templates loaded")

    # ── Queries ──────────────────────────────────────

    @property
    def categories(self) -> Tuple[AffixCategory, ...]:
        return self._categories

    @property
    def rejected(self) -> Tuple[RejectedTemplate, ...]:
        return self._rejected

    @property
    def vocabulary(self) -> frozenset:
        return self._vocabulary

    def entries(self, family: ItemFamily, slot: AffixSlot) -> Tuple[CatalogEntry, ...]:
        return self._entries.get((family, slot), ())

    def all_entries(self) -> List[CatalogEntry]:
        return [e for entries in self._entries.values() for e in entries]

    def find(self, name: str) -> List[CatalogEntry]:
        """All entries whose template name matches (case-insensitive)."""
        wanted = name.strip().lower()
        return [e for e in self.all_entries() if e.template.name.lower() == wanted]

    def counts(self) -> Dict[str, int]:
        return {f"{f.value}.{s.value}": len(entries)
                for (f, s), entries in self._entries.items()}

    def __len__(self) -> int:
        return sum(len(v) for v in self._entries.values())

    # ── Serialization ────────────────────────────────

    def to_dict(self) -> dict:
        return {"categories": [
            {
                "name": cat.name,
                "family": cat.family.value,
                "slot": cat.slot.value,
                "subcategories": [
                    {"name": sub.name,
                     "affixes": [t.to_dict() for t in sub.templates]}
                    for sub in cat.subcategories
                ],
            }
            for cat in self._categories
        ]}

    @classmethod
    def from_dict(cls, data: dict,
                  vocabulary: Optional[Iterable[str]] = None) -> "AffixCatalog":
        """Build from the JSON layout written by to_dict().

        Records that can't even be parsed (bad enum, missing range) are
        rejected the same way as records that fail validation.
        """
        categories = []
        unparsable: List[RejectedTemplate] = []
        for raw_cat in data.get("categories", []):
            try:
                cat_name = str(raw_cat["name"])
                family = ItemFamily(raw_cat["family"])
                slot = AffixSlot(raw_cat["slot"])
            except (KeyError, ValueError, TypeError) as e:
                cat_name = str(raw_cat.get("name", "?")) if isinstance(raw_cat, dict) else "?"
                logger.warning(f"AffixCatalog: skipping unparsable category "
                               f"{cat_name}: {e}")
                unparsable.append(RejectedTemplate(
                    cat_name, "*", "*", f"unparsable category: {e}"))
                continue

            subs = []
            for raw_sub in raw_cat.get("subcategories", []):
                try:
                    sub_name = str(raw_sub["name"])
                    raw_affixes = list(raw_sub.get("affixes", []))
                except (KeyError, ValueError, TypeError, AttributeError) as e:
                    logger.warning(f"AffixCatalog: skipping unparsable sub-category "
                                   f"in {cat_name}: {e}")
                    unparsable.append(RejectedTemplate(
                        cat_name, "?", "*", f"unparsable sub-category: {e}"))
                    continue

                templates = []
                for raw in raw_affixes:
                    try:
                        templates.append(AffixTemplate.from_dict(raw, slot=slot))
                    except (KeyError, ValueError, TypeError) as e:
                        logger.warning(f"AffixCatalog: unparsable affix "
                                       f"{raw.get('name', '?')} in "
                                       f"{cat_name}/{sub_name}: {e}")
                        unparsable.append(RejectedTemplate(
                            cat_name, sub_name,
                            str(raw.get("name", "?")), f"unparsable: {e}"))
                subs.append(AffixSubCategory(sub_name, tuple(templates)))
            categories.append(AffixCategory(cat_name, family, slot, tuple(subs)))

        catalog = cls(categories, vocabulary)
        if unparsable:
            catalog._rejected = tuple(unparsable) + catalog._rejected
        return catalog


# ─── Loading ─────────────────────────────────────────

def load_catalog(path: Optional[Path] = None, url: Optional[str] = None,
                 cache_file: Path = CATALOG_CACHE_FILE,
                 ttl: int = CATALOG_CACHE_TTL,
                 vocabulary: Optional[Iterable[str]] = None) -> AffixCatalog:
    """Load the catalog from an explicit file, a remote URL, or the bundle.

    An explicit path wins.  Otherwise a configured URL is tried (with the
    disk cache), and the bundled catalog is the last resort.
    """
    data = None
    if path is not None:
        data = _read_json(Path(path))
    else:
        url = CATALOG_URL if url is None else url
        if url:
            data = _load_cached_or_download(url, cache_file, ttl)
            if data is None:
                logger.warning("AffixCatalog: remote catalog unavailable, "
                               "using bundled catalog")
        if data is None:
            data = _read_json(BUNDLED_CATALOG_FILE)
    return AffixCatalog.from_dict(data, vocabulary)


def _read_json(path: Path) -> dict:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def _load_cached_or_download(url: str, cache_path: Path, ttl: int) -> Optional[dict]:
    """Load from disk cache if fresh, otherwise download."""
    if cache_path.exists():
        age = time.time() - cache_path.stat().st_mtime
        if age < ttl:
            try:
                data = _read_json(cache_path)
                logger.debug(f"AffixCatalog: loaded {cache_path.name} from cache")
                return data
            except (OSError, ValueError) as e:
                logger.warning(f"AffixCatalog: cache read failed: {e}")

    try:
        logger.info(f"AffixCatalog: downloading {url}...")
        resp = requests.get(url, timeout=30,
                            headers={"User-Agent": CATALOG_USER_AGENT})
        if resp.status_code != 200:
            logger.warning(f"AffixCatalog: HTTP {resp.status_code} for {url}")
            return _load_stale_cache(cache_path)
        data = resp.json()
    except (requests.RequestException, ValueError) as e:
        logger.warning(f"AffixCatalog: download failed: {e}")
        return _load_stale_cache(cache_path)

    try:
        cache_path.parent.mkdir(parents=True, exist_ok=True)
        with open(cache_path, "w", encoding="utf-8") as f:
            json.dump(data, f, separators=(",", ":"))
        logger.info(f"AffixCatalog: cached catalog "
                    f"({cache_path.stat().st_size / 1024:.0f} KB)")
    except OSError as e:
        logger.warning(f"AffixCatalog: cache write failed: {e}")
    return data


def _load_stale_cache(cache_path: Path) -> Optional[dict]:
    """Stale cache as fallback when the download fails."""
    if cache_path.exists():
        try:
            data = _read_json(cache_path)
            logger.warning(f"AffixCatalog: using stale cache {cache_path.name}")
            return data
        except (OSError, ValueError) as e:
            logger.warning(f"AffixCatalog: stale cache unreadable: {e}")
    return None
