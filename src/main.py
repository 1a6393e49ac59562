"""
AffixForge - Command line entry point.

    python src/main.py generate --level 80 --rarity rare --seed 12345
    python src/main.py simulate --level 50 --count 2000
    python src/main.py loot --area 45 --attempts 100 --seed 7
    python src/main.py catalog --level 35
    python src/main.py import-csv resources/sample_affixes.csv -o catalog.json
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from config import APP_VERSION, LOG_FILE, LOG_LEVEL

logger = logging.getLogger(__name__)


def setup_logging(debug: bool = False):
    """Configure logging.

    Console shows INFO+ only so item output stays readable.
    File gets DEBUG when --debug is used (per-roll pool sizes, rejections).
    """
    LOG_FILE.parent.mkdir(parents=True, exist_ok=True)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(logging.DEBUG if debug else getattr(logging, LOG_LEVEL, logging.INFO))
    console.setFormatter(logging.Formatter(
        "%(asctime)s %(message)s",
        datefmt="%H:%M:%S"
    ))

    file_handler = logging.FileHandler(LOG_FILE, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG if debug else logging.INFO)
    file_handler.setFormatter(logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    ))

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if debug else logging.INFO)
    root_logger.addHandler(console)
    root_logger.addHandler(file_handler)


def _make_generator(args):
    from core import ItemGenerator
    from games.arpg import create_arpg_config

    config = create_arpg_config(catalog_file=args.catalog)
    gen = ItemGenerator(config)
    if not gen.initialize():
        print("ERROR: generator could not load its catalog/base items")
        sys.exit(1)
    return gen


def _base_pool(gen, name):
    if not name:
        return None
    from base_items import find_base
    base = find_base(gen.bases, name)
    if base is None:
        print(f"ERROR: unknown base '{name}'. Options: "
              f"{', '.join(b.name for b in gen.bases)}")
        sys.exit(1)
    return [base]


# ─── Commands ────────────────────────────────────────

def cmd_generate(args):
    from core import InvalidRequest

    gen = _make_generator(args)
    pool = _base_pool(gen, args.base)
    try:
        if args.count > 1:
            items = gen.generate_batch(args.count, pool, args.level,
                                       args.rarity, seed=args.seed)
        else:
            items = [gen.generate_item(pool, args.level, args.rarity,
                                       seed=args.seed)]
    except InvalidRequest as e:
        print(f"ERROR: {e}")
        sys.exit(2)

    if args.json:
        print(json.dumps([it.to_dict() for it in items], sort_keys=True, indent=2))
        return
    for i, item in enumerate(items):
        if i:
            print()
        print(item.describe())


def cmd_simulate(args):
    from core import InvalidRequest
    from drop_stats import format_summary, summarize_drops

    gen = _make_generator(args)
    try:
        items = gen.generate_batch(args.count, _base_pool(gen, args.base),
                                   args.level, args.rarity, seed=args.seed)
    except InvalidRequest as e:
        print(f"ERROR: {e}")
        sys.exit(2)
    print(format_summary(summarize_drops(items)))


def cmd_loot(args):
    from drop_stats import format_summary, summarize_drops
    from loot_table import LootTable

    gen = _make_generator(args)
    table = LootTable(gen, args.area)
    lo, hi = table.level_window()
    drops = table.roll_drops(args.attempts, seed=args.seed, rarity=args.rarity)
    print(f"Area {args.area} (bases level {lo}-{hi}): "
          f"{len(drops)} drops from {args.attempts} attempts")
    for item in drops:
        print(f"  [{item.calculated_rarity().label:6}] {item.display_name()} "
              f"({item.base.name})")
    if drops:
        print()
        print(format_summary(summarize_drops(drops)))


def cmd_catalog(args):
    from affix_catalog import load_catalog
    from affix_templates import AffixSlot, ItemFamily
    from tier_gate import is_eligible, max_tier_for

    catalog = load_catalog(path=args.catalog)
    print(f"{len(catalog)} templates, {len(catalog.rejected)} rejected")
    for key, n in sorted(catalog.counts().items()):
        print(f"  {key:20} {n}")
    for r in catalog.rejected:
        print(f"  REJECTED {r.category}/{r.subcategory}/{r.name}: {r.reason}")

    if args.level:
        print(f"\nItem level {args.level}: best tier {max_tier_for(args.level).name}")
        for family in ItemFamily:
            for slot in AffixSlot:
                n = sum(1 for e in catalog.entries(family, slot)
                        if is_eligible(e.template, args.level))
                print(f"  {family.value}.{slot.value:8} {n} eligible")


def cmd_import_csv(args):
    from affix_catalog import AffixCatalog
    from catalog_importer import read_csv_categories, summarize

    categories = read_csv_categories(Path(args.csv))
    catalog = AffixCatalog(categories)
    for key, n in sorted(summarize(categories).items()):
        print(f"  {key:20} {n}")
    for r in catalog.rejected:
        print(f"  REJECTED {r.category}/{r.name}: {r.reason}")

    data = catalog.to_dict()
    if args.output:
        Path(args.output).write_text(json.dumps(data, indent=2), encoding="utf-8")
        print(f"Wrote {len(catalog)} templates to {args.output}")
    else:
        print(json.dumps(data, indent=2))


def main():
    parser = argparse.ArgumentParser(
        description=f"AffixForge {APP_VERSION} - procedural affix/item generator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py generate --level 80 --rarity rare       # One rare item
  python main.py generate --seed 12345 --json            # Reproducible, JSON
  python main.py simulate --level 50 --count 5000        # Distribution stats
  python main.py loot --area 45 --attempts 200           # Area drops
        """
    )
    parser.add_argument("--debug", "-d", action="store_true",
                        help="Enable debug logging")
    parser.add_argument("--catalog", type=Path, default=None,
                        help="Catalog JSON file (default: remote/bundled)")
    sub = parser.add_subparsers(dest="command", required=True)

    # generate
    p_gen = sub.add_parser("generate", help="Generate item(s)")
    p_gen.add_argument("--level", "-l", type=int, default=50,
                       help="Item level (default: 50)")
    p_gen.add_argument("--rarity", "-r", default=None,
                       choices=["normal", "magic", "rare", "random"],
                       help="Force a rarity (default: weighted roll)")
    p_gen.add_argument("--seed", "-s", type=int, default=None,
                       help="Seed for reproducible output")
    p_gen.add_argument("--base", "-b", default=None,
                       help="Base item name (default: any eligible base)")
    p_gen.add_argument("--count", "-n", type=int, default=1,
                       help="Number of items (default: 1)")
    p_gen.add_argument("--json", action="store_true",
                       help="Print JSON instead of tooltips")

    # simulate
    p_sim = sub.add_parser("simulate", help="Generate many items and summarize")
    p_sim.add_argument("--level", "-l", type=int, default=50)
    p_sim.add_argument("--rarity", "-r", default=None,
                       choices=["normal", "magic", "rare", "random"])
    p_sim.add_argument("--seed", "-s", type=int, default=None)
    p_sim.add_argument("--base", "-b", default=None)
    p_sim.add_argument("--count", "-n", type=int, default=1000,
                       help="Number of items (default: 1000)")

    # loot
    p_loot = sub.add_parser("loot", help="Roll area drops")
    p_loot.add_argument("--area", "-a", type=int, required=True,
                        help="Area level")
    p_loot.add_argument("--attempts", type=int, default=100,
                        help="Drop attempts (default: 100)")
    p_loot.add_argument("--rarity", "-r", default=None,
                        choices=["normal", "magic", "rare"],
                        help="Force a rarity (skips the drop-chance roll)")
    p_loot.add_argument("--seed", "-s", type=int, default=None)

    # catalog
    p_cat = sub.add_parser("catalog", help="Validate and summarize the catalog")
    p_cat.add_argument("--level", "-l", type=int, default=0,
                       help="Also count templates eligible at this item level")

    # import-csv
    p_imp = sub.add_parser("import-csv", help="Convert an affix CSV to catalog JSON")
    p_imp.add_argument("csv", help="CSV file")
    p_imp.add_argument("--output", "-o", default=None,
                       help="Output JSON file (default: stdout)")

    args = parser.parse_args()

    setup_logging(debug=args.debug)

    cmds = {
        "generate": cmd_generate,
        "simulate": cmd_simulate,
        "loot": cmd_loot,
        "catalog": cmd_catalog,
        "import-csv": cmd_import_csv,
    }
    try:
        cmds[args.command](args)
    except KeyboardInterrupt:
        print("\nInterrupted.")
    except Exception as e:
        logger.critical(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
