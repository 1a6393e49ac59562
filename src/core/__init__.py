"""
AffixForge Core - item generation engine.

Usage:
    from core import ItemGenerator, GenerationConfig
    from games.arpg import create_arpg_config

    gen = ItemGenerator(create_arpg_config())
    gen.initialize()
    item = gen.generate_item(item_level=50, rarity_policy="magic", seed=7)
"""

from core.generation_config import GenerationConfig
from core.item_generator import InvalidRequest, ItemGenerator

# Domain types live in the flat modules on sys.path:
#   from generated_item import GeneratedItem
#   from affix_catalog import AffixCatalog
#   from rarity import Rarity, RarityPolicy

__all__ = [
    "ItemGenerator",
    "GenerationConfig",
    "InvalidRequest",
]
