"""
AffixForge - Drop Statistics

Summaries over a batch of generated items, for tuning rarity weights and
catalog tiers.  Used by `main.py simulate`.

    stats = summarize_drops(items)
    print(format_summary(stats))
"""

from dataclasses import dataclass, field
from typing import Dict, List

from affix_templates import ItemFamily, Tier
from rarity import Rarity


@dataclass
class DropSummary:
    count: int = 0
    rarity_share: Dict[str, float] = field(default_factory=dict)
    mean_affixes: float = 0.0
    affix_count_histogram: Dict[int, int] = field(default_factory=dict)
    tier_histogram: Dict[int, int] = field(default_factory=dict)
    mean_tier: float = 0.0
    best_tier: int = 0
    mean_dps: float = 0.0          # weapons only
    top_affixes: List[tuple] = field(default_factory=list)


def summarize_drops(items: list, top_n: int = 10) -> DropSummary:
    """Aggregate rarity, affix-count, tier and DPS statistics."""
    import numpy as np

    items = [it for it in items if it is not None]
    n = len(items)
    if n == 0:
        return DropSummary()

    counts = np.array([len(it.prefixes) + len(it.suffixes) for it in items],
                      dtype=np.int64)
    tiers = np.array([int(a.template.tier) for it in items for a in it.affixes],
                     dtype=np.int64)
    dps = np.array([it.dps() for it in items if it.base.family is ItemFamily.WEAPON],
                   dtype=np.float64)

    rarities = [it.calculated_rarity() for it in items]
    rarity_share = {r.value: round(rarities.count(r) / n, 4) for r in Rarity}

    values, freq = np.unique(counts, return_counts=True)
    count_hist = {int(v): int(f) for v, f in zip(values, freq)}

    tier_hist = {int(t): 0 for t in Tier}
    if tiers.size:
        t_values, t_freq = np.unique(tiers, return_counts=True)
        tier_hist.update({int(v): int(f) for v, f in zip(t_values, t_freq)})

    names: Dict[str, int] = {}
    for it in items:
        for a in it.affixes:
            names[a.subcategory] = names.get(a.subcategory, 0) + 1
    top = sorted(names.items(), key=lambda kv: (-kv[1], kv[0]))[:top_n]

    return DropSummary(
        count=n,
        rarity_share=rarity_share,
        mean_affixes=round(float(np.mean(counts)), 3),
        affix_count_histogram=count_hist,
        tier_histogram=tier_hist,
        mean_tier=round(float(np.mean(tiers)), 3) if tiers.size else 0.0,
        best_tier=int(np.min(tiers)) if tiers.size else 0,
        mean_dps=round(float(np.mean(dps)), 1) if dps.size else 0.0,
        top_affixes=top,
    )


def format_summary(s: DropSummary) -> str:
    if s.count == 0:
        return "No items."
    lines = [f"Items: {s.count}"]
    lines.append("Rarity: " + ", ".join(
        f"{k} {v * 100:.1f}%" for k, v in s.rarity_share.items()))
    lines.append(f"Affixes per item: {s.mean_affixes:.2f} "
                 f"(histogram {dict(sorted(s.affix_count_histogram.items()))})")
    if s.best_tier:
        lines.append(f"Tiers: best T{s.best_tier}, mean {s.mean_tier:.2f}")
        lines.append("  " + "  ".join(
            f"T{t}:{c}" for t, c in sorted(s.tier_histogram.items())))
    if s.mean_dps:
        lines.append(f"Weapon DPS (mean): {s.mean_dps:.1f}")
    if s.top_affixes:
        lines.append("Most common affixes:")
        for name, c in s.top_affixes:
            lines.append(f"  {c:5d}  {name}")
    return "\n".join(lines)
