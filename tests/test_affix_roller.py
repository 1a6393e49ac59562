"""Tests for candidate pools and per-side affix rolling."""

import random

from affix_templates import AffixSlot, ItemFamily, ModifierKind, ModifierScope, Tier
from conftest import make_armour, make_catalog, make_mod, make_template, make_weapon


# ── Helpers ──────────────────────────────────────────

def _group_keys(affixes):
    return [a.group_key for a in affixes]


class TestCandidatePool:
    def test_level_one_only_lowest_tier(self, small_catalog):
        from affix_roller import build_candidate_pool
        pool = build_candidate_pool(make_weapon(), 1, AffixSlot.PREFIX, small_catalog)
        assert sorted(e.template.name for e in pool) == ["AddFire T9", "IncPhys T9"]

    def test_level_eighty_everything_for_family(self, small_catalog):
        from affix_roller import build_candidate_pool
        pool = build_candidate_pool(make_weapon(), 80, AffixSlot.PREFIX, small_catalog)
        assert len(pool) == len(small_catalog.entries(ItemFamily.WEAPON, AffixSlot.PREFIX))

    def test_dead_stats_filtered(self, small_catalog):
        from affix_roller import build_candidate_pool
        vest = make_armour(armour=40)
        pool = build_candidate_pool(vest, 80, AffixSlot.PREFIX, small_catalog)
        names = {e.subcategory for e in pool}
        assert "Increased Armour" in names
        assert "Increased Energy Shield" not in names

    def test_custom_thresholds(self, small_catalog):
        from affix_roller import build_candidate_pool
        pool = build_candidate_pool(make_weapon(), 1, AffixSlot.PREFIX, small_catalog,
                                    thresholds=[(1, 1)])
        assert any(e.template.tier is Tier.T1 for e in pool)


class TestBundledPools:
    """Candidate pools over the shipped catalog and bases."""

    def test_fire_sceptre_gets_no_physical_scaling(self, bundled_catalog, bundled_bases):
        from affix_roller import build_candidate_pool
        from base_items import find_base
        sceptre = find_base(bundled_bases, "Ember Sceptre")
        pool = build_candidate_pool(sceptre, 80, AffixSlot.PREFIX, bundled_catalog)
        subs = {e.subcategory for e in pool}
        assert "Increased Physical Damage" not in subs
        assert "Physical Damage and Accuracy" not in subs
        assert "Added Physical Damage" in subs
        assert "Added Fire Damage" in subs

    def test_physical_sword_keeps_physical_scaling(self, bundled_catalog, bundled_bases):
        from affix_roller import build_candidate_pool
        from base_items import find_base
        sword = find_base(bundled_bases, "Broad Sword")
        pool = build_candidate_pool(sword, 80, AffixSlot.PREFIX, bundled_catalog)
        assert "Increased Physical Damage" in {e.subcategory for e in pool}

    def test_every_pooled_modifier_is_live(self, bundled_catalog, bundled_bases):
        from affix_roller import RolledAffix, build_candidate_pool
        from compatibility import dead_stat_reason
        from generated_item import GeneratedItem
        from range_roller import RolledModifier

        checked = 0
        for base in bundled_bases:
            bare = GeneratedItem(base, 80)
            for slot in AffixSlot:
                for entry in build_candidate_pool(base, 80, slot, bundled_catalog):
                    tmpl = entry.template
                    mods = []
                    for mod in tmpl.modifiers:
                        assert dead_stat_reason(base, mod, tmpl) is None, (
                            f"{tmpl.name} on {base.name}")
                        secondary = mod.secondary_range[0] if mod.secondary_range else None
                        mods.append(RolledModifier(mod, mod.value_range[0], secondary))

                    # Lowest roll of every local modifier must move the item's stat
                    item = GeneratedItem(base, 80, prefixes=[
                        RolledAffix(tmpl, entry.category, entry.subcategory, tuple(mods))])
                    for mod in tmpl.modifiers:
                        if mod.scope is not ModifierScope.LOCAL or mod.stat_name == "cast_speed":
                            continue
                        assert item.stat_range(mod.stat_name) != bare.stat_range(mod.stat_name), (
                            f"{tmpl.name} ({mod.stat_name}) does nothing on {base.name}")
                    checked += 1
        assert checked > 0


class TestRollSide:
    def test_one_per_subcategory(self, small_catalog):
        from affix_roller import build_candidate_pool, roll_side
        pool = build_candidate_pool(make_weapon(), 80, AffixSlot.PREFIX, small_catalog)
        for seed in range(100):
            rolled = roll_side(pool, 3, random.Random(seed))
            keys = _group_keys(rolled)
            assert len(rolled) == 3
            assert len(set(keys)) == 3

    def test_stops_when_pool_runs_dry(self, small_catalog):
        from affix_roller import build_candidate_pool, roll_side
        pool = build_candidate_pool(make_weapon(), 1, AffixSlot.PREFIX, small_catalog)
        assert len(roll_side(pool, 3, random.Random(0))) == 2

    def test_empty_pool(self):
        from affix_roller import roll_side
        assert roll_side([], 3, random.Random(0)) == []

    def test_weight_bias(self):
        """A 999:1 weight split favours the heavy template."""
        from affix_roller import build_candidate_pool, roll_side
        catalog = make_catalog({
            (ItemFamily.WEAPON, AffixSlot.PREFIX, "Cat", "Heavy"): [
                make_template("Heavy", weight=999)],
            (ItemFamily.WEAPON, AffixSlot.PREFIX, "Cat", "Light"): [
                make_template("Light", weight=1)],
        })
        pool = build_candidate_pool(make_weapon(), 80, AffixSlot.PREFIX, catalog)
        rng = random.Random(8)
        picks = [roll_side(pool, 1, rng)[0].name for _ in range(1000)]
        assert picks.count("Heavy") > 950

    def test_values_within_template_range(self, small_catalog):
        from affix_roller import build_candidate_pool, roll_side
        pool = build_candidate_pool(make_weapon(), 80, AffixSlot.SUFFIX, small_catalog)
        for seed in range(50):
            for affix in roll_side(pool, 3, random.Random(seed)):
                for mod in affix.modifiers:
                    lo, hi = mod.template.value_range
                    assert lo <= mod.value <= hi


class TestRollAffixes:
    def test_tiers_respect_item_level(self, small_catalog):
        from affix_roller import roll_affixes
        from tier_gate import max_tier_for
        sword = make_weapon()
        best = max_tier_for(50)
        for seed in range(50):
            prefixes, suffixes = roll_affixes(sword, 50, 3, 3, small_catalog,
                                              random.Random(seed))
            assert all(a.template.tier >= best for a in prefixes + suffixes)
            assert all(a.slot is AffixSlot.PREFIX for a in prefixes)
            assert all(a.slot is AffixSlot.SUFFIX for a in suffixes)

    def test_zero_counts(self, small_catalog):
        from affix_roller import roll_affixes
        assert roll_affixes(make_weapon(), 80, 0, 0, small_catalog,
                            random.Random(0)) == ([], [])

    def test_no_energy_shield_on_zero_es_base(self, small_catalog):
        from affix_roller import roll_affixes
        vest = make_armour(armour=40)
        for seed in range(100):
            prefixes, suffixes = roll_affixes(vest, 80, 3, 3, small_catalog,
                                              random.Random(seed))
            stats = {m.stat_name for a in prefixes + suffixes for m in a.modifiers}
            assert "energy_shield" not in stats
            assert "block_chance" not in stats

    def test_same_seed_same_affixes(self, small_catalog):
        from affix_roller import roll_affixes
        sword = make_weapon()
        a = roll_affixes(sword, 70, 3, 3, small_catalog, random.Random(99))
        b = roll_affixes(sword, 70, 3, 3, small_catalog, random.Random(99))
        assert a == b


class TestReroll:
    def test_keeps_template(self, small_catalog):
        from affix_roller import build_candidate_pool, reroll_affix, roll_side
        pool = build_candidate_pool(make_weapon(), 80, AffixSlot.PREFIX, small_catalog)
        original = roll_side(pool, 1, random.Random(4))[0]
        fresh = reroll_affix(original, random.Random(5))
        assert fresh.template is original.template
        assert fresh.group_key == original.group_key
        for mod in fresh.modifiers:
            lo, hi = mod.template.value_range
            assert lo <= mod.value <= hi

    def test_to_dict(self):
        from affix_catalog import CatalogEntry
        from affix_roller import roll_affix
        tmpl = make_template("Heavy", tier=4, mods=[
            make_mod("physical_damage", 40, 49, ModifierKind.INCREASED,
                     ModifierScope.LOCAL)])
        rolled = roll_affix(CatalogEntry("Physical", "Increased Physical Damage", tmpl),
                            random.Random(1))
        d = rolled.to_dict()
        assert d["name"] == "Heavy"
        assert d["tier"] == 4
        assert d["subcategory"] == "Increased Physical Damage"
        assert 40 <= d["modifiers"][0]["value"] <= 49
