"""Tests for the tag-subset and dead-stat compatibility checks."""

import pytest

from affix_templates import DamageType, ItemFamily, ModifierKind, ModifierScope
from conftest import (
    make_armour, make_jewellery, make_mod, make_template, make_weapon,
)

LOCAL, GLOBAL = ModifierScope.LOCAL, ModifierScope.GLOBAL
INC, FLAT = ModifierKind.INCREASED, ModifierKind.FLAT


# ── Tag layer ────────────────────────────────────────

class TestTags:
    def test_subset_required(self):
        from compatibility import tags_match
        sword = make_weapon()
        wand = make_weapon("Wand", tags=("weapon", "ranged", "caster", "spell", "wand"))
        caster_only = make_template(tags=("weapon", "caster"))
        assert not tags_match(sword, caster_only)
        assert tags_match(wand, caster_only)

    def test_empty_tags_never_match(self):
        from compatibility import tags_match
        assert not tags_match(make_weapon(), make_template(tags=()))

    def test_extra_item_tags_are_fine(self):
        from compatibility import tags_match
        assert tags_match(make_weapon(), make_template(tags=("weapon",)))

    @pytest.mark.parametrize("tag,stats,expected", [
        ("energyshield_base", dict(energy_shield=20), True),
        ("energyshield_base", dict(armour=20), False),
        ("armour_base", dict(armour=20), True),
        ("evasion_base", dict(armour=20, evasion=1), True),
        ("evasion_base", dict(), False),
    ])
    def test_magnitude_tags(self, tag, stats, expected):
        from compatibility import has_tag
        assert has_tag(make_armour(**stats), tag) is expected

    def test_magnitude_tag_on_weapon(self):
        from compatibility import has_tag
        assert not has_tag(make_weapon(), "armour_base")


# ── Dead-stat layer ──────────────────────────────────

class TestDeadStats:
    def test_energy_shield_needs_base(self):
        from compatibility import dead_stat_reason
        mod = make_mod("energy_shield", 15, 26, INC, LOCAL)
        assert dead_stat_reason(make_armour(armour=40), mod) == "no base energy shield"
        assert dead_stat_reason(make_armour(energy_shield=20), mod) is None

    def test_global_defence_on_armour_still_needs_base(self):
        from compatibility import dead_stat_reason
        mod = make_mod("energy_shield", 10, 20, FLAT, GLOBAL)
        assert dead_stat_reason(make_armour(evasion=30), mod) is not None

    def test_global_defence_on_jewellery_allowed(self):
        from compatibility import dead_stat_reason
        mod = make_mod("energy_shield", 10, 20, FLAT, GLOBAL)
        assert dead_stat_reason(make_jewellery(), mod) is None

    def test_block_needs_shield(self):
        from compatibility import dead_stat_reason
        mod = make_mod("block_chance", 2, 4, FLAT, LOCAL)
        assert dead_stat_reason(make_armour(armour=40), mod) == "block on a non-shield"
        shield = make_armour("Tower", tags=("armour", "shield"), armour=40, block=24)
        assert dead_stat_reason(shield, mod) is None

    @pytest.mark.parametrize("stat,kind", [
        ("physical_damage", INC),
        ("fire_damage", FLAT),
        ("attack_speed", INC),
    ])
    def test_local_weapon_stats_need_weapon(self, stat, kind):
        from compatibility import dead_stat_reason
        mod = make_mod(stat, 5, 10, kind, LOCAL)
        assert dead_stat_reason(make_jewellery(), mod) is not None
        assert dead_stat_reason(make_armour(armour=10), mod) is not None
        assert dead_stat_reason(make_weapon(), mod) is None

    @pytest.mark.parametrize("kind", [INC, ModifierKind.MORE, ModifierKind.REDUCED])
    def test_scaling_needs_base_damage_of_that_type(self, kind):
        from compatibility import dead_stat_reason
        sceptre = make_weapon("Sceptre", damage=(10, 18), damage_type=DamageType.FIRE)
        phys = make_mod("physical_damage", 15, 19, kind, LOCAL)
        fire = make_mod("fire_damage", 15, 19, kind, LOCAL)
        assert dead_stat_reason(sceptre, phys) == "no base physical_damage to scale"
        assert dead_stat_reason(sceptre, fire) is None
        assert dead_stat_reason(make_weapon(), fire) == "no base fire_damage to scale"

    def test_flat_damage_needs_no_base(self):
        from compatibility import dead_stat_reason
        sceptre = make_weapon("Sceptre", damage=(10, 18), damage_type=DamageType.FIRE)
        mod = make_mod("physical_damage", 1, 2, FLAT, LOCAL, secondary=(3, 4))
        assert dead_stat_reason(sceptre, mod) is None

    def test_flat_sibling_gives_scaling_a_base(self):
        from compatibility import dead_stat_reason
        sceptre = make_weapon("Sceptre", damage=(10, 18), damage_type=DamageType.FIRE)
        inc = make_mod("physical_damage", 20, 25, INC, LOCAL)
        tmpl = make_template(mods=[
            make_mod("physical_damage", 3, 4, FLAT, LOCAL, secondary=(6, 8)), inc])
        assert dead_stat_reason(sceptre, inc, tmpl) is None
        assert dead_stat_reason(sceptre, inc) is not None

    def test_local_crit_needs_base_crit(self):
        from compatibility import dead_stat_reason
        mod = make_mod("critical_chance", 10, 14, INC, LOCAL)
        assert dead_stat_reason(make_weapon(crit=0.0), mod) is not None
        assert dead_stat_reason(make_weapon(crit=5.0), mod) is None

    def test_local_cast_speed_needs_spell_weapon(self):
        from compatibility import dead_stat_reason
        mod = make_mod("cast_speed", 10, 14, INC, LOCAL)
        assert dead_stat_reason(make_weapon(), mod) is not None
        wand = make_weapon("Wand", tags=("weapon", "caster", "spell", "wand"))
        assert dead_stat_reason(wand, mod) is None

    def test_local_defence_on_weapon(self):
        from compatibility import dead_stat_reason
        mod = make_mod("armour", 10, 20, INC, LOCAL)
        assert "non-armour" in dead_stat_reason(make_weapon(), mod)

    @pytest.mark.parametrize("stat", [
        "fire_damage", "physical_damage", "attack_speed", "cast_speed",
        "critical_chance",
    ])
    def test_global_offence_rejected_on_weapon(self, stat):
        from compatibility import dead_stat_reason
        mod = make_mod(stat, 1, 2, FLAT, GLOBAL)
        assert dead_stat_reason(make_weapon(), mod) == f"global {stat} on a weapon"
        assert dead_stat_reason(make_jewellery(), mod) is None

    @pytest.mark.parametrize("stat", ["strength", "spell_damage", "critical_multiplier"])
    def test_other_globals_allowed_on_weapon(self, stat):
        from compatibility import dead_stat_reason
        assert dead_stat_reason(make_weapon(), make_mod(stat, 1, 2, FLAT, GLOBAL)) is None


class TestIsCompatible:
    def test_both_layers_must_pass(self):
        from compatibility import is_compatible
        tmpl = make_template(tags=("armour",),
                             mods=[make_mod("energy_shield", 15, 26, INC, LOCAL)])
        assert not is_compatible(make_armour(armour=40), tmpl)
        assert is_compatible(make_armour(energy_shield=20), tmpl)
        assert not is_compatible(make_weapon(), tmpl)

    def test_increased_physical_on_fire_weapon(self):
        from compatibility import is_compatible
        sceptre = make_weapon("Sceptre", damage=(10, 18), damage_type=DamageType.FIRE)
        tmpl = make_template(mods=[make_mod("physical_damage", 15, 19, INC, LOCAL)])
        assert not is_compatible(sceptre, tmpl)
        assert is_compatible(make_weapon(), tmpl)

    def test_hybrid_fails_if_any_modifier_dead(self):
        from compatibility import is_compatible
        tmpl = make_template(tags=("armour",), mods=[
            make_mod("armour", 6, 13, INC, LOCAL),
            make_mod("maximum_life", 7, 10, FLAT, GLOBAL),
        ])
        assert is_compatible(make_armour(armour=40), tmpl)
        assert not is_compatible(make_armour(evasion=40), tmpl)


class TestCompatibleFamilies:
    def test_families_from_tags(self):
        from compatibility import compatible_families
        assert compatible_families(make_template(tags=("weapon", "caster"))) == [
            ItemFamily.WEAPON]
        assert compatible_families(make_template(tags=("armour", "shield"))) == [
            ItemFamily.ARMOUR]
        assert compatible_families(make_template(tags=("weapon", "ring"))) == []
