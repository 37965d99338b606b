"""Tests for UI helper functions (stat parsing, profile building)."""

from __future__ import annotations

from dataclasses import replace

from volley.profiles import EXAMPLE_DICE, EXAMPLE_TARGET, EXAMPLE_WEAPON, DiceInputs, TargetProfile, WeaponProfile
from volley.split import split_volley

from ui.app import build_target, build_weapon, defense_needs, parse_stat, target_config, weapon_config


class TestParseStat:
    def test_number(self) -> None:
        assert parse_stat("4") == 4
        assert parse_stat(" -1 ") == -1

    def test_blank_is_missing(self) -> None:
        assert parse_stat("") is None
        assert parse_stat(None) is None

    def test_garbage_is_missing(self) -> None:
        assert parse_stat("3+") is None


def _weapon_config(**overrides: object) -> dict:
    config: dict = {
        "random_attacks": False,
        "attacks": "10",
        "to_hit": "3",
        "strength": "5",
        "ap": "-1",
        "random_damage": False,
        "damage": "2",
    }
    config.update(overrides)
    return config


class TestBuildWeapon:
    def test_fixed_stats(self) -> None:
        w = build_weapon(_weapon_config())
        assert w == EXAMPLE_WEAPON

    def test_random_attacks_kept_as_expression(self) -> None:
        w = build_weapon(_weapon_config(random_attacks=True, attacks=" 2D6 "))
        assert w.attacks == "2D6"
        assert w.random_attacks

    def test_random_damage_kept_as_expression(self) -> None:
        w = build_weapon(_weapon_config(random_damage=True, damage="D3+1"))
        assert w.damage == "D3+1"

    def test_blank_stats_are_missing(self) -> None:
        w = build_weapon(_weapon_config(attacks="", to_hit="", damage=""))
        assert w.attacks is None
        assert w.to_hit is None
        assert w.damage is None

    def test_flags(self) -> None:
        w = build_weapon(_weapon_config(torrent=True, sustained_hits=True, sustained_hits_n=2))
        assert w.torrent
        assert w.sustained_hits
        assert w.sustained_hits_n == 2
        assert not w.lethal_hits

    def test_round_trip(self) -> None:
        weapon = WeaponProfile(attacks="D6", to_hit=4, strength=8, ap=-2, damage="D3", lethal_hits=True, hit_mod=-1)
        assert build_weapon(weapon_config(weapon)) == weapon


class TestBuildTarget:
    def test_stats(self) -> None:
        t = build_target({"toughness": "4", "armor_save": "3"})
        assert t == EXAMPLE_TARGET

    def test_fnp_needs_checkbox(self) -> None:
        """The FNP value box is ignored until FNP is switched on."""
        assert build_target({"toughness": "4", "armor_save": "3", "fnp": "5"}).fnp is None
        assert build_target({"toughness": "4", "armor_save": "3", "fnp": "5", "fnp_enabled": True}).fnp == 5

    def test_defensive_flags(self) -> None:
        t = build_target({"toughness": "4", "armor_save": "3", "in_cover": True, "half_damage": True})
        assert t.in_cover
        assert t.half_damage
        assert not t.ignore_ap

    def test_round_trip(self) -> None:
        target = TargetProfile(toughness=5, armor_save=2, invuln=4, fnp=6, save_mod=1, leader_attached=True)
        assert build_target(target_config(target)) == target


class TestDefenseNeeds:
    """Split-volley dice boxes ask for each target's own share."""

    def test_per_target_counts(self) -> None:
        weapon = replace(EXAMPLE_WEAPON, damage="D3")
        target_b = TargetProfile(toughness=5, armor_save=2, fnp=5)
        outcome = split_volley(
            weapon, EXAMPLE_TARGET, replace(EXAMPLE_DICE, saves="1 2 4"),
            target_b, DiceInputs(saves="1 6", damage="3"), 3,
        )
        assert defense_needs(outcome.targets["A"]) == {"saves": 3, "damage": 2, "fnp": 0}
        assert defense_needs(outcome.targets["B"]) == {"saves": 2, "damage": 1, "fnp": 3}

    def test_nothing_allocated(self) -> None:
        outcome = split_volley(EXAMPLE_WEAPON, EXAMPLE_TARGET, EXAMPLE_DICE, EXAMPLE_TARGET, DiceInputs(), 5)
        assert defense_needs(outcome.targets["B"]) == {"saves": 0, "damage": 0, "fnp": 0}
