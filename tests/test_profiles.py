"""Tests for input profiles and the clear / load-example helpers."""

from __future__ import annotations

import dataclasses

import pytest

from volley.profiles import (
    EXAMPLE_DICE,
    EXAMPLE_TARGET,
    EXAMPLE_WEAPON,
    DiceInputs,
    TargetProfile,
    WeaponProfile,
    clear_all,
    clear_dice,
    clear_target,
    clear_weapon,
    load_example,
)

HOOKED_WEAPON = WeaponProfile(attacks=4, to_hit=2, strength=9, hit_mod=-1, wound_mod=1, lethal_hits=True)
HOOKED_TARGET = TargetProfile(toughness=6, save_mod=1, in_cover=True, leader_attached=True, allocate_precision_to_leader=True)


class TestProfiles:
    def test_frozen(self) -> None:
        with pytest.raises(dataclasses.FrozenInstanceError):
            EXAMPLE_WEAPON.attacks = 3  # type: ignore[misc]

    def test_hashable(self) -> None:
        assert hash(WeaponProfile(attacks=3)) == hash(WeaponProfile(attacks=3))
        assert len({EXAMPLE_DICE, DiceInputs(**dataclasses.asdict(EXAMPLE_DICE))}) == 1

    def test_random_stats(self) -> None:
        assert WeaponProfile(attacks="D6").random_attacks
        assert not WeaponProfile(attacks=6).random_attacks
        assert not WeaponProfile().random_attacks
        assert WeaponProfile(damage="D3+1").random_damage

    def test_defaults(self) -> None:
        w = WeaponProfile()
        assert (w.crit_hit, w.crit_wound, w.sustained_hits_n) == (6, 6, 1)


class TestClear:
    def test_clear_weapon(self) -> None:
        assert clear_weapon(HOOKED_WEAPON) == WeaponProfile()

    def test_clear_weapon_preserving_hooks(self) -> None:
        w = clear_weapon(HOOKED_WEAPON, preserve_hooks=True)
        assert (w.hit_mod, w.wound_mod) == (-1, 1)
        assert w.attacks is None
        assert not w.lethal_hits

    def test_clear_target_preserving_hooks(self) -> None:
        t = clear_target(HOOKED_TARGET, preserve_hooks=True)
        assert t.save_mod == 1
        assert t.leader_attached
        assert t.allocate_precision_to_leader
        assert t.toughness is None
        assert not t.in_cover

    def test_clear_all(self) -> None:
        assert clear_all(HOOKED_WEAPON, HOOKED_TARGET) == (WeaponProfile(), TargetProfile(), DiceInputs())

    def test_clear_dice(self) -> None:
        assert clear_dice() == DiceInputs()


class TestLoadExample:
    def test_example(self) -> None:
        assert load_example() == (EXAMPLE_WEAPON, EXAMPLE_TARGET, EXAMPLE_DICE)

    def test_replaces_current_profiles(self) -> None:
        weapon, target, _ = load_example(HOOKED_WEAPON, HOOKED_TARGET)
        assert weapon == EXAMPLE_WEAPON
        assert target == EXAMPLE_TARGET

    def test_preserving_hooks_keeps_modifiers(self) -> None:
        weapon, target, dice = load_example(HOOKED_WEAPON, HOOKED_TARGET, preserve_hooks=True)
        assert (weapon.hit_mod, weapon.wound_mod) == (-1, 1)
        assert target.save_mod == 1
        assert weapon.attacks == 10
        assert not target.in_cover
        assert dice == EXAMPLE_DICE
