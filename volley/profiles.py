"""
Input profiles for a single volley: the weapon, the target, the dice text
the player typed, and the rule toggles in play.

All four are frozen dataclasses. Nothing about a volley persists between
resolutions, so "clearing" the form or "loading the example" just builds
new profiles with the helpers at the bottom of this module. Being frozen
also makes them hashable, which is what lets volley.cache memoize on the
full input tuple.

A stat left as None means the player hasn't entered it yet. The resolver
falls back to a value that can never succeed (7+ to hit, 7+ armor) or to 0,
and volley.status reports the stat as missing.
"""

from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass(frozen=True)
class WeaponProfile:
    """One weapon's profile and keywords."""

    attacks: int | str | None = None
    """An int is a fixed number of attacks. A str is a dice expression
    ("D6", "2D6+1", or "2" meaning 2D6) resolved from the attack rolls.
    None means no attacks have been entered."""

    to_hit: int | None = None
    strength: int | None = None

    ap: int | None = None
    """Armor penetration, zero or negative (AP-2 is stored as -2)."""

    damage: int | str | None = None
    """An int is fixed damage per instance. A str is a dice expression
    rolled once per damage instance ("D6", "D3+1")."""

    crit_hit: int = 6
    crit_wound: int = 6

    torrent: bool = False
    lethal_hits: bool = False
    sustained_hits: bool = False
    sustained_hits_n: int = 1
    devastating_wounds: bool = False
    precision: bool = False
    twin_linked: bool = False
    rapid_fire: bool = False
    rapid_fire_x: int = 0

    hit_mod: int = 0
    wound_mod: int = 0

    @property
    def random_attacks(self) -> bool:
        return isinstance(self.attacks, str)

    @property
    def random_damage(self) -> bool:
        return isinstance(self.damage, str)


@dataclass(frozen=True)
class TargetProfile:
    """The defending unit's profile and defensive abilities."""

    toughness: int | None = None
    armor_save: int | None = None
    invuln: int | None = None
    fnp: int | None = None
    save_mod: int = 0

    in_cover: bool = False
    ignore_ap: bool = False
    ignore_first_failed_save: bool = False
    minus_one_damage: bool = False
    half_damage: bool = False

    leader_attached: bool = False
    """Advisory only: affects the Precision note, never the totals."""

    allocate_precision_to_leader: bool = False


@dataclass(frozen=True)
class DiceInputs:
    """The raw dice text for every phase, exactly as the player typed it."""

    attacks: str = ""
    hits: str = ""
    hit_rerolls: str = ""
    wounds: str = ""
    wound_rerolls: str = ""
    saves: str = ""
    damage: str = ""
    fnp: str = ""


@dataclass(frozen=True)
class RuleFlags:
    """Toggles that aren't part of either profile."""

    reroll_hit_ones: bool = False
    reroll_hit_fails: bool = False
    reroll_wound_ones: bool = False
    reroll_wound_fails: bool = False

    half_range: bool = False
    """Whether the target is within half range, for Rapid Fire."""


EXAMPLE_WEAPON = WeaponProfile(attacks=10, to_hit=3, strength=5, ap=-1, damage=2)
EXAMPLE_TARGET = TargetProfile(toughness=4, armor_save=3)
EXAMPLE_DICE = DiceInputs(
    hits="6 5 5 4 4 3 2 2 1 6",
    wounds="6 5 4 3 2 1 6",
    saves="1 2 4 5 6",
)


def clear_weapon(weapon: WeaponProfile | None = None, preserve_hooks: bool = False) -> WeaponProfile:
    """A blank weapon, optionally keeping the hit and wound modifiers."""
    if preserve_hooks and weapon is not None:
        return WeaponProfile(hit_mod=weapon.hit_mod, wound_mod=weapon.wound_mod)
    return WeaponProfile()


def clear_target(target: TargetProfile | None = None, preserve_hooks: bool = False) -> TargetProfile:
    """A blank target, optionally keeping the save modifier and leader
    settings."""
    if preserve_hooks and target is not None:
        return TargetProfile(
            save_mod=target.save_mod,
            leader_attached=target.leader_attached,
            allocate_precision_to_leader=target.allocate_precision_to_leader,
        )
    return TargetProfile()


def clear_dice() -> DiceInputs:
    return DiceInputs()


def clear_all(
    weapon: WeaponProfile | None = None,
    target: TargetProfile | None = None,
    preserve_hooks: bool = False,
) -> tuple[WeaponProfile, TargetProfile, DiceInputs]:
    """Reset the whole form in one go."""
    return (
        clear_weapon(weapon, preserve_hooks),
        clear_target(target, preserve_hooks),
        clear_dice(),
    )


def load_example(
    weapon: WeaponProfile | None = None,
    target: TargetProfile | None = None,
    preserve_hooks: bool = False,
) -> tuple[WeaponProfile, TargetProfile, DiceInputs]:
    """The canonical worked example: 10 attacks at S5 AP-1 D2 into T4 3+.

    With preserve_hooks the current hit, wound and save modifiers carry
    over into the example.
    """
    new_weapon, new_target = EXAMPLE_WEAPON, EXAMPLE_TARGET
    if preserve_hooks:
        if weapon is not None:
            new_weapon = replace(new_weapon, hit_mod=weapon.hit_mod, wound_mod=weapon.wound_mod)
        if target is not None:
            new_target = replace(new_target, save_mod=target.save_mod)
    return new_weapon, new_target, EXAMPLE_DICE
