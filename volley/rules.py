"""
Target numbers and modifiers for the hit, wound and save rolls.

Every roll in a volley compares an unmodified D6 (plus a modifier) against
a target number. Hit and save modifiers are capped at +1/-1, wound target
numbers come from the Strength vs Toughness table, and no target number is
ever better than 2+.
"""

from __future__ import annotations

from math import ceil


def clamp_mod(mod: int) -> int:
    """Cap a hit or save modifier to the range -1..+1."""
    return max(-1, min(1, mod))


def clamp_min_2plus(target: int) -> int:
    """A roll can never need less than 2+."""
    return max(2, target)


def meets(target: int, unmodified: int, mod: int = 0) -> bool:
    """Whether a die plus its modifier reaches the target number."""
    return unmodified + mod >= target


def wound_target(strength: int, toughness: int) -> int:
    """The wound roll needed for this Strength against this Toughness.

    S >= 2T wounds on a 2+, S > T on a 3+, S = T on a 4+, S > T/2 on a 5+,
    and anything weaker on a 6+.
    """
    if strength >= 2 * toughness:
        return 2
    if strength > toughness:
        return 3
    if strength == toughness:
        return 4
    if strength * 2 > toughness:
        return 5
    return 6


def save_target(
    armor: int,
    ap: int = 0,
    invuln: int | None = None,
    *,
    in_cover: bool = False,
    ignore_ap: bool = False,
) -> int:
    """The save roll needed after cover, AP and an invulnerable save.

    Cover improves the armor save by one step but never past 2+. AP is
    stored as zero or negative, so subtracting it makes the save worse.
    An invulnerable save is used instead whenever it's better, and the
    final number is floored at 2+.
    """
    if in_cover:
        armor = clamp_min_2plus(armor - 1)
    armor_after_ap = armor - (0 if ignore_ap else ap)
    if invuln:
        armor_after_ap = min(armor_after_ap, invuln)
    return clamp_min_2plus(armor_after_ap)


def save_passes(target: int, unmodified: int, mod: int = 0) -> bool:
    """A natural 1 always fails a save, whatever the modifier."""
    return unmodified != 1 and meets(target, unmodified, mod)


def mitigate_damage(damage: int, *, half: bool = False, minus_one: bool = False) -> int:
    """Apply defensive damage reduction to one damage instance.

    The order is fixed: halve (rounding up) first, then subtract 1 without
    going below 1. Zero damage stays zero.
    """
    if damage <= 0:
        return 0
    if half:
        damage = ceil(damage / 2)
    if minus_one:
        damage = max(1, damage - 1)
    return damage
