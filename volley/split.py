"""
Split volleys: one weapon's fire divided between two targets.

The attacks, hits and wounds are rolled once, against target A's
Toughness. The savable wounds that come out of that are shared: the player
declares how many go to target A and the rest go to target B. Each target
then makes its own saves, takes its own damage and rolls its own Feel No
Pain, using its own profile and its own dice.

Mortal wounds from Devastating Wounds are not divided. All of them land on
a single target (A unless told otherwise), because datasheets don't agree
on how mixed savable and mortal damage should be split.
"""

from __future__ import annotations

from volley.engine import Resolver, default_resolver
from volley.profiles import DiceInputs, RuleFlags, TargetProfile, WeaponProfile
from volley.records import OffenseOutcome, SplitResult
from volley.types import TargetLabel

LABELS: tuple[TargetLabel, TargetLabel] = ("A", "B")


def allocate_wounds(savable_wounds: int, to_a: int) -> dict[TargetLabel, int]:
    """Clamp target A's share to [0, savable_wounds]; B gets the rest."""
    savable_wounds = max(0, savable_wounds)
    a = max(0, min(to_a, savable_wounds))
    return {"A": a, "B": savable_wounds - a}


def allocate(
    offense: OffenseOutcome,
    weapon: WeaponProfile,
    targets: dict[TargetLabel, tuple[TargetProfile, DiceInputs]],
    to_a: int,
    mortal_target: TargetLabel = "A",
    resolver: Resolver | None = None,
) -> SplitResult:
    """Run the defensive tail once per target from an already resolved
    offense."""
    if mortal_target not in LABELS:
        raise ValueError(f"unknown split target: {mortal_target!r}")
    if set(targets) != set(LABELS):
        raise ValueError(f"split volleys need exactly targets A and B, got {sorted(targets)}")

    resolver = resolver or default_resolver
    devastating = offense.devastating
    allocated = allocate_wounds(devastating.savable_wounds, to_a)

    outcomes = {}
    for label in LABELS:
        profile, dice = targets[label]
        mortal = devastating.mortal_wound_attacks if label == mortal_target else 0
        outcomes[label] = resolver.defense(allocated[label], mortal, weapon, profile, dice, label)

    log = list(offense.log)
    log.append(
        f"Split volley: {allocated['A']} savable wounds to Target A, {allocated['B']} to Target B"
        + (f", {devastating.mortal_wound_attacks} mortal wounds to Target {mortal_target}"
           if devastating.mortal_wound_attacks else "")
    )
    errors = list(offense.errors)
    for label in LABELS:
        log.extend(outcomes[label].log)
        errors.extend(outcomes[label].errors)

    return SplitResult(
        offense=offense,
        allocated=allocated,
        mortal_target=mortal_target,
        targets=outcomes,
        log=tuple(log),
        errors=tuple(errors),
    )


def split_volley(
    weapon: WeaponProfile,
    target_a: TargetProfile,
    dice_a: DiceInputs,
    target_b: TargetProfile,
    dice_b: DiceInputs,
    to_a: int,
    flags: RuleFlags | None = None,
    mortal_target: TargetLabel = "A",
) -> SplitResult:
    """Resolve a volley split between two targets.

    ``dice_a`` carries the shared attack, hit and wound dice as well as
    target A's save, damage and FNP dice; only the last three are read
    from ``dice_b``.
    """
    offense = default_resolver.offense(weapon, target_a, dice_a, flags or RuleFlags())
    return allocate(offense, weapon, {"A": (target_a, dice_a), "B": (target_b, dice_b)}, to_a, mortal_target)
