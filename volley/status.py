"""
Readiness reporting for the calling layer.

The resolver always returns a best-effort result, even from a half-filled
form. Whether those numbers are worth showing is the caller's policy, and
this module holds it: how many dice each phase still needs, which stats
are missing, whether the volley is Ready, and what to show in "strict
mode", where totals stay locked until every phase has the right dice.
"""

from __future__ import annotations

from dataclasses import dataclass

from volley.dice import parse_dice_list, parse_dice_spec
from volley.profiles import DiceInputs, TargetProfile, WeaponProfile
from volley.records import ResolutionResult
from volley.types import PhaseName, Readiness


@dataclass(frozen=True)
class DiceCounter:
    """Dice needed vs entered for one phase."""

    phase: PhaseName
    needed: int
    entered: int
    checked: bool = True
    """Whether a wrong count blocks readiness. Phases that don't consume
    dice (Torrent hits, fixed damage, no FNP, no eligible rerolls) aren't
    checked."""

    @property
    def remaining(self) -> int:
        return max(0, self.needed - self.entered)

    @property
    def mismatch(self) -> bool:
        return self.checked and self.entered != self.needed


@dataclass(frozen=True)
class DisplayTotals:
    """The damage figures a UI should show, after the strict-mode policy."""

    total_post_fnp: int
    total_pre_fnp: int
    normal_damage: int
    mortal_damage: int
    ignored_total: int
    label: str
    note: str | None = None


@dataclass(frozen=True)
class Assessment:
    counters: dict[PhaseName, DiceCounter]
    missing_stats: list[str]
    status: Readiness
    totals: DisplayTotals


def dice_counters(weapon: WeaponProfile, dice: DiceInputs, result: ResolutionResult) -> dict[PhaseName, DiceCounter]:
    """How many dice each phase wants, read off the latest result."""
    def entered(text: str) -> int:
        return len(parse_dice_list(text))

    attack_spec = parse_dice_spec(weapon.attacks) if weapon.random_attacks else None
    counters = [
        DiceCounter("attacks", attack_spec.n if attack_spec else 0, entered(dice.attacks), checked=attack_spec is not None),
        DiceCounter("hits", 0 if weapon.torrent else result.attacks, entered(dice.hits), checked=not weapon.torrent),
        DiceCounter(
            "hit_rerolls", result.hit_rerolls_needed, entered(dice.hit_rerolls),
            checked=result.hit_rerolls_needed > 0,
        ),
        DiceCounter("wounds", result.wound_roll_pool, entered(dice.wounds)),
        DiceCounter(
            "wound_rerolls", result.wound_rerolls_needed, entered(dice.wound_rerolls),
            checked=result.wound_rerolls_needed > 0,
        ),
        DiceCounter("saves", result.savable_wounds, entered(dice.saves)),
        DiceCounter(
            "damage", result.damage_dice_needed, entered(dice.damage),
            checked=weapon.random_damage and result.damage_dice_needed > 0,
        ),
        DiceCounter("fnp", result.fnp_needed, entered(dice.fnp), checked=result.fnp_needed > 0),
    ]
    return {c.phase: c for c in counters}


def missing_stats(
    weapon: WeaponProfile,
    target: TargetProfile,
    dice: DiceInputs,
    result: ResolutionResult | None = None,
) -> list[str]:
    """Names of the profile fields the player still has to fill in.

    Given the latest result, damage rolls only count as missing when some
    damage dice are actually needed.
    """
    missing = []
    if weapon.random_attacks:
        if not parse_dice_list(dice.attacks):
            missing.append("Attacks rolls")
    elif weapon.attacks is None:
        missing.append("Attacks (fixed)")
    if weapon.to_hit is None:
        missing.append("To Hit")
    if weapon.strength is None:
        missing.append("Strength")
    if weapon.ap is None:
        missing.append("AP")
    if weapon.random_damage:
        needs_dice = result is None or result.damage_dice_needed > 0
        if needs_dice and not dice.damage.strip():
            missing.append("Damage rolls")
    elif weapon.damage is None:
        missing.append("Damage")
    if target.toughness is None:
        missing.append("Toughness")
    if target.armor_save is None:
        missing.append("Armor save")
    return missing


def readiness(missing: list[str], counters: dict[PhaseName, DiceCounter], result: ResolutionResult) -> Readiness:
    if missing:
        return "Waiting for stats"
    if result.errors or any(c.mismatch for c in counters.values()):
        return "Waiting for dice"
    return "Ready"


def display_totals(result: ResolutionResult, status: Readiness, strict: bool = False) -> DisplayTotals:
    """Apply the strict-mode policy to the result's damage totals.

    Outside strict mode unfinished totals are shown as a soft total. In
    strict mode they read zero until the volley is Ready.
    """
    ready = status == "Ready"
    if strict and not ready:
        return DisplayTotals(
            total_post_fnp=0, total_pre_fnp=0, normal_damage=0, mortal_damage=0, ignored_total=0,
            label="Total Damage (LOCKED)",
            note="STRICT MODE: totals locked until Ready",
        )

    note = None
    label = "Total Damage"
    if not ready:
        label = "Potential Damage (SOFT TOTAL)"
        note = "SOFT TOTAL: missing stats" if status == "Waiting for stats" else "SOFT TOTAL: missing dice"
    return DisplayTotals(
        total_post_fnp=result.total_post_fnp,
        total_pre_fnp=result.total_pre_fnp,
        normal_damage=result.normal_damage,
        mortal_damage=result.mortal_damage,
        ignored_total=result.fnp_ignored + result.ignored_by_rule,
        label=label,
        note=note,
    )


def assess(
    weapon: WeaponProfile,
    target: TargetProfile,
    dice: DiceInputs,
    result: ResolutionResult,
    strict: bool = False,
) -> Assessment:
    """Everything a UI needs to prompt for the next dice and show totals."""
    counters = dice_counters(weapon, dice, result)
    missing = missing_stats(weapon, target, dice, result)
    status = readiness(missing, counters, result)
    return Assessment(counters=counters, missing_stats=missing, status=status, totals=display_totals(result, status, strict))
