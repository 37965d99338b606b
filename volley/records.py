"""Structured records for a resolved volley.

Each phase of the resolver fills in one of these dataclasses: the
individual dice it consumed, what the rerolls replaced, and the counts it
handed to the next phase. The TextRenderer turns them into the step log,
and the UI reads the flat numbers off ResolutionResult.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from volley.dice import DiceSpec
from volley.types import RerollMode, TargetLabel


@dataclass
class DieRoll:
    """A single die entered for a hit, wound or save roll."""

    face: int | float
    """The value the player entered (after any reroll substitution)."""

    valid: bool
    """Whether face is a legal D6 result. Invalid dice are skipped."""

    success: bool = False
    crit: bool = False

    rerolled_from: int | float | None = None
    """The original face when this die was replaced by a reroll."""


@dataclass
class Tally:
    """Success and critical counts for one pass over a pool of dice."""

    successes: int = 0
    crits: int = 0
    sustained_extra: int = 0
    lethal: int = 0
    precision: int = 0


@dataclass
class RerollRecord:
    """A reroll sub-phase: which original dice were eligible, in order."""

    mode: RerollMode
    eligible: list[int] = field(default_factory=list)
    """Positions (into the valid original dice) that may be rerolled,
    ascending. Reroll dice are consumed in this order."""

    provided: int = 0
    """How many reroll dice the player entered."""

    @property
    def needed(self) -> int:
        return len(self.eligible)


@dataclass
class AttackPhase:
    """How the attack count was reached."""

    random: bool
    expression: str = ""
    spec: DiceSpec | None = None
    rolls: list[int | float] = field(default_factory=list)
    base: int = 0
    """Attacks before Rapid Fire."""
    rapid_fire_bonus: int = 0

    @property
    def attacks(self) -> int:
        return self.base + self.rapid_fire_bonus


@dataclass
class HitPhase:
    torrent: bool
    target: int
    mod: int
    attacks: int
    dice: list[DieRoll] = field(default_factory=list)
    initial: Tally = field(default_factory=Tally)
    final: Tally = field(default_factory=Tally)
    reroll: RerollRecord | None = None

    @property
    def hits(self) -> int:
        return self.final.successes

    @property
    def total_hits(self) -> int:
        """Successful hits plus the extra hits from Sustained Hits."""
        return self.final.successes + self.final.sustained_extra

    @property
    def wound_roll_pool(self) -> int:
        """Hits that still need a wound roll (Lethal Hits skip it)."""
        return max(0, self.total_hits - self.final.lethal)


@dataclass
class WoundPhase:
    strength: int
    toughness: int
    target: int
    mod: int
    pool: int
    lethal_auto_wounds: int
    dice: list[DieRoll] = field(default_factory=list)
    initial: Tally = field(default_factory=Tally)
    final: Tally = field(default_factory=Tally)
    reroll: RerollRecord | None = None

    @property
    def total_wounds(self) -> int:
        """Wound rolls that succeeded plus Lethal Hits auto-wounds."""
        return self.final.successes + self.lethal_auto_wounds


@dataclass
class DevastatingPhase:
    active: bool
    total_wounds: int
    mortal_wound_attacks: int = 0

    @property
    def savable_wounds(self) -> int:
        return self.total_wounds - self.mortal_wound_attacks


@dataclass
class SavePhase:
    target: int
    mod: int
    required: int
    in_cover: bool = False
    ignore_ap: bool = False
    dice: list[DieRoll] = field(default_factory=list)
    failed: int = 0
    ignored_by_rule: int = 0

    @property
    def failed_effective(self) -> int:
        return max(0, self.failed - self.ignored_by_rule)


@dataclass
class DamagePhase:
    fixed: bool
    mortal_instances: int
    normal_instances: int
    base: int = 0
    """Fixed damage before mitigation (fixed damage only)."""
    per_instance: int = 0
    """Fixed damage after mitigation (fixed damage only)."""
    spec: DiceSpec | None = None
    dice_needed: int = 0
    mortal_damage: int = 0
    normal_damage: int = 0

    @property
    def total(self) -> int:
        return self.normal_damage + self.mortal_damage


@dataclass
class FnpPhase:
    target: int | None
    pre_fnp: int
    required: int = 0
    ignored: int = 0

    @property
    def post_fnp(self) -> int:
        return max(0, self.pre_fnp - self.ignored)


@dataclass
class OffenseOutcome:
    """Everything up to and including the Devastating Wounds conversion.

    This is the part of a volley that a split volley shares between its
    targets.
    """

    attacks: AttackPhase
    hits: HitPhase
    wounds: WoundPhase
    devastating: DevastatingPhase
    precision_note: str = ""
    errors: list[str] = field(default_factory=list)
    log: list[str] = field(default_factory=list)


@dataclass
class DefenseOutcome:
    """The save → damage → FNP tail against one target."""

    label: TargetLabel | None
    savable_wounds: int
    mortal_wound_attacks: int
    saves: SavePhase
    damage: DamagePhase
    fnp: FnpPhase
    errors: list[str] = field(default_factory=list)
    log: list[str] = field(default_factory=list)

    @property
    def total_pre_fnp(self) -> int:
        return self.damage.total

    @property
    def total_post_fnp(self) -> int:
        return self.fnp.post_fnp


@dataclass(frozen=True)
class ResolutionResult:
    """The outcome of one volley. Built once per resolution, never changed.

    The flat fields are what a UI needs to display totals and to work out
    how many dice to ask for next; the phase records behind them are kept
    on ``offense`` and ``defense``. Those records are filled in while the
    volley resolves and are read-only afterwards.
    """

    attacks: int
    hit_rerolls_needed: int
    hits: int
    crit_hits: int
    sustained_extra_hits: int
    lethal_auto_wounds: int
    precision_eligible: int
    wound_roll_pool: int
    wound_rerolls_needed: int
    wound_target: int
    wound_successes: int
    crit_wounds: int
    total_wounds: int
    mortal_wound_attacks: int
    savable_wounds: int
    save_target: int
    failed_saves: int
    ignored_by_rule: int
    failed_saves_effective: int
    damage_dice_needed: int
    normal_damage: int
    mortal_damage: int
    total_pre_fnp: int
    fnp_needed: int
    fnp_ignored: int
    total_post_fnp: int
    precision_note: str
    log: tuple[str, ...]
    errors: tuple[str, ...]
    offense: OffenseOutcome
    defense: DefenseOutcome

    @classmethod
    def from_outcomes(cls, offense: OffenseOutcome, defense: DefenseOutcome) -> ResolutionResult:
        hits, wounds = offense.hits, offense.wounds
        return cls(
            attacks=offense.attacks.attacks,
            hit_rerolls_needed=hits.reroll.needed if hits.reroll else 0,
            hits=hits.hits,
            crit_hits=hits.final.crits,
            sustained_extra_hits=hits.final.sustained_extra,
            lethal_auto_wounds=hits.final.lethal,
            precision_eligible=hits.final.precision,
            wound_roll_pool=wounds.pool,
            wound_rerolls_needed=wounds.reroll.needed if wounds.reroll else 0,
            wound_target=wounds.target,
            wound_successes=wounds.final.successes,
            crit_wounds=wounds.final.crits,
            total_wounds=wounds.total_wounds,
            mortal_wound_attacks=offense.devastating.mortal_wound_attacks,
            savable_wounds=offense.devastating.savable_wounds,
            save_target=defense.saves.target,
            failed_saves=defense.saves.failed,
            ignored_by_rule=defense.saves.ignored_by_rule,
            failed_saves_effective=defense.saves.failed_effective,
            damage_dice_needed=defense.damage.dice_needed,
            normal_damage=defense.damage.normal_damage,
            mortal_damage=defense.damage.mortal_damage,
            total_pre_fnp=defense.total_pre_fnp,
            fnp_needed=defense.fnp.required,
            fnp_ignored=defense.fnp.ignored,
            total_post_fnp=defense.total_post_fnp,
            precision_note=offense.precision_note,
            log=tuple(offense.log + defense.log),
            errors=tuple(offense.errors + defense.errors),
            offense=offense,
            defense=defense,
        )


@dataclass(frozen=True)
class SplitResult:
    """One weapon's volley divided between targets A and B."""

    offense: OffenseOutcome
    allocated: dict[TargetLabel, int]
    """Savable wounds given to each target. They always sum to the
    shared savable wound pool."""

    mortal_target: TargetLabel
    targets: dict[TargetLabel, DefenseOutcome]
    log: tuple[str, ...]
    errors: tuple[str, ...]

    @property
    def total_pre_fnp(self) -> int:
        return sum(t.total_pre_fnp for t in self.targets.values())

    @property
    def total_post_fnp(self) -> int:
        return sum(t.total_post_fnp for t in self.targets.values())
