"""
Volley resolver: walks one weapon's attacks through every phase of the
combat sequence using the dice the player actually rolled.

The phases run in a fixed order, and each one decides how many dice the
next one needs:

    attacks → hits (+ rerolls) → wounds (+ rerolls) → Devastating Wounds
    → saves → damage → Feel No Pain

Critical hits can add hits (Sustained Hits) or skip the wound roll
entirely (Lethal Hits), critical wounds can skip the save (Devastating
Wounds), and defensive abilities shave damage off afterwards. The resolver
never raises on bad input: every validation problem becomes a message in
``errors`` and the affected die is skipped, so a half-filled form still
gets a best-effort result to preview.

Resolution is a pure function of the inputs. Nothing is kept between
calls, so the same inputs always give the same result.
"""

from __future__ import annotations

from functools import partial
from typing import Callable

from volley.dice import die_label, parse_dice_list, parse_dice_spec, valid_die
from volley.profiles import DiceInputs, RuleFlags, TargetProfile, WeaponProfile
from volley.records import (
    AttackPhase,
    DamagePhase,
    DefenseOutcome,
    DevastatingPhase,
    DieRoll,
    FnpPhase,
    HitPhase,
    OffenseOutcome,
    RerollRecord,
    ResolutionResult,
    SavePhase,
    Tally,
    WoundPhase,
)
from volley.renderers import TextRenderer
from volley.rules import clamp_mod, meets, mitigate_damage, save_passes, save_target, wound_target
from volley.types import RerollMode, TargetLabel

NEVER = 7
"""Target number used when a to-hit or armor save hasn't been entered."""


def reroll_mode(ones: bool, fails: bool) -> RerollMode:
    """Rerolling fails already covers every 1, so it takes priority."""
    if fails:
        return "fails"
    if ones:
        return "ones"
    return "none"


def judge(face: int | float, target: int, mod: int, crit_threshold: int) -> DieRoll:
    """Score one hit or wound die.

    A die is critical when it succeeds and its unmodified face is at or
    above the critical threshold.
    """
    if not valid_die(face):
        return DieRoll(face=face, valid=False)
    success = meets(target, face, mod)
    return DieRoll(face=face, valid=True, success=success, crit=success and face >= crit_threshold)


class Resolver:
    """Resolves volleys. Owns nothing but the renderer used for the log.

    The public entry points are resolve() for a whole volley, offense()
    for the phases shared by a split volley, and defense() for the
    save/damage/FNP tail against a single target.
    """

    def __init__(self, renderer: TextRenderer | None = None) -> None:
        self.renderer = renderer or TextRenderer()

    def resolve(
        self,
        weapon: WeaponProfile,
        target: TargetProfile,
        dice: DiceInputs,
        flags: RuleFlags,
    ) -> ResolutionResult:
        offense = self.offense(weapon, target, dice, flags)
        defense = self.defense(
            offense.devastating.savable_wounds,
            offense.devastating.mortal_wound_attacks,
            weapon,
            target,
            dice,
        )
        return ResolutionResult.from_outcomes(offense, defense)

    def offense(
        self,
        weapon: WeaponProfile,
        target: TargetProfile,
        dice: DiceInputs,
        flags: RuleFlags,
    ) -> OffenseOutcome:
        """Attacks through the Devastating Wounds conversion.

        Only the target's Toughness (and its leader settings, for the
        Precision note) matter here.
        """
        errors: list[str] = []
        log: list[str] = []

        attacks = self._attacks(weapon, dice.attacks, flags.half_range, errors)
        log.extend(self.renderer.render_attacks(attacks))

        hits = self._hits(
            weapon, attacks.attacks, dice.hits, dice.hit_rerolls,
            reroll_mode(flags.reroll_hit_ones, flags.reroll_hit_fails), errors,
        )
        log.extend(self.renderer.render_hits(hits))

        wounds = self._wounds(
            weapon, target, hits, dice.wounds, dice.wound_rerolls,
            reroll_mode(flags.reroll_wound_ones, flags.reroll_wound_fails or weapon.twin_linked),
            errors,
        )
        log.extend(self.renderer.render_wounds(wounds))

        devastating = DevastatingPhase(active=weapon.devastating_wounds, total_wounds=wounds.total_wounds)
        if devastating.active:
            devastating.mortal_wound_attacks = min(wounds.final.crits, wounds.total_wounds)
        log.extend(self.renderer.render_devastating(devastating))

        note = self._precision_note(weapon, target, hits.final.precision)
        if note:
            log.append(note)

        return OffenseOutcome(
            attacks=attacks, hits=hits, wounds=wounds, devastating=devastating,
            precision_note=note, errors=errors, log=log,
        )

    def defense(
        self,
        savable_wounds: int,
        mortal_wound_attacks: int,
        weapon: WeaponProfile,
        target: TargetProfile,
        dice: DiceInputs,
        label: TargetLabel | None = None,
    ) -> DefenseOutcome:
        """Saves, damage and Feel No Pain against one target.

        With a label (split volleys) every error and log line is prefixed
        with the target it belongs to.
        """
        prefix = f"Target {label}: " if label else ""
        errors: list[str] = []
        log: list[str] = []

        saves = self._saves(savable_wounds, weapon, target, dice.saves, prefix, errors)
        log.extend(self.renderer.render_saves(saves, label))

        damage = self._damage(mortal_wound_attacks, saves.failed_effective, weapon, target, dice.damage, prefix, errors)
        log.extend(self.renderer.render_damage(damage, label))

        fnp = self._fnp(damage.total, target, dice.fnp, prefix, errors)
        log.extend(self.renderer.render_fnp(fnp, label))

        return DefenseOutcome(
            label=label,
            savable_wounds=savable_wounds,
            mortal_wound_attacks=mortal_wound_attacks,
            saves=saves, damage=damage, fnp=fnp,
            errors=errors, log=log,
        )

    # --- offensive phases ---

    def _attacks(self, weapon: WeaponProfile, text: str, half_range: bool, errors: list[str]) -> AttackPhase:
        """Resolve the attack count, then add Rapid Fire at half range.

        Rapid Fire is added before the hit roll, so it changes how many
        hit dice are needed.
        """
        bonus = max(0, weapon.rapid_fire_x) if weapon.rapid_fire and half_range else 0

        if not weapon.random_attacks:
            return AttackPhase(random=False, base=max(0, int(weapon.attacks or 0)), rapid_fire_bonus=bonus)

        spec = parse_dice_spec(weapon.attacks)
        rolls = parse_dice_list(text)
        record = AttackPhase(
            random=True, expression=str(weapon.attacks), spec=spec,
            rolls=rolls, rapid_fire_bonus=bonus,
        )
        if not spec.ok:
            errors.append('Random attacks: enter a dice expression like "2D6", "D6+1", or "2" (for 2D6).')
            return record
        if len(rolls) != spec.n:
            errors.append(f"Attack rolls provided ({len(rolls)}) must equal dice count ({spec.n}).")

        total = 0
        for i, face in enumerate(rolls[:spec.n]):
            if not valid_die(face, spec.sides):
                errors.append(f"Attack roll #{i + 1} is not a valid {die_label(spec.sides)}.")
                continue
            total += int(face)
        record.base = max(0, total + spec.mod)
        return record

    def _hit_tally(self, dice: list[DieRoll], weapon: WeaponProfile) -> Tally:
        """Count hits and the consequences of each critical hit."""
        tally = Tally()
        for d in dice:
            if not d.success:
                continue
            tally.successes += 1
            if d.crit:
                tally.crits += 1
                if weapon.sustained_hits:
                    tally.sustained_extra += max(0, weapon.sustained_hits_n)
                if weapon.lethal_hits:
                    tally.lethal += 1
                if weapon.precision:
                    tally.precision += 1
        return tally

    def _wound_tally(self, dice: list[DieRoll]) -> Tally:
        return Tally(
            successes=sum(1 for d in dice if d.success),
            crits=sum(1 for d in dice if d.crit),
        )

    def _reroll(
        self,
        dice: list[DieRoll],
        mode: RerollMode,
        text: str,
        score: Callable[[int | float], DieRoll],
        what: str,
        errors: list[str],
    ) -> RerollRecord:
        """Replace eligible dice with their rerolls, in place.

        Eligibility is decided from the original dice only, in one pass that
        collects the eligible positions in ascending order. A second pass
        hands out the reroll dice to those positions in the same order.
        Rerolls replace the original face; they're never added to it.
        """
        eligible = [
            i for i, d in enumerate(dice)
            if d.valid and (not d.success if mode == "fails" else d.face == 1)
        ]
        rerolls = parse_dice_list(text)
        record = RerollRecord(mode=mode, eligible=eligible, provided=len(rerolls))
        if not eligible:
            return record

        if len(rerolls) != len(eligible):
            errors.append(
                f"{what} reroll dice provided ({len(rerolls)}) must equal "
                f"eligible {what.lower()} rerolls ({len(eligible)})."
            )
        for pos, (index, face) in enumerate(zip(eligible, rerolls)):
            new = score(face)
            new.rerolled_from = dice[index].face
            if not new.valid:
                errors.append(f"{what} reroll #{pos + 1} is not a valid {die_label()}.")
            dice[index] = new
        return record

    def _hits(
        self,
        weapon: WeaponProfile,
        attacks: int,
        text: str,
        reroll_text: str,
        mode: RerollMode,
        errors: list[str],
    ) -> HitPhase:
        """Roll to hit. Torrent skips the roll and can't score crits."""
        target = NEVER if weapon.to_hit is None else weapon.to_hit
        record = HitPhase(torrent=weapon.torrent, target=target, mod=clamp_mod(weapon.hit_mod), attacks=attacks)
        if weapon.torrent:
            record.initial = record.final = Tally(successes=attacks)
            return record

        rolls = parse_dice_list(text)
        if len(rolls) != attacks:
            errors.append(
                f"Hit rolls provided ({len(rolls)}) must equal A ({attacks}) "
                f"unless Torrent is enabled."
            )

        score = partial(judge, target=target, mod=record.mod, crit_threshold=weapon.crit_hit)
        record.dice = [score(face) for face in rolls[:attacks]]
        for i, d in enumerate(record.dice):
            if not d.valid:
                errors.append(f"Hit roll #{i + 1} is not a valid {die_label()}.")

        record.initial = record.final = self._hit_tally(record.dice, weapon)
        if mode != "none":
            record.reroll = self._reroll(record.dice, mode, reroll_text, score, "Hit", errors)
            if record.reroll.needed:
                record.final = self._hit_tally(record.dice, weapon)
        return record

    def _wounds(
        self,
        weapon: WeaponProfile,
        target: TargetProfile,
        hits: HitPhase,
        text: str,
        reroll_text: str,
        mode: RerollMode,
        errors: list[str],
    ) -> WoundPhase:
        """Roll to wound with every hit that Lethal Hits didn't already
        turn into a wound. Lethal auto-wounds are never critical."""
        strength = weapon.strength or 0
        toughness = target.toughness or 0
        record = WoundPhase(
            strength=strength,
            toughness=toughness,
            target=wound_target(strength, toughness),
            mod=weapon.wound_mod,
            pool=hits.wound_roll_pool,
            lethal_auto_wounds=hits.final.lethal,
        )

        rolls = parse_dice_list(text)
        if len(rolls) != record.pool:
            errors.append(f"Wound rolls provided ({len(rolls)}) must equal wound-roll pool ({record.pool}).")

        score = partial(judge, target=record.target, mod=record.mod, crit_threshold=weapon.crit_wound)
        record.dice = [score(face) for face in rolls[:record.pool]]
        for i, d in enumerate(record.dice):
            if not d.valid:
                errors.append(f"Wound roll #{i + 1} is not a valid {die_label()}.")

        record.initial = record.final = self._wound_tally(record.dice)
        if mode != "none" and record.pool > 0:
            record.reroll = self._reroll(record.dice, mode, reroll_text, score, "Wound", errors)
            if record.reroll.needed:
                record.final = self._wound_tally(record.dice)
        return record

    def _precision_note(self, weapon: WeaponProfile, target: TargetProfile, eligible: int) -> str:
        """Advisory text about allocating Precision hits to a leader."""
        if not target.leader_attached:
            return ""
        if weapon.precision and eligible > 0:
            choice = "chose to" if target.allocate_precision_to_leader else "chose NOT to"
            return f"Precision: {eligible} eligible crit-hits. You {choice} allocate eligible attacks to the leader."
        return "Leader attached: cannot allocate attacks to leader unless Precision triggers."

    # --- defensive phases ---

    def _saves(
        self,
        savable_wounds: int,
        weapon: WeaponProfile,
        target: TargetProfile,
        text: str,
        prefix: str,
        errors: list[str],
    ) -> SavePhase:
        record = SavePhase(
            target=save_target(
                NEVER if target.armor_save is None else target.armor_save,
                weapon.ap or 0,
                target.invuln,
                in_cover=target.in_cover,
                ignore_ap=target.ignore_ap,
            ),
            mod=clamp_mod(target.save_mod),
            required=savable_wounds,
            in_cover=target.in_cover,
            ignore_ap=target.ignore_ap,
        )

        rolls = parse_dice_list(text)
        if len(rolls) != savable_wounds:
            errors.append(f"{prefix}Save rolls provided ({len(rolls)}) must equal savable wounds ({savable_wounds}).")

        for i, face in enumerate(rolls[:savable_wounds]):
            if not valid_die(face):
                errors.append(f"{prefix}Save roll #{i + 1} is not a valid {die_label()}.")
                record.dice.append(DieRoll(face=face, valid=False))
                continue
            success = save_passes(record.target, face, record.mod)
            record.dice.append(DieRoll(face=face, valid=True, success=success))
            if not success:
                record.failed += 1

        if target.ignore_first_failed_save and record.failed > 0:
            record.ignored_by_rule = 1
        return record

    def _damage(
        self,
        mortal_wound_attacks: int,
        failed_saves: int,
        weapon: WeaponProfile,
        target: TargetProfile,
        text: str,
        prefix: str,
        errors: list[str],
    ) -> DamagePhase:
        """Damage from mortal wounds and failed saves.

        Variable damage takes one die per instance, mortal wounds first.
        Each instance is mitigated on its own: halve, then -1.
        """
        mitigate = partial(mitigate_damage, half=target.half_damage, minus_one=target.minus_one_damage)

        if not weapon.random_damage:
            base = int(weapon.damage or 0)
            per = mitigate(base)
            return DamagePhase(
                fixed=True,
                mortal_instances=mortal_wound_attacks,
                normal_instances=failed_saves,
                base=base,
                per_instance=per,
                normal_damage=failed_saves * per,
                mortal_damage=mortal_wound_attacks * per,
            )

        spec = parse_dice_spec(weapon.damage)
        sides = spec.sides if spec.has_die else 6
        record = DamagePhase(
            fixed=False,
            mortal_instances=mortal_wound_attacks,
            normal_instances=failed_saves,
            spec=spec,
            dice_needed=mortal_wound_attacks + failed_saves,
        )
        if record.dice_needed and not spec.ok:
            errors.append(f'{prefix}Variable damage: enter a dice expression like "D6", "D3+1", or "D6+2".')

        rolls = parse_dice_list(text)
        # Leftover damage dice with nothing to roll for aren't a mismatch.
        if record.dice_needed and len(rolls) != record.dice_needed:
            source = "Dev Wounds dice + failed saves" if mortal_wound_attacks else "failed saves"
            errors.append(
                f"{prefix}Damage rolls provided ({len(rolls)}) must equal "
                f"{record.dice_needed} ({source})."
            )

        for i, face in enumerate(rolls[:record.dice_needed]):
            if not valid_die(face, sides):
                errors.append(f"{prefix}Damage roll #{i + 1} is not a valid {die_label(sides)}.")
                continue
            amount = mitigate(int(face) + spec.mod)
            if i < mortal_wound_attacks:
                record.mortal_damage += amount
            else:
                record.normal_damage += amount
        return record

    def _fnp(self, pre_fnp: int, target: TargetProfile, text: str, prefix: str, errors: list[str]) -> FnpPhase:
        """One Feel No Pain die per point of damage."""
        record = FnpPhase(target=target.fnp, pre_fnp=pre_fnp)
        if target.fnp is None or pre_fnp <= 0:
            return record

        record.required = pre_fnp
        rolls = parse_dice_list(text)
        if len(rolls) != pre_fnp:
            errors.append(
                f"{prefix}FNP rolls provided ({len(rolls)}) must equal total damage ({pre_fnp}) "
                f"when FNP is enabled."
            )
        for i, face in enumerate(rolls[:pre_fnp]):
            if not valid_die(face):
                errors.append(f"{prefix}FNP roll #{i + 1} is not a valid {die_label()}.")
                continue
            if face >= target.fnp:
                record.ignored += 1
        return record


default_resolver = Resolver()


def resolve(
    weapon: WeaponProfile,
    target: TargetProfile,
    dice: DiceInputs | None = None,
    flags: RuleFlags | None = None,
) -> ResolutionResult:
    """Resolve one volley. The single pure entry point to the engine."""
    return default_resolver.resolve(weapon, target, dice or DiceInputs(), flags or RuleFlags())


def resolve_defense(
    savable_wounds: int,
    mortal_wound_attacks: int,
    weapon: WeaponProfile,
    target: TargetProfile,
    dice: DiceInputs | None = None,
    label: TargetLabel | None = None,
) -> DefenseOutcome:
    """Run only the save → damage → FNP tail against one target."""
    return default_resolver.defense(savable_wounds, mortal_wound_attacks, weapon, target, dice or DiceInputs(), label)
