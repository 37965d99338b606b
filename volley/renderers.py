"""Renderers that convert volley phase records into the step log.

The TextRenderer produces the plain-text narration shown under a result.
Other renderers (e.g. one that builds Streamlit tables) can consume the
same record types.
"""

from __future__ import annotations

from volley.records import (
    AttackPhase,
    DamagePhase,
    DevastatingPhase,
    FnpPhase,
    HitPhase,
    SavePhase,
    WoundPhase,
)
from volley.types import TargetLabel


def target_prefix(label: TargetLabel | None) -> str:
    """Log prefix for the split-volley targets; empty for a normal volley."""
    return f"[Target {label}] " if label else ""


class TextRenderer:
    """Renders phase records to log lines.

    Each render_* method returns a list of strings (one per log line), so
    a phase that didn't happen simply contributes nothing.
    """

    def render_attacks(self, record: AttackPhase) -> list[str]:
        lines: list[str] = []
        if record.random:
            spec = record.spec
            dice = f"{spec.n}D{spec.sides}" if spec and spec.ok else "?"
            mod = f" + {spec.mod} (modifier)" if spec and spec.mod else ""
            rolls = ", ".join(str(r) for r in record.rolls)
            lines.append(
                f"Attacks random: spec = {record.expression or '?'}, dice = {dice}, "
                f"rolls = [{rolls}]{mod}, A = {record.base}"
            )
        else:
            lines.append(f"Attacks fixed: A = {record.base}")
        if record.rapid_fire_bonus:
            lines.append(
                f"Rapid Fire: half range. +{record.rapid_fire_bonus} attacks. "
                f"A => {record.attacks}"
            )
        return lines

    def render_hits(self, record: HitPhase) -> list[str]:
        if record.torrent:
            return [f"Hit phase: Torrent, all {record.hits} attacks hit automatically. No critical hits possible."]
        t = record.initial
        lines = [
            f"Hit phase: needed {record.target}+ (modifier {record.mod:+d}). "
            f"Hits = {t.successes}, crit hits = {t.crits}, sustained extra hits = {t.sustained_extra}, "
            f"lethal auto-wounds = {t.lethal}, precision-eligible hits = {t.precision}"
        ]
        if record.reroll and record.reroll.needed:
            after = record.final
            lines.append(
                f"Hit rerolls ({record.reroll.mode}): eligible = {record.reroll.needed}. "
                f"After rerolls: hits = {after.successes}, crit hits = {after.crits}, "
                f"sustained extra hits = {after.sustained_extra}, lethal auto-wounds = {after.lethal}"
            )
        return lines

    def render_wounds(self, record: WoundPhase) -> list[str]:
        lines: list[str] = []
        if record.reroll and record.reroll.needed:
            lines.append(
                f"Wound rerolls ({record.reroll.mode}): eligible = {record.reroll.needed}. "
                f"Before rerolls: wounds from rolls = {record.initial.successes}, "
                f"crit wounds = {record.initial.crits}"
            )
        lines.append(
            f"Wound phase: needed {record.target}+ (S={record.strength} vs T={record.toughness}). "
            f"Wound rolls = {record.pool}, wounds from rolls = {record.final.successes}, "
            f"crit wounds = {record.final.crits}, total wounds incl lethal = {record.total_wounds}"
        )
        return lines

    def render_devastating(self, record: DevastatingPhase) -> list[str]:
        if not record.active:
            return []
        return [
            f"Devastating Wounds: converting {record.mortal_wound_attacks} crit wounds "
            f"to mortal wounds (no saves). Savable wounds = {record.savable_wounds}"
        ]

    def render_saves(self, record: SavePhase, label: TargetLabel | None = None) -> list[str]:
        prefix = target_prefix(label)
        notes = (" (Cover)" if record.in_cover else "") + (" (Ignore AP)" if record.ignore_ap else "")
        lines = [
            f"{prefix}Save phase: save target {record.target}+{notes}. "
            f"{record.required} savable wounds, failed saves = {record.failed}"
        ]
        if record.ignored_by_rule:
            lines.append(f"{prefix}Mitigation: ignored first failed save ({record.ignored_by_rule})")
        return lines

    def render_damage(self, record: DamagePhase, label: TargetLabel | None = None) -> list[str]:
        prefix = target_prefix(label)
        lines: list[str] = []
        if record.fixed:
            if record.normal_instances:
                lines.append(
                    f"{prefix}Damage: fixed D={record.base}. After mods per instance = {record.per_instance}. "
                    f"Normal damage = {record.normal_instances} × {record.per_instance} = {record.normal_damage}"
                )
            if record.mortal_instances:
                lines.append(
                    f"{prefix}Dev Wounds damage: fixed. {record.mortal_instances} × {record.per_instance} "
                    f"= {record.mortal_damage}"
                )
        else:
            if record.mortal_instances:
                lines.append(f"{prefix}Dev Wounds damage: variable. Sum after mods = {record.mortal_damage}")
            if record.normal_instances:
                lines.append(f"{prefix}Damage: variable. Normal damage sum after mods = {record.normal_damage}")
        if label:
            lines.append(
                f"{prefix}Damage: normal = {record.normal_damage}, mortal = {record.mortal_damage}, "
                f"total pre-FNP = {record.total}"
            )
        return lines

    def render_fnp(self, record: FnpPhase, label: TargetLabel | None = None) -> list[str]:
        if not record.required:
            return []
        return [
            f"{target_prefix(label)}Mitigation: FNP {record.target}+. Ignored = {record.ignored}. "
            f"Post-FNP damage = {record.post_fnp}"
        ]
