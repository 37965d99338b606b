"""Streamlit volley calculator UI.

Run with: PYTHONPATH=. streamlit run ui/app.py
"""

from __future__ import annotations

import streamlit as st

from volley.cache import cached_resolve
from volley.dice import parse_dice_spec, roll_dice
from volley.profiles import DiceInputs, RuleFlags, TargetProfile, WeaponProfile, clear_all, load_example
from volley.records import DefenseOutcome
from volley.split import split_volley
from volley.status import assess

WEAPON_FLAGS = (
    ("torrent", "Torrent"),
    ("lethal_hits", "Lethal Hits"),
    ("sustained_hits", "Sustained Hits"),
    ("devastating_wounds", "Devastating Wounds"),
    ("precision", "Precision"),
    ("twin_linked", "Twin-linked"),
    ("rapid_fire", "Rapid Fire"),
)
TARGET_FLAGS = (
    ("in_cover", "In cover"),
    ("ignore_ap", "Ignore AP"),
    ("ignore_first_failed_save", "Ignore first failed save"),
    ("minus_one_damage", "-1 Damage"),
    ("half_damage", "Half damage"),
)
DICE_FIELDS = (
    ("attacks", "Attack rolls"),
    ("hits", "Hit rolls"),
    ("hit_rerolls", "Hit reroll dice"),
    ("wounds", "Wound rolls"),
    ("wound_rerolls", "Wound reroll dice"),
    ("saves", "Save rolls"),
    ("damage", "Damage rolls"),
    ("fnp", "FNP rolls"),
)
SPLIT_DICE_FIELDS = ("saves", "damage", "fnp")


def parse_stat(text: str | None) -> int | None:
    """A blank or unparseable stat box means "not entered yet"."""
    try:
        return int(str(text).strip())
    except ValueError:
        return None


def _stat_text(value: int | None) -> str:
    return "" if value is None else str(value)


def build_weapon(config: dict) -> WeaponProfile:
    """Build a WeaponProfile from the weapon widget values."""
    attacks: int | str | None = config["attacks"].strip()
    if not config["random_attacks"]:
        attacks = parse_stat(attacks)
    damage: int | str | None = config["damage"].strip()
    if not config["random_damage"]:
        damage = parse_stat(damage)
    return WeaponProfile(
        attacks=attacks,
        to_hit=parse_stat(config["to_hit"]),
        strength=parse_stat(config["strength"]),
        ap=parse_stat(config["ap"]),
        damage=damage,
        crit_hit=config.get("crit_hit", 6),
        crit_wound=config.get("crit_wound", 6),
        sustained_hits_n=config.get("sustained_hits_n", 1),
        rapid_fire_x=config.get("rapid_fire_x", 0),
        hit_mod=config.get("hit_mod", 0),
        wound_mod=config.get("wound_mod", 0),
        **{flag: bool(config.get(flag)) for flag, _ in WEAPON_FLAGS},
    )


def weapon_config(weapon: WeaponProfile) -> dict:
    """The widget values that display this weapon. Inverse of build_weapon."""
    config = {
        "random_attacks": weapon.random_attacks,
        "attacks": _stat_text(weapon.attacks),
        "to_hit": _stat_text(weapon.to_hit),
        "strength": _stat_text(weapon.strength),
        "ap": _stat_text(weapon.ap),
        "random_damage": weapon.random_damage,
        "damage": _stat_text(weapon.damage),
        "crit_hit": weapon.crit_hit,
        "crit_wound": weapon.crit_wound,
        "sustained_hits_n": weapon.sustained_hits_n,
        "rapid_fire_x": weapon.rapid_fire_x,
        "hit_mod": weapon.hit_mod,
        "wound_mod": weapon.wound_mod,
    }
    config.update({flag: getattr(weapon, flag) for flag, _ in WEAPON_FLAGS})
    return config


def build_target(config: dict) -> TargetProfile:
    """Build a TargetProfile from the target widget values."""
    return TargetProfile(
        toughness=parse_stat(config["toughness"]),
        armor_save=parse_stat(config["armor_save"]),
        invuln=parse_stat(config.get("invuln", "")),
        fnp=parse_stat(config.get("fnp", "")) if config.get("fnp_enabled") else None,
        save_mod=config.get("save_mod", 0),
        leader_attached=bool(config.get("leader_attached")),
        allocate_precision_to_leader=bool(config.get("allocate_precision_to_leader")),
        **{flag: bool(config.get(flag)) for flag, _ in TARGET_FLAGS},
    )


def target_config(target: TargetProfile) -> dict:
    """The widget values that display this target. Inverse of build_target."""
    config = {
        "toughness": _stat_text(target.toughness),
        "armor_save": _stat_text(target.armor_save),
        "invuln": _stat_text(target.invuln),
        "fnp_enabled": target.fnp is not None,
        "fnp": _stat_text(target.fnp),
        "save_mod": target.save_mod,
        "leader_attached": target.leader_attached,
        "allocate_precision_to_leader": target.allocate_precision_to_leader,
    }
    config.update({flag: getattr(target, flag) for flag, _ in TARGET_FLAGS})
    return config


def defense_needs(outcome: DefenseOutcome) -> dict[str, int]:
    """Dice one split-volley target still needs for its save, damage and
    FNP boxes."""
    return {
        "saves": outcome.savable_wounds,
        "damage": outcome.damage.dice_needed,
        "fnp": outcome.fnp.required,
    }


def _store(prefix: str, config: dict) -> None:
    for key, value in config.items():
        st.session_state[f"{prefix}_{key}"] = value


def _store_profiles(weapon: WeaponProfile, target: TargetProfile, dice: DiceInputs) -> None:
    _store("w", weapon_config(weapon))
    _store("t", target_config(target))
    _store("d", {field: getattr(dice, field) for field, _ in DICE_FIELDS})


def _current_profiles() -> tuple[WeaponProfile, TargetProfile]:
    weapon = build_weapon({k[2:]: v for k, v in st.session_state.items() if k.startswith("w_")})
    target = build_target({k[2:]: v for k, v in st.session_state.items() if k.startswith("t_")})
    return weapon, target


def _on_load_example() -> None:
    weapon, target = _current_profiles()
    _store_profiles(*load_example(weapon, target, st.session_state["preserve_hooks"]))


def _on_clear_all() -> None:
    weapon, target = _current_profiles()
    _store_profiles(*clear_all(weapon, target, st.session_state["preserve_hooks"]))
    for field in SPLIT_DICE_FIELDS:
        st.session_state[f"b_{field}"] = ""


def _on_roll(key: str, n: int, sides: int) -> None:
    st.session_state[key] = roll_dice(n, sides)


def _init_state() -> None:
    """Seed widget keys on first render (before widgets exist)."""
    if "initialized" in st.session_state:
        return
    st.session_state["initialized"] = True
    _store_profiles(*clear_all())
    _store("b", {field: "" for field in SPLIT_DICE_FIELDS})
    _store("bt", target_config(TargetProfile()))
    st.session_state["preserve_hooks"] = False


def weapon_sidebar() -> WeaponProfile:
    st.sidebar.subheader("Weapon")
    config: dict = {}
    config["random_attacks"] = st.sidebar.checkbox("Random attacks", key="w_random_attacks")
    config["attacks"] = st.sidebar.text_input("Attacks (e.g. 10 or D6+1)", key="w_attacks")
    cols = st.sidebar.columns(3)
    config["to_hit"] = cols[0].text_input("To Hit", key="w_to_hit")
    config["strength"] = cols[1].text_input("Strength", key="w_strength")
    config["ap"] = cols[2].text_input("AP", key="w_ap")
    config["random_damage"] = st.sidebar.checkbox("Random damage", key="w_random_damage")
    config["damage"] = st.sidebar.text_input("Damage (e.g. 2 or D3+1)", key="w_damage")

    with st.sidebar.expander("Keywords"):
        for flag, label in WEAPON_FLAGS:
            config[flag] = st.checkbox(label, key=f"w_{flag}")
        config["sustained_hits_n"] = st.number_input("Sustained Hits X", min_value=0, max_value=6, key="w_sustained_hits_n")
        config["rapid_fire_x"] = st.number_input("Rapid Fire X", min_value=0, max_value=20, key="w_rapid_fire_x")

    with st.sidebar.expander("Criticals & modifiers"):
        config["crit_hit"] = st.number_input("Critical hit on", min_value=2, max_value=6, key="w_crit_hit")
        config["crit_wound"] = st.number_input("Critical wound on", min_value=2, max_value=6, key="w_crit_wound")
        config["hit_mod"] = st.number_input("Hit modifier", min_value=-3, max_value=3, key="w_hit_mod")
        config["wound_mod"] = st.number_input("Wound modifier", min_value=-3, max_value=3, key="w_wound_mod")

    return build_weapon(config)


def target_sidebar(prefix: str, heading: str) -> TargetProfile:
    st.sidebar.subheader(heading)
    config: dict = {}
    cols = st.sidebar.columns(3)
    config["toughness"] = cols[0].text_input("Toughness", key=f"{prefix}_toughness")
    config["armor_save"] = cols[1].text_input("Armor save", key=f"{prefix}_armor_save")
    config["invuln"] = cols[2].text_input("Invuln", key=f"{prefix}_invuln")
    config["fnp_enabled"] = st.sidebar.checkbox("Feel No Pain", key=f"{prefix}_fnp_enabled")
    config["fnp"] = st.sidebar.text_input("FNP target", key=f"{prefix}_fnp")

    with st.sidebar.expander("Defensive rules"):
        for flag, label in TARGET_FLAGS:
            config[flag] = st.checkbox(label, key=f"{prefix}_{flag}")
        config["save_mod"] = st.number_input("Save modifier", min_value=-3, max_value=3, key=f"{prefix}_save_mod")
        config["leader_attached"] = st.checkbox("Leader attached", key=f"{prefix}_leader_attached")
        config["allocate_precision_to_leader"] = st.checkbox(
            "Allocate Precision hits to leader", key=f"{prefix}_allocate_precision_to_leader",
        )

    return build_target(config)


def rules_sidebar() -> RuleFlags:
    st.sidebar.subheader("Rerolls & range")
    return RuleFlags(
        reroll_hit_ones=st.sidebar.checkbox("Reroll hit rolls of 1", key="r_hit_ones"),
        reroll_hit_fails=st.sidebar.checkbox("Reroll failed hits", key="r_hit_fails"),
        reroll_wound_ones=st.sidebar.checkbox("Reroll wound rolls of 1", key="r_wound_ones"),
        reroll_wound_fails=st.sidebar.checkbox("Reroll failed wounds", key="r_wound_fails"),
        half_range=st.sidebar.checkbox("Within half range", key="r_half_range"),
    )


def dice_inputs(prefix: str, fields: tuple[str, ...], needed: dict[str, int], sides: dict[str, int]) -> dict[str, str]:
    """Render one text box per dice field, each with a roll-for-me button."""
    labels = dict(DICE_FIELDS)
    values = {}
    for field in fields:
        key = f"{prefix}_{field}"
        text_col, button_col = st.columns([5, 1])
        values[field] = text_col.text_input(f"{labels[field]} (need {needed.get(field, 0)})", key=key)
        button_col.button(
            "Roll", key=f"roll_{key}",
            on_click=_on_roll, args=(key, needed.get(field, 0), sides.get(field, 6)),
        )
    return values


def show_result(result, assessment) -> None:
    totals = assessment.totals
    st.subheader(totals.label)
    st.metric("Damage", totals.total_post_fnp)
    if totals.note:
        st.caption(totals.note)
    cols = st.columns(5)
    cols[0].metric("Attacks", result.attacks)
    cols[1].metric("Hits", result.hits + result.sustained_extra_hits)
    cols[2].metric("Wounds", result.total_wounds)
    cols[3].metric("Failed saves", result.failed_saves_effective)
    cols[4].metric("Ignored", totals.ignored_total)
    st.caption(f"Status: {assessment.status}")


def main() -> None:
    st.set_page_config(page_title="Volley Calculator", layout="wide")
    st.title("Volley Calculator")
    _init_state()

    st.sidebar.checkbox("Preserve hooks", key="preserve_hooks")
    strict = st.sidebar.checkbox("Strict mode", key="strict")
    cols = st.sidebar.columns(2)
    cols[0].button("Load example", on_click=_on_load_example)
    cols[1].button("Clear all", on_click=_on_clear_all)
    st.sidebar.divider()

    weapon = weapon_sidebar()
    st.sidebar.divider()
    target = target_sidebar("t", "Target")
    st.sidebar.divider()
    flags = rules_sidebar()
    st.sidebar.divider()
    split = st.sidebar.checkbox("Split volley", key="split")
    target_b = target_sidebar("bt", "Target B") if split else None

    # Resolve once with the current text so the dice boxes can show how
    # many dice each phase needs.
    current = DiceInputs(**{field: st.session_state.get(f"d_{field}", "") for field, _ in DICE_FIELDS})
    preview = cached_resolve(weapon, target, current, flags)

    attack_spec = parse_dice_spec(weapon.attacks) if weapon.random_attacks else None
    damage_spec = parse_dice_spec(weapon.damage) if weapon.random_damage else None
    needed = {
        "attacks": attack_spec.n if attack_spec else 0,
        "hits": 0 if weapon.torrent else preview.attacks,
        "hit_rerolls": preview.hit_rerolls_needed,
        "wounds": preview.wound_roll_pool,
        "wound_rerolls": preview.wound_rerolls_needed,
        "saves": preview.savable_wounds,
        "damage": preview.damage_dice_needed,
        "fnp": preview.fnp_needed,
    }
    sides = {
        "attacks": attack_spec.sides if attack_spec else 6,
        "damage": damage_spec.sides if damage_spec and damage_spec.has_die else 6,
    }

    # In a split volley the save, damage and FNP boxes above belong to
    # Target A, so they ask for A's share rather than the whole pool.
    split_preview = None
    if split and target_b is not None:
        b_current = DiceInputs(**{field: st.session_state.get(f"b_{field}", "") for field in SPLIT_DICE_FIELDS})
        split_preview = split_volley(
            weapon, target, current, target_b, b_current,
            st.session_state.get("split_to_a", 0), flags,
        )
        needed.update(defense_needs(split_preview.targets["A"]))

    st.subheader("Dice")
    dice = DiceInputs(**dice_inputs("d", tuple(f for f, _ in DICE_FIELDS), needed, sides))
    result = cached_resolve(weapon, target, dice, flags)
    assessment = assess(weapon, target, dice, result, strict)
    show_result(result, assessment)

    if split and target_b is not None:
        st.divider()
        st.subheader("Split volley")
        to_a = st.number_input(
            f"Savable wounds to Target A (of {result.savable_wounds})",
            min_value=0, max_value=max(0, result.savable_wounds), key="split_to_a",
        )
        st.caption("Target A's dice are the save, damage and FNP boxes above. Mortal wounds go to Target A.")
        b_needed = defense_needs(split_preview.targets["B"]) if split_preview else {}
        b_dice = DiceInputs(**dice_inputs("b", SPLIT_DICE_FIELDS, b_needed, sides))
        outcome = split_volley(weapon, target, dice, target_b, b_dice, to_a, flags)
        res_a, res_b = st.columns(2)
        for col, label in ((res_a, "A"), (res_b, "B")):
            part = outcome.targets[label]
            col.metric(f"Target {label}: damage", part.total_post_fnp)
            col.caption(
                f"{part.savable_wounds} wounds, {part.saves.failed} failed saves, "
                f"{part.mortal_wound_attacks} mortal wounds"
            )
        errors, log = outcome.errors, outcome.log
    else:
        errors, log = result.errors, result.log

    if errors:
        st.subheader("Errors")
        for error in errors:
            st.error(error)
    if assessment.missing_stats:
        st.warning("Missing: " + ", ".join(assessment.missing_stats))

    st.subheader("Log")
    st.code("\n".join(log))


if __name__ == "__main__":
    main()
