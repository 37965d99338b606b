"""Tests for hit and wound rerolls.

Eligibility is decided from the original dice in one pass, and reroll dice
are handed out to the eligible positions in ascending order.
"""

from __future__ import annotations

from dataclasses import replace

from volley.engine import resolve
from volley.profiles import EXAMPLE_DICE, EXAMPLE_TARGET, EXAMPLE_WEAPON, DiceInputs, RuleFlags, WeaponProfile


def example(flags: RuleFlags, weapon: WeaponProfile = EXAMPLE_WEAPON, **dice_kw: str):
    return resolve(weapon, EXAMPLE_TARGET, replace(EXAMPLE_DICE, **dice_kw), flags)


class TestHitRerolls:
    """The example hit dice are 6 5 5 4 4 3 2 2 1 6, needing 3+."""

    def test_reroll_ones(self) -> None:
        r = example(RuleFlags(reroll_hit_ones=True), hit_rerolls="5", wounds="6 5 4 3 2 1 6 6")
        assert r.hit_rerolls_needed == 1
        assert r.hits == 8

    def test_reroll_fails(self) -> None:
        r = example(RuleFlags(reroll_hit_fails=True), hit_rerolls="3 1 6")
        assert r.hit_rerolls_needed == 3
        assert r.hits == 9
        assert r.crit_hits == 3

    def test_fails_wins_over_ones(self) -> None:
        r = example(RuleFlags(reroll_hit_ones=True, reroll_hit_fails=True), hit_rerolls="3 1 6")
        assert r.offense.hits.reroll.mode == "fails"
        assert r.hit_rerolls_needed == 3

    def test_consumed_in_position_order(self) -> None:
        """The first reroll die replaces the first eligible die."""
        r = example(RuleFlags(reroll_hit_fails=True), hit_rerolls="6 2 2")
        dice = r.offense.hits.dice
        assert dice[6].face == 6
        assert dice[6].rerolled_from == 2
        assert dice[7].face == 2
        assert dice[8].face == 2
        assert dice[8].rerolled_from == 1

    def test_reroll_replaces_rather_than_adds(self) -> None:
        r = example(RuleFlags(reroll_hit_ones=True), hit_rerolls="1")
        assert r.hits == 7

    def test_count_mismatch_is_one_error(self) -> None:
        r = example(RuleFlags(reroll_hit_fails=True), hit_rerolls="3")
        mismatches = [e for e in r.errors if e.startswith("Hit reroll dice provided")]
        assert mismatches == ["Hit reroll dice provided (1) must equal eligible hit rerolls (3)."]
        assert r.hits == 8

    def test_too_many_rerolls(self) -> None:
        r = example(RuleFlags(reroll_hit_ones=True), hit_rerolls="3 3")
        assert "Hit reroll dice provided (2) must equal eligible hit rerolls (1)." in r.errors
        assert r.hits == 8

    def test_invalid_reroll_die(self) -> None:
        r = example(RuleFlags(reroll_hit_ones=True), hit_rerolls="9")
        assert "Hit reroll #1 is not a valid D6 result (1-6)." in r.errors
        assert r.hits == 7

    def test_invalid_original_die_not_eligible(self) -> None:
        w = WeaponProfile(attacks=2, to_hit=3, strength=4, ap=0, damage=1)
        r = resolve(w, EXAMPLE_TARGET, DiceInputs(hits="7 1", hit_rerolls="4"), RuleFlags(reroll_hit_fails=True))
        assert r.hit_rerolls_needed == 1
        assert r.hits == 1

    def test_nothing_eligible(self) -> None:
        """No ones rolled: reroll dice are ignored without complaint."""
        r = example(RuleFlags(reroll_hit_ones=True), hits="6 5 5 4 4 3 2 2 2 6", hit_rerolls="6")
        assert r.hit_rerolls_needed == 0
        assert r.hits == 7
        assert not any("reroll" in e for e in r.errors)

    def test_no_reroll_flags(self) -> None:
        r = example(RuleFlags(), hit_rerolls="6 6 6")
        assert r.hit_rerolls_needed == 0
        assert r.hits == 7

    def test_rerolled_crit_triggers_sustained(self) -> None:
        w = replace(EXAMPLE_WEAPON, sustained_hits=True)
        r = example(RuleFlags(reroll_hit_ones=True), weapon=w, hit_rerolls="6")
        assert r.sustained_extra_hits == 3
        assert r.wound_roll_pool == 11

    def test_log_before_and_after(self) -> None:
        r = example(RuleFlags(reroll_hit_ones=True), hit_rerolls="5", wounds="6 5 4 3 2 1 6 6")
        assert any(line.startswith("Hit rerolls (ones): eligible = 1. After rerolls: hits = 8") for line in r.log)


class TestWoundRerolls:
    """The example wound dice are 6 5 4 3 2 1 6, needing 3+."""

    def test_reroll_ones(self) -> None:
        r = example(RuleFlags(reroll_wound_ones=True), wound_rerolls="3")
        assert r.wound_rerolls_needed == 1
        assert r.total_wounds == 6

    def test_reroll_fails(self) -> None:
        r = example(RuleFlags(reroll_wound_fails=True), wound_rerolls="4 6")
        assert r.wound_rerolls_needed == 2
        assert r.total_wounds == 7
        assert r.crit_wounds == 3

    def test_twin_linked_rerolls_failed_wounds(self) -> None:
        w = replace(EXAMPLE_WEAPON, twin_linked=True)
        r = example(RuleFlags(), weapon=w, wound_rerolls="4 6")
        assert r.offense.wounds.reroll.mode == "fails"
        assert r.total_wounds == 7

    def test_twin_linked_beats_reroll_ones(self) -> None:
        w = replace(EXAMPLE_WEAPON, twin_linked=True)
        r = example(RuleFlags(reroll_wound_ones=True), weapon=w, wound_rerolls="4 6")
        assert r.wound_rerolls_needed == 2

    def test_count_mismatch(self) -> None:
        r = example(RuleFlags(reroll_wound_fails=True), wound_rerolls="")
        assert "Wound reroll dice provided (0) must equal eligible wound rerolls (2)." in r.errors
        assert r.total_wounds == 5

    def test_log_shows_before_and_after(self) -> None:
        r = example(RuleFlags(reroll_wound_fails=True), wound_rerolls="4 6")
        assert (
            "Wound rerolls (fails): eligible = 2. Before rerolls: wounds from rolls = 5, crit wounds = 2"
            in r.log
        )

    def test_empty_pool_skips_rerolls(self) -> None:
        r = example(RuleFlags(reroll_wound_fails=True), hits="1 1 1 1 1 1 1 1 1 1", wounds="", wound_rerolls="6")
        assert r.wound_rerolls_needed == 0
        assert r.total_wounds == 0
