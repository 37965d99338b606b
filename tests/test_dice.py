"""Tests for dice text parsing and the roll-for-me helper."""

from unittest.mock import patch

from volley.dice import DiceSpec, parse_dice_list, parse_dice_spec, roll_dice, valid_die


class TestParseDiceList:
    """Tests for turning free text into die results."""

    def test_space_separated(self) -> None:
        assert parse_dice_list("6 5 4") == [6, 5, 4]

    def test_brackets_and_commas_are_whitespace(self) -> None:
        """Players often paste dice as lists: "6 5, [2] 1"."""
        assert parse_dice_list("6 5, [2] 1") == [6, 5, 2, 1]
        assert parse_dice_list("[1,2,3]") == [1, 2, 3]

    def test_empty_and_whitespace(self) -> None:
        assert parse_dice_list("") == []
        assert parse_dice_list("   \n\t ") == []
        assert parse_dice_list(None) == []

    def test_non_numbers_dropped(self) -> None:
        """Tokens that aren't finite numbers are silently dropped."""
        assert parse_dice_list("6 x 5 nan inf 4") == [6, 5, 4]

    def test_order_preserved(self) -> None:
        """Later phases consume dice by position, so order matters."""
        assert parse_dice_list("1 6 1 6") == [1, 6, 1, 6]

    def test_out_of_range_values_kept(self) -> None:
        """Range checking is the resolver's job, not the parser's."""
        assert parse_dice_list("0 7 -2") == [0, 7, -2]

    def test_fractions_kept_as_floats(self) -> None:
        result = parse_dice_list("2.5 3.0")
        assert result == [2.5, 3]
        assert isinstance(result[1], int)

    def test_newlines(self) -> None:
        assert parse_dice_list("6\n5\n4") == [6, 5, 4]


class TestParseDiceSpec:
    """Tests for dice expressions like 2D6+1."""

    def test_fixed_number(self) -> None:
        assert parse_dice_spec("6") == DiceSpec(ok=True, n=6, sides=6, mod=0, has_die=False)

    def test_dice_count_and_sides(self) -> None:
        assert parse_dice_spec("2D6") == DiceSpec(ok=True, n=2, sides=6, mod=0, has_die=True)

    def test_implied_count_with_modifier(self) -> None:
        """D3+1 is one D3 plus 1."""
        assert parse_dice_spec("D3+1") == DiceSpec(ok=True, n=1, sides=3, mod=1, has_die=True)

    def test_lowercase_and_spaces(self) -> None:
        spec = parse_dice_spec(" 2d6 + 2 ")
        assert (spec.ok, spec.n, spec.sides, spec.mod) == (True, 2, 6, 2)

    def test_empty_is_not_ok(self) -> None:
        assert parse_dice_spec("").ok is False
        assert parse_dice_spec(None).ok is False
        assert parse_dice_spec("   ").n == 0

    def test_garbage_is_not_ok(self) -> None:
        for raw in ("abc", "D", "+1", "2D6-1", "D6+", "1.5"):
            spec = parse_dice_spec(raw)
            assert spec.ok is False, raw
            assert spec.n == 0, raw

    def test_fixed_zero_is_not_ok(self) -> None:
        spec = parse_dice_spec("0")
        assert spec.ok is False
        assert spec.has_die is False

    def test_zero_sides_fall_back_to_d6(self) -> None:
        assert parse_dice_spec("D0").sides == 6

    def test_sides_floor_at_two(self) -> None:
        assert parse_dice_spec("D1").sides == 2

    def test_int_input(self) -> None:
        """Expressions can be anything str() can render."""
        assert parse_dice_spec(3).n == 3


class TestValidDie:
    def test_d6_range(self) -> None:
        assert all(valid_die(v) for v in range(1, 7))
        assert not valid_die(0)
        assert not valid_die(7)

    def test_non_integers_invalid(self) -> None:
        assert not valid_die(2.5)
        assert valid_die(3.0)

    def test_custom_sides(self) -> None:
        assert valid_die(3, sides=3)
        assert not valid_die(4, sides=3)

    def test_none_invalid(self) -> None:
        assert not valid_die(None)


class TestRollDice:
    def test_formats_as_typed_text(self) -> None:
        with patch("volley.dice.randrange", side_effect=[6, 1, 3]):
            assert roll_dice(3) == "6 1 3"

    def test_range_respects_sides(self) -> None:
        with patch("volley.dice.randrange", return_value=2) as mock_rr:
            roll_dice(2, sides=3)
            for call in mock_rr.call_args_list:
                assert call.args == (1, 4)

    def test_results_parse_back(self) -> None:
        dice = parse_dice_list(roll_dice(50))
        assert len(dice) == 50
        assert all(valid_die(d) for d in dice)

    def test_zero_or_negative_is_empty(self) -> None:
        assert roll_dice(0) == ""
        assert roll_dice(-2) == ""
