"""
Dice text parsing for manually entered rolls.

Nothing in the resolver rolls dice on its own: players roll physical dice
and type the results in. This module turns that free text into numbers
("6 5, [2] 1" becomes [6, 5, 2, 1]) and parses dice expressions such as
"2D6" or "D3+1" into a count, a die size and a flat modifier.

The only randomness here is roll_dice(), which the UI uses to fill a dice
field for players who'd rather not roll by hand.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from random import randrange

_SPEC_RE = re.compile(r"^(\d+)?(?:\s*[dD](\d+))?(?:\s*\+\s*(\d+))?$")
_SEPARATORS = str.maketrans({"[": " ", "]": " ", ",": " "})


@dataclass(frozen=True)
class DiceSpec:
    """A parsed dice expression like 2D6+1."""

    ok: bool
    """False when the text was empty, didn't match, or was a fixed 0."""

    n: int
    """Number of dice (or the fixed value when has_die is False)."""

    sides: int = 6
    """Die size. Defaults to 6 when the expression has no D part."""

    mod: int = 0
    """Flat amount added after the dice are summed."""

    has_die: bool = False
    """Whether the expression contained a D<sides> part."""


INVALID_SPEC = DiceSpec(ok=False, n=0)


def parse_dice_spec(raw: object) -> DiceSpec:
    """Parse "6", "2D6", "D3+1" and the like. Never raises.

    The count defaults to 1 when a die follows ("D6" is 1D6), the die size
    defaults to 6, and only positive modifiers are recognized. A bare number
    with no die part is a fixed value, so "0" is not ok.
    """
    s = "" if raw is None else str(raw).strip()
    if not s:
        return INVALID_SPEC

    m = _SPEC_RE.match(s)
    if not m or (not m[1] and not m[2]):
        return INVALID_SPEC

    has_die = m[2] is not None
    if has_die:
        n = max(1, int(m[1] or "1") or 1)
    else:
        n = max(0, int(m[1]))
    sides = max(2, int(m[2] or "6") or 6)
    mod = int(m[3] or "0")
    return DiceSpec(ok=n > 0, n=n, sides=sides, mod=mod, has_die=has_die)


def _to_number(token: str) -> int | float | None:
    try:
        value = float(token)
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return int(value) if value.is_integer() else value


def parse_dice_list(text: str | None) -> list[int | float]:
    """Turn free text into an ordered list of die results.

    Brackets and commas count as whitespace, and anything that isn't a
    finite number is silently dropped. Order matters: later phases consume
    this list by position.
    """
    if not text:
        return []
    values = (_to_number(token) for token in text.translate(_SEPARATORS).split())
    return [v for v in values if v is not None]


def valid_die(value: int | float | None, sides: int = 6) -> bool:
    """Whether value is a legal face of a die with this many sides."""
    return (
        value is not None
        and float(value).is_integer()
        and 1 <= value <= sides
    )


def die_label(sides: int = 6) -> str:
    """Human-readable description of a legal result, for error messages."""
    return f"D{sides} result (1-{sides})"


def roll_dice(n: int, sides: int = 6) -> str:
    """Roll n dice and format them the way a player would type them."""
    return " ".join(str(randrange(1, sides + 1)) for _ in range(max(0, n)))
