"""
Datasheet fill: turning a unit lookup into weapon and target profiles.

Looking a unit up (by asking a language model about its datasheet, or by
scraping a rules site) happens outside this package. What comes back is a
small JSON object, and this module maps it onto profiles. Fields the
lookup wasn't sure about are simply absent and keep their defaults, so a
partial answer still fills in what it can.

Attacker replies look like::

    {"attacks": "D6", "bs": 3, "strength": 5, "ap": -1, "damage": 2,
     "torrent": false, "lethalHits": true, "sustainedHits": false,
     "sustainedHitsN": 1, "devastatingWounds": false, "twinLinked": false}

and defender replies like::

    {"toughness": 4, "save": 3, "invulnSave": 5, "fnpSave": null}
"""

from __future__ import annotations

import json
import re
from dataclasses import replace
from typing import Any, Mapping

from volley.profiles import TargetProfile, WeaponProfile

_FENCE_RE = re.compile(r"^```[a-zA-Z]*\n?|```$")


def _int_or_none(value: Any) -> int | None:
    """Whole numbers, tolerating the "3+" a datasheet prints for rolls.

    Anything else comes back as None, the same as a field the lookup left
    out.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    try:
        return int(str(value).strip().rstrip("+"))
    except ValueError:
        return None


def _count_or_expression(value: Any) -> int | str | None:
    """Dice expressions contain a D; anything else is a fixed number."""
    if isinstance(value, str) and "d" in value.lower():
        return value.strip()
    return _int_or_none(value)


def weapon_from_mapping(raw: Mapping[str, Any], base: WeaponProfile | None = None) -> WeaponProfile:
    """Fill a weapon profile from an attacker lookup reply.

    Keyword flags the reply doesn't mention are switched off, the same as
    loading any other weapon. Modifiers on ``base`` are kept.
    """
    base = base or WeaponProfile()
    return replace(
        base,
        attacks=_count_or_expression(raw.get("attacks")),
        to_hit=_int_or_none(raw.get("bs")),
        strength=_int_or_none(raw.get("strength")),
        ap=_int_or_none(raw.get("ap")),
        damage=_count_or_expression(raw.get("damage")),
        torrent=bool(raw.get("torrent")),
        lethal_hits=bool(raw.get("lethalHits")),
        sustained_hits=bool(raw.get("sustainedHits")),
        sustained_hits_n=_int_or_none(raw.get("sustainedHitsN")) or 1,
        devastating_wounds=bool(raw.get("devastatingWounds")),
        twin_linked=bool(raw.get("twinLinked")),
    )


def target_from_mapping(raw: Mapping[str, Any], base: TargetProfile | None = None) -> TargetProfile:
    """Fill a target profile from a defender lookup reply."""
    base = base or TargetProfile()
    return replace(
        base,
        toughness=_int_or_none(raw.get("toughness")),
        armor_save=_int_or_none(raw.get("save")),
        invuln=_int_or_none(raw.get("invulnSave")),
        fnp=_int_or_none(raw.get("fnpSave")),
    )


def parse_datasheet_reply(text: str) -> dict[str, Any]:
    """Decode a lookup reply, tolerating a markdown code fence around it.

    Raises ValueError when the reply isn't a JSON object.
    """
    body = _FENCE_RE.sub("", text.strip()).strip()
    try:
        data = json.loads(body)
    except json.JSONDecodeError as e:
        raise ValueError(f"datasheet reply is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"datasheet reply must be a JSON object, got {type(data).__name__}")
    return data
