"""
Memoized resolution for callers that re-resolve on every keystroke.

The UI recomputes the whole volley whenever any field changes. Because the
four input profiles are frozen dataclasses they hash by value, so the full
input tuple can key an LRU cache directly. The cache is purely an
optimization: resolve() is deterministic, and a miss just recomputes.

A hit hands back the same ResolutionResult every earlier caller got, so
results from the cache are read-only. The result itself is frozen and its
log and errors are tuples; the phase records on ``offense`` and ``defense``
are plain dataclasses and must not be modified either. Callers that want
to annotate a result should build their own from it.
"""

from __future__ import annotations

from functools import lru_cache

from volley.engine import resolve
from volley.profiles import DiceInputs, RuleFlags, TargetProfile, WeaponProfile
from volley.records import ResolutionResult

CACHE_SIZE = 256


@lru_cache(maxsize=CACHE_SIZE)
def cached_resolve(
    weapon: WeaponProfile,
    target: TargetProfile,
    dice: DiceInputs,
    flags: RuleFlags,
) -> ResolutionResult:
    """resolve(), but identical inputs return the identical result object.

    The result is shared between callers: treat it, and the phase records
    hanging off it, as read-only.
    """
    return resolve(weapon, target, dice, flags)


cache_info = cached_resolve.cache_info
clear_cache = cached_resolve.cache_clear
