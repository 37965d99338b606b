#!/usr/bin/env python3
"""Resolve the canonical example volley and print its step log."""

from volley.engine import resolve
from volley.profiles import RuleFlags, load_example

weapon, target, dice = load_example()
result = resolve(weapon, target, dice, RuleFlags())
print("\n".join(result.log))
for error in result.errors:
    print(f"error: {error}")
print(
    f"{result.attacks} attacks deal {result.total_post_fnp} damage"
    f" from {result.failed_saves_effective} failed saves"
)
