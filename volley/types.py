"""
The small closed vocabularies a volley is described in.

A volley moves through a fixed list of phases, each reroll phase runs in
one of three modes, a split volley has exactly two targets, and the form
is always in one of three readiness states. Naming those sets as Literal
aliases lets a checker catch a misspelled phase or target label before
the resolver ever sees it.
"""

from typing import Literal, TypeAlias

# The phases of a volley, in resolution order. Used to key dice counters
# and to name the dice fields a phase consumes.
PhaseName: TypeAlias = Literal[
    "attacks",
    "hits",
    "hit_rerolls",
    "wounds",
    "wound_rerolls",
    "saves",
    "damage",
    "fnp",
]

# Which original dice a reroll phase may replace. "fails" wins over "ones"
# when both are switched on, since every natural 1 is also a failure.
RerollMode: TypeAlias = Literal["none", "ones", "fails"]

# The two halves of a split volley. Target A is the primary target: the
# shared wound roll uses its Toughness and mortal wounds land on it unless
# the caller says otherwise.
TargetLabel: TypeAlias = Literal["A", "B"]

# Readiness of the inputs as reported to the calling layer.
Readiness: TypeAlias = Literal[
    "Ready",
    "Waiting for dice",
    "Waiting for stats",
]
