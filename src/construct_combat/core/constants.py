"""Rules constants used by the combat engine."""

from __future__ import annotations

import re

# =============================================================================
# Dice
# =============================================================================

D20 = 20
"""Sides on the die used for initiative and attack rolls."""

DICE_NOTATION_PATTERN = re.compile(r"^\s*(\d*)\s*[dD]\s*(\d+)\s*(?:([+-])\s*(\d+))?\s*$")
"""Matches simple ``NdS[+/-M]`` notation such as ``1d8`` or ``2d6+3``."""

# =============================================================================
# Combat
# =============================================================================

FIRST_ROUND = 1
"""Round number when an encounter begins."""

DEFAULT_ARMOR_CLASS = 13
"""Armor class assumed for targets that do not declare one."""

DEFAULT_WEAPON_DAMAGE = "1d8"
"""Damage dice used when no weapon is equipped or declared."""

ABILITY_SCORE_BASELINE = 10
"""Ability score with a modifier of zero."""

DEFAULT_OUTCOME = "victory"
"""Outcome tag used when an encounter is ended without one."""

MAX_CONDITION_NAME_LENGTH = 50
"""Longest condition tag accepted, after trimming."""


__all__ = [
    "D20",
    "DICE_NOTATION_PATTERN",
    "FIRST_ROUND",
    "DEFAULT_ARMOR_CLASS",
    "DEFAULT_WEAPON_DAMAGE",
    "ABILITY_SCORE_BASELINE",
    "DEFAULT_OUTCOME",
    "MAX_CONDITION_NAME_LENGTH",
]
