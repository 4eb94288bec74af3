"""Combat engine for the Construct.

Submodules:
    dice: Die-roller capability (d20-backed and scripted)
    initiative: Initiative resolution and turn ordering
    conditions: Timed status conditions
    actions: Action dispatch and the dice deferral policy
    combat_manager: The encounter facade driven by the caller

Example:
    >>> from construct_combat.engine import CombatManager
    >>> manager = CombatManager()
    >>> manager.is_active
    False
"""

from __future__ import annotations

from construct_combat.engine.actions import (
    ActionResolver,
    parse_action_request,
    parse_action_type,
)
from construct_combat.engine.combat_manager import (
    CombatManager,
    EventListener,
    LivenessPredicate,
    default_is_alive,
)
from construct_combat.engine.conditions import ConditionTracker, normalize_condition_name
from construct_combat.engine.dice import D20DieRoller, DieRoller, ScriptedDieRoller
from construct_combat.engine.initiative import InitiativeResolver, sort_by_initiative


__all__ = [
    # Dice
    "DieRoller",
    "D20DieRoller",
    "ScriptedDieRoller",
    # Initiative
    "InitiativeResolver",
    "sort_by_initiative",
    # Conditions
    "ConditionTracker",
    "normalize_condition_name",
    # Actions
    "ActionResolver",
    "parse_action_type",
    "parse_action_request",
    # Encounter
    "CombatManager",
    "EventListener",
    "LivenessPredicate",
    "default_is_alive",
]
