"""Pydantic V2 schemas for the Construct combat engine.

Submodules:
    enums: Enumeration types (ControlKind, Ability, ActionType, ...)
    participant: Participants and their weapons
    dice: Roll descriptions handed to callers
    events: Outbound combat events
    actions: Action requests and results
    encounter: Encounter state, conditions, and operation results

Example:
    >>> from construct_combat.models import ControlKind, Participant
    >>> goblin = Participant(
    ...     id="goblin-1", name="Goblin", control=ControlKind.ENGINE,
    ...     ability_scores={"dexterity": 14},
    ... )
    >>> goblin.initiative_bonus
    2
"""

from __future__ import annotations

from construct_combat.models.actions import (
    ACTION_REQUEST_TYPES,
    AbilityRequest,
    ActionRequest,
    ActionResult,
    AttackRequest,
    MoveRequest,
    SpellRequest,
)
from construct_combat.models.dice import DieSpec
from construct_combat.models.encounter import (
    CombatSummary,
    Condition,
    ConditionResult,
    EncounterState,
    EncounterStatus,
    InitiativeEntry,
    InitiativeResult,
    OperationResult,
    TurnResult,
)
from construct_combat.models.enums import (
    Ability,
    ActionType,
    ConditionPolicy,
    ControlKind,
    RollType,
)
from construct_combat.models.events import CombatEvent, EventKind
from construct_combat.models.participant import (
    Participant,
    Weapon,
    calculate_modifier,
)


__all__ = [
    # Enumerations
    "Ability",
    "ActionType",
    "ConditionPolicy",
    "ControlKind",
    "RollType",
    # Participants
    "Participant",
    "Weapon",
    "calculate_modifier",
    # Dice
    "DieSpec",
    # Events
    "CombatEvent",
    "EventKind",
    # Actions
    "ActionRequest",
    "AttackRequest",
    "SpellRequest",
    "AbilityRequest",
    "MoveRequest",
    "ACTION_REQUEST_TYPES",
    "ActionResult",
    # Encounter
    "Condition",
    "EncounterState",
    "InitiativeEntry",
    "OperationResult",
    "InitiativeResult",
    "TurnResult",
    "ConditionResult",
    "CombatSummary",
    "EncounterStatus",
]
