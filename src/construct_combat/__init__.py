"""Construct Combat - turn-based encounter engine for an AI Dungeon Master.

The engine tracks initiative order, rounds and turns, timed conditions,
and dispatches combat actions. It rolls dice only for engine-controlled
participants (monsters, NPCs); player-controlled participants always get
a roll request instead, and damage is always rolled by the caller.

Example:
    >>> from construct_combat import CombatManager, ControlKind, Participant
    >>> manager = CombatManager()
    >>> manager.initialize([
    ...     Participant(id="goblin", name="Goblin", control=ControlKind.ENGINE),
    ...     Participant(id="fighter", name="Fighter", control=ControlKind.PLAYER),
    ... ])
    >>> manager.report_initiative("fighter", 15)
    >>> manager.advance_turn()

Modules:
    core: Configuration, logging, and base exceptions.
    models: Pydantic V2 schemas for participants, conditions, actions and events.
    engine: Die roller, initiative, conditions, actions and the CombatManager.
"""

from __future__ import annotations

# Core
from construct_combat.core.config import Settings, get_settings
from construct_combat.core.exceptions import ConstructCombatError, EncounterError
from construct_combat.core.logging import configure_logging, get_logger

# Models
from construct_combat.models import (
    ActionResult,
    ActionType,
    CombatEvent,
    CombatSummary,
    Condition,
    ControlKind,
    DieSpec,
    EventKind,
    Participant,
    Weapon,
)

# Engine
from construct_combat.engine import (
    CombatManager,
    D20DieRoller,
    DieRoller,
    ScriptedDieRoller,
)


__version__ = "0.1.0"
__all__ = [
    "__version__",
    # Core
    "ConstructCombatError",
    "EncounterError",
    "Settings",
    "get_settings",
    "configure_logging",
    "get_logger",
    # Models
    "ActionResult",
    "ActionType",
    "CombatEvent",
    "CombatSummary",
    "Condition",
    "ControlKind",
    "DieSpec",
    "EventKind",
    "Participant",
    "Weapon",
    # Engine
    "CombatManager",
    "DieRoller",
    "D20DieRoller",
    "ScriptedDieRoller",
]
