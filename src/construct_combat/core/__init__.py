"""Core module providing configuration, logging, and base exceptions.

Exports:
    Exceptions:
        ConstructCombatError: Base exception for all engine errors.
        EncounterError: Base for encounter lifecycle and action failures.

    Configuration:
        Settings: Main application settings class.
        get_settings: Get the settings singleton.
        clear_settings_cache: Force settings reload.

    Logging:
        configure_logging: Set up application logging.
        get_logger: Get a configured logger instance.
"""

from __future__ import annotations

from construct_combat.core.config import (
    EncounterSettings,
    Settings,
    clear_settings_cache,
    get_settings,
)
from construct_combat.core.exceptions import (
    AlreadyActiveError,
    ConditionAlreadyAppliedError,
    ConfigurationError,
    ConstructCombatError,
    DiceRollError,
    EncounterError,
    InvalidEncounterError,
    NotActiveError,
    NotAwaitingRollError,
    NotYourTurnError,
    ParticipantNotFoundError,
    UnknownActionError,
    UnknownSpellError,
    ValidationError,
)
from construct_combat.core.logging import (
    configure_logging,
    get_logger,
)


__all__ = [
    # Base exception
    "ConstructCombatError",
    # Configuration exceptions
    "ConfigurationError",
    "ValidationError",
    # Dice exceptions
    "DiceRollError",
    # Encounter exceptions
    "EncounterError",
    "InvalidEncounterError",
    "AlreadyActiveError",
    "NotActiveError",
    "ParticipantNotFoundError",
    "NotAwaitingRollError",
    "NotYourTurnError",
    "UnknownSpellError",
    "UnknownActionError",
    "ConditionAlreadyAppliedError",
    # Configuration
    "Settings",
    "EncounterSettings",
    "get_settings",
    "clear_settings_cache",
    # Logging
    "configure_logging",
    "get_logger",
]
