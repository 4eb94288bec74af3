"""Enumeration types for the Construct combat engine."""

from __future__ import annotations

from enum import StrEnum


class ControlKind(StrEnum):
    """Who operates a participant.

    The engine may roll dice only on behalf of engine-controlled
    participants; player-controlled participants always supply their
    own results.
    """

    PLAYER = "player"
    ENGINE = "engine"

    @property
    def engine_rolls(self) -> bool:
        """Whether the engine is allowed to roll dice for this kind."""
        return self is ControlKind.ENGINE


class Ability(StrEnum):
    """The six ability scores."""

    STR = "strength"
    DEX = "dexterity"
    CON = "constitution"
    INT = "intelligence"
    WIS = "wisdom"
    CHA = "charisma"

    @property
    def full_name(self) -> str:
        """Get the full name of the ability (e.g., 'Strength')."""
        return self.value.capitalize()


class ActionType(StrEnum):
    """Actions a participant can submit on its turn."""

    ATTACK = "attack"
    SPELL = "spell"
    ABILITY = "ability"
    MOVE = "move"

    @classmethod
    def parse(cls, value: str) -> "ActionType | None":
        """Resolve an action name, accepting the legacy aliases.

        Args:
            value: Action name such as ``attack`` or ``cast_spell``.

        Returns:
            The matching ActionType, or None if the name is unknown.
        """
        key = value.strip().lower()
        key = _ACTION_ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            return None


_ACTION_ALIASES = {
    "cast_spell": "spell",
    "use_ability": "ability",
}


class RollType(StrEnum):
    """How a d20 roll is made."""

    NORMAL = "normal"
    ADVANTAGE = "advantage"
    DISADVANTAGE = "disadvantage"

    @classmethod
    def from_flags(cls, *, advantage: bool, disadvantage: bool) -> "RollType":
        """Combine advantage flags; having both cancels out."""
        if advantage and not disadvantage:
            return cls.ADVANTAGE
        if disadvantage and not advantage:
            return cls.DISADVANTAGE
        return cls.NORMAL


class ConditionPolicy(StrEnum):
    """What re-applying an already-present named condition does."""

    STACK = "stack"
    """Append an independent record alongside the existing ones."""

    REFRESH = "refresh"
    """Reset the existing records' duration and applied round."""

    REJECT = "reject"
    """Refuse the application."""


__all__ = [
    "ControlKind",
    "Ability",
    "ActionType",
    "RollType",
    "ConditionPolicy",
]
