"""Exception hierarchy for the Construct combat engine.

Everything derives from ConstructCombatError so a UI or AI orchestrator
can catch the family at its boundary, yet each failure kind has its own
class so the caller can pick a corrective message.

Example:
    >>> from construct_combat.core.exceptions import NotYourTurnError
    >>> raise NotYourTurnError("It is not Fighter's turn", participant_id="fighter")
"""

from __future__ import annotations

from typing import Any


class ConstructCombatError(Exception):
    """Base exception for all combat engine errors.

    Attributes:
        message: Human-readable error description.
        details: Structured context about the failure.
    """

    def __init__(
        self,
        message: str,
        *,
        details: dict[str, Any] | None = None,
        **context: Any,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            details: Extra structured context.
            **context: Named context fields; None values are dropped.
        """
        self.message = message
        self.details = dict(details or {})
        self.details.update({key: value for key, value in context.items() if value is not None})
        super().__init__(str(self))

    def __str__(self) -> str:
        if not self.details:
            return self.message
        rendered = ", ".join(f"{key}={value!r}" for key, value in self.details.items())
        return f"{self.message} [{rendered}]"

    def __repr__(self) -> str:
        return f"{type(self).__name__}(message={self.message!r}, details={self.details!r})"


# =============================================================================
# Configuration, validation and dice
# =============================================================================


class ConfigurationError(ConstructCombatError):
    """Raised when engine settings are missing or invalid."""

    def __init__(
        self,
        message: str,
        *,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details=details, config_key=config_key)


class ValidationError(ConstructCombatError):
    """Raised when caller-supplied data fails validation.

    This covers malformed participant and action payloads as well as
    out-of-range values such as a zero condition duration.
    """

    def __init__(
        self,
        message: str,
        *,
        field_name: str | None = None,
        invalid_value: Any = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message,
            details=details,
            field_name=field_name,
            invalid_value=invalid_value,
        )


class DiceRollError(ConstructCombatError):
    """Raised when the die roller cannot produce a result."""

    def __init__(
        self,
        message: str,
        *,
        expression: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details=details, expression=expression)


# =============================================================================
# Encounter
# =============================================================================


class EncounterError(ConstructCombatError):
    """Base for encounter lifecycle and action failures.

    Each subclass is a local, recoverable failure reported to the caller;
    none leaves the encounter partially updated.
    """

    def __init__(
        self,
        message: str,
        *,
        participant_id: str | None = None,
        round_number: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the participant and round involved, when known."""
        super().__init__(
            message,
            details=details,
            participant_id=participant_id,
            round_number=round_number,
        )


class InvalidEncounterError(EncounterError):
    """Raised when an encounter cannot be formed from the given participants."""


class AlreadyActiveError(EncounterError):
    """Raised when initializing an encounter that is already running."""


class NotActiveError(EncounterError):
    """Raised when an active-only operation is called on an inactive encounter."""


class ParticipantNotFoundError(EncounterError):
    """Raised when an operation references an unknown participant identity."""


class NotAwaitingRollError(EncounterError):
    """Raised when initiative is reported for a participant that is not awaiting one."""


class NotYourTurnError(EncounterError):
    """Raised when an action is submitted for someone other than the current participant."""


class UnknownSpellError(EncounterError):
    """Raised when a caster attempts a spell it does not know."""


class UnknownActionError(EncounterError):
    """Raised when an action type is outside the supported set."""


class ConditionAlreadyAppliedError(EncounterError):
    """Raised when re-applying a condition under the ``reject`` policy."""


__all__ = [
    "ConstructCombatError",
    "ConfigurationError",
    "ValidationError",
    "DiceRollError",
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
]
