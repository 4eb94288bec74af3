"""Pydantic V2 schemas for encounter state and operation results.

EncounterState is the aggregate root owned by one CombatManager. The
remaining models are snapshots returned to callers.
"""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, computed_field

from construct_combat.core.constants import MAX_CONDITION_NAME_LENGTH
from construct_combat.models.events import CombatEvent
from construct_combat.models.participant import Participant


class Condition(BaseModel):
    """A named timed effect bound to one participant.

    Attributes:
        name: Condition tag, e.g. ``poisoned`` or ``stunned``.
        duration: Rounds remaining; None means until explicitly removed.
        applied_round: Round in which the condition was applied.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    name: str = Field(min_length=1, max_length=MAX_CONDITION_NAME_LENGTH)
    duration: Annotated[int, Field(ge=0)] | None = None
    applied_round: int = Field(ge=0)

    @property
    def is_indefinite(self) -> bool:
        return self.duration is None


class EncounterState(BaseModel):
    """Mutable state of one encounter.

    Invariants while ``active``: ``round_number >= 1`` and
    ``0 <= turn_index < len(initiative_order)``.

    Attributes:
        active: Whether combat is running.
        round_number: Current round (0 when inactive).
        turn_index: Index of the current participant in the initiative order.
        initiative_order: Participants in turn order.
        conditions: Condition records keyed by participant identity.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    active: bool = False
    round_number: int = Field(default=0, ge=0)
    turn_index: int = Field(default=0, ge=0)
    initiative_order: list[Participant] = Field(default_factory=list)
    conditions: dict[str, list[Condition]] = Field(default_factory=dict)

    @property
    def current_participant(self) -> Participant | None:
        if not self.active or not self.initiative_order:
            return None
        return self.initiative_order[self.turn_index]

    def index_of(self, participant_id: str) -> int | None:
        """Position of a participant in the initiative order, if present."""
        for index, participant in enumerate(self.initiative_order):
            if participant.id == participant_id:
                return index
        return None

    def get(self, participant_id: str) -> Participant | None:
        index = self.index_of(participant_id)
        return None if index is None else self.initiative_order[index]

    def reset(self) -> None:
        """Return to the empty, inactive state."""
        self.active = False
        self.round_number = 0
        self.turn_index = 0
        self.initiative_order = []
        self.conditions = {}


class InitiativeEntry(BaseModel):
    """One row of the initiative order as shown to callers."""

    model_config = ConfigDict(frozen=True)

    position: int = Field(ge=1, description="1-based position in turn order")
    is_current_turn: bool
    participant: Participant

    @computed_field  # type: ignore[prop-decorator]
    @property
    def participant_id(self) -> str:
        return self.participant.id

    @computed_field  # type: ignore[prop-decorator]
    @property
    def initiative(self) -> int | None:
        return self.participant.initiative


class OperationResult(BaseModel):
    """Base for results returned by encounter operations.

    Attributes:
        message: Narration-ready summary.
        events: Events emitted by the operation, in order.
    """

    message: str = ""
    events: list[CombatEvent] = Field(default_factory=list)


class InitiativeResult(OperationResult):
    """Result of resolving or reporting initiative."""

    order: list[InitiativeEntry] = Field(default_factory=list)
    round_number: int = 0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def awaiting_roll(self) -> list[str]:
        """Identities still waiting on a player-supplied initiative."""
        return [entry.participant_id for entry in self.order if entry.participant.awaiting_roll]


class TurnResult(OperationResult):
    """Result of moving the turn pointer."""

    current: Participant
    round_number: int
    turn_index: int
    round_completed: bool = False
    expired: list[Condition] = Field(default_factory=list)


class ConditionResult(OperationResult):
    """Result of applying or removing a condition.

    Attributes:
        found: False when a removal matched nothing.
        participant_id: Participant whose conditions changed.
        condition_name: Condition that was applied or removed.
        conditions: The participant's conditions after the change.
    """

    found: bool = True
    participant_id: str
    condition_name: str
    conditions: list[Condition] = Field(default_factory=list)


class CombatSummary(OperationResult):
    """Summary captured when an encounter ends."""

    rounds: int = Field(ge=0)
    outcome: str
    survivors: list[Participant] = Field(default_factory=list)


class EncounterStatus(BaseModel):
    """Point-in-time snapshot of an encounter."""

    active: bool
    round_number: int
    turn_index: int
    current_participant: Participant | None = None
    initiative: list[InitiativeEntry] = Field(default_factory=list)
    conditions: dict[str, list[Condition]] = Field(default_factory=dict)
    can_continue: bool = False


__all__ = [
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
