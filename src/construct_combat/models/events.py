"""Outbound combat events.

Events are the engine's only notification channel. Each carries a
narration-ready message for chat/UI collaborators plus structured data
for anything that wants to react programmatically.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class EventKind(StrEnum):
    """Kinds of events emitted by an encounter."""

    COMBAT_STARTED = "combat_started"
    INITIATIVE_ROLLED = "initiative_rolled"
    INITIATIVE_REQUESTED = "initiative_requested"
    INITIATIVE_REPORTED = "initiative_reported"
    TURN_STARTED = "turn_started"
    ROUND_STARTED = "round_started"
    CONDITION_APPLIED = "condition_applied"
    CONDITION_REMOVED = "condition_removed"
    CONDITION_EXPIRED = "condition_expired"
    ROLL_REQUESTED = "roll_requested"
    ACTION_RESOLVED = "action_resolved"
    PARTICIPANT_REMOVED = "participant_removed"
    COMBAT_ENDED = "combat_ended"


class CombatEvent(BaseModel):
    """A single notification emitted by the engine.

    Attributes:
        kind: What happened.
        message: Narration-ready text.
        participant_id: Participant the event concerns, if any.
        round_number: Round in which the event occurred.
        data: Structured payload specific to the event kind.
        timestamp: When the event was emitted (UTC).
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: EventKind
    message: str
    participant_id: str | None = None
    round_number: int = Field(default=0, ge=0)
    data: dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


__all__ = [
    "EventKind",
    "CombatEvent",
]
