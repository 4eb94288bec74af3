"""Timed status conditions for encounter participants.

Durations count rounds and only tick at round boundaries. A condition
whose duration reaches zero is removed and announced exactly once.
"""

from __future__ import annotations

from construct_combat.core.constants import MAX_CONDITION_NAME_LENGTH
from construct_combat.core.exceptions import (
    ConditionAlreadyAppliedError,
    ParticipantNotFoundError,
    ValidationError,
)
from construct_combat.core.logging import get_logger
from construct_combat.models.encounter import Condition, EncounterState
from construct_combat.models.enums import ConditionPolicy
from construct_combat.models.events import CombatEvent, EventKind
from construct_combat.models.participant import Participant


logger = get_logger(__name__)


def normalize_condition_name(name: str) -> str:
    return name.strip().lower()


class ConditionTracker:
    """Attach, detach and expire conditions in an encounter's condition table.

    Attributes:
        policy: What re-applying an already-present condition does.
    """

    def __init__(self, state: EncounterState, policy: ConditionPolicy = ConditionPolicy.STACK) -> None:
        self._state = state
        self.policy = policy

    def _participant(self, participant_id: str) -> Participant:
        participant = self._state.get(participant_id)
        if participant is None:
            raise ParticipantNotFoundError(
                f"Participant not found: {participant_id}",
                participant_id=participant_id,
                round_number=self._state.round_number,
            )
        return participant

    def conditions_for(self, participant_id: str) -> list[Condition]:
        return list(self._state.conditions.get(participant_id, []))

    def apply(
        self,
        participant_id: str,
        name: str,
        duration: int | None = None,
    ) -> tuple[Condition, CombatEvent]:
        """Apply a condition according to the configured policy.

        Args:
            participant_id: Participant receiving the condition.
            name: Condition tag.
            duration: Rounds until expiry, or None for indefinite.

        Returns:
            The stored condition record and the announcement event.

        Raises:
            ParticipantNotFoundError: If the participant is unknown.
            ValidationError: If the name is blank or too long, or the duration
                is below 1.
            ConditionAlreadyAppliedError: Under the reject policy, if the
                condition is already present.
        """
        participant = self._participant(participant_id)
        tag = normalize_condition_name(name)
        if not tag:
            raise ValidationError("Condition name must not be empty", field_name="name")
        if len(tag) > MAX_CONDITION_NAME_LENGTH:
            raise ValidationError(
                f"Condition name must be at most {MAX_CONDITION_NAME_LENGTH} characters",
                field_name="name",
                invalid_value=tag,
            )
        if duration is not None and duration < 1:
            raise ValidationError(
                "Condition duration must be at least 1 round",
                field_name="duration",
                invalid_value=duration,
            )

        existing = [c for c in self._state.conditions.get(participant_id, []) if c.name == tag]
        round_number = self._state.round_number

        if existing and self.policy is ConditionPolicy.REJECT:
            raise ConditionAlreadyAppliedError(
                f"{participant.name} is already {tag}",
                participant_id=participant_id,
                round_number=round_number,
            )

        if existing and self.policy is ConditionPolicy.REFRESH:
            for record in existing:
                record.duration = duration
                record.applied_round = round_number
            condition = existing[0]
        else:
            condition = Condition(name=tag, duration=duration, applied_round=round_number)
            self._state.conditions.setdefault(participant_id, []).append(condition)

        logger.info(
            "Condition applied",
            participant=participant.name,
            condition=tag,
            duration=duration,
            policy=str(self.policy),
        )
        event = CombatEvent(
            kind=EventKind.CONDITION_APPLIED,
            message=f"{participant.name} is now {tag}!",
            participant_id=participant_id,
            round_number=round_number,
            data={"condition": tag, "duration": duration, "refreshed": bool(existing)},
        )
        return condition, event

    def remove(self, participant_id: str, name: str) -> CombatEvent | None:
        """Remove every record of a named condition.

        Removing an absent condition is not an error.

        Returns:
            The removal event, or None if nothing matched.

        Raises:
            ParticipantNotFoundError: If the participant is unknown.
        """
        participant = self._participant(participant_id)
        tag = normalize_condition_name(name)
        records = self._state.conditions.get(participant_id, [])
        remaining = [c for c in records if c.name != tag]
        if len(remaining) == len(records):
            logger.debug("Condition not present", participant=participant.name, condition=tag)
            return None

        if remaining:
            self._state.conditions[participant_id] = remaining
        else:
            self._state.conditions.pop(participant_id, None)

        logger.info("Condition removed", participant=participant.name, condition=tag)
        return CombatEvent(
            kind=EventKind.CONDITION_REMOVED,
            message=f"{participant.name} is no longer {tag}!",
            participant_id=participant_id,
            round_number=self._state.round_number,
            data={"condition": tag},
        )

    def drop_participant(self, participant_id: str) -> None:
        self._state.conditions.pop(participant_id, None)

    def end_of_round(self) -> tuple[list[Condition], list[CombatEvent]]:
        """Tick every timed condition down by one round.

        Indefinite conditions are untouched. Conditions reaching zero are
        removed and produce one expiry event each.

        Returns:
            The expired conditions and their expiry events.
        """
        expired: list[Condition] = []
        events: list[CombatEvent] = []
        round_number = self._state.round_number

        for participant_id in list(self._state.conditions):
            participant = self._state.get(participant_id)
            name = participant.name if participant else participant_id
            kept: list[Condition] = []
            for condition in self._state.conditions[participant_id]:
                if condition.duration is None:
                    kept.append(condition)
                    continue
                condition.duration -= 1
                if condition.duration > 0:
                    kept.append(condition)
                    continue
                expired.append(condition)
                events.append(
                    CombatEvent(
                        kind=EventKind.CONDITION_EXPIRED,
                        message=f"{name} is no longer {condition.name}!",
                        participant_id=participant_id,
                        round_number=round_number,
                        data={"condition": condition.name, "applied_round": condition.applied_round},
                    )
                )
                logger.info("Condition expired", participant=name, condition=condition.name)

            if kept:
                self._state.conditions[participant_id] = kept
            else:
                del self._state.conditions[participant_id]

        return expired, events


__all__ = [
    "ConditionTracker",
    "normalize_condition_name",
]
