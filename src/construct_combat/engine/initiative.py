"""Initiative resolution for combat encounters.

Engine-controlled participants roll 1d20 plus their initiative bonus
immediately. Player-controlled participants are never rolled for; they
are marked as awaiting a roll and sorted to the end of the order until
their result is reported.
"""

from __future__ import annotations

from collections.abc import Sequence

import pydantic

from construct_combat.core.constants import D20
from construct_combat.core.exceptions import (
    InvalidEncounterError,
    NotAwaitingRollError,
    ParticipantNotFoundError,
    ValidationError,
)
from construct_combat.core.logging import get_logger
from construct_combat.engine.dice import DieRoller
from construct_combat.models.dice import DieSpec
from construct_combat.models.events import CombatEvent, EventKind
from construct_combat.models.participant import Participant


logger = get_logger(__name__)


def _signed(value: int) -> str:
    return f"+ {value}" if value >= 0 else f"- {abs(value)}"


def sort_by_initiative(participants: Sequence[Participant]) -> list[Participant]:
    """Order participants by initiative, highest first.

    Participants without a value go last. The sort is stable, so ties
    keep their existing relative order.
    """
    return sorted(
        participants,
        key=lambda p: (p.initiative is None, -(p.initiative or 0)),
    )


class InitiativeResolver:
    """Establish and maintain the turn order of an encounter.

    Attributes:
        roller: Die roller used for engine-controlled participants.
    """

    def __init__(self, roller: DieRoller) -> None:
        self.roller = roller

    def resolve(
        self,
        participants: Sequence[Participant],
        *,
        round_number: int = 1,
    ) -> tuple[list[Participant], list[CombatEvent]]:
        """Roll or request initiative for every participant.

        Args:
            participants: Participants in caller order.
            round_number: Round stamped on emitted events.

        Returns:
            The turn order and one event per participant (a roll
            announcement or a roll request), in input order.

        Raises:
            InvalidEncounterError: If no participants are given.
            DiceRollError: If the die roller fails; no participant is
                modified in that case.
        """
        if not participants:
            raise InvalidEncounterError("Cannot resolve initiative without participants")

        # Draw every roll before touching any participant.
        rolls: dict[str, int] = {}
        for participant in participants:
            if participant.control.engine_rolls:
                rolls[participant.id] = self.roller.roll_dice(1, D20)[0]

        events: list[CombatEvent] = []
        for participant in participants:
            participant.has_acted = False
            if participant.id in rolls:
                events.append(self._record_roll(participant, rolls[participant.id], round_number))
            else:
                events.append(self._request_roll(participant, round_number))

        order = sort_by_initiative(participants)
        logger.info(
            "Initiative resolved",
            order=[p.name for p in order],
            awaiting=[p.name for p in order if p.awaiting_roll],
        )
        return order, events

    def _record_roll(self, participant: Participant, die: int, round_number: int) -> CombatEvent:
        modifier = participant.initiative_bonus
        total = die + modifier
        participant.initiative = total
        participant.awaiting_roll = False

        logger.info(
            "Initiative rolled",
            participant=participant.name,
            roll=die,
            modifier=modifier,
            total=total,
        )
        return CombatEvent(
            kind=EventKind.INITIATIVE_ROLLED,
            message=f"{participant.name} rolled {die} {_signed(modifier)} = {total} for initiative.",
            participant_id=participant.id,
            round_number=round_number,
            data={"roll": die, "modifier": modifier, "total": total},
        )

    def _request_roll(self, participant: Participant, round_number: int) -> CombatEvent:
        participant.initiative = None
        participant.awaiting_roll = True

        spec = DieSpec(
            count=1,
            sides=D20,
            modifier=participant.initiative_bonus,
            modifier_sources=["Dexterity modifier"],
        )
        logger.info("Initiative requested", participant=participant.name)
        return CombatEvent(
            kind=EventKind.INITIATIVE_REQUESTED,
            message=(
                f"{participant.name}, please roll for initiative! Roll a d20 and add "
                "your Dexterity modifier, then report your result so we can "
                "establish turn order."
            ),
            participant_id=participant.id,
            round_number=round_number,
            data={"die_spec": spec.model_dump()},
        )

    def report(
        self,
        order: Sequence[Participant],
        participant_id: str,
        value: int,
        *,
        round_number: int = 1,
    ) -> tuple[list[Participant], CombatEvent]:
        """Record a player-supplied initiative and re-sort the whole order.

        Args:
            order: Current turn order.
            participant_id: Participant awaiting a roll.
            value: Externally obtained initiative total.
            round_number: Round stamped on the emitted event.

        Returns:
            The re-sorted order and the announcement event.

        Raises:
            ParticipantNotFoundError: If the id is not in the order.
            NotAwaitingRollError: If the participant already has a value.
            ValidationError: If the value is not a whole number.
        """
        participant = next((p for p in order if p.id == participant_id), None)
        if participant is None:
            raise ParticipantNotFoundError(
                f"Participant not found in initiative: {participant_id}",
                participant_id=participant_id,
                round_number=round_number,
            )
        if not participant.awaiting_roll:
            raise NotAwaitingRollError(
                f"{participant.name} is not awaiting an initiative roll",
                participant_id=participant_id,
                round_number=round_number,
                details={"initiative": participant.initiative},
            )

        try:
            participant.initiative = value
        except pydantic.ValidationError as exc:
            raise ValidationError(
                "Initiative must be a whole number",
                field_name="initiative",
                invalid_value=value,
                details={"participant_id": participant_id},
            ) from exc
        value = participant.initiative
        participant.awaiting_roll = False
        new_order = sort_by_initiative(order)

        logger.info("Initiative reported", participant=participant.name, value=value)
        event = CombatEvent(
            kind=EventKind.INITIATIVE_REPORTED,
            message=f"{participant.name} rolls {value} for initiative.",
            participant_id=participant.id,
            round_number=round_number,
            data={"total": value},
        )
        return new_order, event


__all__ = [
    "InitiativeResolver",
    "sort_by_initiative",
]
