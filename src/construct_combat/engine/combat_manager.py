"""Turn-based combat encounter engine.

A CombatManager owns exactly one encounter at a time. It is driven
entirely by its caller (UI or AI orchestrator): initialize, report any
player-supplied initiative, then alternate process_action and
advance_turn until the caller decides to end. Nothing runs in the
background.

The manager holds no process-wide state, so independent sessions each
create their own instance. A single instance is not thread-safe; callers
sharing one across threads must serialize access.

Example:
    >>> from construct_combat import CombatManager, ControlKind, Participant
    >>> from construct_combat.engine.dice import ScriptedDieRoller
    >>> manager = CombatManager(ScriptedDieRoller([10]))
    >>> result = manager.initialize([
    ...     Participant(id="gob", name="Goblin", control=ControlKind.ENGINE,
    ...                 ability_scores={"dexterity": 14}),
    ...     Participant(id="ftr", name="Fighter", control=ControlKind.PLAYER),
    ... ])
    >>> [entry.initiative for entry in result.order]
    [12, None]
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from typing import Any
from uuid import uuid4

import pydantic

from construct_combat.core.config import EncounterSettings, get_settings
from construct_combat.core.constants import DEFAULT_OUTCOME, FIRST_ROUND
from construct_combat.core.exceptions import (
    AlreadyActiveError,
    InvalidEncounterError,
    NotActiveError,
    NotYourTurnError,
    ParticipantNotFoundError,
    ValidationError,
)
from construct_combat.core.logging import get_logger
from construct_combat.engine.actions import (
    ActionResolver,
    parse_action_request,
    parse_action_type,
)
from construct_combat.engine.conditions import ConditionTracker, normalize_condition_name
from construct_combat.engine.dice import D20DieRoller, DieRoller
from construct_combat.engine.initiative import InitiativeResolver
from construct_combat.models.actions import ActionRequest, ActionResult
from construct_combat.models.encounter import (
    CombatSummary,
    Condition,
    ConditionResult,
    EncounterState,
    EncounterStatus,
    InitiativeEntry,
    InitiativeResult,
    TurnResult,
)
from construct_combat.models.enums import ActionType, ConditionPolicy
from construct_combat.models.events import CombatEvent, EventKind
from construct_combat.models.participant import Participant


logger = get_logger(__name__)

EventListener = Callable[[CombatEvent], None]
LivenessPredicate = Callable[[Participant], bool]


def default_is_alive(participant: Participant) -> bool:
    """A participant survives while it has hit points left."""
    return participant.is_alive


class CombatManager:
    """Run one turn-based combat encounter.

    Attributes:
        encounter_id: Identifier stamped on this manager's log lines.
    """

    def __init__(
        self,
        roller: DieRoller | None = None,
        *,
        settings: EncounterSettings | None = None,
        encounter_id: str | None = None,
    ) -> None:
        """Initialize an idle combat manager.

        Args:
            roller: Die roller for engine-controlled rolls; defaults to d20.
            settings: Encounter rules; defaults to the application settings.
            encounter_id: Optional identifier for logging.
        """
        self._settings = settings or get_settings().encounter
        self._roller = roller or D20DieRoller()
        self._state = EncounterState()
        self._initiative = InitiativeResolver(self._roller)
        self._conditions = ConditionTracker(
            self._state,
            ConditionPolicy(self._settings.condition_policy),
        )
        self._actions = ActionResolver(
            self._roller,
            default_armor_class=self._settings.default_armor_class,
            default_weapon_damage=self._settings.default_weapon_damage,
        )
        self._listeners: list[EventListener] = []
        self.encounter_id = encounter_id or uuid4().hex
        self._log = logger.bind(encounter_id=self.encounter_id)
        self._log.info("CombatManager initialized", policy=self._settings.condition_policy)

    # =========================================================================
    # Read-only views
    # =========================================================================

    @property
    def is_active(self) -> bool:
        return self._state.active

    @property
    def round_number(self) -> int:
        return self._state.round_number

    @property
    def turn_index(self) -> int:
        return self._state.turn_index

    @property
    def state(self) -> EncounterState:
        """A deep copy of the encounter state, safe to serialize."""
        return self._state.model_copy(deep=True)

    def current_participant(self) -> Participant | None:
        """The participant at the turn pointer, or None when inactive."""
        return self._state.current_participant

    def initiative_order(self) -> list[InitiativeEntry]:
        """The turn order with 1-based positions and the current-turn marker."""
        return [
            InitiativeEntry(
                position=index + 1,
                is_current_turn=self._state.active and index == self._state.turn_index,
                participant=participant.model_copy(deep=True),
            )
            for index, participant in enumerate(self._state.initiative_order)
        ]

    def conditions_for(self, participant_id: str) -> list[Condition]:
        """Active condition records for one participant."""
        return [c.model_copy() for c in self._conditions.conditions_for(participant_id)]

    def should_continue(self) -> bool:
        """Whether both sides still have someone standing."""
        if not self._state.active:
            return False
        order = self._state.initiative_order
        players_alive = any(p.is_player and p.is_alive for p in order)
        engine_alive = any(not p.is_player and p.is_alive for p in order)
        return players_alive and engine_alive

    def status(self) -> EncounterStatus:
        """Snapshot of the whole encounter."""
        current = self._state.current_participant
        return EncounterStatus(
            active=self._state.active,
            round_number=self._state.round_number,
            turn_index=self._state.turn_index,
            current_participant=current.model_copy(deep=True) if current else None,
            initiative=self.initiative_order(),
            conditions={
                pid: [c.model_copy() for c in records]
                for pid, records in self._state.conditions.items()
            },
            can_continue=self.should_continue(),
        )

    # =========================================================================
    # Events
    # =========================================================================

    def subscribe(self, listener: EventListener) -> Callable[[], None]:
        """Register a listener invoked for every emitted event.

        Returns:
            A callable that unsubscribes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, events: Iterable[CombatEvent]) -> None:
        for event in events:
            for listener in list(self._listeners):
                try:
                    listener(event)
                except Exception:
                    self._log.exception("Event listener failed", kind=event.kind.value)

    def _event(
        self,
        kind: EventKind,
        message: str,
        participant: Participant | None = None,
        **data: Any,
    ) -> CombatEvent:
        return CombatEvent(
            kind=kind,
            message=message,
            participant_id=participant.id if participant else None,
            round_number=self._state.round_number,
            data=data,
        )

    # =========================================================================
    # Guards
    # =========================================================================

    def _require_active(self, operation: str) -> None:
        if not self._state.active:
            raise NotActiveError(
                f"No active combat: cannot {operation}",
                details={"operation": operation},
            )

    def _require_participant(self, participant_id: str) -> Participant:
        participant = self._state.get(participant_id)
        if participant is None:
            raise ParticipantNotFoundError(
                f"Participant not found: {participant_id}",
                participant_id=participant_id,
                round_number=self._state.round_number,
            )
        return participant

    @staticmethod
    def _coerce_participants(
        participants: Iterable[Participant | Mapping[str, Any]],
    ) -> list[Participant]:
        coerced: list[Participant] = []
        for raw in participants:
            if isinstance(raw, Participant):
                coerced.append(raw)
                continue
            try:
                coerced.append(Participant.model_validate(raw))
            except pydantic.ValidationError as exc:
                raise ValidationError(
                    "Invalid participant",
                    details={"errors": exc.errors(include_url=False)},
                ) from exc
        return coerced

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def initialize(
        self,
        participants: Iterable[Participant | Mapping[str, Any]],
    ) -> InitiativeResult:
        """Start an encounter: resolve initiative and begin round 1.

        Engine-controlled participants roll initiative now; player-controlled
        participants receive a roll request and sort last until reported.
        The caller's Participant objects are used directly, so hit point
        changes made by the caller are visible to the engine.

        Args:
            participants: Participants, or dictionaries describing them.

        Returns:
            The initiative order and the emitted events.

        Raises:
            AlreadyActiveError: If an encounter is already running.
            InvalidEncounterError: If there are no participants or ids repeat.
            ValidationError: If a participant dictionary is malformed.
        """
        if self._state.active:
            raise AlreadyActiveError(
                "Combat is already active",
                round_number=self._state.round_number,
            )

        roster = self._coerce_participants(participants)
        if not roster:
            raise InvalidEncounterError("Cannot start combat: no participants")
        ids = [p.id for p in roster]
        duplicates = sorted({pid for pid in ids if ids.count(pid) > 1})
        if duplicates:
            raise InvalidEncounterError(
                "Participant ids must be unique",
                details={"duplicates": duplicates},
            )

        order, events = self._initiative.resolve(roster, round_number=FIRST_ROUND)

        self._state.initiative_order = order
        self._state.conditions = {}
        self._state.round_number = FIRST_ROUND
        self._state.turn_index = 0
        self._state.active = True

        message = f"Combat initiated! {len(order)} participants ready."
        events.append(
            self._event(
                EventKind.COMBAT_STARTED,
                message,
                participant_ids=[p.id for p in order],
            )
        )
        self._log.info("Combat started", participants=len(order), round=FIRST_ROUND)
        self._emit(events)
        return InitiativeResult(
            message=message,
            events=events,
            order=self.initiative_order(),
            round_number=self._state.round_number,
        )

    def report_initiative(self, participant_id: str, value: int) -> InitiativeResult:
        """Record a player-supplied initiative and re-sort the order.

        The turn pointer is left where it is, even if the current
        participant moves. Reporting once combat is under way is the
        caller's responsibility to avoid.

        Raises:
            NotActiveError: If no encounter is running.
            ParticipantNotFoundError: If the id is unknown.
            NotAwaitingRollError: If the participant already has a value.
            ValidationError: If the value is not a whole number.
        """
        self._require_active("report initiative")
        order, event = self._initiative.report(
            self._state.initiative_order,
            participant_id,
            value,
            round_number=self._state.round_number,
        )
        self._state.initiative_order = order
        self._emit([event])
        return InitiativeResult(
            message=event.message,
            events=[event],
            order=self.initiative_order(),
            round_number=self._state.round_number,
        )

    def advance_turn(self) -> TurnResult:
        """End the current turn and move to the next participant.

        When the pointer passes the last participant the round rolls over:
        conditions tick down (expiring ones are announced), every
        has-acted flag resets, the round increments and the pointer
        returns to 0.

        Raises:
            NotActiveError: If no encounter is running.
        """
        self._require_active("advance turn")
        state = self._state
        state.initiative_order[state.turn_index].has_acted = True

        next_index = state.turn_index + 1
        events: list[CombatEvent] = []
        expired: list[Condition] = []
        round_completed = next_index >= len(state.initiative_order)
        if round_completed:
            expired, events = self._roll_over_round()
        else:
            state.turn_index = next_index

        current = state.initiative_order[state.turn_index]
        events.append(self._turn_started(current))
        self._log.info(
            "Next turn",
            participant=current.name,
            round=state.round_number,
            turn=state.turn_index,
        )
        self._emit(events)
        return TurnResult(
            message=events[-1].message,
            events=events,
            current=current.model_copy(deep=True),
            round_number=state.round_number,
            turn_index=state.turn_index,
            round_completed=round_completed,
            expired=expired,
        )

    def _roll_over_round(self) -> tuple[list[Condition], list[CombatEvent]]:
        state = self._state
        expired, events = self._conditions.end_of_round()
        for participant in state.initiative_order:
            participant.has_acted = False
        state.round_number += 1
        state.turn_index = 0
        events.append(
            self._event(
                EventKind.ROUND_STARTED,
                f"Round {state.round_number} begins!",
                round=state.round_number,
            )
        )
        self._log.info("New round started", round=state.round_number, expired=len(expired))
        return expired, events

    def _turn_started(self, participant: Participant) -> CombatEvent:
        return self._event(
            EventKind.TURN_STARTED,
            f"{participant.name}'s turn begins!",
            participant,
            turn=self._state.turn_index,
            awaiting_roll=participant.awaiting_roll,
        )

    def remove_participant(self, participant_id: str) -> TurnResult:
        """Take a participant out of the encounter.

        The pointer stays on the same logical next participant. If the
        removed participant was the last one in the round to act, the
        round rolls over as it would in advance_turn.

        Raises:
            NotActiveError: If no encounter is running.
            ParticipantNotFoundError: If the id is unknown.
            InvalidEncounterError: If it is the only participant left.
        """
        self._require_active("remove participant")
        state = self._state
        participant = self._require_participant(participant_id)
        if len(state.initiative_order) == 1:
            raise InvalidEncounterError(
                "Cannot remove the last participant; end the encounter instead",
                participant_id=participant_id,
                round_number=state.round_number,
            )

        index = state.index_of(participant_id)
        was_current = index == state.turn_index
        order = list(state.initiative_order)
        del order[index]
        state.initiative_order = order
        self._conditions.drop_participant(participant_id)
        if index < state.turn_index:
            state.turn_index -= 1

        events = [
            self._event(
                EventKind.PARTICIPANT_REMOVED,
                f"{participant.name} leaves the combat.",
                participant,
            )
        ]
        expired: list[Condition] = []
        round_completed = state.turn_index >= len(order)
        if round_completed:
            expired, rollover_events = self._roll_over_round()
            events.extend(rollover_events)

        current = state.initiative_order[state.turn_index]
        if was_current or round_completed:
            events.append(self._turn_started(current))
        self._log.info("Participant removed", participant=participant.name, remaining=len(order))
        self._emit(events)
        return TurnResult(
            message=events[0].message,
            events=events,
            current=current.model_copy(deep=True),
            round_number=state.round_number,
            turn_index=state.turn_index,
            round_completed=round_completed,
            expired=expired,
        )

    def end(
        self,
        outcome: str = DEFAULT_OUTCOME,
        *,
        is_alive: LivenessPredicate | None = None,
    ) -> CombatSummary:
        """End the encounter and clear all state.

        Args:
            outcome: Outcome tag such as ``victory`` or ``defeat``.
            is_alive: Decides who counts as a survivor; defaults to hp > 0.

        Returns:
            Rounds reached, survivors and the outcome.

        Raises:
            NotActiveError: If no encounter is running, including a second end().
        """
        self._require_active("end combat")
        predicate = is_alive or default_is_alive
        rounds = self._state.round_number
        survivors = [p.model_copy(deep=True) for p in self._state.initiative_order if predicate(p)]

        if outcome == "victory":
            verdict = "Victory!"
        elif outcome == "defeat":
            verdict = "Defeat..."
        else:
            verdict = f"Outcome: {outcome}."
        message = f"Combat ended! {verdict} Total rounds: {rounds}"
        event = self._event(
            EventKind.COMBAT_ENDED,
            message,
            outcome=outcome,
            rounds=rounds,
            survivors=[p.id for p in survivors],
        )

        self._state.reset()
        self._log.info("Combat ended", outcome=outcome, rounds=rounds, survivors=len(survivors))
        self._emit([event])
        return CombatSummary(
            message=message,
            events=[event],
            rounds=rounds,
            outcome=outcome,
            survivors=survivors,
        )

    # =========================================================================
    # Actions
    # =========================================================================

    def process_action(
        self,
        action_type: ActionType | str,
        payload: ActionRequest | Mapping[str, Any],
    ) -> ActionResult:
        """Resolve an action for the current participant.

        Args:
            action_type: ``attack``, ``spell``, ``ability`` or ``move``.
            payload: Request model or dictionary; must name the current
                participant as ``actor_id``.

        Returns:
            Either the resolved outcome or a roll request to satisfy first.

        Raises:
            NotActiveError: If no encounter is running.
            UnknownActionError: If the action type is not supported.
            ValidationError: If the payload is malformed.
            ParticipantNotFoundError: If the actor or target is unknown.
            NotYourTurnError: If the actor is not the current participant.
            UnknownSpellError: If a spell is not known by the caster.
        """
        self._require_active("process action")
        action = parse_action_type(action_type)
        request = parse_action_request(action, payload)
        actor = self._require_participant(request.actor_id)
        current = self._state.current_participant
        if current is None or actor.id != current.id:
            raise NotYourTurnError(
                f"It is not {actor.name}'s turn",
                participant_id=actor.id,
                round_number=self._state.round_number,
                details={"current_participant": current.id if current else None},
            )

        result = self._actions.resolve(self._state, actor, action, request)
        self._emit(result.events)
        return result

    # =========================================================================
    # Conditions
    # =========================================================================

    def apply_condition(
        self,
        participant_id: str,
        name: str,
        duration: int | None = None,
    ) -> ConditionResult:
        """Apply a named condition to a participant.

        Args:
            participant_id: Participant receiving the condition.
            name: Condition tag, e.g. ``poisoned``.
            duration: Round boundaries until expiry; None for indefinite.

        Raises:
            NotActiveError: If no encounter is running.
            ParticipantNotFoundError: If the id is unknown.
            ValidationError: If the duration is below 1.
            ConditionAlreadyAppliedError: Under the reject policy.
        """
        self._require_active("apply condition")
        condition, event = self._conditions.apply(participant_id, name, duration)
        self._emit([event])
        return ConditionResult(
            message=event.message,
            events=[event],
            participant_id=participant_id,
            condition_name=condition.name,
            conditions=self.conditions_for(participant_id),
        )

    def remove_condition(self, participant_id: str, name: str) -> ConditionResult:
        """Remove every record of a named condition.

        An absent condition is reported with ``found=False`` rather than
        raised, since callers may remove speculatively.

        Raises:
            NotActiveError: If no encounter is running.
            ParticipantNotFoundError: If the id is unknown.
        """
        self._require_active("remove condition")
        event = self._conditions.remove(participant_id, name)
        tag = normalize_condition_name(name)
        if event is None:
            return ConditionResult(
                message="Condition not found",
                found=False,
                participant_id=participant_id,
                condition_name=tag,
                conditions=self.conditions_for(participant_id),
            )
        self._emit([event])
        return ConditionResult(
            message=event.message,
            events=[event],
            participant_id=participant_id,
            condition_name=tag,
            conditions=self.conditions_for(participant_id),
        )


__all__ = [
    "CombatManager",
    "EventListener",
    "LivenessPredicate",
    "default_is_alive",
]
