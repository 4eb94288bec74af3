"""Combat action resolution.

Dice policy: the engine rolls attack dice only for engine-controlled
participants. A player-controlled attacker gets a roll request and must
resubmit the attack with ``attack_roll`` set. Damage is never rolled by
the engine: every hit returns a damage roll request, whoever attacked.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

import pydantic

from construct_combat.core.constants import D20, DEFAULT_ARMOR_CLASS, DEFAULT_WEAPON_DAMAGE
from construct_combat.core.exceptions import (
    ParticipantNotFoundError,
    UnknownActionError,
    UnknownSpellError,
    ValidationError,
)
from construct_combat.core.logging import get_logger
from construct_combat.engine.dice import DieRoller
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
from construct_combat.models.encounter import EncounterState
from construct_combat.models.enums import ActionType, RollType
from construct_combat.models.events import CombatEvent, EventKind
from construct_combat.models.participant import Participant


logger = get_logger(__name__)

_ROLL_GUIDANCE = {
    RollType.NORMAL: "",
    RollType.ADVANTAGE: " with advantage (roll twice, take higher)",
    RollType.DISADVANTAGE: " with disadvantage (roll twice, take lower)",
}


def parse_action_type(action_type: ActionType | str) -> ActionType:
    """Resolve an action name, raising for anything outside the supported set."""
    if isinstance(action_type, ActionType):
        return action_type
    parsed = ActionType.parse(str(action_type))
    if parsed is None:
        raise UnknownActionError(
            f"Unknown action type: {action_type}",
            details={"action_type": str(action_type), "supported": [a.value for a in ActionType]},
        )
    return parsed


def parse_action_request(
    action: ActionType,
    payload: ActionRequest | Mapping[str, Any],
) -> ActionRequest:
    """Validate a payload into the request model for ``action``.

    Raises:
        ValidationError: If the payload does not match the action's schema.
    """
    request_type = ACTION_REQUEST_TYPES[action]
    if isinstance(payload, request_type):
        return payload
    if isinstance(payload, ActionRequest):
        payload = payload.model_dump()
    try:
        return request_type.model_validate(payload)
    except pydantic.ValidationError as exc:
        raise ValidationError(
            f"Invalid {action.value} payload",
            details={"errors": exc.errors(include_url=False)},
        ) from exc


class ActionResolver:
    """Dispatch actions submitted by the current participant.

    Attributes:
        roller: Die roller used for engine-controlled attack rolls.
        default_armor_class: AC assumed for targets without one.
        default_weapon_damage: Damage dice for attackers without a weapon.
    """

    def __init__(
        self,
        roller: DieRoller,
        *,
        default_armor_class: int = DEFAULT_ARMOR_CLASS,
        default_weapon_damage: str = DEFAULT_WEAPON_DAMAGE,
    ) -> None:
        self.roller = roller
        self.default_armor_class = default_armor_class
        self.default_weapon_damage = default_weapon_damage
        self._handlers: dict[
            ActionType, Callable[[EncounterState, Participant, Any], ActionResult]
        ] = {
            ActionType.ATTACK: self._attack,
            ActionType.SPELL: self._spell,
            ActionType.ABILITY: self._ability,
            ActionType.MOVE: self._move,
        }

    def resolve(
        self,
        state: EncounterState,
        actor: Participant,
        action: ActionType,
        request: ActionRequest,
    ) -> ActionResult:
        """Run the handler for ``action``.

        The caller has already checked that ``actor`` is the current
        participant and that ``request`` matches ``action``.
        """
        result = self._handlers[action](state, actor, request)
        logger.info(
            "Action processed",
            action=action.value,
            actor=actor.name,
            resolved=result.resolved,
            roll_required=result.roll_required,
            hit=result.hit,
        )
        return result

    def _target(self, state: EncounterState, target_id: str | None) -> Participant | None:
        if target_id is None:
            return None
        return self._require_target(state, target_id)

    def _require_target(self, state: EncounterState, target_id: str) -> Participant:
        target = state.get(target_id)
        if target is None:
            raise ParticipantNotFoundError(
                f"Target not found: {target_id}",
                participant_id=target_id,
                round_number=state.round_number,
            )
        return target

    def _event(
        self,
        state: EncounterState,
        kind: EventKind,
        actor: Participant,
        message: str,
        **data: Any,
    ) -> CombatEvent:
        return CombatEvent(
            kind=kind,
            message=message,
            participant_id=actor.id,
            round_number=state.round_number,
            data=data,
        )

    # -------------------------------------------------------------------------
    # Attack
    # -------------------------------------------------------------------------

    def _attack(self, state: EncounterState, attacker: Participant, request: AttackRequest) -> ActionResult:
        target = self._require_target(state, request.target_id)
        target_ac = target.armor_class or self.default_armor_class
        ability = attacker.attack_ability
        modifier = attacker.attack_modifier
        sources = [f"{ability.full_name} modifier"]
        if attacker.weapon and attacker.weapon.attack_bonus:
            sources.append("weapon attack bonus")
        roll_type = request.roll_type
        weapon_name = attacker.weapon.name if attacker.weapon else "unarmed strike"

        natural: int | None = None
        if request.attack_roll is not None:
            total = request.attack_roll
        elif attacker.control.engine_rolls:
            natural = self._roll_d20(roll_type)
            total = natural + modifier
        else:
            spec = DieSpec(
                count=1,
                sides=D20,
                modifier=modifier,
                modifier_sources=sources,
                roll_type=roll_type,
            )
            instructions = (
                f"Please roll your attack roll. Roll a d20{_ROLL_GUIDANCE[roll_type]} "
                f"and add your attack modifier ({spec.notation})."
            )
            message = f"Roll your attack against {target.name} (AC {target_ac})."
            event = self._event(
                state,
                EventKind.ROLL_REQUESTED,
                attacker,
                f"{attacker.name}: {instructions}",
                roll="attack",
                target_id=target.id,
                die_spec=spec.model_dump(),
            )
            return ActionResult(
                action=ActionType.ATTACK,
                actor_id=attacker.id,
                actor_name=attacker.name,
                roll_required=True,
                instructions=instructions,
                die_spec=spec,
                target_id=target.id,
                target_armor_class=target_ac,
                message=message,
                events=[event],
            )

        hit = total >= target_ac
        critical = natural == 20
        fumble = natural == 1
        common = {
            "action": ActionType.ATTACK,
            "actor_id": attacker.id,
            "actor_name": attacker.name,
            "resolved": True,
            "target_id": target.id,
            "hit": hit,
            "attack_roll": natural,
            "attack_total": total,
            "target_armor_class": target_ac,
            "critical": critical,
            "fumble": fumble,
        }

        if not hit:
            message = f"{attacker.name} misses {target.name} (needed {target_ac}, rolled {total})."
            event = self._event(
                state,
                EventKind.ACTION_RESOLVED,
                attacker,
                message,
                action=ActionType.ATTACK.value,
                target_id=target.id,
                hit=False,
                attack_total=total,
            )
            return ActionResult(**common, message=message, events=[event])

        damage_dice = attacker.weapon.damage if attacker.weapon else self.default_weapon_damage
        damage_spec = DieSpec.parse(
            damage_dice,
            extra_modifier=attacker.ability_modifier(ability),
            modifier_sources=[f"{ability.full_name} modifier"],
        )
        instructions = f"Please roll {damage_dice} for damage and add your {ability.full_name} modifier."
        if critical:
            # Dice double on a crit; the flat modifier does not.
            damage_spec = damage_spec.model_copy(update={"count": damage_spec.count * 2})
            instructions += f" Critical hit: roll the damage dice twice ({damage_spec.notation})."
        message = f"{attacker.name} hits {target.name} with {weapon_name} (rolled {total} vs AC {target_ac})!"
        events = [
            self._event(
                state,
                EventKind.ACTION_RESOLVED,
                attacker,
                message,
                action=ActionType.ATTACK.value,
                target_id=target.id,
                hit=True,
                attack_total=total,
                critical=critical,
            ),
            self._event(
                state,
                EventKind.ROLL_REQUESTED,
                attacker,
                f"{attacker.name}: {instructions}",
                roll="damage",
                target_id=target.id,
                die_spec=damage_spec.model_dump(),
            ),
        ]
        return ActionResult(
            **common,
            damage_roll_required=True,
            die_spec=damage_spec,
            instructions=instructions,
            message=message,
            events=events,
        )

    def _roll_d20(self, roll_type: RollType) -> int:
        if roll_type is RollType.NORMAL:
            return self.roller.roll_dice(1, D20)[0]
        dice = self.roller.roll_dice(2, D20)
        return max(dice) if roll_type is RollType.ADVANTAGE else min(dice)

    # -------------------------------------------------------------------------
    # Spell, ability, move
    # -------------------------------------------------------------------------

    def _spell(self, state: EncounterState, caster: Participant, request: SpellRequest) -> ActionResult:
        if not caster.knows_spell(request.spell):
            raise UnknownSpellError(
                f"{caster.name} doesn't know {request.spell}",
                participant_id=caster.id,
                round_number=state.round_number,
                details={"spell": request.spell, "known_spells": list(caster.known_spells)},
            )
        target = self._target(state, request.target_id)
        message = f"{caster.name} casts {request.spell}!"
        if target is not None:
            message = f"{caster.name} casts {request.spell} at {target.name}!"
        event = self._event(
            state,
            EventKind.ACTION_RESOLVED,
            caster,
            message,
            action=ActionType.SPELL.value,
            spell=request.spell,
            level=request.level,
            target_id=request.target_id,
        )
        return ActionResult(
            action=ActionType.SPELL,
            actor_id=caster.id,
            actor_name=caster.name,
            resolved=True,
            target_id=request.target_id,
            spell=request.spell,
            spell_level=request.level,
            message=message,
            events=[event],
        )

    def _ability(self, state: EncounterState, actor: Participant, request: AbilityRequest) -> ActionResult:
        target = self._target(state, request.target_id)
        message = f"{actor.name} uses {request.ability}."
        if target is not None:
            message = f"{actor.name} uses {request.ability} on {target.name}."
        event = self._event(
            state,
            EventKind.ACTION_RESOLVED,
            actor,
            message,
            action=ActionType.ABILITY.value,
            ability=request.ability,
            target_id=request.target_id,
        )
        return ActionResult(
            action=ActionType.ABILITY,
            actor_id=actor.id,
            actor_name=actor.name,
            resolved=True,
            target_id=request.target_id,
            message=message,
            events=[event],
        )

    def _move(self, state: EncounterState, actor: Participant, request: MoveRequest) -> ActionResult:
        if request.destination:
            message = f"{actor.name} moves to {request.destination}."
        else:
            message = f"{actor.name} moves {request.distance_feet} feet."
        event = self._event(
            state,
            EventKind.ACTION_RESOLVED,
            actor,
            message,
            action=ActionType.MOVE.value,
            distance_feet=request.distance_feet,
            destination=request.destination,
        )
        return ActionResult(
            action=ActionType.MOVE,
            actor_id=actor.id,
            actor_name=actor.name,
            resolved=True,
            message=message,
            events=[event],
        )


__all__ = [
    "ActionResolver",
    "parse_action_type",
    "parse_action_request",
]
