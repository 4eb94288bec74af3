"""Pydantic V2 schemas for combat action requests and results.

Requests are validated from plain dictionaries supplied by the UI or the
AI orchestrator. Results tell the caller either what happened or exactly
what must be rolled before the action can resolve.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from construct_combat.models.dice import DieSpec
from construct_combat.models.enums import ActionType, RollType
from construct_combat.models.events import CombatEvent


class ActionRequest(BaseModel):
    """Common fields for every action.

    Attributes:
        actor_id: Participant submitting the action; must be the current one.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    actor_id: str = Field(min_length=1)


class AttackRequest(ActionRequest):
    """A weapon attack against another participant.

    Attributes:
        target_id: Participant being attacked.
        advantage: Roll the d20 twice and keep the higher.
        disadvantage: Roll the d20 twice and keep the lower.
        attack_roll: Externally obtained attack total (d20 + modifiers).
            Required to resolve a player-controlled attack.
    """

    target_id: str = Field(min_length=1)
    advantage: bool = False
    disadvantage: bool = False
    attack_roll: int | None = None

    @property
    def roll_type(self) -> RollType:
        return RollType.from_flags(advantage=self.advantage, disadvantage=self.disadvantage)


class SpellRequest(ActionRequest):
    """Casting a known spell."""

    spell: str = Field(min_length=1)
    target_id: str | None = None
    level: int = Field(default=1, ge=0, le=9)


class AbilityRequest(ActionRequest):
    """Using a class or racial ability."""

    ability: str = Field(min_length=1)
    target_id: str | None = None


class MoveRequest(ActionRequest):
    """Moving on the battlefield."""

    distance_feet: int = Field(default=0, ge=0)
    destination: str | None = None


ACTION_REQUEST_TYPES: dict[ActionType, type[ActionRequest]] = {
    ActionType.ATTACK: AttackRequest,
    ActionType.SPELL: SpellRequest,
    ActionType.ABILITY: AbilityRequest,
    ActionType.MOVE: MoveRequest,
}


class ActionResult(BaseModel):
    """Outcome of a submitted action.

    Exactly one of three shapes is produced:

    - ``roll_required``: nothing happened yet; roll ``die_spec`` and
      resubmit the action with the result.
    - a resolved attack: ``hit`` is set; on a hit ``damage_roll_required``
      is always true and ``die_spec`` describes the damage roll.
    - any other resolved action: ``resolved`` with a descriptive message.

    Attributes:
        action: The action type.
        actor_id: Acting participant.
        actor_name: Acting participant's display name.
        resolved: Whether the action completed at this layer.
        roll_required: The caller must roll and resubmit.
        instructions: What the caller must roll, in words.
        die_spec: Roll description (attack roll or damage roll).
        target_id: Targeted participant, if any.
        hit: Attack outcome, None for non-attacks and deferred attacks.
        attack_roll: Natural d20 result kept by the engine.
        attack_total: Attack total compared against the target's AC.
        target_armor_class: AC the attack was compared against.
        critical: The kept d20 was a natural 20. Reports the die only;
            a critical can still miss against a high armor class.
        fumble: The kept d20 was a natural 1. Reports the die only;
            a fumble can still hit a low armor class.
        damage_roll_required: Damage must be rolled externally.
        spell: Spell cast, for spell actions.
        spell_level: Level the spell was cast at.
        message: Narration-ready summary.
        events: Events emitted while processing the action.
    """

    model_config = ConfigDict(extra="forbid")

    action: ActionType
    actor_id: str
    actor_name: str
    resolved: bool = False
    roll_required: bool = False
    instructions: str = ""
    die_spec: DieSpec | None = None
    target_id: str | None = None
    hit: bool | None = None
    attack_roll: int | None = None
    attack_total: int | None = None
    target_armor_class: int | None = None
    critical: bool = False
    fumble: bool = False
    damage_roll_required: bool = False
    spell: str | None = None
    spell_level: int | None = None
    message: str = ""
    events: list[CombatEvent] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_shape(self) -> "ActionResult":
        if self.roll_required and self.resolved:
            raise ValueError("an action cannot be both resolved and awaiting a roll")
        if self.damage_roll_required and self.hit is not True:
            raise ValueError("damage is only requested on a hit")
        return self


__all__ = [
    "ActionRequest",
    "AttackRequest",
    "SpellRequest",
    "AbilityRequest",
    "MoveRequest",
    "ACTION_REQUEST_TYPES",
    "ActionResult",
]
