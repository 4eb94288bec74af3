"""Tests for action parsing and resolution."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from construct_combat.core.exceptions import (
    ParticipantNotFoundError,
    UnknownActionError,
    UnknownSpellError,
    ValidationError,
)
from construct_combat.engine.actions import ActionResolver, parse_action_request, parse_action_type
from construct_combat.engine.dice import ScriptedDieRoller
from construct_combat.models import (
    AbilityRequest,
    ActionType,
    AttackRequest,
    EncounterState,
    EventKind,
    MoveRequest,
    Participant,
    RollType,
    SpellRequest,
)


@pytest.fixture
def state(goblin: Participant, fighter: Participant, wizard: Participant) -> EncounterState:
    """An active round-1 encounter with a goblin, a fighter and a wizard."""
    return EncounterState(
        active=True,
        round_number=1,
        initiative_order=[goblin, fighter, wizard],
    )


class TestParseActionType:
    """Tests for parse_action_type."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("attack", ActionType.ATTACK),
            ("Spell", ActionType.SPELL),
            ("cast_spell", ActionType.SPELL),
            ("use_ability", ActionType.ABILITY),
            (ActionType.MOVE, ActionType.MOVE),
        ],
    )
    def test_known(self, raw: str, expected: ActionType) -> None:
        """Test supported names and aliases resolve."""
        assert parse_action_type(raw) == expected

    def test_unknown(self) -> None:
        """Test an unsupported name raises UnknownActionError."""
        with pytest.raises(UnknownActionError) as exc_info:
            parse_action_type("dance")

        assert "attack" in exc_info.value.details["supported"]


class TestParseActionRequest:
    """Tests for parse_action_request."""

    def test_from_dict(self) -> None:
        """Test a dictionary becomes the action's request model."""
        request = parse_action_request(ActionType.ATTACK, {"actor_id": "goblin", "target_id": "fighter"})

        assert isinstance(request, AttackRequest)
        assert request.roll_type == RollType.NORMAL

    def test_missing_field(self) -> None:
        """Test a missing target is a validation error."""
        with pytest.raises(ValidationError) as exc_info:
            parse_action_request(ActionType.ATTACK, {"actor_id": "goblin"})

        assert exc_info.value.details["errors"]

    def test_unknown_field(self) -> None:
        """Test unexpected fields are rejected."""
        with pytest.raises(ValidationError):
            parse_action_request(ActionType.MOVE, {"actor_id": "goblin", "teleport": True})

    def test_level_bounds(self) -> None:
        """Test spell level must be 0-9."""
        with pytest.raises(ValidationError):
            parse_action_request(ActionType.SPELL, {"actor_id": "wizard", "spell": "Fire Bolt", "level": 10})

    def test_advantage_cancels(self) -> None:
        """Test advantage and disadvantage together roll normally."""
        request = AttackRequest(actor_id="goblin", target_id="fighter", advantage=True, disadvantage=True)

        assert request.roll_type == RollType.NORMAL


class TestEngineAttack:
    """Tests for attacks rolled by the engine."""

    def test_hit(self, state: EncounterState, goblin: Participant) -> None:
        """Test a hit resolves and requests damage."""
        roller = ScriptedDieRoller([13])
        resolver = ActionResolver(roller)

        result = resolver.resolve(
            state, goblin, ActionType.ATTACK, AttackRequest(actor_id="goblin", target_id="fighter")
        )

        assert result.resolved is True
        assert result.roll_required is False
        assert result.hit is True
        assert result.attack_roll == 13
        assert result.attack_total == 17
        assert result.target_armor_class == 16
        assert result.damage_roll_required is True
        assert result.die_spec is not None
        assert result.die_spec.notation == "1d6+2"
        assert result.instructions == "Please roll 1d6 for damage and add your Dexterity modifier."
        assert [e.kind for e in result.events] == [EventKind.ACTION_RESOLVED, EventKind.ROLL_REQUESTED]
        assert roller.remaining == 0

    def test_miss(self, state: EncounterState, goblin: Participant) -> None:
        """Test a miss reports what was needed."""
        resolver = ActionResolver(ScriptedDieRoller([5]))

        result = resolver.resolve(
            state, goblin, ActionType.ATTACK, AttackRequest(actor_id="goblin", target_id="fighter")
        )

        assert result.hit is False
        assert result.damage_roll_required is False
        assert result.die_spec is None
        assert result.message == "Goblin misses Fighter (needed 16, rolled 9)."

    def test_total_equal_to_ac_hits(self, state: EncounterState, goblin: Participant) -> None:
        """Test meeting the armor class is a hit."""
        resolver = ActionResolver(ScriptedDieRoller([12]))

        result = resolver.resolve(
            state, goblin, ActionType.ATTACK, AttackRequest(actor_id="goblin", target_id="fighter")
        )

        assert result.attack_total == 16
        assert result.hit is True

    def test_advantage_keeps_higher(self, state: EncounterState, goblin: Participant) -> None:
        """Test advantage rolls two d20s and keeps the higher."""
        roller = ScriptedDieRoller([3, 18])
        resolver = ActionResolver(roller)

        result = resolver.resolve(
            state,
            goblin,
            ActionType.ATTACK,
            AttackRequest(actor_id="goblin", target_id="fighter", advantage=True),
        )

        assert roller.history == [(2, 20, [3, 18])]
        assert result.attack_roll == 18
        assert result.attack_total == 22

    def test_disadvantage_keeps_lower(self, state: EncounterState, goblin: Participant) -> None:
        """Test disadvantage rolls two d20s and keeps the lower."""
        resolver = ActionResolver(ScriptedDieRoller([3, 18]))

        result = resolver.resolve(
            state,
            goblin,
            ActionType.ATTACK,
            AttackRequest(actor_id="goblin", target_id="fighter", disadvantage=True),
        )

        assert result.attack_roll == 3
        assert result.hit is False

    def test_critical(self, state: EncounterState, goblin: Participant) -> None:
        """Test a natural 20 is flagged and doubles the damage dice."""
        resolver = ActionResolver(ScriptedDieRoller([20]))

        result = resolver.resolve(
            state, goblin, ActionType.ATTACK, AttackRequest(actor_id="goblin", target_id="fighter")
        )

        assert result.critical is True
        assert result.fumble is False
        assert result.die_spec is not None
        assert result.die_spec.count == 2
        assert result.die_spec.notation == "2d6+2"
        assert "Critical hit" in result.instructions
        damage_request = result.events[-1]
        assert damage_request.kind == EventKind.ROLL_REQUESTED
        assert damage_request.data["die_spec"]["count"] == 2

    def test_critical_can_miss(
        self,
        state: EncounterState,
        goblin: Participant,
        participant_factory: Callable[..., Participant],
    ) -> None:
        """Test the critical flag reports the natural die, not the outcome."""
        golem = participant_factory("golem", armor_class=25)
        state.initiative_order = [*state.initiative_order, golem]
        resolver = ActionResolver(ScriptedDieRoller([20]))

        result = resolver.resolve(
            state, goblin, ActionType.ATTACK, AttackRequest(actor_id="goblin", target_id="golem")
        )

        assert result.critical is True
        assert result.hit is False
        assert result.damage_roll_required is False

    def test_fumble(self, state: EncounterState, goblin: Participant) -> None:
        """Test a natural 1 is flagged."""
        resolver = ActionResolver(ScriptedDieRoller([1]))

        result = resolver.resolve(
            state, goblin, ActionType.ATTACK, AttackRequest(actor_id="goblin", target_id="fighter")
        )

        assert result.fumble is True
        assert result.hit is False

    def test_default_armor_class(self, state: EncounterState, goblin: Participant) -> None:
        """Test targets without armor class use the configured default."""
        resolver = ActionResolver(ScriptedDieRoller([7]), default_armor_class=11)

        result = resolver.resolve(
            state, goblin, ActionType.ATTACK, AttackRequest(actor_id="goblin", target_id="wizard")
        )

        assert result.target_armor_class == 11
        assert result.hit is True

    def test_unarmed_default_damage(
        self,
        state: EncounterState,
        participant_factory: Callable[..., Participant],
    ) -> None:
        """Test an attacker without a weapon uses the default damage dice."""
        brute = participant_factory("brute", ability_scores={"strength": 14})
        state.initiative_order = [*state.initiative_order, brute]
        resolver = ActionResolver(ScriptedDieRoller([19]), default_weapon_damage="1d4")

        result = resolver.resolve(
            state, brute, ActionType.ATTACK, AttackRequest(actor_id="brute", target_id="fighter")
        )

        assert result.die_spec is not None
        assert result.die_spec.notation == "1d4+2"
        assert "unarmed strike" in result.message

    def test_unknown_target(self, state: EncounterState, goblin: Participant) -> None:
        """Test attacking someone not in the encounter."""
        roller = ScriptedDieRoller([10])
        resolver = ActionResolver(roller)

        with pytest.raises(ParticipantNotFoundError):
            resolver.resolve(state, goblin, ActionType.ATTACK, AttackRequest(actor_id="goblin", target_id="ghost"))
        assert roller.remaining == 1


class TestPlayerAttack:
    """Tests for attacks by player-controlled participants."""

    def test_roll_requested(self, state: EncounterState, fighter: Participant) -> None:
        """Test the engine never rolls for a player."""
        roller = ScriptedDieRoller([20])
        resolver = ActionResolver(roller)

        result = resolver.resolve(
            state, fighter, ActionType.ATTACK, AttackRequest(actor_id="fighter", target_id="goblin")
        )

        assert result.roll_required is True
        assert result.resolved is False
        assert result.hit is None
        assert result.die_spec is not None
        assert result.die_spec.notation == "1d20+5"
        assert result.die_spec.modifier_sources == ["Strength modifier", "weapon attack bonus"]
        assert result.message == "Roll your attack against Goblin (AC 15)."
        assert result.instructions.startswith("Please roll your attack roll.")
        assert [e.kind for e in result.events] == [EventKind.ROLL_REQUESTED]
        assert roller.remaining == 1

    def test_advantage_guidance(self, state: EncounterState, fighter: Participant) -> None:
        """Test the request explains how to roll with advantage."""
        resolver = ActionResolver(ScriptedDieRoller())

        result = resolver.resolve(
            state,
            fighter,
            ActionType.ATTACK,
            AttackRequest(actor_id="fighter", target_id="goblin", advantage=True),
        )

        assert result.die_spec is not None
        assert result.die_spec.roll_type == RollType.ADVANTAGE
        assert "take higher" in result.instructions

    def test_supplied_roll_resolves(self, state: EncounterState, fighter: Participant) -> None:
        """Test resubmitting with the rolled total resolves the attack."""
        resolver = ActionResolver(ScriptedDieRoller())

        result = resolver.resolve(
            state,
            fighter,
            ActionType.ATTACK,
            AttackRequest(actor_id="fighter", target_id="goblin", attack_roll=17),
        )

        assert result.resolved is True
        assert result.hit is True
        assert result.attack_roll is None
        assert result.attack_total == 17
        assert result.die_spec is not None
        assert result.die_spec.notation == "1d8+3"
        assert result.instructions == "Please roll 1d8 for damage and add your Strength modifier."


class TestOtherActions:
    """Tests for spells, abilities and movement."""

    def test_spell_at_target(self, state: EncounterState, wizard: Participant) -> None:
        """Test casting a known spell at a target."""
        resolver = ActionResolver(ScriptedDieRoller())

        result = resolver.resolve(
            state,
            wizard,
            ActionType.SPELL,
            SpellRequest(actor_id="wizard", spell="fire bolt", target_id="goblin", level=0),
        )

        assert result.resolved is True
        assert result.spell == "fire bolt"
        assert result.spell_level == 0
        assert result.message == "Wizard casts fire bolt at Goblin!"

    def test_spell_without_target(self, state: EncounterState, wizard: Participant) -> None:
        """Test casting with no target."""
        result = ActionResolver(ScriptedDieRoller()).resolve(
            state, wizard, ActionType.SPELL, SpellRequest(actor_id="wizard", spell="Magic Missile")
        )

        assert result.message == "Wizard casts Magic Missile!"
        assert result.spell_level == 1

    def test_unknown_spell(self, state: EncounterState, wizard: Participant) -> None:
        """Test casting a spell the caster doesn't know."""
        with pytest.raises(UnknownSpellError) as exc_info:
            ActionResolver(ScriptedDieRoller()).resolve(
                state, wizard, ActionType.SPELL, SpellRequest(actor_id="wizard", spell="Fireball")
            )

        assert exc_info.value.message == "Wizard doesn't know Fireball"

    def test_ability(self, state: EncounterState, fighter: Participant) -> None:
        """Test using an ability."""
        result = ActionResolver(ScriptedDieRoller()).resolve(
            state, fighter, ActionType.ABILITY, AbilityRequest(actor_id="fighter", ability="Second Wind")
        )

        assert result.resolved is True
        assert result.message == "Fighter uses Second Wind."

    def test_ability_on_target(self, state: EncounterState, fighter: Participant) -> None:
        """Test using an ability on another participant."""
        result = ActionResolver(ScriptedDieRoller()).resolve(
            state,
            fighter,
            ActionType.ABILITY,
            AbilityRequest(actor_id="fighter", ability="Shove", target_id="goblin"),
        )

        assert result.message == "Fighter uses Shove on Goblin."

    def test_move(self, state: EncounterState, goblin: Participant) -> None:
        """Test moving a distance or to a destination."""
        resolver = ActionResolver(ScriptedDieRoller())

        by_distance = resolver.resolve(state, goblin, ActionType.MOVE, MoveRequest(actor_id="goblin", distance_feet=30))
        to_place = resolver.resolve(
            state, goblin, ActionType.MOVE, MoveRequest(actor_id="goblin", destination="the doorway")
        )

        assert by_distance.message == "Goblin moves 30 feet."
        assert to_place.message == "Goblin moves to the doorway."
