"""Tests for initiative resolution."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from construct_combat.core.exceptions import (
    DiceRollError,
    InvalidEncounterError,
    NotAwaitingRollError,
    ParticipantNotFoundError,
    ValidationError,
)
from construct_combat.engine.dice import ScriptedDieRoller
from construct_combat.engine.initiative import InitiativeResolver, sort_by_initiative
from construct_combat.models import ControlKind, EventKind, Participant


class TestSortByInitiative:
    """Tests for the turn-order sort."""

    def test_descending(self, participant_factory: Callable[..., Participant]) -> None:
        """Test higher initiative goes first."""
        low = participant_factory("low", initiative=5)
        high = participant_factory("high", initiative=18)

        assert [p.id for p in sort_by_initiative([low, high])] == ["high", "low"]

    def test_ties_keep_input_order(self, participant_factory: Callable[..., Participant]) -> None:
        """Test the sort is stable."""
        first = participant_factory("first", initiative=12)
        second = participant_factory("second", initiative=12)

        assert [p.id for p in sort_by_initiative([first, second])] == ["first", "second"]

    def test_pending_last(self, participant_factory: Callable[..., Participant]) -> None:
        """Test participants without a value sort after everyone."""
        pending = participant_factory("pending", ControlKind.PLAYER)
        negative = participant_factory("negative", initiative=-2)

        assert [p.id for p in sort_by_initiative([pending, negative])] == ["negative", "pending"]


class TestResolve:
    """Tests for InitiativeResolver.resolve."""

    def test_engine_rolls_with_modifier(self, goblin: Participant) -> None:
        """Test engine participants roll 1d20 plus their bonus."""
        resolver = InitiativeResolver(ScriptedDieRoller([10]))

        order, events = resolver.resolve([goblin])

        assert order == [goblin]
        assert goblin.initiative == 12
        assert goblin.awaiting_roll is False
        assert events[0].kind == EventKind.INITIATIVE_ROLLED
        assert events[0].message == "Goblin rolled 10 + 2 = 12 for initiative."
        assert events[0].data == {"roll": 10, "modifier": 2, "total": 12}

    def test_negative_modifier_message(self, participant_factory: Callable[..., Participant]) -> None:
        """Test a negative bonus is narrated with a minus sign."""
        zombie = participant_factory("zombie", initiative_modifier=-2)
        resolver = InitiativeResolver(ScriptedDieRoller([8]))

        _, events = resolver.resolve([zombie])

        assert zombie.initiative == 6
        assert events[0].message == "Zombie rolled 8 - 2 = 6 for initiative."

    def test_players_are_never_rolled_for(self, goblin: Participant, fighter: Participant) -> None:
        """Test players get a roll request and consume no dice."""
        roller = ScriptedDieRoller([10])
        resolver = InitiativeResolver(roller)

        order, events = resolver.resolve([fighter, goblin])

        assert [p.id for p in order] == ["goblin", "fighter"]
        assert fighter.initiative is None
        assert fighter.awaiting_roll is True
        assert roller.history == [(1, 20, [10])]
        request = events[0]
        assert request.kind == EventKind.INITIATIVE_REQUESTED
        assert request.message.startswith("Fighter, please roll for initiative!")
        assert request.data["die_spec"]["notation"] == "1d20+1"

    def test_resets_has_acted(self, goblin: Participant) -> None:
        """Test resolving clears the acted flag."""
        goblin.has_acted = True

        InitiativeResolver(ScriptedDieRoller([10])).resolve([goblin])

        assert goblin.has_acted is False

    def test_empty(self) -> None:
        """Test resolving nobody is an error."""
        with pytest.raises(InvalidEncounterError):
            InitiativeResolver(ScriptedDieRoller()).resolve([])

    def test_roller_failure_changes_nothing(self, goblin: Participant, orc: Participant) -> None:
        """Test no participant is touched when the roller fails mid-way."""
        resolver = InitiativeResolver(ScriptedDieRoller([10]))

        with pytest.raises(DiceRollError):
            resolver.resolve([goblin, orc])

        assert goblin.initiative is None
        assert orc.initiative is None


class TestReport:
    """Tests for InitiativeResolver.report."""

    def test_report_resorts(self, goblin: Participant, fighter: Participant) -> None:
        """Test a reported value re-sorts the order."""
        resolver = InitiativeResolver(ScriptedDieRoller([10]))
        order, _ = resolver.resolve([goblin, fighter])

        new_order, event = resolver.report(order, "fighter", 15)

        assert [p.id for p in new_order] == ["fighter", "goblin"]
        assert fighter.initiative == 15
        assert fighter.awaiting_roll is False
        assert event.kind == EventKind.INITIATIVE_REPORTED
        assert event.message == "Fighter rolls 15 for initiative."

    def test_report_tie_with_roll(self, participant_factory: Callable[..., Participant]) -> None:
        """Test a reported value equal to a rolled one sorts after it."""
        rolled = participant_factory("rolled")
        player = participant_factory("player", ControlKind.PLAYER)
        resolver = InitiativeResolver(ScriptedDieRoller([10]))
        order, _ = resolver.resolve([player, rolled])

        new_order, _ = resolver.report(order, "player", 10)

        assert [p.id for p in new_order] == ["rolled", "player"]

    def test_report_fractional(self, goblin: Participant, fighter: Participant) -> None:
        """Test a non-integer value is rejected and the roll stays outstanding."""
        resolver = InitiativeResolver(ScriptedDieRoller([10]))
        order, _ = resolver.resolve([goblin, fighter])

        with pytest.raises(ValidationError):
            resolver.report(order, "fighter", 15.5)

        assert fighter.initiative is None
        assert fighter.awaiting_roll is True

    def test_report_unknown(self, goblin: Participant) -> None:
        """Test reporting for someone not in the order."""
        resolver = InitiativeResolver(ScriptedDieRoller([10]))
        order, _ = resolver.resolve([goblin])

        with pytest.raises(ParticipantNotFoundError):
            resolver.report(order, "nobody", 10)

    def test_report_not_awaiting(self, goblin: Participant) -> None:
        """Test reporting for an engine participant that already rolled."""
        resolver = InitiativeResolver(ScriptedDieRoller([10]))
        order, _ = resolver.resolve([goblin])

        with pytest.raises(NotAwaitingRollError):
            resolver.report(order, "goblin", 20)
        assert goblin.initiative == 12
