"""Pytest configuration and shared fixtures.

This module provides common fixtures for the combat engine test suite:
sample participants, a scripted die roller, and a manager factory.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any

import pytest

from construct_combat.core.config import EncounterSettings
from construct_combat.engine.combat_manager import CombatManager
from construct_combat.engine.dice import ScriptedDieRoller
from construct_combat.models import Ability, ControlKind, Participant, Weapon


if TYPE_CHECKING:
    from collections.abc import Generator


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Reset the settings cache before and after each test."""
    from construct_combat.core.config import clear_settings_cache

    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def mock_env_vars(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Set up mock environment variables for testing.

    Returns:
        Dictionary of environment variables that were set.
    """
    env_vars = {
        "CONSTRUCT_COMBAT_DEBUG": "true",
        "CONSTRUCT_COMBAT_LOG_LEVEL": "DEBUG",
        "CONSTRUCT_COMBAT_ENCOUNTER_CONDITION_POLICY": "refresh",
    }
    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)
    return env_vars


# =============================================================================
# Participant Fixtures
# =============================================================================


@pytest.fixture
def goblin() -> Participant:
    """Engine-controlled goblin: DEX 14 (+2), scimitar attack +4, AC 15."""
    return Participant(
        id="goblin",
        name="Goblin",
        control=ControlKind.ENGINE,
        current_hp=7,
        max_hp=7,
        armor_class=15,
        ability_scores={Ability.STR: 8, Ability.DEX: 14},
        weapon=Weapon(name="Scimitar", damage="1d6", finesse=True, attack_bonus=2),
    )


@pytest.fixture
def orc() -> Participant:
    """Engine-controlled orc: DEX 12 (+1), greataxe attack +5, AC 13."""
    return Participant(
        id="orc",
        name="Orc",
        control=ControlKind.ENGINE,
        current_hp=15,
        max_hp=15,
        armor_class=13,
        ability_scores={Ability.STR: 16, Ability.DEX: 12},
        weapon=Weapon(name="Greataxe", damage="1d12", attack_bonus=2),
    )


@pytest.fixture
def fighter() -> Participant:
    """Player-controlled fighter: STR 16 (+3), longsword attack +5, AC 16."""
    return Participant(
        id="fighter",
        name="Fighter",
        control=ControlKind.PLAYER,
        current_hp=12,
        max_hp=12,
        armor_class=16,
        ability_scores={Ability.STR: 16, Ability.DEX: 12},
        weapon=Weapon(name="Longsword", damage="1d8", attack_bonus=2),
        known_abilities=["Second Wind"],
    )


@pytest.fixture
def wizard() -> Participant:
    """Player-controlled wizard with two known spells and no declared AC."""
    return Participant(
        id="wizard",
        name="Wizard",
        control=ControlKind.PLAYER,
        current_hp=8,
        max_hp=8,
        ability_scores={Ability.DEX: 14, Ability.INT: 16},
        known_spells=["Fire Bolt", "Magic Missile"],
    )


def make_participant(participant_id: str, control: ControlKind = ControlKind.ENGINE, **kwargs: Any) -> Participant:
    """Build a minimal participant with no modifiers."""
    kwargs.setdefault("name", participant_id.title())
    kwargs.setdefault("current_hp", 10)
    kwargs.setdefault("max_hp", 10)
    return Participant(id=participant_id, control=control, **kwargs)


@pytest.fixture
def participant_factory() -> Callable[..., Participant]:
    """Factory for minimal participants."""
    return make_participant


# =============================================================================
# Engine Fixtures
# =============================================================================


@pytest.fixture
def scripted_roller() -> ScriptedDieRoller:
    """Create an empty scripted roller; tests queue values with extend()."""
    return ScriptedDieRoller()


@pytest.fixture
def make_manager() -> Callable[..., CombatManager]:
    """Factory building a CombatManager around a scripted roller.

    Usage:
        manager = make_manager([10, 15], condition_policy="refresh")
    """

    def _make(rolls: Iterable[int] = (), **settings: Any) -> CombatManager:
        return CombatManager(
            ScriptedDieRoller(rolls),
            settings=EncounterSettings(**settings),
        )

    return _make
