"""Pydantic V2 schemas for encounter participants.

A Participant is one creature in an encounter. It is created by the
caller before the encounter starts; the engine only mutates its
initiative bookkeeping (initiative value, awaiting-roll flag, has-acted
flag). Hit point changes remain the caller's responsibility.
"""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator

from construct_combat.core.constants import ABILITY_SCORE_BASELINE, DICE_NOTATION_PATTERN
from construct_combat.models.enums import Ability, ControlKind


AbilityScore = Annotated[int, Field(ge=1, le=30, description="Ability score (1-30)")]


def calculate_modifier(score: int) -> int:
    """Calculate the ability modifier from an ability score.

    Example:
        >>> calculate_modifier(14)
        2
        >>> calculate_modifier(7)
        -2
    """
    return (score - ABILITY_SCORE_BASELINE) // 2


class Weapon(BaseModel):
    """An equipped weapon.

    Attributes:
        name: Display name.
        damage: Damage dice notation, e.g. ``1d8`` or ``2d6+1``.
        finesse: Attacks may use Dexterity instead of Strength.
        ranged: Attacks use Dexterity.
        attack_bonus: Flat bonus added to attack rolls (proficiency, magic).
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(min_length=1, max_length=100)
    damage: str = Field(default="1d8", description="Damage dice notation")
    finesse: bool = False
    ranged: bool = False
    attack_bonus: int = 0

    @field_validator("damage")
    @classmethod
    def validate_damage(cls, value: str) -> str:
        if not DICE_NOTATION_PATTERN.match(value):
            raise ValueError(f"invalid damage dice: {value!r}")
        return value.replace(" ", "")

    @property
    def attack_ability(self) -> Ability:
        """Ability used for attack rolls with this weapon."""
        return Ability.DEX if self.finesse or self.ranged else Ability.STR


class Participant(BaseModel):
    """One creature taking part in an encounter.

    Attributes:
        id: Opaque caller-assigned identity, unique within an encounter.
        name: Display name used in narration.
        control: Whether a player or the engine operates this participant.
        current_hp: Current hit points.
        max_hp: Maximum hit points.
        armor_class: Armor class; None falls back to the configured default.
        ability_scores: Declared ability scores; missing abilities count as 10.
        initiative_modifier: Explicit initiative bonus overriding Dexterity.
        known_spells: Spells this participant can cast.
        known_abilities: Class/racial abilities this participant can use.
        weapon: Equipped weapon, if any.
        initiative: Initiative value; None until resolved.
        awaiting_roll: True while a player-supplied initiative is outstanding.
        has_acted: Whether this participant has taken its turn this round.
    """

    model_config = ConfigDict(
        extra="forbid",
        validate_assignment=True,
    )

    id: str = Field(min_length=1, description="Caller-assigned identity")
    name: str = Field(min_length=1, max_length=100, description="Display name")
    control: ControlKind = Field(description="Player- or engine-controlled")
    current_hp: int = Field(default=1, description="Current HP")
    max_hp: Annotated[int, Field(ge=1, description="Maximum HP")] = 1
    armor_class: Annotated[int, Field(ge=1, le=30)] | None = None
    ability_scores: dict[Ability, AbilityScore] = Field(default_factory=dict)
    initiative_modifier: int | None = None
    known_spells: list[str] = Field(default_factory=list)
    known_abilities: list[str] = Field(default_factory=list)
    weapon: Weapon | None = None

    initiative: int | None = None
    awaiting_roll: bool = False
    has_acted: bool = False

    @property
    def is_player(self) -> bool:
        return self.control is ControlKind.PLAYER

    @property
    def is_alive(self) -> bool:
        return self.current_hp > 0

    def ability_modifier(self, ability: Ability) -> int:
        """Modifier for an ability, 0 when the score is not declared."""
        score = self.ability_scores.get(ability)
        if score is None:
            return 0
        return calculate_modifier(score)

    @property
    def initiative_bonus(self) -> int:
        """Initiative modifier: explicit override, else Dexterity, else 0."""
        if self.initiative_modifier is not None:
            return self.initiative_modifier
        return self.ability_modifier(Ability.DEX)

    @property
    def attack_ability(self) -> Ability:
        if self.weapon is None:
            return Ability.STR
        return self.weapon.attack_ability

    @property
    def attack_modifier(self) -> int:
        """Total bonus added to this participant's attack rolls."""
        bonus = self.weapon.attack_bonus if self.weapon else 0
        return self.ability_modifier(self.attack_ability) + bonus

    def knows_spell(self, spell: str) -> bool:
        wanted = spell.strip().casefold()
        return any(known.strip().casefold() == wanted for known in self.known_spells)


__all__ = [
    "AbilityScore",
    "calculate_modifier",
    "Weapon",
    "Participant",
]
