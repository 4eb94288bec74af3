"""Roll descriptions handed to callers who must roll for themselves."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, computed_field

from construct_combat.core.constants import DICE_NOTATION_PATTERN
from construct_combat.core.exceptions import DiceRollError
from construct_combat.models.enums import RollType


class DieSpec(BaseModel):
    """What to roll and what to add.

    Attributes:
        count: Number of dice.
        sides: Sides per die.
        modifier: Flat modifier added to the dice total, when known.
        modifier_sources: Human-readable names of what makes up the modifier.
        roll_type: Normal, advantage or disadvantage.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    count: int = Field(ge=1)
    sides: int = Field(ge=1)
    modifier: int = 0
    modifier_sources: list[str] = Field(default_factory=list)
    roll_type: RollType = RollType.NORMAL

    @computed_field  # type: ignore[prop-decorator]
    @property
    def notation(self) -> str:
        """Dice notation such as ``1d20+5``."""
        base = f"{self.count}d{self.sides}"
        if self.modifier > 0:
            return f"{base}+{self.modifier}"
        if self.modifier < 0:
            return f"{base}{self.modifier}"
        return base

    @classmethod
    def parse(
        cls,
        notation: str,
        *,
        extra_modifier: int = 0,
        modifier_sources: list[str] | None = None,
    ) -> "DieSpec":
        """Build a spec from ``NdS[+/-M]`` notation.

        Args:
            notation: Dice notation; a missing count means one die.
            extra_modifier: Added on top of any modifier in the notation.
            modifier_sources: Names of the modifier's components.

        Raises:
            DiceRollError: If the notation cannot be parsed.
        """
        match = DICE_NOTATION_PATTERN.match(notation)
        if match is None:
            raise DiceRollError("Invalid dice notation", expression=notation)
        count_str, sides_str, sign, flat = match.groups()
        count = int(count_str) if count_str else 1
        sides = int(sides_str)
        if count < 1 or sides < 1:
            raise DiceRollError("Dice count and sides must be positive", expression=notation)
        modifier = int(flat) if flat else 0
        if sign == "-":
            modifier = -modifier
        return cls(
            count=count,
            sides=sides,
            modifier=modifier + extra_modifier,
            modifier_sources=list(modifier_sources or []),
        )


__all__ = ["DieSpec"]
