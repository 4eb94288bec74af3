"""Die-roller capability injected into the combat engine.

The engine never draws random numbers itself; it asks a DieRoller for
"N dice of S sides". Production code uses the d20 library, tests and
replays use a scripted sequence.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Protocol, runtime_checkable

import d20

from construct_combat.core.exceptions import DiceRollError
from construct_combat.core.logging import get_logger


logger = get_logger(__name__)


@runtime_checkable
class DieRoller(Protocol):
    """Capability: roll ``count`` dice of ``sides`` sides."""

    def roll_dice(self, count: int, sides: int) -> list[int]:
        """Return the individual die results, in roll order."""
        ...


def _validate(count: int, sides: int) -> None:
    if count < 1 or sides < 1:
        raise DiceRollError(
            "Dice count and sides must be at least 1",
            expression=f"{count}d{sides}",
            details={"count": count, "sides": sides},
        )


class D20DieRoller:
    """DieRoller backed by the d20 library.

    Example:
        >>> roller = D20DieRoller()
        >>> len(roller.roll_dice(2, 6))
        2
    """

    def roll_dice(self, count: int, sides: int) -> list[int]:
        """Roll dice with d20 and return each kept die.

        Raises:
            DiceRollError: If count or sides is below 1, or d20 fails.
        """
        _validate(count, sides)
        expression = f"{count}d{sides}"
        try:
            result = d20.roll(expression)
        except d20.RollError as exc:
            raise DiceRollError(f"Dice roll failed: {exc}", expression=expression) from exc

        values = self._extract_dice_values(result.expr)
        logger.debug("Dice rolled", expression=expression, values=values, total=result.total)
        return values

    def _extract_dice_values(self, expr: Any) -> list[int]:
        """Walk the d20 expression tree collecting kept die values."""
        values: list[int] = []

        def traverse(node: Any) -> None:
            if isinstance(node, d20.Dice):
                for die in node.values:
                    if die.kept:
                        values.append(die.number)
            elif hasattr(node, "children"):
                for child in node.children:
                    traverse(child)

        traverse(expr)
        return values


class ScriptedDieRoller:
    """DieRoller that replays a fixed sequence of results.

    Each requested die consumes the next scripted value, so
    ``roll_dice(2, 20)`` consumes two.

    Example:
        >>> roller = ScriptedDieRoller([10, 4])
        >>> roller.roll_dice(1, 20)
        [10]
    """

    def __init__(self, values: Iterable[int] = ()) -> None:
        self._values: list[int] = list(values)
        self._position = 0
        self.history: list[tuple[int, int, list[int]]] = []

    @property
    def remaining(self) -> int:
        return len(self._values) - self._position

    def extend(self, values: Iterable[int]) -> None:
        """Queue more results."""
        self._values.extend(values)

    def roll_dice(self, count: int, sides: int) -> list[int]:
        """Return the next ``count`` scripted values.

        Raises:
            DiceRollError: If the script runs out or a value does not fit the die.
        """
        _validate(count, sides)
        if self.remaining < count:
            raise DiceRollError(
                "Scripted die roller exhausted",
                expression=f"{count}d{sides}",
                details={"remaining": self.remaining},
            )
        values = self._values[self._position : self._position + count]
        for value in values:
            if not 1 <= value <= sides:
                raise DiceRollError(
                    f"Scripted value {value} does not fit a d{sides}",
                    expression=f"{count}d{sides}",
                )
        self._position += count
        self.history.append((count, sides, values))
        return list(values)


__all__ = [
    "DieRoller",
    "D20DieRoller",
    "ScriptedDieRoller",
]
