from dataclasses import dataclass
from enum import Enum
from typing import Tuple, Union

from typedefs import Coord


class Direction(Enum):
    """Movement directions keyed by their command letter."""

    RIGHT = "D"
    LEFT = "I"
    UP = "S"
    DOWN = "B"

    @property
    def symbol(self) -> str:
        return self.value

    @property
    def delta(self) -> Coord:
        return DIRECTION_DELTAS[self]

    @staticmethod
    def from_symbol(symbol: str) -> "Direction":
        try:
            return Direction(symbol.upper())
        except ValueError as exc:
            raise ValueError(f"Unknown direction: {symbol}") from exc


DIRECTION_DELTAS = {
    Direction.RIGHT: (1, 0),
    Direction.LEFT: (-1, 0),
    Direction.UP: (0, -1),
    Direction.DOWN: (0, 1),
}
SYMBOLS = frozenset(d.symbol for d in Direction)


@dataclass(frozen=True)
class Move:
    direction: Direction
    steps: int

    def __post_init__(self) -> None:
        if not isinstance(self.direction, Direction):
            raise ValueError(f"Unknown direction: {self.direction}")
        if self.steps < 1:
            raise ValueError(f"Move steps must be positive, got {self.steps}")

    def __str__(self) -> str:
        return f"{self.direction.symbol}{self.steps}"


@dataclass(frozen=True)
class LoopBlock:
    """A flat run of moves repeated ``repetitions`` times. Never holds another loop."""

    commands: Tuple[Move, ...]
    repetitions: int

    def __str__(self) -> str:
        body = ",".join(str(move) for move in self.commands)
        return f"({body})X{self.repetitions}"


Term = Union[Move, LoopBlock]
ParsedProgram = Tuple[Term, ...]
