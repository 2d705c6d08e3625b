import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple, Union

from game_constants import LOOPS_FROM_LEVEL, MAX_REQUIRED_ENERGY
from typedefs import Coord


class LevelError(ValueError):
    pass


class CellType(Enum):
    SAFE = "safe"
    ENERGY = "energy"
    VOID = "void"
    SNAKE = "snake"
    DOOR = "door"


SAFE = "."
PATH = "+"
START = "@"
CELL_CHARS = {
    SAFE: CellType.SAFE,
    PATH: CellType.SAFE,
    START: CellType.SAFE,
    "E": CellType.ENERGY,
    "V": CellType.VOID,
    "X": CellType.SNAKE,
    "D": CellType.DOOR,
}
CELL_TO_CHAR = {
    CellType.SAFE: SAFE,
    CellType.ENERGY: "E",
    CellType.VOID: "V",
    CellType.SNAKE: "X",
    CellType.DOOR: "D",
}


@dataclass(frozen=True)
class Cell:
    x: int
    y: int
    type: CellType = CellType.SAFE
    is_path: bool = False


@dataclass
class GridLevel:
    """A playable level: typed cells addressed as ``grid[y][x]``.

    ``required_energy`` is informational; the simulation only checks whether
    the character picked up any energy before reaching the door.
    """

    level: int
    grid: List[List[Cell]]
    start: Coord
    door: Coord
    energy_positions: List[Coord] = field(default_factory=list)
    required_energy: int = 1
    allows_loops: bool = True
    time_limit: Optional[int] = None
    has_guide_lines: bool = False
    name: str = ""

    def __post_init__(self) -> None:
        if not self.grid or not self.grid[0]:
            raise LevelError("Level grid must not be empty")
        width = len(self.grid[0])
        if any(len(row) != width for row in self.grid):
            raise LevelError("Level grid rows must all have the same width")
        if not self.in_bounds(*self.start):
            raise LevelError(f"Start {self.start} is outside the grid")
        if not self.in_bounds(*self.door):
            raise LevelError(f"Door {self.door} is outside the grid")
        if self.cell_at(self.door).type is not CellType.DOOR:
            raise LevelError(f"Door {self.door} is not a door cell")
        for pos in self.energy_positions:
            if not self.in_bounds(*pos) or self.cell_at(pos).type is not CellType.ENERGY:
                raise LevelError(f"Energy position {pos} is not an energy cell")

    @property
    def width(self) -> int:
        return len(self.grid[0])

    @property
    def height(self) -> int:
        return len(self.grid)

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def cell_at(self, position: Coord) -> Cell:
        x, y = position
        return self.grid[y][x]

    def cells(self):
        for row in self.grid:
            for cell in row:
                yield cell


def parse_level(
    lines: Sequence[str],
    level: int = 1,
    name: str = "",
    allows_loops: bool = True,
    time_limit: Optional[int] = None,
) -> GridLevel:
    grid: List[List[Cell]] = []
    start: Optional[Coord] = None
    door: Optional[Coord] = None
    energy: List[Coord] = []
    has_path = False
    for y, row in enumerate(lines):
        cells = []
        for x, ch in enumerate(row):
            cell_type = CELL_CHARS.get(ch)
            if cell_type is None:
                raise LevelError(f"Unknown level character '{ch}' at ({x},{y})")
            if ch == START:
                if start is not None:
                    raise LevelError("Level has more than one start position")
                start = (x, y)
            elif cell_type is CellType.DOOR:
                if door is not None:
                    raise LevelError("Level has more than one door")
                door = (x, y)
            elif cell_type is CellType.ENERGY:
                energy.append((x, y))
            has_path = has_path or ch == PATH
            cells.append(Cell(x, y, cell_type, ch == PATH))
        grid.append(cells)
    if start is None:
        raise LevelError("Level has no start position")
    if door is None:
        raise LevelError("Level has no door")
    return GridLevel(
        level=level,
        grid=grid,
        start=start,
        door=door,
        energy_positions=energy,
        required_energy=min(level, MAX_REQUIRED_ENERGY),
        allows_loops=allows_loops,
        time_limit=time_limit,
        has_guide_lines=has_path,
        name=name,
    )


LEVEL_FIRST_STEPS = [
    ".....",
    "...ED",
    ".....",
    ".V...",
    "@....",
]

LEVEL_SNAKE_PIT = [
    "......D",
    ".XXXX..",
    ".X..X..",
    ".X.EX..",
    ".X.....",
    ".XXXXX.",
    "@......",
]

LEVEL_STAIRS = [
    "..........D",
    ".........VV",
    "........V..",
    ".......V...",
    "......V....",
    ".....V.....",
    "....V......",
    "...V.......",
    "..V.E......",
    ".V.........",
    "@..........",
]

BUILTIN_LEVELS: Dict[str, Tuple[int, List[str]]] = {
    "first-steps": (1, LEVEL_FIRST_STEPS),
    "snake-pit": (6, LEVEL_SNAKE_PIT),
    "stairs": (15, LEVEL_STAIRS),
}
LEVEL_ORDER = ["first-steps", "snake-pit", "stairs"]


def get_level(name: str) -> GridLevel:
    if name not in BUILTIN_LEVELS:
        raise LevelError(f"Unknown level '{name}'. Known levels: {', '.join(sorted(BUILTIN_LEVELS))}")
    number, lines = BUILTIN_LEVELS[name]
    return parse_level(lines, level=number, name=name, allows_loops=number >= LOOPS_FROM_LEVEL)


def load_level(name_or_number: Union[str, int], seed: Optional[int] = None) -> GridLevel:
    """Return a built-in level by name, or generate one by level number."""
    if isinstance(name_or_number, str) and not name_or_number.isdigit():
        return get_level(name_or_number)

    from level_generator import LevelGenerator

    number = int(name_or_number)
    if number < 1:
        raise LevelError(f"Level numbers start at 1, got {number}")
    return LevelGenerator(rng=random.Random(seed)).generate(number)
