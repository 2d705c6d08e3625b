"""
Generate a random playable level for a given level number.

The start is always the bottom-left corner and the door the top-right corner.
Energy cells are scattered away from the border, then VOID and SNAKE obstacles
are dropped on the remaining SAFE cells. Early levels get a guide path that
walks horizontally then vertically from the start to the first energy cell and
on to the door; it only marks cells and never clears obstacles.
"""

import logging
import random
from typing import List, Optional

from game_constants import (
    BASE_TIME_LIMIT_S,
    GRID_SIZE,
    GUIDE_LINES_UNTIL_LEVEL,
    LOOPS_FROM_LEVEL,
    MAX_REQUIRED_ENERGY,
    MIN_TIME_LIMIT_S,
    TIME_LIMIT_FROM_LEVEL,
    TIME_LIMIT_STEP_S,
)
from levels import Cell, CellType, GridLevel
from typedefs import Coord

logger = logging.getLogger(__name__)

MAX_PLACEMENT_ATTEMPTS = 100
VOID_SHARE = 0.6


def time_limit_for(level_number: int) -> Optional[int]:
    if level_number < TIME_LIMIT_FROM_LEVEL:
        return None
    limit = BASE_TIME_LIMIT_S - (level_number - TIME_LIMIT_FROM_LEVEL) * TIME_LIMIT_STEP_S
    return max(limit, MIN_TIME_LIMIT_S)


def simple_path(start: Coord, end: Coord) -> List[Coord]:
    path: List[Coord] = []
    x, y = start
    while x != end[0]:
        x += 1 if x < end[0] else -1
        path.append((x, y))
    while y != end[1]:
        y += 1 if y < end[1] else -1
        path.append((x, y))
    return path


class LevelGenerator:
    def __init__(self, size: int = GRID_SIZE, rng: Optional[random.Random] = None):
        if size < 3:
            raise ValueError("Grid size must be at least 3 to keep energy off the border.")
        self.size = size
        self.rng = rng if rng is not None else random.Random()

    def generate(self, level_number: int) -> GridLevel:
        types = [[CellType.SAFE for _ in range(self.size)] for _ in range(self.size)]
        start = (0, self.size - 1)
        door = (self.size - 1, 0)
        types[door[1]][door[0]] = CellType.DOOR

        energy = self._energy_positions(level_number)
        for x, y in energy:
            types[y][x] = CellType.ENERGY

        obstacle_count = int(level_number * 2.5)
        void_count = int(obstacle_count * VOID_SHARE)
        for index in range(obstacle_count):
            kind = CellType.VOID if index < void_count else CellType.SNAKE
            self._place_obstacle(types, kind, start, door, energy)

        path = set()
        has_guide_lines = level_number <= GUIDE_LINES_UNTIL_LEVEL
        if has_guide_lines:
            first_stop = energy[0] if energy else door
            path.update(simple_path(start, first_stop))
            if energy:
                path.update(simple_path(energy[0], door))

        grid = [
            [Cell(x, y, types[y][x], (x, y) in path) for x in range(self.size)]
            for y in range(self.size)
        ]
        logger.debug(
            "Generated level %d: %d energy, %d obstacles requested", level_number, len(energy), obstacle_count
        )
        return GridLevel(
            level=level_number,
            grid=grid,
            start=start,
            door=door,
            energy_positions=energy,
            required_energy=min(level_number, MAX_REQUIRED_ENERGY),
            allows_loops=level_number >= LOOPS_FROM_LEVEL,
            time_limit=time_limit_for(level_number),
            has_guide_lines=has_guide_lines,
            name=f"level-{level_number}",
        )

    def _energy_positions(self, level_number: int) -> List[Coord]:
        positions: List[Coord] = []
        count = min(level_number, MAX_REQUIRED_ENERGY, (self.size - 2) ** 2)
        while len(positions) < count:
            x = self.rng.randrange(self.size - 2) + 1
            y = self.rng.randrange(self.size - 2) + 1
            if (x, y) not in positions:
                positions.append((x, y))
        return positions

    def _place_obstacle(self, types, kind: CellType, start: Coord, door: Coord, energy: List[Coord]) -> bool:
        for _ in range(MAX_PLACEMENT_ATTEMPTS):
            x = self.rng.randrange(self.size)
            y = self.rng.randrange(self.size)
            if (x, y) in (start, door) or (x, y) in energy:
                continue
            if types[y][x] is not CellType.SAFE:
                continue
            types[y][x] = kind
            return True
        return False
