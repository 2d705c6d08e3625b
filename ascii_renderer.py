from typing import Optional

from levels import CELL_TO_CHAR, PATH, START, CellType, GridLevel
from simulation_engine import EventKind, StepEvent
from typedefs import Coord

PLAYER = "@"


class AsciiRenderer:
    @staticmethod
    def render(
        level: GridLevel,
        position: Optional[Coord] = None,
        show_coords: bool = False,
    ) -> str:
        grid = [[CELL_TO_CHAR[cell.type] for cell in row] for row in level.grid]
        for cell in level.cells():
            if cell.is_path and cell.type is CellType.SAFE:
                grid[cell.y][cell.x] = PATH
        sx, sy = level.start
        grid[sy][sx] = START
        if position is not None:
            px, py = position
            grid[py][px] = PLAYER
        if not show_coords:
            return "\n".join("".join(row) for row in grid)

        h = level.height
        label_w = max(2, len(str(h - 1)))
        header = " " * (label_w + 1) + "".join(str(x % 10) for x in range(level.width))
        lines = [header]
        for y, row in enumerate(grid):
            lines.append(f"{y:>{label_w}} " + "".join(row))
        return "\n".join(lines)


def render_ascii(level: GridLevel, position: Optional[Coord] = None, show_coords: bool = False) -> str:
    return AsciiRenderer.render(level, position, show_coords)


def describe_event(event: StepEvent) -> str:
    x, y = event.position
    if event.kind is EventKind.MOVED:
        return f"moved ({x},{y})"
    if event.kind is EventKind.COLLECTED_ENERGY:
        return f"energy ({x},{y}) total={event.energy_collected}"
    if event.kind is EventKind.FAILED:
        return f"failed {event.failure} ({x},{y})"
    if event.kind is EventKind.DOOR_LOCKED:
        return f"door locked ({x},{y})"
    if event.kind is EventKind.VICTORY:
        return f"victory ({x},{y})"
    return f"exhausted ({x},{y})"


class PrintingPlayback:
    """Renderer sink for headless runs: one printed line per event."""

    def __init__(self, moves: bool = True):
        self.moves = moves

    def play(self, event: StepEvent) -> None:
        if event.kind is EventKind.MOVED and not self.moves:
            return
        print(describe_event(event))
