from typing import Iterable, List

from commands import Move, ParsedProgram
from typedefs import Coord


def expand(program: ParsedProgram) -> List[Move]:
    expanded: List[Move] = []
    for term in program:
        if isinstance(term, Move):
            expanded.append(term)
        else:
            for _ in range(term.repetitions):
                expanded.extend(term.commands)
    return expanded


def count_unit_steps(moves: Iterable[Move]) -> int:
    return sum(move.steps for move in moves)


def final_position(start: Coord, moves: Iterable[Move]) -> Coord:
    """Where ``moves`` end up from ``start``, ignoring grid bounds and cell types."""
    x, y = start
    for move in moves:
        dx, dy = move.direction.delta
        x += dx * move.steps
        y += dy * move.steps
    return x, y
