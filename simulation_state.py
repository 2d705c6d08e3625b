from dataclasses import dataclass
from enum import Enum

from typedefs import Coord


class Outcome(Enum):
    RUNNING = "running"
    OUT_OF_BOUNDS = "out_of_bounds"
    FELL_VOID = "fell_void"
    BITTEN_SNAKE = "bitten_snake"
    NEEDS_ENERGY = "needs_energy"
    VICTORY = "victory"

    @property
    def hazard(self) -> bool:
        return self in (Outcome.OUT_OF_BOUNDS, Outcome.FELL_VOID, Outcome.BITTEN_SNAKE, Outcome.NEEDS_ENERGY)


@dataclass
class RunState:
    position: Coord
    energized: bool = False
    energy_collected: int = 0
    outcome: Outcome = Outcome.RUNNING
    steps_taken: int = 0

    def collect_energy(self) -> None:
        self.energy_collected += 1
        self.energized = True
